"""
================================================================================
Spotlight v1.0 - Spotlight API Routes
================================================================================
Message-style transport for the command palette.

ENDPOINTS:
  POST /api/spotlight          - {action, ...} -> {success, results|data|result, error?}
  GET  /api/spotlight/health   - Cache, scheduler and collection state

ACTIONS:
  Suggestions      getSpotlightSuggestions, getLocalSuggestions,
                   getAutocompleteSuggestions, getInstantSuggestion
  Results          spotlightHandleResult, getSpaceForUrl
  Provider relay   searchTabs, getRecentTabs, searchBookmarks, searchHistory,
                   getTopSites, getAutocomplete, getPinnedTabs
  Action relay     switchToTab, navigateCurrentTab, openNewTab,
                   performSearch, getActiveTab
  Bookmark events  bookmarksChanged, importBegan, importEnded

Unknown actions and malformed payloads answer 400. Action failures answer
200 with {success: false, error}. A pipeline that does not answer in time
answers 504.
================================================================================
"""

import logging
import concurrent.futures
from typing import Any, Awaitable, Callable, Dict

from flask import Blueprint, jsonify, request

from ..log import log
from ..models import TabMode
from ..actions import ActionError, NoActiveTabError, DISPOSITION_CURRENT_TAB, DISPOSITION_NEW_TAB
from ..providers.relay import RelayError
from ..search.instant import generate_instant_suggestion
from ..extensions import SpotlightServices, get_services
from .validators import (
    validate_fields,
    validate_query,
    validate_mode,
    validate_optional_int,
    MAX_URL_LENGTH,
    MAX_QUERY_LENGTH,
    MAX_RECENT_TABS,
)

logger = logging.getLogger(__name__)

spotlight_bp = Blueprint('spotlight_api', __name__, url_prefix='/api/spotlight')

ACTION_FAILURES = (ActionError, RelayError, LookupError)

Handler = Callable[[SpotlightServices, Dict[str, Any]], Awaitable[Dict[str, Any]]]
ACTIONS: Dict[str, Handler] = {}


# =============================================================================
# HELPERS
# =============================================================================

class RequestError(Exception):
    """Malformed action payload."""


class ActionTimeout(Exception):
    """Handler gave up waiting on the pipeline."""


def action(name: str):
    """Register an async handler for a transport action."""
    def decorator(func: Handler) -> Handler:
        ACTIONS[name] = func
        return func
    return decorator


def _error(message: str, status: int = 400):
    return jsonify({'success': False, 'error': message}), status


def _check(error):
    if error:
        raise RequestError(error)


def _query(payload: Dict[str, Any]) -> str:
    _check(validate_query(payload))
    return payload.get('query') or ""


def _mode(payload: Dict[str, Any]) -> TabMode:
    _check(validate_mode(payload))
    return TabMode(payload.get('mode') or TabMode.CURRENT_TAB)


def _results(items) -> Dict[str, Any]:
    return {'success': True, 'results': [item.to_dict() for item in items]}


# =============================================================================
# SUGGESTIONS
# =============================================================================

@action('getSpotlightSuggestions')
async def get_spotlight_suggestions(services: SpotlightServices, payload: Dict[str, Any]):
    query = _query(payload)
    mode = _mode(payload)
    scheduler = services.scheduler

    if not query.strip():
        return _results(await scheduler.get_suggestions_immediate("", mode))

    future = scheduler.get_suggestions_using_cache(query, mode)
    results = await scheduler.wait(future, timeout=services.config.request_timeout)
    if results is None:
        if scheduler.was_superseded(future):
            return {'success': False, 'superseded': True, 'error': 'Superseded by a newer query'}
        raise ActionTimeout(f"No suggestions within {services.config.request_timeout:g}s")
    return _results(results)


@action('getLocalSuggestions')
async def get_local_suggestions(services: SpotlightServices, payload: Dict[str, Any]):
    results = await services.scheduler.get_local_suggestions_immediate(_query(payload), _mode(payload))
    return _results(results)


@action('getAutocompleteSuggestions')
async def get_autocomplete_suggestions(services: SpotlightServices, payload: Dict[str, Any]):
    return _results(await services.scheduler.get_autocomplete_suggestions(_query(payload)))


@action('getInstantSuggestion')
async def get_instant_suggestion(services: SpotlightServices, payload: Dict[str, Any]):
    instant = generate_instant_suggestion(_query(payload))
    return {'success': True, 'result': instant.to_dict() if instant else None}


# =============================================================================
# RESULT HANDLING
# =============================================================================

@action('spotlightHandleResult')
async def handle_result(services: SpotlightServices, payload: Dict[str, Any]):
    result = payload.get('result')
    if not isinstance(result, dict):
        raise RequestError("Missing required field: result")
    _check(validate_optional_int(payload, 'currentTabId'))

    await services.dispatcher.dispatch(result, _mode(payload), payload.get('currentTabId'))
    return {'success': True}


@action('getSpaceForUrl')
async def get_space_for_url(services: SpotlightServices, payload: Dict[str, Any]):
    _check(validate_fields(payload, [('url', str, MAX_URL_LENGTH)]))
    if services.spaces is None:
        return {'success': True, 'data': None}

    entry = await services.spaces.get_space_for_url(payload['url'])
    return {'success': True, 'data': entry.to_dict() if entry else None}


# =============================================================================
# PROVIDER RELAY
# =============================================================================

@action('searchTabs')
async def search_tabs(services: SpotlightServices, payload: Dict[str, Any]):
    return _results(await services.provider.get_open_tabs_data(_query(payload)))


@action('getRecentTabs')
async def get_recent_tabs(services: SpotlightServices, payload: Dict[str, Any]):
    _check(validate_optional_int(payload, 'limit'))
    limit = payload.get('limit') or 5
    if not 0 < limit <= MAX_RECENT_TABS:
        raise RequestError(f"Field 'limit' must be between 1 and {MAX_RECENT_TABS}")
    return _results(await services.provider.get_recent_tabs_data(limit))


@action('searchBookmarks')
async def search_bookmarks(services: SpotlightServices, payload: Dict[str, Any]):
    return _results(await services.provider.get_bookmarks_data(_query(payload)))


@action('searchHistory')
async def search_history(services: SpotlightServices, payload: Dict[str, Any]):
    return _results(await services.provider.get_history_data(_query(payload)))


@action('getTopSites')
async def get_top_sites(services: SpotlightServices, payload: Dict[str, Any]):
    return _results(await services.provider.get_top_sites_data())


@action('getAutocomplete')
async def get_autocomplete(services: SpotlightServices, payload: Dict[str, Any]):
    return _results(await services.provider.get_autocomplete_data(_query(payload)))


@action('getPinnedTabs')
async def get_pinned_tabs(services: SpotlightServices, payload: Dict[str, Any]):
    return _results(await services.provider.get_pinned_tabs_data(_query(payload)))


# =============================================================================
# ACTION RELAY
# =============================================================================

@action('switchToTab')
async def switch_to_tab(services: SpotlightServices, payload: Dict[str, Any]):
    _check(validate_optional_int(payload, 'tabId'))
    _check(validate_optional_int(payload, 'windowId'))
    tab_id = payload.get('tabId')
    window_id = payload.get('windowId')
    if tab_id is None and window_id is None:
        raise RequestError("Missing required field: tabId")

    if tab_id is not None:
        await services.environment.activate_tab(tab_id)
    if window_id is not None:
        await services.environment.focus_window(window_id)
    return {'success': True}


@action('navigateCurrentTab')
async def navigate_current_tab(services: SpotlightServices, payload: Dict[str, Any]):
    _check(validate_fields(payload, [('url', str, MAX_URL_LENGTH)]))
    _check(validate_optional_int(payload, 'tabId'))

    tab_id = payload.get('tabId')
    if tab_id is None:
        active = await services.environment.query_active_tab()
        if not active or active.get('id') is None:
            raise NoActiveTabError()
        tab_id = active['id']

    await services.environment.navigate_tab(tab_id, payload['url'])
    return {'success': True}


@action('openNewTab')
async def open_new_tab(services: SpotlightServices, payload: Dict[str, Any]):
    _check(validate_fields(payload, [('url', str, MAX_URL_LENGTH)]))
    await services.environment.create_tab(payload['url'])
    return {'success': True}


@action('performSearch')
async def perform_search(services: SpotlightServices, payload: Dict[str, Any]):
    _check(validate_fields(payload, [('query', str, MAX_QUERY_LENGTH)]))
    disposition = payload.get('disposition') or DISPOSITION_CURRENT_TAB
    if disposition not in (DISPOSITION_CURRENT_TAB, DISPOSITION_NEW_TAB):
        raise RequestError(f"Invalid disposition: {disposition}")

    await services.environment.web_search(payload['query'], disposition)
    return {'success': True}


@action('getActiveTab')
async def get_active_tab(services: SpotlightServices, payload: Dict[str, Any]):
    return {'success': True, 'data': await services.environment.query_active_tab()}


# =============================================================================
# BOOKMARK EVENTS
# =============================================================================

@action('bookmarksChanged')
async def bookmarks_changed(services: SpotlightServices, payload: Dict[str, Any]):
    if services.space_cache is not None:
        await services.space_cache.invalidate()
    return {'success': True}


@action('importBegan')
async def import_began(services: SpotlightServices, payload: Dict[str, Any]):
    if services.space_cache is not None:
        services.space_cache.begin_import()
    return {'success': True}


@action('importEnded')
async def import_ended(services: SpotlightServices, payload: Dict[str, Any]):
    if services.space_cache is not None:
        await services.space_cache.end_import()
    return {'success': True}


# =============================================================================
# ROUTES
# =============================================================================

@spotlight_bp.route('', methods=['POST'])
def spotlight_action():
    """
    Dispatch one transport action.

    Request Body:
        {"action": "getSpotlightSuggestions", "query": "gith", "mode": "current-tab"}

    Returns:
        {"success": true, "results": [...]} or {"success": false, "error": "..."}
    """
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return _error('Request body must be a JSON object')

    name = payload.get('action')
    handler = ACTIONS.get(name) if isinstance(name, str) else None
    if handler is None:
        return _error(f"Unknown action: {name}")

    services = get_services()
    timeout = services.config.request_timeout + services.config.debounce_delay + 1
    try:
        body = services.runner.run(handler(services, payload), timeout=timeout)
    except RequestError as e:
        return _error(str(e))
    except ACTION_FAILURES as e:
        log(f"Action {name} failed: {e}")
        return jsonify({'success': False, 'error': str(e)})
    except ActionTimeout as e:
        log(f"Action {name} timed out: {e}")
        return _error(f"Action {name} timed out", 504)
    except concurrent.futures.TimeoutError:
        log(f"Action {name} timed out after {timeout:.1f}s")
        return _error(f"Action {name} timed out", 504)
    except Exception as e:
        logger.exception(f"Unexpected error in action {name}")
        return _error(str(e), 500)

    return jsonify(body)


@spotlight_bp.route('/health', methods=['GET'])
def health():
    """
    Report pipeline state.

    Returns:
        {"status": "ok", "provider": "browser", "scheduler": {...}, "space_cache": {...}}
    """
    services = get_services()
    return jsonify({
        'status': 'ok' if services.runner.is_running else 'stopped',
        'provider': services.provider.id,
        'scheduler': services.scheduler.stats(),
        'space_cache': services.space_cache.stats() if services.space_cache else None,
        'actions': sorted(ACTIONS),
    })
