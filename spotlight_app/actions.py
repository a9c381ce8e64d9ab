"""
================================================================================
Spotlight v1.0 - Action Dispatcher
================================================================================
Turns a chosen result plus a navigation mode into exactly one browser side
effect, or a typed error.

Rules per result type:
  open-tab / pinned-tab
    new-tab      -> needs metadata.tab_id; activate it, focus window_id if set
    current-tab  -> needs url; navigate the hinted tab, else the active tab
  url-suggestion / bookmark / history / top-site / autocomplete-suggestion
    new-tab      -> needs url; create a tab
    current-tab  -> needs url; navigate the hinted tab, else the active tab
  search-query
    any mode     -> needs metadata.query; web search with matching disposition

Required fields are checked before the environment is touched. Environment
failures propagate as ActionEnvironmentError.
================================================================================
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Union, Dict, Any

from .models import Result, ResultType, TabMode

logger = logging.getLogger(__name__)


DISPOSITION_NEW_TAB = "NEW_TAB"
DISPOSITION_CURRENT_TAB = "CURRENT_TAB"

URL_RESULT_TYPES = {
    ResultType.URL_SUGGESTION,
    ResultType.BOOKMARK,
    ResultType.HISTORY,
    ResultType.TOP_SITE,
    ResultType.AUTOCOMPLETE_SUGGESTION,
}

TAB_RESULT_TYPES = {ResultType.OPEN_TAB, ResultType.PINNED_TAB}


# =============================================================================
# ERRORS
# =============================================================================

class ActionError(Exception):
    """Base class for action dispatch failures."""


class MissingFieldError(ActionError):
    def __init__(self, result_type: str, field_name: str):
        self.result_type = result_type
        self.field_name = field_name
        super().__init__(f"{result_type} result is missing required field '{field_name}'")


class UnknownResultTypeError(ActionError):
    def __init__(self, result_type: Any):
        self.result_type = result_type
        super().__init__(f"Unknown result type: {result_type}")


class NoActiveTabError(ActionError):
    def __init__(self):
        super().__init__("No active tab found")


class ActionEnvironmentError(ActionError):
    """An environment call rejected; the original exception is chained."""

    def __init__(self, operation: str, cause: Exception):
        self.operation = operation
        super().__init__(f"{operation} failed: {cause}")


# =============================================================================
# ENVIRONMENT CONTRACT
# =============================================================================

class ActionEnvironment(ABC):
    """Mutating browser operations the dispatcher may call. All may raise."""

    @abstractmethod
    async def activate_tab(self, tab_id: int):
        ...

    @abstractmethod
    async def focus_window(self, window_id: int):
        ...

    @abstractmethod
    async def navigate_tab(self, tab_id: int, url: str):
        ...

    @abstractmethod
    async def create_tab(self, url: str):
        ...

    @abstractmethod
    async def query_active_tab(self) -> Optional[Dict[str, Any]]:
        """Return {'id': ..., 'window_id': ...} for the focused tab, or None."""

    @abstractmethod
    async def web_search(self, text: str, disposition: str):
        ...


# =============================================================================
# DISPATCHER
# =============================================================================

class ActionDispatcher:
    """
    Stateless per-type dispatcher.

    Usage:
        dispatcher = ActionDispatcher(environment)
        await dispatcher.dispatch(result, TabMode.NEW_TAB)
    """

    def __init__(self, environment: ActionEnvironment):
        self.environment = environment

    async def dispatch(
        self,
        result: Union[Result, Dict[str, Any]],
        mode: Union[TabMode, str],
        current_tab_id: Optional[int] = None
    ):
        """
        Perform the side effect for a selected result.

        Args:
            result: Selected result (Result or wire dict)
            mode: current-tab or new-tab
            current_tab_id: Known current tab, skips the active-tab lookup

        Raises:
            ActionError: on missing fields, unknown types or environment failure
        """
        result = self._coerce(result)
        try:
            mode = TabMode(mode)
        except ValueError:
            raise ActionError(f"Unknown navigation mode: {mode}") from None
        logger.info(f"Dispatching {result.type.value} in {mode.value} mode")

        if result.type in TAB_RESULT_TYPES:
            await self._handle_tab(result, mode, current_tab_id)
        elif result.type in URL_RESULT_TYPES:
            await self._handle_url(result, mode, current_tab_id)
        elif result.type == ResultType.SEARCH_QUERY:
            await self._handle_search(result, mode)
        else:
            raise UnknownResultTypeError(result.type)

    # -------------------------------------------------------------------------

    def _coerce(self, result: Union[Result, Dict[str, Any]]) -> Result:
        if isinstance(result, Result):
            return result
        if not isinstance(result, dict):
            raise ActionError("No result to dispatch")
        try:
            return Result.from_dict(result)
        except ValueError:
            raise UnknownResultTypeError(result.get('type')) from None
        except KeyError:
            raise MissingFieldError('unknown', 'type') from None

    async def _handle_tab(self, result: Result, mode: TabMode, current_tab_id: Optional[int]):
        if mode == TabMode.NEW_TAB:
            tab_id = result.metadata.tab_id
            if tab_id is None:
                raise MissingFieldError(result.type.value, 'tab_id')

            await self._call('activate_tab', self.environment.activate_tab(tab_id))
            if result.metadata.window_id is not None:
                await self._call('focus_window', self.environment.focus_window(result.metadata.window_id))
            return

        if not result.url:
            raise MissingFieldError(result.type.value, 'url')
        await self._navigate_current(result.url, current_tab_id)

    async def _handle_url(self, result: Result, mode: TabMode, current_tab_id: Optional[int]):
        if not result.url:
            raise MissingFieldError(result.type.value, 'url')

        if mode == TabMode.NEW_TAB:
            await self._call('create_tab', self.environment.create_tab(result.url))
        else:
            await self._navigate_current(result.url, current_tab_id)

    async def _handle_search(self, result: Result, mode: TabMode):
        query = result.metadata.query
        if not query:
            raise MissingFieldError(result.type.value, 'query')

        disposition = DISPOSITION_NEW_TAB if mode == TabMode.NEW_TAB else DISPOSITION_CURRENT_TAB
        await self._call('web_search', self.environment.web_search(query, disposition))

    async def _navigate_current(self, url: str, current_tab_id: Optional[int]):
        tab_id = current_tab_id
        if tab_id is None:
            active = await self._call('query_active_tab', self.environment.query_active_tab())
            if not active or active.get('id') is None:
                raise NoActiveTabError()
            tab_id = active['id']

        await self._call('navigate_tab', self.environment.navigate_tab(tab_id, url))

    async def _call(self, operation: str, awaitable):
        try:
            return await awaitable
        except ActionError:
            raise
        except Exception as e:
            logger.error(f"Action {operation} failed: {e}")
            raise ActionEnvironmentError(operation, e) from e
