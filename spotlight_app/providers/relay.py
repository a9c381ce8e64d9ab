"""
================================================================================
Spotlight v1.0 - Relay Provider
================================================================================
Data provider, action environment and collection lookup for contexts
without direct browser access. Every call is relayed to a privileged
Spotlight service over HTTP.

Wire format (POST <relay_url>/api/spotlight):
  request   {"action": "searchTabs", "query": "gith", ...}
  response  {"success": true, "results": [...]}      data calls
            {"success": true, "data": {...}}         active tab lookup, space lookup
            {"success": false, "error": "..."}       failures

Failures raise RelayError; the aggregation engine turns data-call failures
into empty contributions and unenriched results, the dispatcher wraps
action failures.
================================================================================
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..models import Result
from ..actions import ActionEnvironment
from ..spaces.cache import SpaceLookup, SpaceEntry
from .base import (
    BaseDataProvider,
    TabRecord,
    BookmarkRecord,
    HistoryRecord,
    SiteRecord,
    PinnedTabRecord,
)

logger = logging.getLogger(__name__)


RELAY_PATH = "/api/spotlight"


class RelayError(Exception):
    """Relay call failed or the remote side reported an error."""

    def __init__(self, action: str, message: str):
        self.action = action
        super().__init__(f"{action}: {message}")


class RelayClient:
    """Shared HTTP plumbing for the relay provider and environment."""

    def __init__(self, base_url: str, timeout: float = 5.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Args:
            base_url: Root URL of the privileged service
            timeout: Request timeout in seconds
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self.transport,
                headers={'Accept': 'application/json'}
            )
        return self._client

    async def close(self):
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def send(self, action: str, **payload) -> Dict[str, Any]:
        """
        Relay one action.

        Returns:
            Decoded response body (success already checked)

        Raises:
            RelayError: on transport errors or {success: false}
        """
        client = await self._get_client()
        try:
            response = await client.post(RELAY_PATH, json={'action': action, **payload})
            body = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Relay {action} failed: {e}")
            raise RelayError(action, str(e)) from e
        except ValueError as e:
            raise RelayError(action, f"invalid JSON response ({e})") from e

        if not isinstance(body, dict) or not body.get('success'):
            error = body.get('error') if isinstance(body, dict) else None
            raise RelayError(action, error or f"HTTP {response.status_code}")
        return body

    async def results(self, action: str, **payload) -> List[Dict[str, Any]]:
        body = await self.send(action, **payload)
        return [item for item in body.get('results') or [] if isinstance(item, dict)]


class RelayDataProvider(BaseDataProvider):
    """Provider that asks a privileged Spotlight service for its data."""

    id = "relay"
    name = "Relay"

    def __init__(self, client: RelayClient):
        self.client = client

    async def close(self):
        await self.client.close()

    async def get_open_tabs_data(self, query: str = "") -> List[TabRecord]:
        items = await self.client.results('searchTabs', query=query)
        return [TabRecord.from_dict(item) for item in items]

    async def get_recent_tabs_data(self, limit: int = 5) -> List[TabRecord]:
        items = await self.client.results('getRecentTabs', limit=limit)
        return [TabRecord.from_dict(item) for item in items]

    async def get_bookmarks_data(self, query: str) -> List[BookmarkRecord]:
        items = await self.client.results('searchBookmarks', query=query)
        return [BookmarkRecord.from_dict(item) for item in items]

    async def get_history_data(self, query: str) -> List[HistoryRecord]:
        items = await self.client.results('searchHistory', query=query)
        return [HistoryRecord.from_dict(item) for item in items]

    async def get_top_sites_data(self) -> List[SiteRecord]:
        items = await self.client.results('getTopSites')
        return [SiteRecord.from_dict(item) for item in items]

    async def get_autocomplete_data(self, query: str) -> List[Result]:
        items = await self.client.results('getAutocomplete', query=query)
        return [Result.from_dict(item) for item in items]

    async def get_pinned_tabs_data(self, query: str = "") -> List[PinnedTabRecord]:
        items = await self.client.results('getPinnedTabs', query=query)
        return [PinnedTabRecord.from_dict(item) for item in items]


class RelayActionEnvironment(ActionEnvironment):
    """Action environment that relays each side effect."""

    def __init__(self, client: RelayClient):
        self.client = client

    async def activate_tab(self, tab_id: int):
        await self.client.send('switchToTab', tabId=tab_id)

    async def focus_window(self, window_id: int):
        await self.client.send('switchToTab', windowId=window_id)

    async def navigate_tab(self, tab_id: int, url: str):
        await self.client.send('navigateCurrentTab', tabId=tab_id, url=url)

    async def create_tab(self, url: str):
        await self.client.send('openNewTab', url=url)

    async def query_active_tab(self) -> Optional[Dict[str, Any]]:
        body = await self.client.send('getActiveTab')
        return body.get('data')

    async def web_search(self, text: str, disposition: str):
        await self.client.send('performSearch', query=text, disposition=disposition)


class RelaySpaceLookup(SpaceLookup):
    """Collection membership answered by the privileged side's space cache."""

    def __init__(self, client: RelayClient):
        self.client = client

    async def get_space_for_url(self, url: str) -> Optional[SpaceEntry]:
        if not url:
            return None
        body = await self.client.send('getSpaceForUrl', url=url)
        data = body.get('data')
        return SpaceEntry.from_dict(data) if isinstance(data, dict) else None
