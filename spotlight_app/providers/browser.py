"""
================================================================================
Spotlight v1.0 - Host Browser Adapter
================================================================================
The host browser's tab/bookmark/history/search surface as one async API.

BrowserAPI is what BrowserDataProvider reads from and what the action
dispatcher writes to. StaticBrowser implements it over an in-process
profile (a JSON export of tabs, the bookmark tree, history and top sites)
and applies actions to that profile, which is what the development server
and the tests run against.

Profile format:
  {
    "tabs":      [{"id": 1, "title": "...", "url": "...", "window_id": 1,
                   "pinned": false, "active": true, "last_activity": 0}],
    "bookmarks": {"id": "0", "children": [{"id": "1", "title": "Bookmarks Bar",
                   "children": [...]}]},
    "history":   [{"url": "...", "title": "...", "visit_count": 3,
                   "last_visit_time": 1700000000.0}],
    "top_sites": [{"title": "...", "url": "..."}],
    "spaces":    [{"id": "s1", "name": "Work", "color": "blue"}]
  }
================================================================================
"""

import json
import time
import logging
from abc import abstractmethod
from typing import List, Optional, Dict, Any, Iterator
from urllib.parse import quote_plus

from ..actions import ActionEnvironment, DISPOSITION_NEW_TAB
from .base import TabRecord, HistoryRecord, SiteRecord, BookmarkNode

logger = logging.getLogger(__name__)


ROOT_BOOKMARK_ID = "0"
SEARCH_URL = "https://www.google.com/search?q="


class BrowserAPI(ActionEnvironment):
    """Read side of the host browser on top of the action environment."""

    @abstractmethod
    async def query_tabs(self) -> List[TabRecord]:
        ...

    @abstractmethod
    async def search_bookmarks(self, query: str) -> List[BookmarkNode]:
        """Nodes whose title or url contains every term of query."""

    @abstractmethod
    async def find_bookmarks_by_title(self, title: str) -> List[BookmarkNode]:
        """Nodes whose title is exactly title."""

    @abstractmethod
    async def get_bookmark_children(self, node_id: str) -> List[BookmarkNode]:
        ...

    @abstractmethod
    async def get_bookmark_subtree(self, node_id: str) -> Optional[BookmarkNode]:
        ...

    @abstractmethod
    async def search_history(self, text: str, max_results: int, start_time: float) -> List[HistoryRecord]:
        ...

    @abstractmethod
    async def get_top_sites(self) -> List[SiteRecord]:
        ...


class StaticBrowser(BrowserAPI):
    """
    BrowserAPI over an in-memory profile.

    Actions mutate the profile: activating a tab marks it active, creating
    a tab appends one, navigating rewrites a tab's url.
    """

    def __init__(self, profile: Optional[Dict[str, Any]] = None):
        profile = profile or {}
        self.tabs: List[TabRecord] = [TabRecord.from_dict(t) for t in profile.get('tabs', [])]
        self.bookmarks = BookmarkNode.from_dict(profile.get('bookmarks') or {'id': ROOT_BOOKMARK_ID})
        self.history: List[HistoryRecord] = [HistoryRecord.from_dict(h) for h in profile.get('history', [])]
        self.top_sites: List[SiteRecord] = [SiteRecord.from_dict(s) for s in profile.get('top_sites', [])]
        self.spaces: List[Dict[str, Any]] = list(profile.get('spaces', []))
        self.focused_window_id: Optional[int] = None
        self.searches: List[Dict[str, str]] = []

    @classmethod
    def from_file(cls, path: str) -> 'StaticBrowser':
        with open(path, 'r', encoding='utf-8') as f:
            profile = json.load(f)
        logger.info(f"Loaded browser profile from {path}")
        return cls(profile)

    # =========================================================================
    # TABS
    # =========================================================================

    def _tab(self, tab_id: int) -> TabRecord:
        for tab in self.tabs:
            if tab.id == tab_id:
                return tab
        raise LookupError(f"No tab with id {tab_id}")

    async def query_tabs(self) -> List[TabRecord]:
        return [TabRecord.from_dict(tab.to_dict()) for tab in self.tabs]

    async def activate_tab(self, tab_id: int):
        target = self._tab(tab_id)
        for tab in self.tabs:
            if tab.window_id == target.window_id:
                tab.active = tab is target
        target.last_activity = time.time()

    async def focus_window(self, window_id: int):
        if not any(tab.window_id == window_id for tab in self.tabs):
            raise LookupError(f"No window with id {window_id}")
        self.focused_window_id = window_id

    async def navigate_tab(self, tab_id: int, url: str):
        tab = self._tab(tab_id)
        tab.url = url
        tab.last_activity = time.time()

    async def create_tab(self, url: str) -> TabRecord:
        window_id = self.focused_window_id
        if window_id is None and self.tabs:
            window_id = self.tabs[0].window_id
        tab = TabRecord(
            id=max((t.id for t in self.tabs), default=0) + 1,
            title=url,
            url=url,
            window_id=window_id,
            last_activity=time.time(),
        )
        self.tabs.append(tab)
        await self.activate_tab(tab.id)
        self.focused_window_id = window_id
        return tab

    async def query_active_tab(self) -> Optional[Dict[str, Any]]:
        candidates = [tab for tab in self.tabs if tab.active]
        if self.focused_window_id is not None:
            focused = [tab for tab in candidates if tab.window_id == self.focused_window_id]
            candidates = focused or candidates
        if not candidates:
            return None
        return {'id': candidates[0].id, 'window_id': candidates[0].window_id}

    async def web_search(self, text: str, disposition: str):
        self.searches.append({'text': text, 'disposition': disposition})
        url = f"{SEARCH_URL}{quote_plus(text)}"
        if disposition == DISPOSITION_NEW_TAB:
            await self.create_tab(url)
            return

        active = await self.query_active_tab()
        if not active:
            raise LookupError("No active tab for search")
        await self.navigate_tab(active['id'], url)

    # =========================================================================
    # BOOKMARKS
    # =========================================================================

    def _walk(self, node: BookmarkNode) -> Iterator[BookmarkNode]:
        for child in node.children:
            yield child
            yield from self._walk(child)

    def _find(self, node_id: str) -> Optional[BookmarkNode]:
        if self.bookmarks.id == node_id:
            return self.bookmarks
        for node in self._walk(self.bookmarks):
            if node.id == node_id:
                return node
        return None

    async def search_bookmarks(self, query: str) -> List[BookmarkNode]:
        terms = (query or "").lower().split()
        matches = []
        for node in self._walk(self.bookmarks):
            if not terms:
                if node.url:
                    matches.append(node)
                continue
            haystack = f"{node.title} {node.url or ''}".lower()
            if all(term in haystack for term in terms):
                matches.append(node)
        return matches

    async def find_bookmarks_by_title(self, title: str) -> List[BookmarkNode]:
        return [node for node in self._walk(self.bookmarks) if node.title == title]

    async def get_bookmark_children(self, node_id: str) -> List[BookmarkNode]:
        node = self._find(node_id)
        if node is None:
            raise LookupError(f"No bookmark node with id {node_id}")
        return list(node.children)

    async def get_bookmark_subtree(self, node_id: str) -> Optional[BookmarkNode]:
        return self._find(node_id)

    # =========================================================================
    # HISTORY & TOP SITES
    # =========================================================================

    async def search_history(self, text: str, max_results: int, start_time: float) -> List[HistoryRecord]:
        terms = (text or "").lower().split()
        items = [
            item for item in self.history
            if item.last_visit_time >= start_time
            and all(term in f"{item.title} {item.url}".lower() for term in terms)
        ]
        items.sort(key=lambda item: item.last_visit_time, reverse=True)
        return [HistoryRecord.from_dict(item.to_dict()) for item in items[:max_results]]

    async def get_top_sites(self) -> List[SiteRecord]:
        return [SiteRecord.from_dict(site.to_dict()) for site in self.top_sites]
