"""
================================================================================
Spotlight v1.0 - Browser Data Provider
================================================================================
Data provider with direct access to the host browser (BrowserAPI).

Sources:
  - Open tabs      fuzzy-filtered on title/url (all tabs for empty query)
  - Recent tabs    ordered by last activity
  - Bookmarks      browser search, minus anything inside the collection root
  - History        last 7 days, max 10 items
  - Top sites      unfiltered (the engine fuzzy-filters them)
  - Autocomplete   remote suggest API
  - Pinned tabs    collection bookmarks with their open tab, if any

Tabs, bookmarks and history carry the fuzzy match_score of the query when
the matcher accepts them.
================================================================================
"""

import time
import logging
from typing import List, Optional, Set

from ..models import Result
from ..storage import KeyValueStore
from ..search.fuzzy import FuzzyMatchService, TITLE_URL_KEYS, fuzzy_service
from ..spaces.locator import CollectionLocator
from ..spaces.cache import SPACES_KEY
from .base import (
    BaseDataProvider,
    TabRecord,
    BookmarkRecord,
    HistoryRecord,
    SiteRecord,
    PinnedTabRecord,
    BookmarkNode,
)
from .browser import BrowserAPI
from .autocomplete import AutocompleteProvider

logger = logging.getLogger(__name__)


HISTORY_DAYS = 7
HISTORY_MAX_RESULTS = 10


class BrowserDataProvider(BaseDataProvider):
    """Provider reading straight from a BrowserAPI."""

    id = "browser"
    name = "Browser"

    def __init__(
        self,
        browser: BrowserAPI,
        store: KeyValueStore,
        autocomplete: Optional[AutocompleteProvider] = None,
        locator: Optional[CollectionLocator] = None,
        fuzzy: Optional[FuzzyMatchService] = None,
        history_days: int = HISTORY_DAYS,
        history_max_results: int = HISTORY_MAX_RESULTS
    ):
        self.browser = browser
        self.store = store
        self.autocomplete = autocomplete or AutocompleteProvider()
        self.locator = locator or CollectionLocator(browser)
        self.fuzzy = fuzzy or fuzzy_service
        self.history_days = history_days
        self.history_max_results = history_max_results

    async def close(self):
        await self.autocomplete.close()

    def _fuzzy_filter(self, records, query: str):
        """Keep records accepted by the matcher and attach their match_score."""
        matches = self.fuzzy.search(records, query, keys=TITLE_URL_KEYS)
        for match in matches:
            match.item.match_score = match.match_score
        return [match.item for match in matches]

    # =========================================================================
    # TABS
    # =========================================================================

    async def get_open_tabs_data(self, query: str = "") -> List[TabRecord]:
        tabs = [tab for tab in await self.browser.query_tabs() if tab.title and tab.url]
        if not query:
            return tabs
        return self._fuzzy_filter(tabs, query)

    async def get_recent_tabs_data(self, limit: int = 5) -> List[TabRecord]:
        tabs = [tab for tab in await self.browser.query_tabs() if tab.title and tab.url]
        tabs.sort(key=lambda tab: tab.last_activity or 0, reverse=True)
        return tabs[:limit]

    # =========================================================================
    # BOOKMARKS
    # =========================================================================

    async def _collection_folder_ids(self) -> Set[str]:
        """Ids of the collection root and every folder below it."""
        try:
            root = await self.locator.find_root()
        except Exception as e:
            logger.warning(f"Collection root lookup failed: {e}")
            return set()
        if root is None:
            return set()

        subtree = await self.browser.get_bookmark_subtree(root.id)
        folder_ids = {root.id}
        stack = [subtree] if subtree else []
        while stack:
            node = stack.pop()
            for child in node.children:
                if child.is_folder:
                    folder_ids.add(child.id)
                    stack.append(child)
        return folder_ids

    async def get_bookmarks_data(self, query: str) -> List[BookmarkRecord]:
        nodes = await self.browser.search_bookmarks(query)
        excluded = await self._collection_folder_ids()

        bookmarks = [
            BookmarkRecord(id=node.id, title=node.title, url=node.url, parent_id=node.parent_id)
            for node in nodes
            if node.url and node.parent_id not in excluded
        ]
        if not query:
            return bookmarks

        # Keep every browser hit; attach a match score where the matcher agrees
        self._fuzzy_filter(bookmarks, query)
        return bookmarks

    # =========================================================================
    # HISTORY, TOP SITES, AUTOCOMPLETE
    # =========================================================================

    async def get_history_data(self, query: str) -> List[HistoryRecord]:
        start_time = time.time() - self.history_days * 24 * 60 * 60
        items = await self.browser.search_history(query, self.history_max_results, start_time)
        if query:
            self._fuzzy_filter(items, query)
        return items

    async def get_top_sites_data(self) -> List[SiteRecord]:
        return await self.browser.get_top_sites()

    async def get_autocomplete_data(self, query: str) -> List[Result]:
        return await self.autocomplete.get_autocomplete_suggestions(query)

    # =========================================================================
    # PINNED TABS
    # =========================================================================

    async def get_pinned_tabs_data(self, query: str = "") -> List[PinnedTabRecord]:
        spaces = await self.store.get_json(SPACES_KEY) or []
        root = await self.locator.find_root()
        if root is None:
            return []

        subtree = await self.browser.get_bookmark_subtree(root.id)
        if subtree is None:
            return []
        tabs = await self.browser.query_tabs()
        query_lower = (query or "").lower()

        pinned = []
        for space_folder in subtree.children:
            if not space_folder.is_folder:
                continue
            space = next((s for s in spaces if s.get('name') == space_folder.title), None)
            if space is None:
                continue

            for bookmark in self._leaves(space_folder):
                if query_lower and query_lower not in bookmark.title.lower() and query_lower not in bookmark.url.lower():
                    continue
                tab = next((t for t in tabs if t.url == bookmark.url), None)
                pinned.append(PinnedTabRecord(
                    id=bookmark.id,
                    title=bookmark.title,
                    url=bookmark.url,
                    space_id=str(space.get('id')),
                    space_name=space.get('name'),
                    space_color=space.get('color'),
                    tab_id=tab.id if tab else None,
                    is_active=tab is not None,
                ))

        logger.debug(f"Pinned tabs for '{query}': {len(pinned)}")
        return pinned

    def _leaves(self, folder: BookmarkNode) -> List[BookmarkNode]:
        leaves = []
        for item in folder.children:
            if item.url:
                leaves.append(item)
            else:
                leaves.extend(self._leaves(item))
        return leaves
