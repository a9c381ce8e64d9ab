"""
================================================================================
Spotlight v1.0 - Collection (Space) Enrichment Cache
================================================================================
Maps a normalized URL to the user collection that bookmarks it, so results
can be annotated with the collection's name, id and color.

States:
  EMPTY ----ensure_built()----> BUILDING ----> READY
    ^                                            |
    +----------------- invalidate() -------------+

Build:
  1. Restore the persisted snapshot if one exists (trusted as-is)
  2. Otherwise locate the collection root, fetch its subtree in one call
     and walk it in memory: first-level folders are collections, every
     URL leaf below a collection (at any depth) maps to that collection
  3. Persist {folderId, urlMap, timestamp}

Concurrency:
  - One build task at a time; concurrent callers await the same task
  - invalidate() bumps an epoch so a build that finishes afterwards is
    discarded instead of resurrecting stale data
  - While a bulk import runs, invalidate() only records that one is
    pending; end_import() applies it
================================================================================
"""

import time
import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Dict, Any, Tuple, List

from ..urls import normalize_url
from ..storage import KeyValueStore
from ..providers.base import BookmarkNode
from ..providers.browser import BrowserAPI
from .locator import CollectionLocator, DEFAULT_FOLDER_TITLE

logger = logging.getLogger(__name__)


SNAPSHOT_KEY = "spaceUrlCache"
SPACES_KEY = "spaces"
DEFAULT_SPACE_COLOR = "grey"


class CacheState(str, Enum):
    EMPTY = "empty"
    BUILDING = "building"
    READY = "ready"


@dataclass
class SpaceEntry:
    """Collection membership of one bookmarked URL."""
    space_name: str
    space_id: str
    space_color: str = DEFAULT_SPACE_COLOR
    bookmark_id: Optional[str] = None
    bookmark_title: Optional[str] = None

    def to_storage(self) -> Dict[str, Any]:
        return {
            'spaceName': self.space_name,
            'spaceId': self.space_id,
            'spaceColor': self.space_color,
            'bookmarkId': self.bookmark_id,
            'bookmarkTitle': self.bookmark_title,
        }

    @classmethod
    def from_storage(cls, data: Dict[str, Any]) -> 'SpaceEntry':
        return cls(
            space_name=data.get('spaceName') or "",
            space_id=str(data.get('spaceId') or ""),
            space_color=data.get('spaceColor') or DEFAULT_SPACE_COLOR,
            bookmark_id=data.get('bookmarkId'),
            bookmark_title=data.get('bookmarkTitle'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'space_name': self.space_name,
            'space_id': self.space_id,
            'space_color': self.space_color,
            'bookmark_id': self.bookmark_id,
            'bookmark_title': self.bookmark_title,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SpaceEntry':
        return cls(
            space_name=data.get('space_name') or "",
            space_id=str(data.get('space_id') or ""),
            space_color=data.get('space_color') or DEFAULT_SPACE_COLOR,
            bookmark_id=data.get('bookmark_id'),
            bookmark_title=data.get('bookmark_title'),
        )


class SpaceLookup(ABC):
    """URL -> collection membership, as the engine consumes it."""

    async def ensure_built(self):
        """Prepare the lookup. Only caching implementations need this."""

    def has_data(self) -> bool:
        return True

    @abstractmethod
    async def get_space_for_url(self, url: str) -> Optional[SpaceEntry]:
        ...


class SpaceCache(SpaceLookup):
    """
    Lazily built, persisted, invalidation-aware URL -> collection map.

    Usage:
        cache = SpaceCache(browser, store)
        entry = await cache.get_space_for_url("https://github.com/")
        if entry:
            print(entry.space_name)
    """

    def __init__(
        self,
        browser: BrowserAPI,
        store: KeyValueStore,
        locator: Optional[CollectionLocator] = None,
        folder_title: str = DEFAULT_FOLDER_TITLE
    ):
        self.browser = browser
        self.store = store
        self.locator = locator or CollectionLocator(browser, folder_title)

        self.folder_id: Optional[str] = None
        self._map: Optional[Dict[str, SpaceEntry]] = None
        self._build_task: Optional[asyncio.Future] = None
        self._epoch = 0
        self._storage_lock: Optional[asyncio.Lock] = None

        # Bulk import protocol
        self.is_importing = False
        self.pending_invalidation = False

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def state(self) -> CacheState:
        if self._map is not None:
            return CacheState.READY
        if self._build_task is not None and not self._build_task.done():
            return CacheState.BUILDING
        return CacheState.EMPTY

    @property
    def size(self) -> int:
        return len(self._map) if self._map else 0

    def has_data(self) -> bool:
        return bool(self._map)

    def _lock(self) -> asyncio.Lock:
        if self._storage_lock is None:
            self._storage_lock = asyncio.Lock()
        return self._storage_lock

    # =========================================================================
    # LOOKUP
    # =========================================================================

    async def ensure_built(self):
        """Build the map once; concurrent callers share one build."""
        while self._map is None:
            if self._build_task is None or self._build_task.done():
                self._build_task = asyncio.ensure_future(self._build(self._epoch))
            await asyncio.shield(self._build_task)

    async def get_space_for_url(self, url: str) -> Optional[SpaceEntry]:
        if not url:
            return None
        if self._map is None:
            await self.ensure_built()
        return (self._map or {}).get(normalize_url(url))

    # =========================================================================
    # BUILD
    # =========================================================================

    async def _build(self, epoch: int):
        try:
            restored = await self._restore()
        except Exception as e:
            logger.warning(f"Space snapshot restore failed: {e}")
            restored = None

        if restored is not None:
            if epoch == self._epoch:
                self._map, self.folder_id = restored
                logger.info(f"Space cache restored from storage with {len(self._map)} URLs")
            return

        try:
            url_map, folder_id = await self._rebuild()
        except Exception as e:
            logger.error(f"Space cache build failed: {e}")
            if epoch == self._epoch:
                self._map = {}
                self.folder_id = None
            return

        async with self._lock():
            if epoch != self._epoch:
                logger.debug("Space cache build discarded (invalidated mid-build)")
                return
            if folder_id is not None:
                await self.store.set_json(SNAPSHOT_KEY, {
                    'folderId': folder_id,
                    'urlMap': {url: entry.to_storage() for url, entry in url_map.items()},
                    'timestamp': int(time.time() * 1000),
                })
            if epoch != self._epoch:
                return
            self._map = url_map
            self.folder_id = folder_id

        logger.info(f"Space cache built with {len(url_map)} URLs")

    async def _restore(self) -> Optional[Tuple[Dict[str, SpaceEntry], Optional[str]]]:
        snapshot = await self.store.get_json(SNAPSHOT_KEY)
        if not isinstance(snapshot, dict) or not isinstance(snapshot.get('urlMap'), dict):
            return None
        try:
            url_map = {
                url: SpaceEntry.from_storage(entry)
                for url, entry in snapshot['urlMap'].items()
            }
        except (AttributeError, TypeError) as e:
            logger.warning(f"Ignoring malformed space snapshot: {e}")
            return None
        return url_map, snapshot.get('folderId')

    async def _rebuild(self) -> Tuple[Dict[str, SpaceEntry], Optional[str]]:
        root = await self.locator.find_root()
        if root is None:
            return {}, None

        subtree = await self.browser.get_bookmark_subtree(root.id)
        if subtree is None:
            return {}, root.id

        colors = await self._space_colors()
        url_map: Dict[str, SpaceEntry] = {}
        for space_folder in subtree.children:
            if not space_folder.is_folder:
                continue
            self._process_folder(
                space_folder,
                space_folder.title,
                space_folder.id,
                colors.get(space_folder.title, DEFAULT_SPACE_COLOR),
                url_map,
            )
        return url_map, root.id

    def _process_folder(self, folder: BookmarkNode, name: str, space_id: str, color: str, url_map: Dict[str, SpaceEntry]):
        for item in folder.children:
            if item.url:
                url_map[normalize_url(item.url)] = SpaceEntry(
                    space_name=name,
                    space_id=space_id,
                    space_color=color,
                    bookmark_id=item.id,
                    bookmark_title=item.title,
                )
            else:
                self._process_folder(item, name, space_id, color, url_map)

    async def _space_colors(self) -> Dict[str, str]:
        spaces: List[Dict[str, Any]] = await self.store.get_json(SPACES_KEY) or []
        return {
            space['name']: space.get('color') or DEFAULT_SPACE_COLOR
            for space in spaces
            if isinstance(space, dict) and space.get('name')
        }

    # =========================================================================
    # INVALIDATION
    # =========================================================================

    async def invalidate(self):
        """Drop the map and the persisted snapshot (deferred during imports)."""
        if self.is_importing:
            self.pending_invalidation = True
            logger.debug("Space cache invalidation deferred (import in progress)")
            return

        self._map = None
        self.folder_id = None
        self._epoch += 1
        async with self._lock():
            await self.store.delete(SNAPSHOT_KEY)
        logger.info("Space cache invalidated")

    def begin_import(self):
        self.is_importing = True

    async def end_import(self):
        self.is_importing = False
        if self.pending_invalidation:
            self.pending_invalidation = False
            await self.invalidate()

    def stats(self) -> Dict[str, Any]:
        return {
            'state': self.state.value,
            'size': self.size,
            'folder_id': self.folder_id,
            'is_importing': self.is_importing,
            'pending_invalidation': self.pending_invalidation,
        }
