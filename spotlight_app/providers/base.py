"""
================================================================================
Spotlight v1.0 - Base Data Provider
================================================================================
Abstract contract every suggestion source implementation satisfies.

Two implementations are selected at construction time:
  - BrowserDataProvider  (providers/background.py) - direct host access
  - RelayDataProvider    (providers/relay.py)      - relays over HTTP

All data methods are async, may raise, and treat an empty query as
"no filter". The aggregation engine depends only on this contract and
turns any exception into an empty contribution.
================================================================================
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, fields, asdict
from typing import List, Optional, Dict, Any, TypeVar, Type

from ..models import Result, ResultType, ResultMetadata


R = TypeVar('R')


def _from_dict(cls: Type[R], data: Dict[str, Any]) -> R:
    known = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in data.items() if k in known})


# =============================================================================
# RECORDS
# =============================================================================

@dataclass
class TabRecord:
    """An open browser tab."""
    id: int
    title: str
    url: str
    window_id: Optional[int] = None
    fav_icon_url: Optional[str] = None
    pinned: bool = False
    active: bool = False
    group_name: Optional[str] = None
    group_color: Optional[str] = None
    last_activity: float = 0
    match_score: Optional[float] = None

    def to_result(self) -> Result:
        return Result(
            type=ResultType.PINNED_TAB if self.pinned else ResultType.OPEN_TAB,
            title=self.title,
            url=self.url,
            favicon=self.fav_icon_url,
            metadata=ResultMetadata(
                tab_id=self.id,
                window_id=self.window_id,
                group_name=self.group_name or None,
                group_color=self.group_color or None,
                match_score=self.match_score,
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TabRecord':
        return _from_dict(cls, data)


@dataclass
class BookmarkRecord:
    """A URL bookmark (folders never reach the engine)."""
    id: str
    title: str
    url: str
    parent_id: Optional[str] = None
    match_score: Optional[float] = None

    def to_result(self) -> Result:
        return Result(
            type=ResultType.BOOKMARK,
            title=self.title,
            url=self.url,
            metadata=ResultMetadata(bookmark_id=self.id, match_score=self.match_score),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BookmarkRecord':
        return _from_dict(cls, data)


@dataclass
class HistoryRecord:
    """A visited page."""
    url: str
    title: str = ""
    visit_count: int = 0
    last_visit_time: float = 0
    match_score: Optional[float] = None

    def to_result(self) -> Result:
        return Result(
            type=ResultType.HISTORY,
            title=self.title or self.url,
            url=self.url,
            metadata=ResultMetadata(
                visit_count=self.visit_count,
                last_visit_time=self.last_visit_time,
                match_score=self.match_score,
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'HistoryRecord':
        return _from_dict(cls, data)


@dataclass
class SiteRecord:
    """A most-visited site."""
    title: str
    url: str

    def to_result(self) -> Result:
        return Result(type=ResultType.TOP_SITE, title=self.title, url=self.url)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SiteRecord':
        return _from_dict(cls, data)


@dataclass
class PinnedTabRecord:
    """
    A bookmark inside a user collection, optionally backed by an open tab.

    These arrive pre-enriched with their collection identity.
    """
    id: str
    title: str
    url: str
    space_id: Optional[str] = None
    space_name: Optional[str] = None
    space_color: Optional[str] = None
    tab_id: Optional[int] = None
    is_active: bool = False
    match_score: Optional[float] = None

    def to_result(self) -> Result:
        return Result(
            type=ResultType.PINNED_TAB,
            title=self.title,
            url=self.url,
            metadata=ResultMetadata(
                bookmark_id=self.id,
                space_id=self.space_id,
                space_name=self.space_name,
                space_color=self.space_color,
                tab_id=self.tab_id,
                is_active=self.is_active,
                match_score=self.match_score,
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PinnedTabRecord':
        return _from_dict(cls, data)


@dataclass
class BookmarkNode:
    """A node of the bookmark tree; folders have no url."""
    id: str
    title: str = ""
    url: Optional[str] = None
    parent_id: Optional[str] = None
    children: List['BookmarkNode'] = field(default_factory=list)

    @property
    def is_folder(self) -> bool:
        return not self.url

    def to_dict(self) -> Dict[str, Any]:
        data = {'id': self.id, 'title': self.title, 'parent_id': self.parent_id}
        if self.url:
            data['url'] = self.url
        else:
            data['children'] = [child.to_dict() for child in self.children]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any], parent_id: Optional[str] = None) -> 'BookmarkNode':
        node = cls(
            id=str(data['id']),
            title=data.get('title') or "",
            url=data.get('url') or None,
            parent_id=data.get('parent_id', parent_id),
        )
        node.children = [cls.from_dict(child, node.id) for child in data.get('children') or []]
        return node


# =============================================================================
# PROVIDER CONTRACT
# =============================================================================

class BaseDataProvider(ABC):
    """
    Abstract base class for suggestion data providers.

    All providers must implement the seven data fetchers below. The engine
    calls them concurrently and never lets one failure affect another.
    """

    id: str = "base"
    name: str = "Base Provider"

    @abstractmethod
    async def get_open_tabs_data(self, query: str = "") -> List[TabRecord]:
        """Open tabs, fuzzy-filtered by query (all tabs for an empty query)."""

    @abstractmethod
    async def get_recent_tabs_data(self, limit: int = 5) -> List[TabRecord]:
        """Open tabs ordered by last activity, most recent first."""

    @abstractmethod
    async def get_bookmarks_data(self, query: str) -> List[BookmarkRecord]:
        """URL bookmarks matching query, excluding the collection root subtree."""

    @abstractmethod
    async def get_history_data(self, query: str) -> List[HistoryRecord]:
        """Recent history matching query."""

    @abstractmethod
    async def get_top_sites_data(self) -> List[SiteRecord]:
        """Most-visited sites (unfiltered)."""

    @abstractmethod
    async def get_autocomplete_data(self, query: str) -> List[Result]:
        """Remote suggestions, already shaped as results."""

    @abstractmethod
    async def get_pinned_tabs_data(self, query: str = "") -> List[PinnedTabRecord]:
        """Collection bookmarks matching query, with their open tab if any."""

    async def close(self):
        """Release network resources."""
