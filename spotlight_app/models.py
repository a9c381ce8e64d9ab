"""
================================================================================
Spotlight v1.0 - Result Models
================================================================================
Canonical candidate representation shared by every stage of the pipeline.

A Result is created fresh for each query, flows through dedup, enrichment
and scoring, and is discarded after rendering or dispatch. Only `score` is
mutated after construction.

Wire shape (JSON):
  {
    "type": "open-tab",
    "title": "GitHub",
    "url": "https://github.com",
    "domain": "github.com",
    "favicon": null,
    "score": 90,
    "metadata": {"tab_id": 12, "window_id": 1}
  }
================================================================================
"""

from dataclasses import dataclass, field, fields, asdict
from typing import Optional, Dict, Any
from enum import Enum

from .urls import extract_domain, normalize_url


# =============================================================================
# ENUMS
# =============================================================================

class ResultType(str, Enum):
    """Closed set of result kinds."""
    URL_SUGGESTION = "url-suggestion"
    SEARCH_QUERY = "search-query"
    AUTOCOMPLETE_SUGGESTION = "autocomplete-suggestion"
    OPEN_TAB = "open-tab"
    PINNED_TAB = "pinned-tab"
    BOOKMARK = "bookmark"
    HISTORY = "history"
    TOP_SITE = "top-site"


class TabMode(str, Enum):
    """Where a chosen result should open."""
    CURRENT_TAB = "current-tab"
    NEW_TAB = "new-tab"


# =============================================================================
# DATA MODELS
# =============================================================================

@dataclass
class ResultMetadata:
    """
    Per-type payload attached to a Result.

    Every field is optional; which ones are set depends on the result type:
      - tabs: tab_id, window_id, group_name, group_color, is_active
      - search/autocomplete: query, original_query, position, is_url
      - instant URL suggestions: original_input
      - collection enrichment: space_name, space_id, space_color,
        bookmark_id, bookmark_title, is_space
      - history: visit_count, last_visit_time
      - fuzzy sources: match_score, fuzzy_match, match_type, tier_score
    """

    # Tabs
    tab_id: Optional[int] = None
    window_id: Optional[int] = None
    group_name: Optional[str] = None
    group_color: Optional[str] = None
    is_active: Optional[bool] = None

    # Search / autocomplete
    query: Optional[str] = None
    original_query: Optional[str] = None
    original_input: Optional[str] = None
    position: Optional[int] = None
    is_url: Optional[bool] = None

    # Collection (space) enrichment
    space_name: Optional[str] = None
    space_id: Optional[str] = None
    space_color: Optional[str] = None
    bookmark_id: Optional[str] = None
    bookmark_title: Optional[str] = None
    is_space: Optional[bool] = None

    # History
    visit_count: Optional[int] = None
    last_visit_time: Optional[float] = None

    # Fuzzy matching
    match_score: Optional[float] = None
    fuzzy_match: Optional[bool] = None
    match_type: Optional[str] = None
    tier_score: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize, omitting unset fields."""
        return {k: v for k, v in asdict(self).items() if v is not None}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'ResultMetadata':
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class Result:
    """
    One scored, typed destination.

    `domain` is derived from `url` at construction and is never passed in.
    `score` is excluded from equality; identity between two results is
    decided by `identity_key()`, never by object reference.
    """

    type: ResultType
    title: str
    url: str = ""
    favicon: Optional[str] = None
    score: float = field(default=0, compare=False)
    metadata: ResultMetadata = field(default_factory=ResultMetadata)
    domain: str = field(init=False, default="")

    def __post_init__(self):
        self.type = ResultType(self.type)
        self.title = self.title or ""
        self.url = self.url or ""
        if isinstance(self.metadata, dict):
            self.metadata = ResultMetadata.from_dict(self.metadata)
        elif self.metadata is None:
            self.metadata = ResultMetadata()
        self.domain = extract_domain(self.url) if self.url else ""

    def identity_key(self) -> str:
        """
        Key used to decide whether two results are the same destination.

        Returns:
            Normalized URL, `search:<title>` for pure search suggestions,
            or the title. Empty string means "not identifiable".
        """
        if self.url:
            return normalize_url(self.url)
        if self.type == ResultType.SEARCH_QUERY:
            return f"search:{self.title}"
        return self.title or ""

    def is_same_destination(self, other: 'Result') -> bool:
        if self.url and other.url:
            return normalize_url(self.url) == normalize_url(other.url)
        return (
            self.type == ResultType.SEARCH_QUERY
            and other.type == ResultType.SEARCH_QUERY
            and self.title == other.title
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'type': self.type.value,
            'title': self.title,
            'url': self.url,
            'domain': self.domain,
            'favicon': self.favicon,
            'score': self.score,
            'metadata': self.metadata.to_dict(),
        }

    def copy(self) -> 'Result':
        """Independent copy (metadata included)."""
        return Result.from_dict(self.to_dict())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Result':
        return cls(
            type=ResultType(data['type']),
            title=data.get('title') or "",
            url=data.get('url') or "",
            favicon=data.get('favicon'),
            score=data.get('score') or 0,
            metadata=ResultMetadata.from_dict(data.get('metadata')),
        )
