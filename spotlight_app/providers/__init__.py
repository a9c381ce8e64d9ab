"""Suggestion data providers."""

from .base import (
    BaseDataProvider,
    TabRecord,
    BookmarkRecord,
    HistoryRecord,
    SiteRecord,
    PinnedTabRecord,
    BookmarkNode,
)

__all__ = [
    'BaseDataProvider',
    'TabRecord',
    'BookmarkRecord',
    'HistoryRecord',
    'SiteRecord',
    'PinnedTabRecord',
    'BookmarkNode',
]
