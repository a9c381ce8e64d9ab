"""
================================================================================
Spotlight v1.0 - Fuzzy Match Service
================================================================================
Weighted, case-insensitive, location-independent approximate matching over
small candidate snapshots (tabs, bookmarks, history, top sites).

Scoring:
  - Per key: rapidfuzz partial_ratio (best matching window anywhere in the
    text, so a token deep inside a URL counts as much as one at the start).
    Text shorter than the query has no window to slide, so it is compared
    whole with ratio
  - A key is accepted when its similarity >= 1 - threshold
  - Item score: best accepted key, where a key of weight w is scored
    similarity ** (max_weight / w). A perfect hit on any key is 1.0, and
    lighter keys lose more for the same partial similarity. Items with no
    accepted key are dropped
  - match_score: rescaled to [0, 1] where 1 = perfect, 0 = weakest accepted

There is no index: every call scores the snapshot it is given.
================================================================================
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from rapidfuzz import fuzz, utils

logger = logging.getLogger(__name__)


DEFAULT_THRESHOLD = 0.4
MIN_QUERY_LENGTH = 2


@dataclass(frozen=True)
class FuzzyKey:
    """A searchable field and its relative weight."""
    name: str
    weight: float = 1.0


@dataclass
class FuzzyMatch:
    item: Any
    match_score: float


TITLE_URL_KEYS = (FuzzyKey('title', 2), FuzzyKey('url', 1))


def _field_value(item: Any, name: str) -> str:
    if isinstance(item, dict):
        value = item.get(name)
    else:
        value = getattr(item, name, None)
    return value if isinstance(value, str) else ""


class FuzzyMatchService:
    """
    Approximate matcher wrapping rapidfuzz.

    Usage:
        service = FuzzyMatchService()
        matches = service.search(tabs, "gith", keys=TITLE_URL_KEYS)
        for m in matches:
            print(m.item.title, m.match_score)
    """

    def __init__(self, threshold: float = DEFAULT_THRESHOLD, min_query_length: int = MIN_QUERY_LENGTH):
        """
        Args:
            threshold: 0.0 requires a perfect match, 1.0 accepts anything
            min_query_length: Shorter queries return no matches
        """
        self.threshold = threshold
        self.min_query_length = min_query_length

    def similarity(self, query: str, text: str) -> float:
        """Similarity in [0, 1] of the best window of text against query."""
        query = utils.default_process(query or "")
        text = utils.default_process(text or "")
        if not query or not text:
            return 0.0
        if len(text) < len(query):
            return fuzz.ratio(query, text) / 100.0
        return fuzz.partial_ratio(query, text) / 100.0

    def search(
        self,
        items: Sequence[Any],
        query: str,
        keys: Sequence[FuzzyKey] = TITLE_URL_KEYS,
        threshold: Optional[float] = None,
        sort: bool = False,
    ) -> List[FuzzyMatch]:
        """
        Score items against query.

        Args:
            items: Mappings or objects exposing the key fields
            query: Raw query text
            keys: Weighted fields to match
            threshold: Per-call override of the acceptance threshold
            sort: Order by match_score descending (stable) instead of input order

        Returns:
            Accepted items with a match_score in [0, 1]
        """
        query = (query or "").strip()
        if len(query) < self.min_query_length or not items or not keys:
            return []

        threshold = self.threshold if threshold is None else threshold
        cutoff = 1.0 - threshold

        max_weight = max(key.weight for key in keys)

        matches = []
        for item in items:
            raw = None
            for key in keys:
                similarity = self.similarity(query, _field_value(item, key.name))
                if similarity < cutoff:
                    continue
                weighted = similarity ** (max_weight / key.weight)
                if raw is None or weighted > raw:
                    raw = weighted

            if raw is None:
                continue

            if cutoff >= 1.0:
                match_score = 1.0
            else:
                match_score = (raw - cutoff) / (1.0 - cutoff)
            matches.append(FuzzyMatch(item=item, match_score=round(max(0.0, min(1.0, match_score)), 4)))

        if sort:
            matches.sort(key=lambda m: m.match_score, reverse=True)

        logger.debug(f"Fuzzy search '{query}': {len(matches)}/{len(items)} accepted")
        return matches


fuzzy_service = FuzzyMatchService()
