"""
================================================================================
Spotlight v1.0 - Result Deduplicator
================================================================================
Collapses candidates that point at the same destination.

Problem:
  A page that is open, bookmarked and in history would be listed three times.

Solution:
  1. Key each candidate by identity (normalized URL, `search:<title>` for
     pure search suggestions, else title); drop candidates with no key
  2. On collision keep the higher priority = type base score + own score
  3. The winner takes the loser's slot, so first-seen order is preserved

Priority order:
  search-query > url-suggestion > open-tab > pinned-tab > bookmark >
  history > top-site > autocomplete-suggestion
================================================================================
"""

import logging
from typing import Dict, List

from ..models import Result
from .scoring import BASE_SCORES

logger = logging.getLogger(__name__)


class ResultDeduplicator:
    """Single-pass, priority-aware deduplication by URL identity."""

    def priority(self, result: Result) -> float:
        return BASE_SCORES.get(result.type, 0) + (result.score or 0)

    def deduplicate(self, results: List[Result]) -> List[Result]:
        """
        Deduplicate results.

        Args:
            results: Candidates from all sources, in any order

        Returns:
            One result per identity key
        """
        slots: Dict[str, int] = {}
        deduplicated: List[Result] = []

        for result in results:
            key = result.identity_key()
            if not key:
                continue

            index = slots.get(key)
            if index is None:
                slots[key] = len(deduplicated)
                deduplicated.append(result)
                continue

            existing = deduplicated[index]
            if self.priority(result) > self.priority(existing):
                logger.debug(f"Dedup: {result.type.value} replaces {existing.type.value} for {key}")
                deduplicated[index] = result

        return deduplicated
