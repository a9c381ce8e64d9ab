"""
================================================================================
Spotlight v1.0 - Aggregation & Ranking Engine
================================================================================
Merges every suggestion source into one ranked, truncated list.

Flow (non-empty query):
  1. Fetch open tabs, pinned tabs, bookmarks, history, top sites and
     autocomplete concurrently; a failing source contributes nothing
  2. Fuzzy-filter top sites, add curated-directory domain completions
  3. Deduplicate by URL identity (type priority wins)
  4. Enrich with collection (space) membership
  5. Score, sort descending, keep the top 8

Empty query:
  Open tabs only, deduplicated, enriched, ordered by type base score.

Failure:
  Anything escaping the per-source guards degrades to a single synthetic
  "navigate to" or "search for" suggestion.
================================================================================
"""

import asyncio
import logging
import time
from typing import List, Optional, Union

from ..models import Result, ResultType, ResultMetadata, TabMode
from ..urls import is_url, normalize_input_url
from ..directory.popular_sites import fuzzy_domain_match
from ..providers.base import BaseDataProvider
from ..spaces.cache import SpaceLookup
from .fuzzy import FuzzyMatchService, TITLE_URL_KEYS, fuzzy_service
from .deduplicator import ResultDeduplicator
from .scoring import (
    score_and_sort,
    rank_by_type,
    MAX_RESULTS,
    FALLBACK_URL_SCORE,
    FALLBACK_SEARCH_SCORE,
)

logger = logging.getLogger(__name__)


CURATED_MATCH_LIMIT = 5


class SpotlightEngine:
    """
    Suggestion aggregator over a data provider.

    Usage:
        engine = SpotlightEngine(provider, space_cache)
        results = await engine.get_suggestions("gith", TabMode.CURRENT_TAB)
    """

    def __init__(
        self,
        provider: BaseDataProvider,
        space_cache: Optional[SpaceLookup] = None,
        fuzzy: Optional[FuzzyMatchService] = None,
        max_results: int = MAX_RESULTS
    ):
        """
        Args:
            provider: Data source implementation
            space_cache: Collection lookup, a SpaceCache or a relayed lookup
                (None disables enrichment)
            fuzzy: Matcher used for top sites
            max_results: Output length cap
        """
        self.provider = provider
        self.space_cache = space_cache
        self.fuzzy = fuzzy or fuzzy_service
        self.deduplicator = ResultDeduplicator()
        self.max_results = max_results

    # =========================================================================
    # PUBLIC OPERATIONS
    # =========================================================================

    async def get_suggestions(self, query: str, mode: Union[TabMode, str] = TabMode.CURRENT_TAB) -> List[Result]:
        """
        Ranked suggestions from every source, autocomplete included.

        Args:
            query: Raw query text
            mode: Navigation mode (does not affect ranking)

        Returns:
            At most max_results results, score descending
        """
        return await self._suggest(query, include_autocomplete=True)

    async def get_local_suggestions(self, query: str, mode: Union[TabMode, str] = TabMode.CURRENT_TAB) -> List[Result]:
        """Same pipeline without the remote autocomplete source."""
        return await self._suggest(query, include_autocomplete=False)

    async def get_default_results(self) -> List[Result]:
        """Open tabs for the empty-query view."""
        try:
            tabs = await self.provider.get_open_tabs_data("")
            results = [tab.to_result() for tab in tabs]
        except Exception as e:
            logger.error(f"Error getting default results: {e}")
            results = []

        results = self.deduplicator.deduplicate(results)
        results = await self._enrich(results)
        return rank_by_type(results, self.max_results)

    async def get_autocomplete_suggestions(self, query: str) -> List[Result]:
        try:
            return await self.provider.get_autocomplete_data(query.strip())
        except Exception as e:
            logger.error(f"Autocomplete source failed: {e}")
            return []

    async def get_recent_tabs(self, limit: int = 5) -> List[Result]:
        try:
            tabs = await self.provider.get_recent_tabs_data(limit)
        except Exception as e:
            logger.error(f"Error getting recent tabs: {e}")
            return []
        return [tab.to_result() for tab in tabs]

    # =========================================================================
    # PIPELINE
    # =========================================================================

    async def _suggest(self, query: str, include_autocomplete: bool) -> List[Result]:
        trimmed = (query or "").strip().lower()
        if not trimmed:
            return await self.get_default_results()

        start_time = time.time()
        try:
            candidates = await self._gather_sources(trimmed, include_autocomplete)
            results = self.deduplicator.deduplicate(candidates)
            results = await self._enrich(results)
            results = score_and_sort(results, trimmed, self.max_results)
        except Exception as e:
            logger.error(f"Search error for '{trimmed}': {e}")
            return [self.fallback_result(trimmed)]

        logger.info(
            f"Suggestions for '{trimmed}': {len(candidates)} candidates -> "
            f"{len(results)} results in {time.time() - start_time:.3f}s"
        )
        return results

    async def _gather_sources(self, query: str, include_autocomplete: bool) -> List[Result]:
        """
        Query all sources in parallel.

        Returns:
            Every candidate, in source order
        """
        source_ids = ['open_tabs', 'pinned_tabs', 'bookmarks', 'history', 'top_sites']
        tasks = [
            self.provider.get_open_tabs_data(query),
            self.provider.get_pinned_tabs_data(query),
            self.provider.get_bookmarks_data(query),
            self.provider.get_history_data(query),
            self.provider.get_top_sites_data(),
        ]
        if include_autocomplete:
            source_ids.append('autocomplete')
            tasks.append(self.provider.get_autocomplete_data(query))

        settled = await asyncio.gather(*tasks, return_exceptions=True)

        by_source = {}
        for source_id, result in zip(source_ids, settled):
            if isinstance(result, BaseException):
                logger.error(f"Source failed for {source_id}: {result}")
                by_source[source_id] = []
                continue
            by_source[source_id] = result or []

        candidates: List[Result] = []
        for source_id in ('open_tabs', 'pinned_tabs', 'bookmarks', 'history'):
            candidates.extend(record.to_result() for record in by_source[source_id])
        candidates.extend(by_source.get('autocomplete', []))
        candidates.extend(self._matching_top_sites(by_source['top_sites'], query))
        candidates.extend(self._curated_matches(query))
        return candidates

    def _matching_top_sites(self, sites, query: str) -> List[Result]:
        results = []
        for match in self.fuzzy.search(sites, query, keys=TITLE_URL_KEYS):
            result = match.item.to_result()
            result.metadata.match_score = match.match_score
            results.append(result)
        return results

    def _curated_matches(self, query: str) -> List[Result]:
        return [
            Result(
                type=ResultType.TOP_SITE,
                title=match.display_name,
                url=f"https://{match.domain}",
                metadata=ResultMetadata(
                    fuzzy_match=True,
                    match_type=match.match_type,
                    tier_score=match.score,
                    original_query=query,
                ),
            )
            for match in fuzzy_domain_match(query, CURATED_MATCH_LIMIT)
        ]

    async def _enrich(self, results: List[Result]) -> List[Result]:
        """Attach collection membership to results that have a URL."""
        if self.space_cache is None:
            return results

        await self.space_cache.ensure_built()
        if not self.space_cache.has_data():
            return results

        targets = [r for r in results if r.url and not r.metadata.space_name]
        entries = await asyncio.gather(
            *(self.space_cache.get_space_for_url(r.url) for r in targets),
            return_exceptions=True
        )

        for result, entry in zip(targets, entries):
            if isinstance(entry, Exception):
                logger.warning(f"Space lookup failed for {result.url}: {entry}")
                continue
            if entry is None:
                continue
            result.metadata.is_space = True
            result.metadata.space_name = entry.space_name
            result.metadata.space_id = entry.space_id
            result.metadata.space_color = entry.space_color or "grey"
            result.metadata.bookmark_id = entry.bookmark_id
            result.metadata.bookmark_title = entry.bookmark_title
        return results

    # =========================================================================
    # FALLBACK
    # =========================================================================

    def fallback_result(self, query: str) -> Result:
        if is_url(query):
            url = normalize_input_url(query)
            return Result(
                type=ResultType.URL_SUGGESTION,
                title=f"Navigate to {url}",
                url=url,
                score=FALLBACK_URL_SCORE,
            )
        return Result(
            type=ResultType.SEARCH_QUERY,
            title=f'Search for "{query}"',
            url="",
            score=FALLBACK_SEARCH_SCORE,
            metadata=ResultMetadata(query=query),
        )
