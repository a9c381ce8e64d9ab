"""
================================================================================
Spotlight v1.0 - Remote Autocomplete Client
================================================================================
Best-effort query completions from a public suggest endpoint.

Response format (firefox client):
  ["query", ["suggestion 1", "suggestion 2", ...], ...]

Behavior:
  - Queries shorter than 2 characters return nothing
  - Top 5 suggestions become autocomplete-suggestion results, scored
    30 - position
  - URL-looking suggestions link to the site, others to a web search
  - 30 second cache keyed by the lower-cased query
  - Identical in-flight requests share one HTTP call
  - 3 second timeout; any failure yields an empty list
================================================================================
"""

import asyncio
import logging
from typing import List, Optional, Dict
from urllib.parse import quote_plus

import httpx

from ..models import Result, ResultType, ResultMetadata
from ..urls import is_url, normalize_input_url
from ..directory.site_names import website_name_extractor
from ..search.cache import SearchCache
from ..search.scoring import autocomplete_score

logger = logging.getLogger(__name__)


DEFAULT_ENDPOINT = "https://clients1.google.com/complete/search"
SEARCH_URL = "https://www.google.com/search?q="
MAX_SUGGESTIONS = 5
MIN_QUERY_LENGTH = 2


class AutocompleteProvider:
    """
    Async suggest-API client with caching and request coalescing.

    Usage:
        provider = AutocompleteProvider()
        results = await provider.get_autocomplete_suggestions("pyth")
        await provider.close()
    """

    id: str = "autocomplete"
    name: str = "Remote Autocomplete"

    user_agent: str = "Mozilla/5.0 (compatible; Spotlight)"

    def __init__(
        self,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout: float = 3.0,
        cache_ttl: float = 30,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Args:
            endpoint: Suggest API URL
            timeout: Request timeout in seconds
            cache_ttl: Result cache lifetime in seconds
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self.endpoint = endpoint
        self.timeout = timeout
        self.transport = transport
        self.cache = SearchCache(ttl=cache_ttl, max_size=200)
        self._pending: Dict[str, asyncio.Future] = {}
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                transport=self.transport,
                headers={
                    'User-Agent': self.user_agent,
                    'Accept': 'application/json'
                }
            )
        return self._client

    async def close(self):
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def get_autocomplete_suggestions(self, query: str) -> List[Result]:
        """
        Suggestions for query, served from cache when fresh.

        Args:
            query: Raw query text

        Returns:
            Up to 5 autocomplete results, [] on any failure
        """
        query = (query or "").strip()
        if len(query) < MIN_QUERY_LENGTH:
            return []

        cache_key = query.lower()
        cached = self.cache.get(cache_key, self.id)
        if cached is not None:
            return cached

        pending = self._pending.get(cache_key)
        if pending is None:
            pending = asyncio.ensure_future(self._fetch(query))
            self._pending[cache_key] = pending
            pending.add_done_callback(lambda _: self._pending.pop(cache_key, None))

        try:
            results = await asyncio.shield(pending)
        except Exception as e:
            logger.error(f"Autocomplete failed for '{query}': {e}")
            return []

        self.cache.set(cache_key, self.id, results)
        return [result.copy() for result in results]

    async def _fetch(self, query: str) -> List[Result]:
        client = await self._get_client()
        try:
            response = await client.get(self.endpoint, params={'client': 'firefox', 'q': query})
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException:
            logger.warning(f"Autocomplete request timed out for '{query}'")
            return []
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Autocomplete fetch error for '{query}': {e}")
            return []

        if not isinstance(data, list) or len(data) < 2 or not isinstance(data[1], list):
            logger.warning(f"Unexpected autocomplete response format: {str(data)[:200]}")
            return []

        suggestions = [s for s in data[1] if isinstance(s, str)][:MAX_SUGGESTIONS]
        return [self._to_result(suggestion, query, index) for index, suggestion in enumerate(suggestions)]

    def _to_result(self, suggestion: str, query: str, position: int) -> Result:
        suggestion_is_url = is_url(suggestion)
        if suggestion_is_url:
            title = website_name_extractor.extract_website_name(suggestion)
            url = normalize_input_url(suggestion)
        else:
            title = suggestion
            url = f"{SEARCH_URL}{quote_plus(suggestion)}"

        return Result(
            type=ResultType.AUTOCOMPLETE_SUGGESTION,
            title=title,
            url=url,
            score=autocomplete_score(position),
            metadata=ResultMetadata(
                query=suggestion,
                original_query=query,
                position=position,
                is_url=suggestion_is_url,
            ),
        )

    def stats(self) -> Dict:
        return {**self.cache.stats(), 'pending_requests': len(self._pending)}
