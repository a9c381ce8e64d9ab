"""
================================================================================
Spotlight v1.0 - Suggestion Scheduler
================================================================================
Debounce + short-TTL cache in front of the aggregation engine, and the
caller-side session that renders results progressively.

Cached path (get_suggestions_using_cache):
  1. Cancel the pending debounce timer (the earlier call is superseded and
     its future is never resolved)
  2. Cache hit on "<trimmed query>:<mode>" -> resolved future, no debounce
  3. Miss -> run the engine after the quiet period, cache, resolve
  Engine errors resolve to [].

Immediate path (get_*_immediate):
  Direct engine calls, no cache, no debounce, errors -> [].

SearchSession (two-phase search):
  local results -> autocomplete -> full results (only if autocomplete
  returned anything). A generation counter is compared after every await;
  stale phases are dropped silently.
================================================================================
"""

import time
import asyncio
import logging
import weakref
from typing import Callable, Dict, List, Optional, Set, Union

from ..models import Result, TabMode
from .cache import SearchCache
from .engine import SpotlightEngine
from .instant import generate_instant_suggestion, combine_results

logger = logging.getLogger(__name__)


DEBOUNCE_DELAY = 0.15
CACHE_TTL = 30


class SuggestionScheduler:
    """
    Debounced, cached access to a SpotlightEngine.

    Must be used from a single running event loop.

    Usage:
        scheduler = SuggestionScheduler(engine)
        results = await scheduler.get_suggestions_using_cache("gith", "current-tab")
    """

    def __init__(
        self,
        engine: SpotlightEngine,
        debounce_delay: float = DEBOUNCE_DELAY,
        cache_ttl: float = CACHE_TTL,
        cache: Optional[SearchCache] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Args:
            engine: Aggregation engine
            debounce_delay: Quiet period in seconds before the engine runs
            cache_ttl: Result cache lifetime in seconds
            cache: Pre-built cache (overrides cache_ttl and clock)
            clock: Time source for the cache, injectable for tests
        """
        self.engine = engine
        self.debounce_delay = debounce_delay
        self.cache = cache or SearchCache(ttl=cache_ttl, clock=clock)

        self._timer: Optional[asyncio.TimerHandle] = None
        self._pending_future: Optional[asyncio.Future] = None
        self._signals: Dict[asyncio.Future, asyncio.Event] = {}
        self._tasks: Set[asyncio.Task] = set()
        self._superseded = weakref.WeakSet()
        self.superseded_count = 0

    # =========================================================================
    # CACHED + DEBOUNCED
    # =========================================================================

    def get_suggestions_using_cache(self, query: str, mode: Union[TabMode, str] = TabMode.CURRENT_TAB) -> asyncio.Future:
        """
        Schedule a debounced engine call, or answer from cache.

        Args:
            query: Raw query text
            mode: Navigation mode (part of the cache key)

        Returns:
            Future resolving to the results; never resolved if superseded
        """
        loop = asyncio.get_running_loop()
        mode = TabMode(mode).value

        self._supersede_pending()

        future = loop.create_future()
        cached = self.cache.get(query, mode)
        if cached is not None:
            logger.debug(f"Cache HIT for '{query.strip()}:{mode}'")
            future.set_result(cached)
            return future

        self._signals[future] = asyncio.Event()
        self._pending_future = future
        self._timer = loop.call_later(self.debounce_delay, self._fire, query, mode, future)
        return future

    def _supersede_pending(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

        previous = self._pending_future
        self._pending_future = None
        if previous is not None and not previous.done():
            self.superseded_count += 1
            self._superseded.add(previous)
            signal = self._signals.pop(previous, None)
            if signal is not None:
                signal.set()

    def _fire(self, query: str, mode: str, future: asyncio.Future):
        self._timer = None
        if self._pending_future is future:
            self._pending_future = None
        task = asyncio.ensure_future(self._run(query, mode, future))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, query: str, mode: str, future: asyncio.Future):
        try:
            results = await self.engine.get_suggestions(query, mode)
            self.cache.evict_expired()
            self.cache.set(query, mode, results)
        except Exception as e:
            logger.error(f"Debounced search failed for '{query}': {e}")
            results = []
        finally:
            self._signals.pop(future, None)

        if not future.done():
            future.set_result(results)

    async def wait(self, future: asyncio.Future, timeout: Optional[float] = None) -> Optional[List[Result]]:
        """
        Await a scheduled call without hanging on supersession.

        Returns:
            Results, or None if the call was superseded or timed out
            (was_superseded() tells the two apart)
        """
        if future.done():
            return future.result()

        signal = self._signals.get(future)
        if signal is None:
            return None

        waiter = asyncio.ensure_future(signal.wait())
        try:
            await asyncio.wait({future, waiter}, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()

        if future.done():
            return future.result()
        return None

    def was_superseded(self, future: asyncio.Future) -> bool:
        """True if a newer call replaced this one before it ran."""
        return future in self._superseded

    # =========================================================================
    # IMMEDIATE
    # =========================================================================

    async def get_suggestions_immediate(self, query: str, mode: Union[TabMode, str] = TabMode.CURRENT_TAB) -> List[Result]:
        try:
            return await self.engine.get_suggestions(query, mode)
        except Exception as e:
            logger.error(f"Immediate search failed for '{query}': {e}")
            return []

    async def get_local_suggestions_immediate(self, query: str, mode: Union[TabMode, str] = TabMode.CURRENT_TAB) -> List[Result]:
        try:
            return await self.engine.get_local_suggestions(query, mode)
        except Exception as e:
            logger.error(f"Local search failed for '{query}': {e}")
            return []

    async def get_autocomplete_suggestions(self, query: str) -> List[Result]:
        try:
            return await self.engine.get_autocomplete_suggestions(query)
        except Exception as e:
            logger.error(f"Autocomplete failed for '{query}': {e}")
            return []

    def stats(self) -> Dict:
        return {
            'cache': self.cache.stats(),
            'debounce_delay': self.debounce_delay,
            'pending': self._pending_future is not None,
            'superseded': self.superseded_count,
        }


class SearchSession:
    """
    Progressive two-phase search for one input box.

    Each call to search() starts a new generation; results of an older
    generation are never published.

    Usage:
        session = SearchSession(scheduler, on_results=render)
        await session.search("gith", "current-tab")
    """

    def __init__(self, scheduler: SuggestionScheduler, on_results: Optional[Callable[[List[Result]], None]] = None):
        self.scheduler = scheduler
        self.on_results = on_results
        self.generation = 0

    def is_current(self, generation: int) -> bool:
        return generation == self.generation

    def _publish(self, results: List[Result]):
        if self.on_results:
            self.on_results(results)

    async def search(self, query: str, mode: Union[TabMode, str] = TabMode.CURRENT_TAB) -> Optional[List[Result]]:
        """
        Run local, then autocomplete, then full search.

        Returns:
            Final combined results, or None if a newer search superseded this one
        """
        self.generation += 1
        generation = self.generation
        instant = generate_instant_suggestion(query)

        if not (query or "").strip():
            results = await self.scheduler.get_suggestions_immediate("", mode)
            if not self.is_current(generation):
                return None
            self._publish(results)
            return results

        local = await self.scheduler.get_local_suggestions_immediate(query, mode)
        if not self.is_current(generation):
            return None
        combined = combine_results(instant, local)
        self._publish(combined)

        autocomplete = await self.scheduler.get_autocomplete_suggestions(query)
        if not self.is_current(generation):
            return None
        if not autocomplete:
            return combined

        full = await self.scheduler.get_suggestions_immediate(query, mode)
        if not self.is_current(generation):
            return None
        combined = combine_results(instant, full)
        self._publish(combined)
        return combined
