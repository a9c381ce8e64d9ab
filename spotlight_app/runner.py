"""
Bridge between sync Flask views and the async suggestion pipeline.

Flask routes are sync, but the engine, scheduler and space cache are async
and keep state (debounce timers, single-flight build task, HTTP clients)
that must live on one event loop. AsyncRunner owns that loop on a daemon
thread and lets request threads submit coroutines to it.
"""

import asyncio
import logging
import threading
import concurrent.futures
from typing import Any, Awaitable, Optional

logger = logging.getLogger(__name__)


class AsyncRunner:
    """
    Long-lived event loop on a background thread.

    Usage:
        runner = AsyncRunner()
        results = runner.run(engine.get_suggestions("gith"), timeout=5)
        runner.stop()
    """

    def __init__(self, name: str = "spotlight-loop"):
        self.loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._serve, name=name, daemon=True)
        self._thread.start()

    def _serve(self):
        asyncio.set_event_loop(self.loop)
        self.loop.run_forever()

    @property
    def is_running(self) -> bool:
        return self._thread.is_alive() and not self.loop.is_closed()

    def run(self, coro: Awaitable, timeout: Optional[float] = None) -> Any:
        """
        Run coroutine on the background loop and wait for its result.

        Raises:
            concurrent.futures.TimeoutError: if timeout elapses (the
                coroutine is cancelled)
            Whatever the coroutine raises
        """
        future = asyncio.run_coroutine_threadsafe(coro, self.loop)
        try:
            return future.result(timeout)
        except concurrent.futures.TimeoutError:
            future.cancel()
            raise

    def stop(self):
        """Stop the loop and join the thread."""
        if self.loop.is_closed():
            return
        self.loop.call_soon_threadsafe(self.loop.stop)
        self._thread.join(timeout=5)
        self.loop.close()
        logger.info("Async runner stopped")
