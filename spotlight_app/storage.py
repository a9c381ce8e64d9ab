"""
================================================================================
Spotlight v1.0 - Durable Key/Value Storage
================================================================================
Small JSON store used for the collection snapshot and the collection list.

Backends:
  - RedisBackend   REDIS_URL set (shared across workers)
  - FileBackend    SPOTLIGHT_STORAGE_PATH set (single JSON document)
  - MemoryBackend  default, and fallback when Redis is unreachable

Backends are synchronous and log-and-swallow I/O errors; KeyValueStore
exposes async get_json / set_json / delete that run them in the default
executor so the event loop never blocks.
================================================================================
"""

import os
import json
import asyncio
import logging
import threading
from typing import Any, Optional, Dict
from collections import OrderedDict

import redis

logger = logging.getLogger(__name__)


class RedisBackend:
    """Redis-based storage for shared state."""
    def __init__(self, url: str):
        self.client = redis.from_url(url, decode_responses=True)
        self.url = url

    def get(self, key: str) -> Optional[str]:
        try:
            return self.client.get(key)
        except redis.RedisError as e:
            logger.error(f"Redis GET failed: {e}")
            return None

    def set(self, key: str, value: str):
        try:
            self.client.set(key, value)
        except redis.RedisError as e:
            logger.error(f"Redis SET failed: {e}")

    def delete(self, key: str):
        try:
            self.client.delete(key)
        except redis.RedisError as e:
            logger.error(f"Redis DELETE failed: {e}")


class FileBackend:
    """All keys in one JSON document on disk, rewritten atomically."""
    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()
        directory = os.path.dirname(os.path.abspath(path))
        os.makedirs(directory, exist_ok=True)

    def _read(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Storage file unreadable ({self.path}): {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, str]):
        tmp_path = f"{self.path}.tmp"
        try:
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(data, f)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(f"Storage file write failed ({self.path}): {e}")

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read().get(key)

    def set(self, key: str, value: str):
        with self._lock:
            data = self._read()
            data[key] = value
            self._write(data)

    def delete(self, key: str):
        with self._lock:
            data = self._read()
            if key in data:
                del data[key]
                self._write(data)


class MemoryBackend:
    """In-process storage (lost on restart)."""
    def __init__(self, max_size: int = 1000):
        self._data: OrderedDict = OrderedDict()
        self._lock = threading.Lock()
        self.max_size = max_size

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            if key not in self._data:
                return None
            self._data.move_to_end(key)
            return self._data[key]

    def set(self, key: str, value: str):
        with self._lock:
            if len(self._data) >= self.max_size and key not in self._data:
                self._data.popitem(last=False)
            self._data[key] = value
            self._data.move_to_end(key)

    def delete(self, key: str):
        with self._lock:
            self._data.pop(key, None)


class KeyValueStore:
    """Async JSON facade over a storage backend."""
    def __init__(self, backend, prefix: str = "spotlight:"):
        self.backend = backend
        self.prefix = prefix

    def _k(self, key: str) -> str:
        return f"{self.prefix}{key}"

    async def _run(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    async def get_json(self, key: str) -> Optional[Any]:
        data = await self._run(self.backend.get, self._k(key))
        if not data:
            return None
        try:
            return json.loads(data)
        except ValueError as e:
            logger.warning(f"Discarding corrupt value for {key}: {e}")
            return None

    async def set_json(self, key: str, value: Any):
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            logger.error(f"Storage SET failed for {key}: {e}")
            return
        await self._run(self.backend.set, self._k(key), payload)

    async def delete(self, key: str):
        await self._run(self.backend.delete, self._k(key))


def create_store(redis_url: Optional[str] = None, path: Optional[str] = None, prefix: str = "spotlight:") -> KeyValueStore:
    """
    Pick a backend from configuration.

    Args:
        redis_url: Redis connection URL (preferred)
        path: JSON file path
        prefix: Key namespace
    """
    if redis_url:
        try:
            backend = RedisBackend(redis_url)
            backend.client.ping()
            logger.info(f"Storage initialized with Redis: {redis_url}")
            return KeyValueStore(backend, prefix)
        except redis.RedisError as e:
            logger.warning(f"Redis connection failed, falling back to memory: {e}")
            return KeyValueStore(MemoryBackend(), prefix)

    if path:
        logger.info(f"Storage initialized with FileBackend: {path}")
        return KeyValueStore(FileBackend(path), prefix)

    logger.info("Storage initialized with MemoryBackend")
    return KeyValueStore(MemoryBackend(), prefix)
