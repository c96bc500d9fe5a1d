"""Process-local cache tier (always available, no I/O)."""

from __future__ import annotations

import time
from collections import OrderedDict
from collections.abc import Callable
from typing import Any

import structlog

log = structlog.get_logger(__name__)

# Milliseconds since the epoch; injectable for deterministic expiry in tests.
Clock = Callable[[], int]


def system_clock() -> int:
    return int(time.time() * 1000)


class MemoryCacheAdapter:
    """In-memory CachePort implementation with TTL and optional LRU bound.

    Expired keys are purged lazily on access (and by ``list_keys()``).
    Values are stored by reference; callers must not mutate them after
    ``set()``.

    Args:
        ttl_seconds: Default TTL for `set()` without explicit value.
        max_items: Evict least recently used keys beyond this count
            (``None`` = unbounded).
        clock: Millisecond clock.
    """

    def __init__(
        self,
        ttl_seconds: int = 3600,
        max_items: int | None = None,
        clock: Clock = system_clock,
    ) -> None:
        self.default_ttl = ttl_seconds
        self.max_items = max_items
        self._clock = clock
        self._data: OrderedDict[str, tuple[Any, int | None]] = OrderedDict()

    # --- Context Manager ---
    async def __aenter__(self) -> MemoryCacheAdapter:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        self._data.clear()

    # --- CachePort implementation ---
    async def get(self, key: str) -> Any | None:
        item = self._data.get(key)
        if item is None:
            return None
        value, expires_at = item
        if expires_at is not None and expires_at <= self._clock():
            del self._data[key]
            return None
        self._data.move_to_end(key)
        return value

    async def set(self, key: str, value: Any, *, ttl: int | None = None) -> None:
        expire = ttl if ttl is not None else self.default_ttl
        expires_at = self._clock() + expire * 1000 if expire and expire > 0 else None
        self._data[key] = (value, expires_at)
        self._data.move_to_end(key)
        if self.max_items is not None:
            while len(self._data) > self.max_items:
                evicted, _ = self._data.popitem(last=False)
                log.debug("memory_cache_evicted", key=evicted)

    async def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    async def exists(self, key: str) -> bool:
        return await self.get(key) is not None

    async def list_keys(self, prefix: str = "") -> list[str]:
        now = self._clock()
        expired = [k for k, (_, exp) in self._data.items() if exp is not None and exp <= now]
        for key in expired:
            del self._data[key]
        return [k for k in self._data if k.startswith(prefix)]

    async def clear(self) -> None:
        self._data.clear()
