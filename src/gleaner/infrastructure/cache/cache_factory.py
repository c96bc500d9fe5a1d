"""Cache factory - builds the durable cache tier from config."""

from __future__ import annotations

from typing import Literal

import structlog

from gleaner.domain.ports.cache import CachePort

from .diskcache_adapter import DiskcacheAdapter
from .memory_adapter import Clock, MemoryCacheAdapter, system_clock
from .redis_adapter import RedisAdapter

log = structlog.get_logger(__name__)

CacheBackend = Literal["memory", "diskcache", "redis"]


def create_cache(
    backend: CacheBackend = "memory",
    *,
    directory: str = "./.gleaner-cache",
    redis_url: str = "redis://localhost:6379/0",
    ttl_seconds: int = 86400,
    max_concurrent: int = 10,
    max_items: int | None = None,
    clock: Clock = system_clock,
) -> CachePort:
    """Create a cache tier for ``backend``.

    Args:
        backend: "memory" (process-local), "diskcache" (SQLite) or "redis".
        directory: Diskcache directory.
        redis_url: Redis connection string.
        ttl_seconds: Default TTL for every backend.
        max_concurrent: Semaphore limit for diskcache (Redis uses 50).
        max_items: LRU bound for the memory backend.
        clock: Millisecond clock for the memory backend.

    Raises:
        ValueError: If `backend` is unknown.
    """
    log.info("cache_factory_create", backend=backend, ttl=ttl_seconds)

    if backend == "memory":
        return MemoryCacheAdapter(ttl_seconds=ttl_seconds, max_items=max_items, clock=clock)
    if backend == "diskcache":
        return DiskcacheAdapter(
            directory=directory,
            ttl_seconds=ttl_seconds,
            max_concurrent=max_concurrent,
        )
    if backend == "redis":
        return RedisAdapter(url=redis_url, ttl_seconds=ttl_seconds, max_concurrent=50)
    raise ValueError(
        f"Unknown cache backend: {backend!r}. Must be 'memory', 'diskcache' or 'redis'."
    )
