"""Cache infrastructure: tiers, the record store and its sweeper."""

from .cache_factory import CacheBackend, create_cache
from .cache_store import CacheEntry, CacheStore, CacheSweeper
from .diskcache_adapter import DiskcacheAdapter
from .memory_adapter import Clock, MemoryCacheAdapter, system_clock
from .redis_adapter import RedisAdapter

__all__ = [
    "CacheBackend",
    "CacheEntry",
    "CacheStore",
    "CacheSweeper",
    "Clock",
    "DiskcacheAdapter",
    "MemoryCacheAdapter",
    "RedisAdapter",
    "create_cache",
    "system_clock",
]
