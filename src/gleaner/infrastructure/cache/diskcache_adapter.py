"""Durable cache tier on diskcache (SQLite file, no daemon)."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import structlog
from diskcache import Cache as DiskCache

log = structlog.get_logger(__name__)


class DiskcacheAdapter:
    """Async wrapper for diskcache.Cache (sync-only library).

    Disk I/O runs in ``asyncio.to_thread``; a semaphore bounds parallel
    operations to limit SQLite lock contention.  The SQLite file is opened
    in ``__aenter__``, so constructing the adapter touches no filesystem.

    Args:
        directory: Cache directory.
        ttl_seconds: Default TTL for `set()` without explicit value.
        max_concurrent: Max parallel disk ops.
    """

    def __init__(
        self,
        directory: str | Path = "./.gleaner-cache",
        ttl_seconds: int = 86400,
        max_concurrent: int = 10,
    ) -> None:
        self.directory = Path(directory)
        self.default_ttl = ttl_seconds
        self._cache: DiskCache | None = None
        self._semaphore = asyncio.Semaphore(max_concurrent)

    async def __aenter__(self) -> DiskcacheAdapter:
        if self._cache is None:
            self._cache = await asyncio.to_thread(DiskCache, str(self.directory))
            log.info("diskcache_opened", directory=str(self.directory))
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._cache is not None:
            await asyncio.to_thread(self._cache.close)
            self._cache = None
            log.info("diskcache_closed", directory=str(self.directory))

    def _opened(self) -> DiskCache:
        if self._cache is None:
            raise RuntimeError(
                "Diskcache not opened. Use 'async with cache:' or await cache.__aenter__()"
            )
        return self._cache

    async def _run(self, fn, *args, **kwargs) -> Any:
        async with self._semaphore:
            return await asyncio.to_thread(fn, *args, **kwargs)

    # --- CachePort implementation ---
    async def get(self, key: str) -> Any | None:
        cache = self._opened()
        return await self._run(cache.get, key, default=None)

    async def set(self, key: str, value: Any, *, ttl: int | None = None) -> None:
        cache = self._opened()
        expire = ttl if ttl is not None else self.default_ttl
        await self._run(cache.set, key, value, expire=expire if expire > 0 else None)

    async def delete(self, key: str) -> bool:
        if self._cache is None:
            return False
        return bool(await self._run(self._cache.delete, key))

    async def exists(self, key: str) -> bool:
        if self._cache is None:
            return False
        # __contains__ honours expiry
        cache = self._cache
        return await self._run(lambda: key in cache)

    async def list_keys(self, prefix: str = "") -> list[str]:
        """Keys starting with ``prefix``; expired keys not yet culled may be listed."""
        cache = self._opened()
        keys = await self._run(lambda: list(cache.iterkeys()))
        return [k for k in keys if isinstance(k, str) and k.startswith(prefix)]

    async def clear(self) -> None:
        if self._cache is None:
            return
        await self._run(self._cache.clear)
        log.warning("diskcache_cleared", directory=str(self.directory))
