"""Durable cache tier on Redis (redis.asyncio)."""

from __future__ import annotations

import asyncio
import pickle
from typing import Any

import structlog
from redis.asyncio import Redis

log = structlog.get_logger(__name__)


class RedisAdapter:
    """Async Redis cache tier.

    Values are pickled; keys are namespaced with ``namespace`` so that
    ``clear()`` and ``list_keys()`` never touch foreign keys in a shared
    database.  Redis errors propagate: the CacheStore in front of this
    tier decides how to degrade.

    Args:
        url: Redis URL (e.g. `redis://localhost:6379/0`).
        ttl_seconds: Default TTL.
        max_concurrent: Max parallel Redis ops.
        namespace: Prefix prepended to every key.
    """

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        ttl_seconds: int = 86400,
        max_concurrent: int = 50,
        namespace: str = "gleaner:",
    ) -> None:
        self.url = url
        self.default_ttl = ttl_seconds
        self.namespace = namespace
        self._client: Redis | None = None
        self._semaphore = asyncio.Semaphore(max_concurrent)

    async def __aenter__(self) -> RedisAdapter:
        if self._client is None:
            client = Redis.from_url(self.url, decode_responses=False)
            # Fail fast on a bad URL or unreachable server
            await client.ping()
            self._client = client
            log.info("redis_connected", url=self.url)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            log.info("redis_closed")

    def _connected(self) -> Redis:
        if self._client is None:
            raise RuntimeError("Redis not connected. Use 'async with cache:'")
        return self._client

    def _k(self, key: str) -> str:
        return f"{self.namespace}{key}"

    # --- CachePort implementation ---
    async def get(self, key: str) -> Any | None:
        client = self._connected()
        async with self._semaphore:
            raw = await client.get(self._k(key))
        return None if raw is None else pickle.loads(raw)

    async def set(self, key: str, value: Any, *, ttl: int | None = None) -> None:
        client = self._connected()
        expire = ttl if ttl is not None else self.default_ttl
        packed = pickle.dumps(value)
        async with self._semaphore:
            if expire > 0:
                await client.setex(self._k(key), expire, packed)
            else:
                await client.set(self._k(key), packed)

    async def delete(self, key: str) -> bool:
        if self._client is None:
            return False
        async with self._semaphore:
            return await self._client.delete(self._k(key)) > 0

    async def exists(self, key: str) -> bool:
        if self._client is None:
            return False
        async with self._semaphore:
            return await self._client.exists(self._k(key)) > 0

    async def list_keys(self, prefix: str = "") -> list[str]:
        client = self._connected()
        strip = len(self.namespace)
        out: list[str] = []
        async with self._semaphore:
            async for raw in client.scan_iter(match=f"{self._k(prefix)}*"):
                key = raw.decode() if isinstance(raw, bytes) else str(raw)
                out.append(key[strip:])
        return out

    async def clear(self) -> None:
        if self._client is None:
            return
        keys = await self.list_keys()
        if keys:
            async with self._semaphore:
                await self._client.delete(*(self._k(k) for k in keys))
        log.warning("redis_cleared", namespace=self.namespace, count=len(keys))
