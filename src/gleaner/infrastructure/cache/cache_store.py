"""TTL/LRU cache of extraction records in front of one or two cache tiers.

The store wraps every payload in a :class:`CacheEntry` and owns expiry,
LRU eviction and statistics itself, so tier adapters only need plain
get/set/delete/list semantics.  Reads go to the preferred (durable) tier
when one is configured; the first failure of that tier switches the store
to the process-local tier for the rest of its life.
"""

from __future__ import annotations

import asyncio
import json
import math
from contextlib import suppress
from dataclasses import dataclass, replace
from typing import Any

import structlog

from gleaner.domain.adapters import CacheError, ValidationError
from gleaner.domain.entities import ExtractionRecord
from gleaner.domain.ports.cache import CachePort
from gleaner.infrastructure.common import url_cache_key

from .memory_adapter import Clock, MemoryCacheAdapter, system_clock

log = structlog.get_logger(__name__)

EXPORT_VERSION = "1.0"


@dataclass(frozen=True)
class CacheEntry:
    """One cached payload.  Replaced, never mutated, on every touch."""

    key: str
    payload: Any
    created_at: int
    expires_at: int
    last_accessed_at: int
    access_count: int = 0
    size_bytes: int = 0
    url: str = ""

    def is_expired(self, now_ms: int) -> bool:
        return now_ms >= self.expires_at

    def touched(self, now_ms: int) -> CacheEntry:
        return replace(self, last_accessed_at=now_ms, access_count=self.access_count + 1)

    def remaining_seconds(self, now_ms: int) -> int:
        return max(1, math.ceil((self.expires_at - now_ms) / 1000))


def payload_size(payload: Any) -> int:
    """Approximate size in bytes (UTF-8 JSON)."""
    try:
        return len(json.dumps(payload, ensure_ascii=False, default=str).encode("utf-8"))
    except (TypeError, ValueError):
        return 0


class CacheStore:
    """Keyed TTL cache with LRU bound and hit statistics.

    Args:
        local: Process-local tier (always available).
        preferred: Durable tier used while healthy (``None`` = local only).
        ttl_seconds: Default TTL.
        max_items: Evict least recently accessed entries beyond this count.
        clock: Millisecond clock shared with expiry checks.
    """

    def __init__(
        self,
        local: CachePort | None = None,
        preferred: CachePort | None = None,
        *,
        ttl_seconds: int = 86400,
        max_items: int = 1000,
        clock: Clock = system_clock,
    ) -> None:
        self._clock = clock
        self._local: CachePort = local or MemoryCacheAdapter(ttl_seconds=ttl_seconds, clock=clock)
        self._preferred = preferred
        self._degraded = False
        self.default_ttl = ttl_seconds
        self.max_items = max(1, max_items)
        self._lock = asyncio.Lock()
        self.hits = 0
        self.misses = 0

    # --- Lifecycle ---
    async def __aenter__(self) -> CacheStore:
        await self._local.__aenter__()
        if self._preferred is not None:
            try:
                await self._preferred.__aenter__()
            except Exception:
                log.warning("cache_preferred_tier_unavailable", exc_info=True)
                self._degraded = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._preferred is not None:
            try:
                await self._preferred.aclose()
            except Exception:
                log.warning("cache_preferred_tier_close_failed", exc_info=True)
        await self._local.aclose()

    @property
    def tier_name(self) -> str:
        tier = self._tier()
        return type(tier).__name__

    @property
    def degraded(self) -> bool:
        return self._degraded

    def _tier(self) -> CachePort:
        if self._preferred is not None and not self._degraded:
            return self._preferred
        return self._local

    async def _call(self, op: str, *args: Any, **kwargs: Any) -> Any:
        tier = self._tier()
        try:
            return await getattr(tier, op)(*args, **kwargs)
        except Exception as exc:
            if tier is self._local:
                raise CacheError(f"cache {op} failed: {exc}") from exc
            log.warning("cache_tier_degraded", op=op, tier=type(tier).__name__, exc_info=True)
            self._degraded = True

        try:
            return await getattr(self._local, op)(*args, **kwargs)
        except Exception as exc:
            raise CacheError(f"cache {op} failed: {exc}") from exc

    # --- Keyed API ---
    async def get(self, key: str) -> Any | None:
        """Payload for ``key``, or None on a miss (expired entries are purged)."""
        async with self._lock:
            now = self._clock()
            entry = await self._call("get", key)
            if not isinstance(entry, CacheEntry):
                if entry is not None:
                    await self._call("delete", key)
                self.misses += 1
                return None
            if entry.is_expired(now):
                await self._call("delete", key)
                self.misses += 1
                log.debug("cache_entry_expired", key=key)
                return None

            touched = entry.touched(now)
            await self._call("set", key, touched, ttl=touched.remaining_seconds(now))
            self.hits += 1
            return entry.payload

    async def set(self, key: str, payload: Any, ttl: int | None = None, *, url: str = "") -> None:
        ttl_seconds = ttl if ttl is not None else self.default_ttl
        if ttl_seconds <= 0:
            raise ValueError(f"ttl must be positive, got {ttl_seconds}")

        now = self._clock()
        entry = CacheEntry(
            key=key,
            payload=payload,
            created_at=now,
            expires_at=now + ttl_seconds * 1000,
            last_accessed_at=now,
            size_bytes=payload_size(payload),
            url=url,
        )
        async with self._lock:
            await self._call("set", key, entry, ttl=ttl_seconds)
            await self._evict_overflow()
        log.debug("cache_set", key=key, ttl=ttl_seconds, size_bytes=entry.size_bytes)

    async def delete(self, key: str) -> bool:
        async with self._lock:
            return bool(await self._call("delete", key))

    async def list_keys(self) -> list[str]:
        return list(await self._call("list_keys"))

    async def clear(self) -> int:
        """Drop every entry; returns how many keys were removed."""
        async with self._lock:
            removed = len(await self._call("list_keys"))
            await self._call("clear")
        log.info("cache_store_cleared", tier=self.tier_name, removed=removed)
        return removed

    # --- URL-keyed record helpers ---
    async def get_record(self, url: str) -> ExtractionRecord | None:
        key = url_cache_key(url)
        payload = await self.get(key)
        if payload is None:
            return None
        try:
            return ExtractionRecord.from_dict(payload)
        except (ValueError, TypeError, AttributeError) as exc:
            log.warning("cache_record_corrupt", key=key, error=str(exc))
            await self.delete(key)
            return None

    async def put_record(self, url: str, record: ExtractionRecord, ttl: int | None = None) -> None:
        await self.set(url_cache_key(url), record.to_dict(), ttl, url=url)

    async def delete_url(self, url: str) -> bool:
        return await self.delete(url_cache_key(url))

    # --- Maintenance ---
    async def _entries(self) -> list[CacheEntry | None]:
        """Raw entries for every listed key (None for foreign/corrupt values)."""
        out: list[CacheEntry | None] = []
        for key in await self._call("list_keys"):
            value = await self._call("get", key)
            out.append(value if isinstance(value, CacheEntry) else None)
        return out

    async def _lru_entries(self, keys: list[str]) -> tuple[list[CacheEntry], int]:
        """Valid entries for ``keys``, least recently accessed first.

        Foreign or corrupt values are deleted on the way; the second item
        is how many of those were dropped.  Caller holds the lock.
        """
        entries: list[CacheEntry] = []
        dropped = 0
        for key in keys:
            value = await self._call("get", key)
            if isinstance(value, CacheEntry):
                entries.append(value)
            else:
                await self._call("delete", key)
                dropped += 1
        entries.sort(key=lambda e: (e.last_accessed_at, e.created_at))
        return entries, dropped

    async def _evict_overflow(self) -> None:
        """Drop least recently accessed entries beyond ``max_items``; caller holds the lock."""
        keys = await self._call("list_keys")
        if len(keys) <= self.max_items:
            return

        entries, dropped = await self._lru_entries(keys)
        overflow = len(keys) - dropped - self.max_items
        for entry in entries[: max(0, overflow)]:
            await self._call("delete", entry.key)
            log.debug("cache_entry_evicted", key=entry.key)

    async def evict_lru(self, count: int) -> int:
        """Delete the ``count`` least recently accessed entries; returns how many went."""
        if count <= 0:
            return 0
        async with self._lock:
            entries, _ = await self._lru_entries(await self._call("list_keys"))
            victims = entries[:count]
            for entry in victims:
                await self._call("delete", entry.key)
        log.info("cache_lru_evicted", requested=count, removed=len(victims))
        return len(victims)

    async def delete_matching(
        self,
        *,
        older_than_ms: int | None = None,
        source_id: str | None = None,
        min_size: int = 0,
        max_size: int | None = None,
    ) -> int:
        """Delete entries matching every given criterion.

        Args:
            older_than_ms: Only entries created more than this long ago.
            source_id: Only records extracted by this source.
            min_size: Only entries of at least this many bytes.
            max_size: Only entries of at most this many bytes.

        Returns:
            Number of deleted entries.
        """
        removed = 0
        async with self._lock:
            now = self._clock()
            for key in await self._call("list_keys"):
                entry = await self._call("get", key)
                if not isinstance(entry, CacheEntry):
                    continue
                if older_than_ms is not None and entry.created_at >= now - older_than_ms:
                    continue
                payload = entry.payload if isinstance(entry.payload, dict) else {}
                if source_id and payload.get("sourceId") != source_id:
                    continue
                if entry.size_bytes < min_size:
                    continue
                if max_size is not None and entry.size_bytes > max_size:
                    continue
                await self._call("delete", key)
                removed += 1
        log.info("cache_selective_cleared", removed=removed, source_id=source_id)
        return removed

    async def sweep(self) -> int:
        """Delete every expired entry; returns how many were removed."""
        removed = 0
        async with self._lock:
            now = self._clock()
            for key in await self._call("list_keys"):
                value = await self._call("get", key)
                if isinstance(value, CacheEntry) and not value.is_expired(now):
                    continue
                await self._call("delete", key)
                removed += 1
        log.info("cache_swept", removed=removed, tier=self.tier_name)
        return removed

    async def stats(self) -> dict[str, Any]:
        now = self._clock()
        entries = [e for e in await self._entries() if e is not None]
        total_size = sum(e.size_bytes for e in entries)
        lookups = self.hits + self.misses
        return {
            "total_items": len(entries),
            "total_size": total_size,
            "expired_items": sum(1 for e in entries if e.is_expired(now)),
            "average_size": round(total_size / len(entries), 2) if entries else 0,
            "hit_rate": round(self.hits / lookups, 4) if lookups else 0.0,
            "hits": self.hits,
            "misses": self.misses,
            "tier": self.tier_name,
            "degraded": self._degraded,
        }

    # --- Export / import ---
    async def export(self) -> dict[str, Any]:
        now = self._clock()
        items = [
            {
                "key": e.key,
                "url": e.url,
                "data": e.payload,
                "createdAt": e.created_at,
                "expiresAt": e.expires_at,
            }
            for e in await self._entries()
            if e is not None and not e.is_expired(now)
        ]
        return {
            "version": EXPORT_VERSION,
            "exportTime": now,
            "totalItems": len(items),
            "items": items,
        }

    async def import_(self, payload: Any) -> int:
        """Load entries from :meth:`export` output.

        Expired or malformed items are skipped.

        Returns:
            Number of imported entries.

        Raises:
            ValidationError: ``payload`` is not an export document.
        """
        if not isinstance(payload, dict) or not isinstance(payload.get("items"), list):
            raise ValidationError("cache import expects an object with an 'items' list")

        imported = 0
        skipped = 0
        async with self._lock:
            now = self._clock()
            for item in payload["items"]:
                entry = self._entry_from_export(item, now)
                if entry is None:
                    skipped += 1
                    continue
                await self._call("set", entry.key, entry, ttl=entry.remaining_seconds(now))
                imported += 1
            await self._evict_overflow()

        log.info("cache_imported", imported=imported, skipped=skipped)
        return imported

    @staticmethod
    def _entry_from_export(item: Any, now: int) -> CacheEntry | None:
        if not isinstance(item, dict):
            return None
        key = item.get("key")
        data = item.get("data")
        expires_at = item.get("expiresAt")
        created_at = item.get("createdAt", now)
        if not isinstance(key, str) or not key or not isinstance(data, dict):
            return None
        if not isinstance(expires_at, int) or isinstance(expires_at, bool) or expires_at <= now:
            return None
        if not isinstance(created_at, int) or created_at >= expires_at:
            created_at = now
        try:
            ExtractionRecord.from_dict(data)
        except (ValueError, TypeError, AttributeError):
            return None
        return CacheEntry(
            key=key,
            payload=data,
            created_at=created_at,
            expires_at=expires_at,
            last_accessed_at=now,
            size_bytes=payload_size(data),
            url=str(item.get("url") or ""),
        )


class CacheSweeper:
    """Runs :meth:`CacheStore.sweep` every ``interval_seconds``.

    Call :meth:`start` during app lifespan and :meth:`stop` on shutdown.
    """

    def __init__(self, store: CacheStore, interval_seconds: float = 3600) -> None:
        self._store = store
        self._interval = interval_seconds
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running or self._interval <= 0:
            return
        self._task = asyncio.create_task(self.run_forever(), name="gleaner-cache-sweeper")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        log.info("cache_sweeper_stopped")

    async def run_forever(self) -> None:
        log.info("cache_sweeper_started", interval_seconds=self._interval)
        try:
            while True:
                await asyncio.sleep(self._interval)
                try:
                    await self._store.sweep()
                except Exception:
                    log.error("cache_sweep_error", exc_info=True)
        except asyncio.CancelledError:
            log.info("cache_sweeper_cancelled")
            raise
