"""Cache administration (stats, clear, delete, export, import).

Cache tier failures are logged and reported as "nothing happened"; they
never surface as errors to callers.
"""

from __future__ import annotations

from typing import Any

import structlog

from gleaner.domain.adapters import CacheError, ValidationError
from gleaner.domain.ports import RecordCachePort

log = structlog.get_logger(__name__)

EMPTY_STATS: dict[str, Any] = {
    "total_items": 0,
    "total_size": 0,
    "expired_items": 0,
    "average_size": 0,
    "hit_rate": 0.0,
    "hits": 0,
    "misses": 0,
}

CLEAR_OPERATIONS = ("expired", "all", "lru", "selective")
DEFAULT_LRU_COUNT = 10
MAX_LRU_COUNT = 100


class CacheAdminUseCase:
    def __init__(self, cache: RecordCachePort) -> None:
        self.cache = cache

    async def cache_stats(self) -> dict[str, Any]:
        try:
            return await self.cache.stats()
        except CacheError:
            log.warning("cache_stats_failed", exc_info=True)
            return {**EMPTY_STATS, "error": "cache unavailable"}

    async def clear_cache(
        self,
        operation: str = "expired",
        *,
        count: int = DEFAULT_LRU_COUNT,
        older_than_days: int | None = None,
        source_id: str | None = None,
        min_size: int = 0,
        max_size: int | None = None,
    ) -> int:
        """Run one cleanup ``operation`` and return how many entries went.

        Operations:
            expired: drop expired entries (the sweep).
            all: drop everything.
            lru: drop the ``count`` least recently accessed entries (capped at 100).
            selective: drop entries matching every given criterion.

        Raises:
            ValidationError: Unknown ``operation``.
        """
        if operation not in CLEAR_OPERATIONS:
            raise ValidationError(f"unknown cache clear operation {operation!r}")
        try:
            if operation == "expired":
                cleaned = await self.cache.sweep()
            elif operation == "all":
                cleaned = await self.cache.clear()
            elif operation == "lru":
                cleaned = await self.cache.evict_lru(min(max(count, 0), MAX_LRU_COUNT))
            else:
                cleaned = await self.cache.delete_matching(
                    older_than_ms=(
                        older_than_days * 86_400_000 if older_than_days is not None else None
                    ),
                    source_id=source_id or None,
                    min_size=min_size,
                    max_size=max_size or None,
                )
        except CacheError:
            log.warning("cache_clear_failed", operation=operation, exc_info=True)
            return 0
        log.info("cache_cleared", operation=operation, cleaned=cleaned)
        return cleaned

    async def delete_cache_entry(self, url: str) -> bool:
        """
        Raises:
            ValidationError: ``url`` is empty.
        """
        if not url:
            raise ValidationError("missing url")
        try:
            return await self.cache.delete_url(url)
        except CacheError:
            log.warning("cache_delete_failed", url=url, exc_info=True)
            return False

    async def export_cache(self) -> dict[str, Any]:
        try:
            return await self.cache.export()
        except CacheError:
            log.warning("cache_export_failed", exc_info=True)
            return {"version": "1.0", "exportTime": 0, "totalItems": 0, "items": []}

    async def import_cache(self, payload: Any) -> int:
        """
        Raises:
            ValidationError: ``payload`` is not an export document.
        """
        try:
            return await self.cache.import_(payload)
        except CacheError:
            log.warning("cache_import_failed", exc_info=True)
            return 0
