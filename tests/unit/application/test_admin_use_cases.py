"""Tests for the adapter and cache administration use cases."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from gleaner.application.use_cases.adapter_admin import AdapterAdminUseCase, UnknownAdapterError
from gleaner.application.use_cases.cache_admin import EMPTY_STATS, CacheAdminUseCase
from gleaner.domain.adapters import CacheError, ValidationError
from gleaner.infrastructure.adapters import AdapterRegistry

# ---------------------------------------------------------------------------
# Adapter admin
# ---------------------------------------------------------------------------


class TestAdapterAdmin:
    def test_list_supported_sources(self) -> None:
        sources = AdapterAdminUseCase(AdapterRegistry()).list_supported_sources()
        assert "javbus" in {s.source_id for s in sources}

    def test_validate_known(self) -> None:
        result = AdapterAdminUseCase(AdapterRegistry()).validate_adapter("javdb")
        assert result.is_valid is True

    def test_validate_unknown(self) -> None:
        with pytest.raises(UnknownAdapterError) as exc_info:
            AdapterAdminUseCase(AdapterRegistry()).validate_adapter("nope")
        assert exc_info.value.source_id == "nope"

    def test_unknown_is_a_validation_error(self) -> None:
        assert issubclass(UnknownAdapterError, ValidationError)

    @pytest.mark.parametrize("method", ["validate_adapter", "reload_adapter"])
    def test_empty_source_id(self, method: str) -> None:
        admin = AdapterAdminUseCase(AdapterRegistry())
        with pytest.raises(ValidationError, match="missing source id"):
            getattr(admin, method)("")

    def test_reload(self) -> None:
        registry = AdapterRegistry()
        admin = AdapterAdminUseCase(registry)

        assert admin.reload_adapter("jable") is False
        registry.get("jable")
        assert admin.reload_adapter("jable") is True

    def test_reload_unknown(self) -> None:
        registry = MagicMock()
        registry.__contains__.return_value = False
        with pytest.raises(UnknownAdapterError):
            AdapterAdminUseCase(registry).reload_adapter("nope")
        registry.reload.assert_not_called()


# ---------------------------------------------------------------------------
# Cache admin
# ---------------------------------------------------------------------------


def _broken_cache() -> AsyncMock:
    cache = AsyncMock()
    for name in ("stats", "clear", "sweep", "evict_lru", "delete_matching", "delete_url", "export", "import_"):
        setattr(cache, name, AsyncMock(side_effect=CacheError("tier down")))
    return cache


class TestCacheAdmin:
    async def test_passthrough(self, mock_record_cache: AsyncMock) -> None:
        admin = CacheAdminUseCase(mock_record_cache)

        assert await admin.cache_stats() == {"total_items": 1}
        assert await admin.clear_cache() == 2
        assert await admin.delete_cache_entry("https://a.test/x") is True
        assert (await admin.export_cache())["version"] == "1.0"
        assert await admin.import_cache({"items": []}) == 0

        mock_record_cache.delete_url.assert_awaited_once_with("https://a.test/x")
        mock_record_cache.import_.assert_awaited_once_with({"items": []})

    async def test_delete_requires_url(self, mock_record_cache: AsyncMock) -> None:
        with pytest.raises(ValidationError):
            await CacheAdminUseCase(mock_record_cache).delete_cache_entry("")
        mock_record_cache.delete_url.assert_not_called()

    async def test_cache_errors_are_swallowed(self) -> None:
        admin = CacheAdminUseCase(_broken_cache())

        stats = await admin.cache_stats()
        assert stats["total_items"] == EMPTY_STATS["total_items"]
        assert stats["error"] == "cache unavailable"
        assert await admin.clear_cache() == 0
        assert await admin.clear_cache("all") == 0
        assert await admin.delete_cache_entry("https://a.test/x") is False
        assert (await admin.export_cache())["items"] == []
        assert await admin.import_cache({"items": []}) == 0

    async def test_import_validation_errors_propagate(self, mock_record_cache: AsyncMock) -> None:
        mock_record_cache.import_ = AsyncMock(side_effect=ValidationError("bad document"))
        with pytest.raises(ValidationError):
            await CacheAdminUseCase(mock_record_cache).import_cache("nope")


class TestCacheClearOperations:
    async def test_expired_is_the_default(self, mock_record_cache: AsyncMock) -> None:
        assert await CacheAdminUseCase(mock_record_cache).clear_cache() == 2
        mock_record_cache.sweep.assert_awaited_once_with()
        mock_record_cache.clear.assert_not_called()

    async def test_all(self, mock_record_cache: AsyncMock) -> None:
        assert await CacheAdminUseCase(mock_record_cache).clear_cache("all") == 4
        mock_record_cache.clear.assert_awaited_once_with()

    @pytest.mark.parametrize(("count", "expected"), [(5, 5), (500, 100), (-3, 0)])
    async def test_lru_count_is_capped(
        self, mock_record_cache: AsyncMock, count: int, expected: int
    ) -> None:
        assert await CacheAdminUseCase(mock_record_cache).clear_cache("lru", count=count) == 3
        mock_record_cache.evict_lru.assert_awaited_once_with(expected)

    async def test_selective_criteria(self, mock_record_cache: AsyncMock) -> None:
        cleaned = await CacheAdminUseCase(mock_record_cache).clear_cache(
            "selective", older_than_days=2, source_id="javbus", min_size=10, max_size=0
        )

        assert cleaned == 1
        mock_record_cache.delete_matching.assert_awaited_once_with(
            older_than_ms=2 * 86_400_000,
            source_id="javbus",
            min_size=10,
            max_size=None,
        )

    async def test_unknown_operation(self, mock_record_cache: AsyncMock) -> None:
        with pytest.raises(ValidationError, match="unknown cache clear operation"):
            await CacheAdminUseCase(mock_record_cache).clear_cache("everything")
        mock_record_cache.clear.assert_not_called()
