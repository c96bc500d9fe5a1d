"""Tests for AdapterRegistry."""

from __future__ import annotations

import pytest

from gleaner.domain.adapters import AdapterLoadError
from gleaner.infrastructure.adapters import (
    GENERIC_ID,
    AdapterRegistry,
    GenericAdapter,
    JavBusAdapter,
)


def _broken() -> JavBusAdapter:
    raise RuntimeError("factory exploded")


class TestDetectSource:
    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://www.javbus.com/IPX-156", "javbus"),
            ("https://javdb.com/v/abc", "javdb"),
            ("https://sukebei.nyaa.si/view/1", "sukebei"),
            ("https://unknown.example.com/x", GENERIC_ID),
        ],
    )
    def test_detect(self, url: str, expected: str) -> None:
        assert AdapterRegistry().detect_source(url) == expected

    def test_detected_source_without_factory_maps_to_generic(self) -> None:
        registry = AdapterRegistry({GENERIC_ID: GenericAdapter})
        assert registry.detect_source("https://www.javbus.com/IPX-156") == GENERIC_ID


class TestGet:
    def test_instances_are_cached(self) -> None:
        registry = AdapterRegistry()
        first = registry.get("javbus")
        assert isinstance(first, JavBusAdapter)
        assert registry.get("javbus") is first
        assert registry.cached_ids() == ["javbus"]

    def test_unknown_id_falls_back_to_generic(self) -> None:
        registry = AdapterRegistry()
        adapter = registry.get("nope")
        assert adapter.source_id == GENERIC_ID
        assert registry.get(GENERIC_ID) is adapter

    def test_broken_factory_falls_back_to_generic(self) -> None:
        registry = AdapterRegistry({"javbus": _broken, GENERIC_ID: GenericAdapter})
        assert registry.get("javbus").source_id == GENERIC_ID
        assert registry.cached_ids() == [GENERIC_ID]

    def test_fallback_is_not_aliased_under_the_broken_id(self) -> None:
        registry = AdapterRegistry({"javbus": _broken, GENERIC_ID: GenericAdapter})
        stale = registry.get("javbus")

        assert registry.reload(GENERIC_ID) is True
        fresh = registry.get("javbus")

        assert fresh is not stale
        assert fresh is registry.get(GENERIC_ID)
        assert registry.cached_ids() == [GENERIC_ID]

    def test_broken_generic_raises(self) -> None:
        registry = AdapterRegistry({"javbus": _broken, GENERIC_ID: _broken})
        with pytest.raises(AdapterLoadError):
            registry.get("javbus")

    def test_generic_max_anchors_is_passed_through(self) -> None:
        registry = AdapterRegistry(generic_max_anchors=7)
        adapter = registry.get(GENERIC_ID)
        assert isinstance(adapter, GenericAdapter)
        assert adapter.max_anchors == 7

    def test_contains(self) -> None:
        registry = AdapterRegistry()
        assert "javbus" in registry
        assert "nope" not in registry


class TestReload:
    def test_reload_evicts_cached_instance(self) -> None:
        registry = AdapterRegistry()
        first = registry.get("javdb")

        assert registry.reload("javdb") is True
        assert registry.get("javdb") is not first

    def test_reload_of_uncached_id(self) -> None:
        assert AdapterRegistry().reload("javdb") is False


class TestListAndValidate:
    def test_lists_every_source(self) -> None:
        sources = AdapterRegistry().list_sources()
        ids = [s.source_id for s in sources]

        assert len(ids) == 8
        assert set(ids) == {
            "javbus", "javdb", "jable", "javgg", "javmost", "sukebei", "javguru", GENERIC_ID,
        }
        javbus = next(s for s in sources if s.source_id == "javbus")
        assert javbus.display_name == "JavBus"
        assert "magnet_links" in javbus.capabilities

    def test_broken_source_is_not_listed_as_a_second_generic(self) -> None:
        registry = AdapterRegistry({"javbus": _broken, GENERIC_ID: GenericAdapter})
        assert [s.source_id for s in registry.list_sources()] == [GENERIC_ID]

    def test_validate_known(self) -> None:
        result = AdapterRegistry().validate("sukebei")
        assert result.is_valid is True
        assert result.errors == ()
        assert "torrent_files" in result.capabilities

    def test_validate_unknown(self) -> None:
        result = AdapterRegistry().validate("nope")
        assert result.is_valid is False
        assert "unknown source" in result.errors[0]

    def test_validate_broken_factory(self) -> None:
        result = AdapterRegistry({"javbus": _broken, GENERIC_ID: GenericAdapter}).validate("javbus")
        assert result.is_valid is False
        assert "construction failed" in result.errors[0]

    def test_validate_does_not_cache(self) -> None:
        registry = AdapterRegistry()
        registry.validate("javbus")
        assert registry.cached_ids() == []
