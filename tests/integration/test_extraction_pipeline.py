"""Integration tests: full extraction pipeline with mocked HTTP (respx).

Each test builds the real engine through build_context(); only the
network is faked.
"""

from __future__ import annotations

import httpx
import pytest
import respx
from fastapi.testclient import TestClient

from gleaner.domain.entities import ExtractionItem, ExtractionOptions, ExtractionStatus
from gleaner.infrastructure.config import AppConfig
from gleaner.interfaces.composition import build_context
from gleaner.interfaces.main import build_app

pytestmark = pytest.mark.integration

_LISTING_URL = "https://www.javbus.com/search/IPX-156"
_DETAIL_URL = "https://www.javbus.com/IPX-156"


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class TestDetailPage:
    async def test_extracts_and_caches(
        self,
        engine_config: AppConfig,
        http_client: httpx.AsyncClient,
        respx_mock: respx.MockRouter,
        javbus_detail_html: str,
    ) -> None:
        route = respx_mock.get(_DETAIL_URL).respond(200, text=javbus_detail_html)
        item = ExtractionItem(id="a", url=_DETAIL_URL, title="IPX-156")

        async with build_context(engine_config, http_client=http_client) as engine:
            first = await engine.extract_single(item)
            second = await engine.extract_single(item)
            stats = await engine.cache_stats()

        assert first.extraction_status is ExtractionStatus.SUCCESS
        assert first.source_id == "javbus"
        assert first.code == "IPX-156"
        assert first.cast[0].name == "Momo Sakura"
        assert first.magnet_links[0].uri.startswith("magnet:?xt=urn:btih:ABC123")

        assert second.extraction_status is ExtractionStatus.CACHED
        assert second.code == "IPX-156"
        assert route.call_count == 1
        assert stats["total_items"] == 1

    async def test_sends_source_referer(
        self,
        engine_config: AppConfig,
        http_client: httpx.AsyncClient,
        respx_mock: respx.MockRouter,
        javbus_detail_html: str,
    ) -> None:
        route = respx_mock.get(_DETAIL_URL).respond(200, text=javbus_detail_html)

        async with build_context(engine_config, http_client=http_client) as engine:
            await engine.extract_single(ExtractionItem(id="a", url=_DETAIL_URL))

        assert route.calls.last.request.headers["Referer"] == "https://www.javbus.com/"

    async def test_http_error_is_retried_then_reported(
        self,
        engine_config: AppConfig,
        http_client: httpx.AsyncClient,
        respx_mock: respx.MockRouter,
    ) -> None:
        route = respx_mock.get(_DETAIL_URL).respond(404)

        async with build_context(engine_config, http_client=http_client) as engine:
            record = await engine.extract_single(ExtractionItem(id="a", url=_DETAIL_URL))
            stats = await engine.cache_stats()

        assert record.extraction_status is ExtractionStatus.ERROR
        assert "404" in record.extraction_error
        assert record.retry_count == 0
        assert route.call_count == 2
        assert stats["total_items"] == 0

    async def test_no_retry_option(
        self,
        engine_config: AppConfig,
        http_client: httpx.AsyncClient,
        respx_mock: respx.MockRouter,
    ) -> None:
        route = respx_mock.get(_DETAIL_URL).respond(500)

        async with build_context(engine_config, http_client=http_client) as engine:
            await engine.extract_single(
                ExtractionItem(id="a", url=_DETAIL_URL),
                ExtractionOptions(enable_retry=False),
            )

        assert route.call_count == 1


class TestListingPage:
    async def test_resolves_best_detail_link(
        self,
        engine_config: AppConfig,
        http_client: httpx.AsyncClient,
        respx_mock: respx.MockRouter,
        javbus_listing_html: str,
        javbus_detail_html: str,
    ) -> None:
        respx_mock.get(_LISTING_URL).respond(200, text=javbus_listing_html)
        detail = respx_mock.get(_DETAIL_URL).respond(200, text=javbus_detail_html)
        other = respx_mock.get("https://www.javbus.com/IPX-157").respond(200, text="")

        async with build_context(engine_config, http_client=http_client) as engine:
            record = await engine.extract_single(
                ExtractionItem(id="b", url=_LISTING_URL, keyword="IPX-156")
            )

        assert record.extraction_status is ExtractionStatus.SUCCESS
        assert record.origin_url == _LISTING_URL
        assert record.detail_url == _DETAIL_URL
        assert detail.call_count == 1
        assert other.call_count == 0

    async def test_batch_mixes_outcomes(
        self,
        engine_config: AppConfig,
        http_client: httpx.AsyncClient,
        respx_mock: respx.MockRouter,
        javbus_detail_html: str,
    ) -> None:
        respx_mock.get(_DETAIL_URL).respond(200, text=javbus_detail_html)
        respx_mock.get("https://www.javbus.com/IPX-999").mock(
            side_effect=httpx.ConnectError("refused")
        )
        items = [
            ExtractionItem(id="ok", url=_DETAIL_URL),
            ExtractionItem(id="down", url="https://www.javbus.com/IPX-999"),
        ]

        async with build_context(engine_config, http_client=http_client) as engine:
            records = await engine.extract_batch(items)

        assert [r.item_id for r in records] == ["ok", "down"]
        assert records[0].extraction_status is ExtractionStatus.SUCCESS
        assert records[1].extraction_status is ExtractionStatus.ERROR


class TestDurableCache:
    async def test_records_survive_engine_restart(
        self,
        disk_config: AppConfig,
        respx_mock: respx.MockRouter,
        javbus_detail_html: str,
    ) -> None:
        route = respx_mock.get(_DETAIL_URL).respond(200, text=javbus_detail_html)
        item = ExtractionItem(id="a", url=_DETAIL_URL)

        async with build_context(disk_config, http_client=httpx.AsyncClient()) as engine:
            first = await engine.extract_single(item)
            assert engine.cache.tier_name == "DiskcacheAdapter"

        async with build_context(disk_config, http_client=httpx.AsyncClient()) as engine:
            second = await engine.extract_single(item)

        assert first.extraction_status is ExtractionStatus.SUCCESS
        assert second.extraction_status is ExtractionStatus.CACHED
        assert route.call_count == 1


# ---------------------------------------------------------------------------
# HTTP app
# ---------------------------------------------------------------------------


class TestApp:
    def test_lifespan_wires_engine(self, engine_config: AppConfig) -> None:
        with TestClient(build_app(engine_config)) as client:
            assert client.get("/healthz").json() == {"status": "ok"}

            sites = client.get("/detail/supported-sites").json()
            assert sites["metadata"]["totalSites"] == 8
            assert "javbus" in {s["sourceType"] for s in sites["sites"]}

            stats = client.get("/detail/cache/stats").json()["stats"]
            assert stats["total_items"] == 0
            assert stats["tier"] == "MemoryCacheAdapter"

            validation = client.get(
                "/detail/validate-parser", params={"sourceType": "javbus"}
            ).json()["validation"]
            assert validation["isValid"] is True

            assert client.get(
                "/detail/validate-parser", params={"sourceType": "nope"}
            ).status_code == 404

            for operation in ("expired", "all", "lru", "selective"):
                body = client.delete("/detail/cache/clear", params={"operation": operation}).json()
                assert body == {"operation": operation, "cleaned": 0}

    def test_rejects_bad_input_before_fetching(self, engine_config: AppConfig) -> None:
        with TestClient(build_app(engine_config)) as client:
            resp = client.post(
                "/detail/extract-single", json={"searchResult": {"url": "not a url"}}
            )
            assert resp.status_code == 400

            resp = client.post("/detail/extract-batch", json={"searchResults": []})
            assert resp.status_code == 400
