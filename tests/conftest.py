"""Shared test fixtures for Gleaner test suite."""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import AsyncMock

import pytest

from gleaner.domain.entities import (
    CastMember,
    DownloadLink,
    ExtractionItem,
    ExtractionRecord,
    ExtractionStatus,
    MagnetLink,
)

# ---------------------------------------------------------------------------
# Markup fixtures
# ---------------------------------------------------------------------------

JAVBUS_LISTING_URL = "https://www.javbus.com/search/IPX-156"
JAVBUS_DETAIL_URL = "https://www.javbus.com/IPX-156"

JAVBUS_LISTING_HTML = """\
<html><head><title>IPX-156 - Search - JavBus</title></head><body>
<div id="waterfall">
  <a class="movie-box" href="https://www.javbus.com/IPX-157">
    <div class="photo-frame"><img src="/pics/thumb/ipx157.jpg" title="IPX-157 Another Title"></div>
    <div class="photo-info"><span>IPX-157 Another Title</span></div>
  </a>
  <a class="movie-box" href="/IPX-156">
    <div class="photo-frame"><img src="/pics/thumb/ipx156.jpg" title="IPX-156 Sample Title Here"></div>
    <div class="photo-info"><span>IPX-156 Sample Title Here</span></div>
  </a>
  <a class="movie-box" href="https://evil.example.com/IPX-156">
    <div class="photo-frame"><img src="/x.jpg" title="IPX-156 Mirror"></div>
  </a>
</div>
<ul class="pagination"><li><a href="/search/IPX-156/2">2</a></li></ul>
</body></html>
"""

JAVBUS_DETAIL_HTML = """\
<html><head><title>IPX-156 Sample Title Here - JavBus</title></head><body>
<div class="container">
<h3>IPX-156 Sample Title Here</h3>
<div class="row movie">
  <div class="col-md-9 screencap">
    <a class="bigImage" href="/pics/cover/ipx156_b.jpg"><img src="/pics/cover/ipx156_b.jpg" title="IPX-156"></a>
  </div>
  <div class="col-md-3 info">
    <p><span class="header">識別碼:</span> <span>IPX-156</span></p>
    <p><span class="header">發行日期:</span> 2018/7/13</p>
    <p><span class="header">長度:</span> 120分鐘</p>
    <p><span class="header">導演:</span> <a href="/director/1">Director Name</a></p>
    <p><span class="header">製作商:</span> <a href="/studio/2">IDEA POCKET</a></p>
    <p><span class="header">發行商:</span> <a href="/label/3">Tissue</a></p>
    <p>
      <span class="genre"><label><a href="/genre/1">Drama</a></label></span>
      <span class="genre"><label><a href="/genre/2">Solowork</a></label></span>
      <span class="genre"><label><a href="/genre/1">Drama</a></label></span>
    </p>
    <p class="star-show">演員</p>
    <div class="star-name"><a href="https://www.javbus.com/star/abc" title="Momo Sakura">Momo Sakura</a></div>
  </div>
</div>
<div id="sample-waterfall">
  <a class="sample-box" href="https://www.javbus.com/pics/sample/1.jpg"><div class="photo-frame"><img src="https://www.javbus.com/pics/sample/1s.jpg"></div></a>
  <a class="sample-box" href="https://www.javbus.com/pics/sample/2.jpg"><div class="photo-frame"><img src="https://www.javbus.com/pics/sample/2s.jpg"></div></a>
</div>
<table id="magnet-table">
  <tr><td><a href="magnet:?xt=urn:btih:ABC123&amp;dn=IPX-156">IPX-156 HD</a></td></tr>
  <tr><td><a href="magnet:xt=broken">broken</a></td></tr>
</table>
<div class="downloads">
  <a href="https://www.javbus.com/download/ipx156.torrent">Download torrent</a>
  <a href="https://files.other-host.com/download/ipx156">Mirror download</a>
</div>
</div>
</body></html>
"""


# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------


class FakeClock:
    """Logical millisecond clock; advance it explicitly."""

    def __init__(self, now: int = 0) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeFetcher:
    """PageFetcherPort double.

    ``pages`` maps a URL to markup, an exception, or a list of those
    (consumed one per call).  Tracks how many fetches overlap.
    """

    def __init__(self, pages: dict[str, Any] | None = None) -> None:
        self.pages: dict[str, Any] = dict(pages or {})
        self.calls: list[str] = []
        self.timeouts: list[float] = []
        self.in_flight = 0
        self.starts: list[int] = []

    async def fetch(self, url: str, *, timeout: float, source_id: str = "") -> str:
        self.calls.append(url)
        self.timeouts.append(timeout)
        self.in_flight += 1
        self.starts.append(self.in_flight)
        try:
            await asyncio.sleep(0)
            outcome = self.pages[url]
            if isinstance(outcome, list):
                outcome = outcome.pop(0)
            if isinstance(outcome, BaseException):
                raise outcome
            return outcome
        finally:
            self.in_flight -= 1


@pytest.fixture()
def javbus_listing_html() -> str:
    return JAVBUS_LISTING_HTML


@pytest.fixture()
def javbus_detail_html() -> str:
    return JAVBUS_DETAIL_HTML


@pytest.fixture()
def make_fetcher() -> type[FakeFetcher]:
    return FakeFetcher


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(now=1_700_000_000_000)


@pytest.fixture()
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher(
        {
            JAVBUS_LISTING_URL: JAVBUS_LISTING_HTML,
            JAVBUS_DETAIL_URL: JAVBUS_DETAIL_HTML,
        }
    )


# ---------------------------------------------------------------------------
# Domain entity fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def detail_item() -> ExtractionItem:
    return ExtractionItem(id="item-1", url=JAVBUS_DETAIL_URL, title="IPX-156 Sample")


@pytest.fixture()
def listing_item() -> ExtractionItem:
    return ExtractionItem(
        id="item-2",
        url=JAVBUS_LISTING_URL,
        title="IPX-156 Sample",
        keyword="IPX-156",
    )


@pytest.fixture()
def record() -> ExtractionRecord:
    """Fully populated record."""
    return ExtractionRecord(
        title="IPX-156 Sample Title Here",
        code="IPX-156",
        cover="https://www.javbus.com/pics/cover/ipx156_b.jpg",
        screenshots=["https://www.javbus.com/pics/sample/1s.jpg"],
        cast=[CastMember(name="Momo Sakura", profile_url="https://www.javbus.com/star/abc")],
        director="Director Name",
        studio="IDEA POCKET",
        release_date="2018-07-13",
        duration_minutes=120,
        tags=["Drama"],
        magnet_links=[MagnetLink(name="HD", uri="magnet:?xt=urn:btih:ABC123", seeders=3)],
        download_links=[
            DownloadLink(name="torrent", url="https://www.javbus.com/d/1.torrent", type="torrent")
        ],
        rating=8.5,
        source_id="javbus",
        origin_url=JAVBUS_DETAIL_URL,
        detail_url=JAVBUS_DETAIL_URL,
        extraction_status=ExtractionStatus.SUCCESS,
        extracted_at_ms=1_700_000_000_000,
    )


# ---------------------------------------------------------------------------
# Mock port fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_record_cache() -> AsyncMock:
    """Mock RecordCachePort."""
    cache = AsyncMock()
    cache.get_record = AsyncMock(return_value=None)
    cache.put_record = AsyncMock()
    cache.delete_url = AsyncMock(return_value=True)
    cache.stats = AsyncMock(return_value={"total_items": 1})
    cache.clear = AsyncMock(return_value=4)
    cache.sweep = AsyncMock(return_value=2)
    cache.evict_lru = AsyncMock(return_value=3)
    cache.delete_matching = AsyncMock(return_value=1)
    cache.export = AsyncMock(return_value={"version": "1.0", "items": []})
    cache.import_ = AsyncMock(return_value=0)
    return cache
