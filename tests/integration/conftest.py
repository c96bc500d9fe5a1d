"""Shared fixtures for integration tests.

These tests wire the real engine (registry, ranker, normalizer, cache
tiers, PageFetcher) together with mocked HTTP via respx.
"""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest
import respx

from gleaner.infrastructure.config import AppConfig


@pytest.fixture()
def http_client() -> httpx.AsyncClient:
    """Real httpx.AsyncClient for use with respx mocking."""
    return httpx.AsyncClient()


@pytest.fixture()
def respx_mock() -> respx.MockRouter:
    """Explicit respx mock router for request interception."""
    with respx.mock(assert_all_called=False) as router:
        yield router


@pytest.fixture()
def engine_config() -> AppConfig:
    """Memory-only config without retry or batch pauses."""
    return AppConfig(extraction={"retry_delay_ms": 0, "batch_delay_ms": 0})


@pytest.fixture()
def disk_config(tmp_path: Path) -> AppConfig:
    """Same as engine_config, but with a diskcache tier under tmp_path."""
    return AppConfig(
        extraction={"retry_delay_ms": 0, "batch_delay_ms": 0},
        cache={"backend": "diskcache", "dir": str(tmp_path / "cache")},
    )
