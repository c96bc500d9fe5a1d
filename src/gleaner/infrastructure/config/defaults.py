"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "gleaner",
    "environment": "dev",
    "http": {
        "timeout_seconds": 15.0,
        "follow_redirects": True,
        "user_agent": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/131.0.0.0 Safari/537.36"
        ),
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "cache": {
        "backend": "memory",
        "dir": "./.gleaner-cache",
        "ttl_seconds": 86400,
        "max_items": 1000,
        "sweep_interval_seconds": 3600,
    },
    "extraction": {
        "timeout_ms": 15_000,
        "enable_retry": True,
        "enable_cache": True,
        "max_concurrency": 4,
        "retry_delay_ms": 1000,
        "batch_delay_ms": 500,
        "min_content_length": 100,
        "max_batch_size": 20,
    },
    "ranking": {
        "code_exact_weight": 40.0,
        "code_partial_weight": 25.0,
        "similarity_weight": 30.0,
        "provenance_bonus": 15.0,
        "generic_max_anchors": 50,
    },
    "normalizer": {
        "max_screenshots": 20,
        "max_download_links": 15,
        "max_magnet_links": 15,
    },
}
