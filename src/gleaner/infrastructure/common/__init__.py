"""Common infrastructure utilities."""

from __future__ import annotations

from .codes import compact_code, extract_code, has_code_path
from .converters import to_float, to_int
from .parsers import find_size, parse_date_iso, parse_duration_minutes
from .patterns import (
    detect_source,
    has_search_indicator,
    is_navigation_text,
    is_spam_host,
    matches_exclusion,
)
from .urls import (
    host_of,
    is_http_url,
    is_same_or_subhost,
    normalize_url,
    resolve_url,
    url_cache_key,
)

__all__ = [
    "compact_code",
    "detect_source",
    "extract_code",
    "find_size",
    "has_code_path",
    "has_search_indicator",
    "host_of",
    "is_http_url",
    "is_navigation_text",
    "is_same_or_subhost",
    "is_spam_host",
    "matches_exclusion",
    "normalize_url",
    "parse_date_iso",
    "parse_duration_minutes",
    "resolve_url",
    "to_float",
    "to_int",
    "url_cache_key",
]
