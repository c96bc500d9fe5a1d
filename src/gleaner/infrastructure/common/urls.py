"""URL helpers: host checks, normalization, resolution."""

from __future__ import annotations

import hashlib
from urllib.parse import urljoin, urlsplit


def host_of(url: str) -> str:
    """Lower-cased host of ``url`` without port, or "" if malformed."""
    try:
        host = urlsplit(url).hostname
    except ValueError:
        return ""
    return (host or "").lower()


def is_http_url(url: str) -> bool:
    """True for well-formed absolute ``http(s)`` URLs with a host."""
    if not url or any(ch.isspace() for ch in url):
        return False
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.hostname)


def is_same_or_subhost(host: str, parent: str) -> bool:
    """True if ``host`` equals ``parent`` or is a sub-host of it."""
    host = host.lower().rstrip(".")
    parent = parent.lower().rstrip(".")
    if not host or not parent:
        return False
    return host == parent or host.endswith("." + parent)


def normalize_url(url: str) -> str:
    """Comparison form: lower-cased, query/fragment and trailing slash stripped."""
    base = url.strip().lower().split("#", 1)[0].split("?", 1)[0]
    return base.rstrip("/")


def resolve_url(href: str, base_url: str) -> str:
    """Resolve ``href`` against ``base_url``; "" for empty or script links."""
    href = (href or "").strip()
    if not href or href.startswith(("javascript:", "#", "data:")):
        return ""
    if href.startswith("magnet:"):
        return href
    try:
        return urljoin(base_url, href)
    except ValueError:
        return ""


def url_cache_key(url: str) -> str:
    """Stable cache key for a target URL (hash of its normalized form)."""
    digest = hashlib.sha256(normalize_url(url).encode()).hexdigest()[:16]
    return f"detail_{digest}"
