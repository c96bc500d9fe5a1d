"""Tests for URL, code and exclusion helpers."""

from __future__ import annotations

import pytest

from gleaner.infrastructure.common import (
    compact_code,
    detect_source,
    extract_code,
    has_code_path,
    has_search_indicator,
    host_of,
    is_http_url,
    is_navigation_text,
    is_same_or_subhost,
    is_spam_host,
    matches_exclusion,
    normalize_url,
    resolve_url,
    url_cache_key,
)

# ---------------------------------------------------------------------------
# Codes
# ---------------------------------------------------------------------------


class TestExtractCode:
    def test_hyphenated(self) -> None:
        assert extract_code("IPX-156 Sample Title") == "IPX-156"

    def test_lower_case_is_upper_cased(self) -> None:
        assert extract_code("watch ssis-001 now") == "SSIS-001"

    def test_without_hyphen(self) -> None:
        assert extract_code("abp123") == "ABP123"

    def test_digit_prefixed(self) -> None:
        assert extract_code("259LUXU special") == "259LUXU"

    def test_none(self) -> None:
        assert extract_code("no code here") == ""

    def test_compact_code(self) -> None:
        assert compact_code("ipx-156") == "IPX156"

    def test_has_code_path(self) -> None:
        assert has_code_path("/IPX-156/")
        assert not has_code_path("/videos/abc")


# ---------------------------------------------------------------------------
# URLs
# ---------------------------------------------------------------------------


class TestUrls:
    def test_host_of_lowercases_and_strips_port(self) -> None:
        assert host_of("https://WWW.JavBus.com:8443/x") == "www.javbus.com"

    def test_host_of_malformed(self) -> None:
        assert host_of("http://[::1") == ""

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://a.test/x", True),
            ("http://a.test", True),
            ("ftp://a.test/x", False),
            ("/relative/path", False),
            ("https://a.test/with space", False),
            ("", False),
        ],
    )
    def test_is_http_url(self, url: str, expected: bool) -> None:
        assert is_http_url(url) is expected

    def test_same_host(self) -> None:
        assert is_same_or_subhost("javbus.com", "javbus.com")

    def test_sub_host(self) -> None:
        assert is_same_or_subhost("cdn.javbus.com", "javbus.com")

    def test_parent_is_not_widened(self) -> None:
        assert not is_same_or_subhost("m.example.com", "www.example.com")
        assert not is_same_or_subhost("example.com", "www.example.com")
        assert is_same_or_subhost("img.www.example.com", "www.example.com")

    def test_suffix_lookalike_is_rejected(self) -> None:
        assert not is_same_or_subhost("evil-javbus.com", "javbus.com")

    def test_normalize_url(self) -> None:
        assert normalize_url("HTTPS://A.test/Path/?q=1#frag") == "https://a.test/path"

    def test_resolve_relative(self) -> None:
        assert resolve_url("/IPX-156", "https://www.javbus.com/search/x") == "https://www.javbus.com/IPX-156"

    def test_resolve_rejects_script_links(self) -> None:
        assert resolve_url("javascript:void(0)", "https://a.test/") == ""
        assert resolve_url("#top", "https://a.test/") == ""

    def test_resolve_keeps_magnets(self) -> None:
        assert resolve_url("magnet:?xt=1", "https://a.test/") == "magnet:?xt=1"

    def test_cache_key_is_stable_across_equivalent_urls(self) -> None:
        a = url_cache_key("https://www.javbus.com/IPX-156/")
        b = url_cache_key("https://WWW.javbus.com/IPX-156?ref=x")
        assert a == b
        assert a.startswith("detail_")
        assert len(a) == len("detail_") + 16


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------


class TestPatterns:
    @pytest.mark.parametrize(
        ("url", "source"),
        [
            ("https://www.javbus.com/IPX-156", "javbus"),
            ("https://javdb.com/v/abc", "javdb"),
            ("https://jable.tv/videos/ipx-156/", "jable"),
            ("https://javgg.net/jav/ipx-156/", "javgg"),
            ("https://www.javmost.com/IPX-156/", "javmost"),
            ("https://sukebei.nyaa.si/view/1", "sukebei"),
            ("https://jav.guru/1/slug/", "javguru"),
            ("https://unknown.example.org/x", "generic"),
        ],
    )
    def test_detect_source(self, url: str, source: str) -> None:
        assert detect_source(url) == source

    def test_search_indicator(self) -> None:
        assert has_search_indicator("https://a.test/search/IPX")
        assert has_search_indicator("https://a.test/?s=ipx")
        assert not has_search_indicator("https://a.test/IPX-156")

    def test_exclusion_patterns(self) -> None:
        assert matches_exclusion("https://a.test/tag/drama")
        assert matches_exclusion("https://a.test/videos?page=2")
        assert not matches_exclusion("https://a.test/videos/ipx-156")

    def test_spam_host_and_subhost(self) -> None:
        assert is_spam_host("https://seedmm.cyou/x")
        assert is_spam_host("https://www.seedmm.cyou/x")
        assert not is_spam_host("https://www.javbus.com/x")

    def test_navigation_text(self) -> None:
        assert is_navigation_text("Next")
        assert is_navigation_text(" 下一页 ")
        assert is_navigation_text("12")
        assert not is_navigation_text("IPX-156 Sample")
        assert not is_navigation_text("")
