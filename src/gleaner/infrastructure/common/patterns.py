"""Shared URL/text exclusion tables for link discovery."""

from __future__ import annotations

import re

from .urls import host_of, is_same_or_subhost

# Host pattern -> source id, checked in order; unknown hosts map to "generic".
SITE_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"(^|\.)javbus\.com$"), "javbus"),
    (re.compile(r"(^|\.)javdb\.com$"), "javdb"),
    (re.compile(r"(^|\.)jable\.tv$"), "jable"),
    (re.compile(r"(^|\.)javgg\.net$"), "javgg"),
    (re.compile(r"(^|\.)javmost\.com$"), "javmost"),
    (re.compile(r"(^|\.)sukebei\.nyaa\.si$"), "sukebei"),
    (re.compile(r"(^|\.)jav\.guru$"), "javguru"),
)

SEARCH_INDICATORS: tuple[str, ...] = (
    "/search/", "/search?", "?q=", "?s=", "?query=", "?keyword=", "?search=",
    "/page/", "/list/", "/category/", "/genre/", "/actresses/", "/studio/",
    "/label/", "/uncensored/", "/forum/", "/doc/", "/terms", "/privacy",
    "/login", "/register",
)

# Listing, category, pagination and account paths
EXCLUDE_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"/search(?:/|\?|$)",
        r"/category(?:/|$)",
        r"/tags?(?:/|$)",
        r"/list(?:/|$)",
        r"/page(?:/|$)",
        r"[?&]page=",
        r"/login",
        r"/register",
        r"/user(?:/|$)",
        r"/profile",
        r"/settings",
        r"/forum",
        r"/doc(?:/|$)",
        r"/terms",
        r"/privacy",
        r"/#",
    )
)

SPAM_HOSTS: frozenset[str] = frozenset(
    {
        "seedmm.cyou", "busfan.cyou", "dmmsee.ink", "ph7zhi.vip", "8pla6t.vip",
        "ltrpvkga.com", "frozaflurkiveltra.com", "shvaszc.cc", "fpnylxm.cc",
        "mvqttfwf.com", "jempoprostoklimor.com", "128zha.cc", "aciyopg.cc",
        "go.mnaspm.com", "mnaspm.com", "asacp.org", "pr0rze.vip",
    }
)

NAVIGATION_TEXTS: frozenset[str] = frozenset(
    {
        "english", "中文", "日本語", "한국의", "有碼", "無碼", "女優", "類別",
        "論壇", "下一页", "上一页", "首页", "下一頁", "上一頁", "首頁",
        "terms", "privacy", "登入", "登录", "註冊", "注册", "next", "prev",
        "previous", "page", "home", "login", "register", "»", "«",
    }
)


def detect_source(url: str) -> str:
    host = host_of(url)
    for pattern, source_id in SITE_PATTERNS:
        if pattern.search(host):
            return source_id
    return "generic"


def has_search_indicator(url: str) -> bool:
    lower = url.lower()
    return any(indicator in lower for indicator in SEARCH_INDICATORS)


def matches_exclusion(url: str) -> bool:
    return any(p.search(url) for p in EXCLUDE_PATTERNS)


def is_spam_host(url: str) -> bool:
    host = host_of(url)
    return any(is_same_or_subhost(host, spam) for spam in SPAM_HOSTS)


def is_navigation_text(text: str) -> bool:
    stripped = text.strip().lower()
    if not stripped:
        return False
    return stripped in NAVIGATION_TEXTS or stripped.isdigit()
