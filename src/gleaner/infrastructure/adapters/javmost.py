"""JavMost adapter (javmost.com and its mirror sub-domains)."""

from __future__ import annotations

import re

from gleaner.domain.adapters import MarkupDocument, ParseContext, RawFields
from gleaner.infrastructure.common import host_of, is_same_or_subhost

from .base import LinkStrategy, MarkupAdapterBase

_INFO = ".info"


class JavMostAdapter(MarkupAdapterBase):
    source_id = "javmost"
    display_name = "JavMost"
    description = "JavMost - Japanese adult video streaming"
    capabilities = (
        "detail_extraction",
        "search_links",
        "actress_info",
        "download_links",
        "subdomain_support",
    )
    referer = "https://www.javmost.com/"

    _detail_patterns = (re.compile(r"^/[A-Z]{2,6}-?\d{3,6}[^/]*(?:/|$)", re.IGNORECASE),)
    _reject_patterns = (re.compile(r"/search|/tag/", re.IGNORECASE),)

    def is_detail_url(self, url: str) -> bool:
        return is_same_or_subhost(host_of(url), "javmost.com") and super().is_detail_url(url)

    def _strategies(self) -> list[tuple[str, LinkStrategy]]:
        return [
            ("javmost_video", self._card_strategy((".video-item a", ".movie-item a", ".item a"), "javmost_video")),
            ("javmost_loose", self._card_strategy(("a[href]",), "javmost_loose")),
        ]

    def _parse_fields(self, doc: MarkupDocument, context: ParseContext) -> RawFields:
        url = context.detail_url
        fields = self._common_fields(doc, url)
        fields.update(
            {
                "title": self._title(doc, "h1", ".video-title", ".title", ".post-title", ".main-title"),
                "code": self._code(doc, url, "h1", ".video-code", ".title", ".code", ".video-meta"),
                "quality": self._text(doc, ".quality", ".video-quality"),
                "resolution": self._text(doc, ".resolution", ".video-resolution"),
                "release_date": self._text(doc, ".release-date", ".date", ".publish-date", ".meta .date"),
                "description": self._text(doc, ".description", ".summary", ".content", ".intro", ".synopsis"),
            }
        )
        fields["download_links"] = fields["download_links"] or self._downloads(doc, url, f"{_INFO} a[title]")
        return fields
