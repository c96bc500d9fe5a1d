"""JavGG adapter (javgg.net), a blog-style site with ``/jav/<slug>/`` posts."""

from __future__ import annotations

import re

from gleaner.domain.adapters import MarkupDocument, ParseContext, RawFields

from .base import LinkStrategy, MarkupAdapterBase


class JavGGAdapter(MarkupAdapterBase):
    source_id = "javgg"
    display_name = "JavGG"
    description = "JavGG.net - Japanese adult video streaming"
    capabilities = (
        "detail_extraction",
        "search_links",
        "screenshots",
        "download_links",
        "actress_info",
    )
    referer = "https://javgg.net/"

    _detail_patterns = (re.compile(r"^/jav/[a-z0-9-]+", re.IGNORECASE),)
    _reject_patterns = (re.compile(r"/search|/tag/", re.IGNORECASE),)

    def _strategies(self) -> list[tuple[str, LinkStrategy]]:
        return [
            (
                "javgg_video",
                self._card_strategy(
                    ('.video-item a[href*="/jav/"]', '.movie-item a[href*="/jav/"]', '.item a[href*="/jav/"]'),
                    "javgg_video",
                ),
            ),
            ("javgg_loose", self._card_strategy(('a[href*="/jav/"]',), "javgg_loose")),
        ]

    def _parse_fields(self, doc: MarkupDocument, context: ParseContext) -> RawFields:
        url = context.detail_url
        fields = self._common_fields(doc, url)
        fields["title"] = self._title(doc, "h1", ".video-title", ".title", ".post-title") or fields["title"]
        fields["code"] = self._code(doc, url, "h1", ".video-title", ".code", ".video-meta", ".info .code")
        fields["screenshots"] = self._images(
            doc, url, ".screenshots img", ".preview img", ".gallery img", ".sample img", 'img[class*="screenshot"]'
        )
        return fields
