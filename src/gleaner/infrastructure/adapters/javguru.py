"""JavGuru adapter (jav.guru), WordPress posts at ``/<post-id>/<slug>/``."""

from __future__ import annotations

import re

from gleaner.domain.adapters import MarkupDocument, ParseContext, RawFields

from .base import LinkStrategy, MarkupAdapterBase


class JavGuruAdapter(MarkupAdapterBase):
    source_id = "javguru"
    display_name = "JavGuru"
    description = "Jav.guru - Japanese adult video blog"
    capabilities = (
        "detail_extraction",
        "search_links",
        "basic_info",
        "description",
    )
    referer = "https://jav.guru/"

    _detail_patterns = (re.compile(r"^/\d+/[a-z0-9-]+", re.IGNORECASE),)
    _reject_patterns = (re.compile(r"\?s=|/search", re.IGNORECASE),)

    def _strategies(self) -> list[tuple[str, LinkStrategy]]:
        return [
            ("javguru_video", self._card_strategy((".video-item a", ".movie-item a", ".item a"), "javguru_video")),
            ("javguru_loose", self._card_strategy(("a[href]",), "javguru_loose")),
        ]

    def _parse_fields(self, doc: MarkupDocument, context: ParseContext) -> RawFields:
        url = context.detail_url
        fields = self._common_fields(doc, url)
        fields["screenshots"] = fields["screenshots"] or self._images(doc, url, ".video-images img")
        fields["tags"] = fields["tags"] or self._texts(doc, ".labels a")
        fields["description"] = self._text(
            doc, ".description", ".summary", ".content", ".intro", ".synopsis", ".post-content", ".entry-content",
            min_length=10,
        )
        return fields
