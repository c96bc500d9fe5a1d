"""Jable adapter (jable.tv), a streaming site with ``/videos/<slug>/`` pages."""

from __future__ import annotations

import re
from typing import Any

from gleaner.domain.adapters import MarkupDocument, ParseContext, RawFields
from gleaner.infrastructure.common import host_of, is_same_or_subhost, resolve_url

from .base import LinkStrategy, MarkupAdapterBase

_STREAM_RE = re.compile(r"""(https?://[^\s"'<>]+\.m3u8[^\s"'<>]*)""")


class JableAdapter(MarkupAdapterBase):
    source_id = "jable"
    display_name = "Jable"
    description = "Jable.tv - Japanese adult video streaming"
    capabilities = (
        "detail_extraction",
        "search_links",
        "streaming",
        "actress_info",
    )
    referer = "https://jable.tv/"

    _detail_patterns = (re.compile(r"^/videos/[^/?]+"),)

    def is_detail_url(self, url: str) -> bool:
        return is_same_or_subhost(host_of(url), "jable.tv") and super().is_detail_url(url)

    def _strategies(self) -> list[tuple[str, LinkStrategy]]:
        return [
            ("jable_video_item", self._select_strategy('.video-item a[href*="/videos/"]', "jable_video")),
            ("jable_list", self._select_strategy('.list-videos a[href*="/videos/"]', "jable_video")),
            ("jable_direct", self._select_strategy('a[href*="/videos/"]', "jable_video")),
        ]

    def _parse_fields(self, doc: MarkupDocument, context: ParseContext) -> RawFields:
        url = context.detail_url
        cover = self._image(doc, url, ".video-cover img", ".cover img")
        if not cover:
            poster = self._attr(doc, "video[poster]", "poster")
            cover = resolve_url(poster, url) if poster else ""
        return {
            "title": self._title(doc, ".title-video", ".video-title", "h4", "h1"),
            "code": self._code(doc, url, ".models a", ".video-detail strong", ".title-video", "h4"),
            "cover": cover,
            "screenshots": self._images(doc, url, ".video-screenshots img"),
            "actors": self._actors(doc, url, ".models a", ".actress a"),
            "release_date": self._text(doc, ".video-detail .date", ".publish-time", ".inactive-color"),
            "duration": self._text(doc, ".video-detail .duration", ".length"),
            "tags": self._texts(doc, ".tag a", ".category a", ".tags a"),
            "magnet_links": [],
            "download_links": self._downloads(doc, url, 'a[href*="download"]', ".download-btn")
            + self._streams(doc),
            "description": self._text(doc, ".video-description", ".description"),
            "rating": "",
        }

    @staticmethod
    def _streams(doc: MarkupDocument) -> list[dict[str, Any]]:
        seen: set[str] = set()
        out: list[dict[str, Any]] = []
        for source in doc.query_selector_all("video source[src], source[src]"):
            src = source.get("src").strip()
            if src and src not in seen:
                seen.add(src)
                out.append({"name": "stream", "url": src, "type": "stream", "size": "", "quality": ""})
        for script in doc.query_selector_all("script"):
            for match in _STREAM_RE.finditer(script.inner_html):
                src = match.group(1)
                if src not in seen:
                    seen.add(src)
                    out.append({"name": "HLS stream", "url": src, "type": "stream", "size": "", "quality": ""})
        return out
