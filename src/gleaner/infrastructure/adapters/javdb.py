"""JavDB adapter (javdb.com).

Detail pages live at ``/v/<hash>``; metadata sits in ``.panel-block``
rows labelled in Chinese (``導演:``, ``片商:`` ...).
"""

from __future__ import annotations

import re

from gleaner.domain.adapters import MarkupDocument, ParseContext, RawFields
from gleaner.domain.entities import CandidateLink, ListingPage
from gleaner.infrastructure.common import extract_code, resolve_url
from gleaner.infrastructure.markup import MicroDocument

from .base import LinkStrategy, MarkupAdapterBase

_PANEL = ".panel-block"
_CODE_PATH_RE = re.compile(r"^/[A-Z]{2,6}-?\d{3,6}(?:/|$)", re.IGNORECASE)


class JavDBAdapter(MarkupAdapterBase):
    source_id = "javdb"
    display_name = "JavDB"
    description = "JavDB - Japanese adult video database"
    capabilities = (
        "detail_extraction",
        "search_links",
        "screenshots",
        "actress_info",
        "tags",
    )
    referer = "https://javdb.com/"

    _detail_patterns = (re.compile(r"^/v/[a-zA-Z0-9]+"), _CODE_PATH_RE)
    _reject_patterns = (re.compile(r"/search", re.IGNORECASE),)

    def _strategies(self) -> list[tuple[str, LinkStrategy]]:
        return [
            ("javdb_video", self._video_items),
            ("javdb_direct", self._select_strategy('a[href*="/v/"]', "javdb_video")),
        ]

    def _video_items(self, doc: MicroDocument, listing: ListingPage) -> list[CandidateLink]:
        for selector in (".movie-list .item a", ".grid-item a", ".video-node a"):
            out: list[CandidateLink] = []
            for anchor in doc.query_selector_all(selector):
                title_el = anchor.query_selector(".video-title") or anchor.query_selector("strong")
                title = title_el.text if title_el is not None else ""
                link = self._candidate(anchor, listing, "javdb_video", title=title)
                if link is not None:
                    out.append(link)
            if out:
                return out
        return []

    def _parse_fields(self, doc: MarkupDocument, context: ParseContext) -> RawFields:
        url = context.detail_url
        actors = self._actors(doc, url, ".actress-tag a")
        if not actors:
            actors = [
                {"name": a.text, "profileUrl": resolve_url(a.href, url)}
                for a in self._labeled_links(doc, _PANEL, "演員", "Actor")
                if a.text
            ]
        return {
            "title": self._title(doc, "h2.title", ".video-title", "title"),
            "code": self._video_code(doc, url),
            "cover": self._image(doc, url, ".video-cover img", ".cover img", "img.video-cover"),
            "screenshots": self._images(doc, url, ".tile-images a.tile-item", ".tile-images img", ".preview-images img"),
            "actors": actors,
            "director": self._labeled_value(doc, _PANEL, "導演", "Director"),
            "studio": self._labeled_value(doc, _PANEL, "片商", "Maker"),
            "label": self._labeled_value(doc, _PANEL, "廠牌", "Publisher"),
            "series": self._labeled_value(doc, _PANEL, "系列", "Series"),
            "release_date": self._labeled_value(doc, _PANEL, "日期", "時間", "Released Date"),
            "duration": self._labeled_value(doc, _PANEL, "時長", "Duration"),
            "tags": [a.text for a in self._labeled_links(doc, _PANEL, "類別", "Tags") if a.text],
            "magnet_links": self._magnets(doc),
            "download_links": [],
            "description": self._text(doc, ".video-description", ".description"),
            "rating": self._text(doc, ".score .value", ".score-stars", ".score"),
        }

    def _video_code(self, doc: MarkupDocument, url: str) -> str:
        row = self._labeled_row(doc, _PANEL, "番號", "ID:")
        if row is not None:
            code = extract_code(row.text)
            if code:
                return code
        return self._code(doc, url, ".first-block .value", ".video-meta strong", "h2.title")
