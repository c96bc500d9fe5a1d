"""JavBus adapter (javbus.com).

Listing pages wrap each title in a ``.movie-box`` anchor whose poster
``img`` carries the title; detail pages live at ``/<CODE>``.
"""

from __future__ import annotations

import re

from gleaner.domain.adapters import MarkupDocument, ParseContext, RawFields
from gleaner.domain.entities import CandidateLink, ListingPage
from gleaner.infrastructure.common import extract_code
from gleaner.infrastructure.markup import MicroDocument

from .base import LinkStrategy, MarkupAdapterBase

_INFO_ROWS = ".info p"
_TAG_EXCLUDE = frozenset({"演員", "導演", "製作商", "發行商", "系列", "發行日期", "長度"})


class JavBusAdapter(MarkupAdapterBase):
    source_id = "javbus"
    display_name = "JavBus"
    description = "JavBus - Japanese adult video database"
    capabilities = (
        "detail_extraction",
        "search_links",
        "screenshots",
        "magnet_links",
        "actress_info",
    )
    referer = "https://www.javbus.com/"

    _detail_patterns = (re.compile(r"^/(?:[a-z]{2}/)?[A-Z]{2,6}-?\d{3,6}(?:/|$)", re.IGNORECASE),)
    _reject_patterns = (
        re.compile(r"/search", re.IGNORECASE),
        re.compile(r"/genre/", re.IGNORECASE),
        re.compile(r"/actresses/", re.IGNORECASE),
    )

    def _strategies(self) -> list[tuple[str, LinkStrategy]]:
        return [
            ("javbus_moviebox", self._movie_boxes),
            ("javbus_direct", self._select_strategy("a[href]", "javbus_direct")),
        ]

    def _movie_boxes(self, doc: MicroDocument, listing: ListingPage) -> list[CandidateLink]:
        out: list[CandidateLink] = []
        for box in doc.query_selector_all(".movie-box"):
            anchor = box if box.href else box.query_selector("a[href]")
            if anchor is None:
                continue
            img = box.query_selector("img")
            title = (img.title or img.get("alt")) if img is not None else ""
            link = self._candidate(anchor, listing, "javbus_moviebox", title=title)
            if link is not None:
                out.append(link)
        return out

    def _parse_fields(self, doc: MarkupDocument, context: ParseContext) -> RawFields:
        url = context.detail_url
        return {
            "title": self._title(doc, "h3", ".title", "title"),
            "code": self._code_from_info(doc, url),
            "cover": self._image(doc, url, ".screencap img", ".bigImage img", ".poster img", 'img[class*="cover"]'),
            "screenshots": self._images(
                doc, url, ".sample-box img", ".sample-box", ".screenshot img", ".preview img", 'img[class*="sample"]'
            ),
            "actors": self._actors(doc, url, ".star-name a", ".actress a"),
            "director": self._labeled_value(doc, _INFO_ROWS, "導演", "Director"),
            "studio": self._labeled_value(doc, _INFO_ROWS, "製作商", "Studio"),
            "label": self._labeled_value(doc, _INFO_ROWS, "發行商", "Label"),
            "series": self._labeled_value(doc, _INFO_ROWS, "系列", "Series"),
            "release_date": self._labeled_value(doc, _INFO_ROWS, "發行日期", "Release Date"),
            "duration": self._labeled_value(doc, _INFO_ROWS, "長度", "Length"),
            "tags": self._texts(doc, ".genre a", ".tag a", ".category a", exclude=_TAG_EXCLUDE),
            "magnet_links": self._magnets(doc),
            "download_links": self._downloads(doc, url, 'a[href*="download"]'),
            "description": self._text(doc, ".description", ".summary", ".intro"),
            "rating": self._text(doc, ".rating", ".score", ".rate"),
        }

    def _code_from_info(self, doc: MarkupDocument, url: str) -> str:
        row = self._labeled_row(doc, _INFO_ROWS, "識別碼", "ID:")
        if row is not None:
            code = extract_code(row.text)
            if code:
                return code
        return self._code(doc, url, "h3", ".title")
