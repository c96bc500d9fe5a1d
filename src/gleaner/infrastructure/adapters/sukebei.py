"""Sukebei adapter (sukebei.nyaa.si torrent index).

Search results are a table with one torrent per ``tr``; the first anchor
to ``/view/<id>`` in a row is the detail link (the second one points at
the comments anchor of the same page).
"""

from __future__ import annotations

import re
from typing import Any

from gleaner.domain.adapters import MarkupDocument, ParseContext, RawFields
from gleaner.domain.entities import CandidateLink, ListingPage
from gleaner.infrastructure.common import compact_code, extract_code, to_int
from gleaner.infrastructure.markup import MicroDocument

from .base import MAGNET_PREFIX, LinkStrategy, MarkupAdapterBase, clean_text

_VIEW_ANCHOR = 'a[href*="/view/"]'
_ROW_CODE_BONUS = 20.0


class SukebeiAdapter(MarkupAdapterBase):
    source_id = "sukebei"
    display_name = "Sukebei"
    description = "Sukebei.nyaa.si - torrent index"
    capabilities = (
        "detail_extraction",
        "search_links",
        "magnet_links",
        "torrent_files",
        "seeders_info",
    )
    referer = "https://sukebei.nyaa.si/"

    _detail_patterns = (re.compile(r"^/view/\d+/?$"),)

    def _strategies(self) -> list[tuple[str, LinkStrategy]]:
        return [
            ("sukebei_table_row", self._table_rows),
            ("sukebei_direct", self._select_strategy(f"td {_VIEW_ANCHOR}", "sukebei_direct")),
            ("sukebei_loose", self._select_strategy(_VIEW_ANCHOR, "sukebei_loose")),
        ]

    def _table_rows(self, doc: MicroDocument, listing: ListingPage) -> list[CandidateLink]:
        keyword_code = compact_code(extract_code(listing.search_keyword))
        seen: set[str] = set()
        out: list[CandidateLink] = []
        for row in doc.query_selector_all("tr"):
            for anchor in row.query_selector_all(f"td {_VIEW_ANCHOR}"):
                if "#comments" in anchor.href or "comments" in anchor.class_name:
                    continue
                title = anchor.title or anchor.text
                bonus = 0.0
                if keyword_code and keyword_code in compact_code(title):
                    bonus = _ROW_CODE_BONUS
                link = self._candidate(anchor, listing, "sukebei_table_row", title=title, bonus=bonus)
                if link is not None and link.url not in seen:
                    seen.add(link.url)
                    out.append(link)
                break
        return out

    def _parse_fields(self, doc: MarkupDocument, context: ParseContext) -> RawFields:
        url = context.detail_url
        title = self._title(doc, ".torrent-title", ".panel-title", ".title", "title")
        size = self._text(doc, ".size", ".file-size", ".torrent-size", ".filesize") or self._row_value(doc, "File size")
        seeders = to_int(self._text(doc, ".seeders", ".seeds") or self._row_value(doc, "Seeders")) or 0
        leechers = to_int(self._text(doc, ".leechers", ".peers") or self._row_value(doc, "Leechers")) or 0

        magnets: list[dict[str, Any]] = []
        for element in doc.query_selector_all('a[href^="magnet:"], .magnet'):
            uri = element.href.strip() or clean_text(element.text)
            if not uri.startswith(MAGNET_PREFIX) or any(m["uri"] == uri for m in magnets):
                continue
            magnets.append(
                {
                    "name": title or "magnet",
                    "uri": uri,
                    "size": size,
                    "seeders": seeders,
                    "leechers": leechers,
                }
            )

        torrents = self._downloads(doc, url, 'a[href$=".torrent"]', ".torrent-download")
        for torrent in torrents:
            torrent["type"] = "torrent"
            torrent["size"] = torrent["size"] or size

        return {
            "title": title,
            "code": extract_code(title) or self._code(doc, url, ".torrent-description"),
            "release_date": self._text(doc, ".date", ".upload-time", ".torrent-date", ".timestamp")
            or self._text(doc, "[data-timestamp]"),
            "file_size": size,
            "magnet_links": magnets,
            "download_links": torrents,
            "description": self._text(
                doc, ".description", ".torrent-description", "#torrent-description", ".content", ".details"
            ),
            "tags": [],
            "actors": [],
        }

    def _row_value(self, doc: MarkupDocument, label: str) -> str:
        """Value cell next to a ``<div class="col-md-1">Label:</div>`` cell."""
        for row in doc.query_selector_all(".row"):
            cells = row.query_selector_all("div")
            for i, cell in enumerate(cells[:-1]):
                if cell.text.rstrip(":").strip() == label:
                    return clean_text(cells[i + 1].text)
        return ""
