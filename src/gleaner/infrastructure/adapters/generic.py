"""Fallback adapter for sites without a dedicated adapter."""

from __future__ import annotations

import re
from urllib.parse import urlsplit

from gleaner.domain.adapters import MarkupDocument, ParseContext, RawFields
from gleaner.domain.entities import CandidateLink, ListingPage
from gleaner.infrastructure.common import extract_code, has_search_indicator, matches_exclusion
from gleaner.infrastructure.markup import MicroDocument

from .base import LinkStrategy, MarkupAdapterBase

DEFAULT_MAX_ANCHORS = 50
MAX_CANDIDATES = 20
MIN_KEYWORD_SCORE = 20.0

_CONTAINER_SELECTOR = ".item a, .movie a, .video a, .result a, .card a"


class GenericAdapter(MarkupAdapterBase):
    source_id = "generic"
    display_name = "Generic"
    description = "Generic parser for sites without a dedicated adapter"
    capabilities = ("detail_extraction", "search_links", "basic_parsing")

    _detail_patterns = (
        re.compile(r"/[A-Z]{2,6}-?\d{3,6}(?:/|$)", re.IGNORECASE),
        re.compile(r"/v/[a-zA-Z0-9]+"),
        re.compile(r"/videos?/[^/]+"),
        re.compile(r"/jav/[^/]+"),
        re.compile(r"/view/\d+"),
        re.compile(r"/\d+/[a-z0-9-]+", re.IGNORECASE),
        re.compile(r"/(?:watch|play|movie)/"),
    )

    def __init__(self, max_anchors: int = DEFAULT_MAX_ANCHORS) -> None:
        super().__init__()
        self.max_anchors = max(1, max_anchors)

    def is_detail_url(self, url: str) -> bool:
        try:
            parts = urlsplit(url)
        except ValueError:
            return False
        if parts.scheme not in ("http", "https") or not parts.hostname:
            return False
        if has_search_indicator(url) or matches_exclusion(url):
            return False
        if any(p.search(parts.path) for p in self._detail_patterns):
            return True
        return bool(extract_code(parts.path))

    def _strategies(self) -> list[tuple[str, LinkStrategy]]:
        return [
            ("generic_container", self._bounded(_CONTAINER_SELECTOR, "generic_container")),
            ("generic_code", self._bounded("a[title], a[href]", "generic_code", require_code=True)),
            ("generic_detail", self._bounded("a[href]", "generic_detail")),
        ]

    def _bounded(self, selector: str, provenance: str, *, require_code: bool = False) -> LinkStrategy:
        """Strategy that examines at most ``max_anchors`` anchors and keeps the best 20."""

        def strategy(doc: MicroDocument, listing: ListingPage) -> list[CandidateLink]:
            seen: set[str] = set()
            out: list[CandidateLink] = []
            for anchor in doc.query_selector_all(selector)[: self.max_anchors]:
                link = self._candidate(anchor, listing, provenance)
                if link is None or link.url in seen:
                    continue
                if require_code and not link.code:
                    continue
                if listing.search_keyword and link.score < MIN_KEYWORD_SCORE:
                    continue
                seen.add(link.url)
                out.append(link)
            out.sort(key=lambda c: c.score, reverse=True)
            return out[:MAX_CANDIDATES]

        return strategy

    def _parse_fields(self, doc: MarkupDocument, context: ParseContext) -> RawFields:
        return self._common_fields(doc, context.detail_url)
