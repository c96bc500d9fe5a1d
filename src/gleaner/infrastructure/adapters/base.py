"""Shared base class for markup-driven site adapters.

Eliminates boilerplate that is duplicated across the per-site adapters:
detail-URL gating, strategy-ordered link discovery with base scoring,
error wrapping around detail parsing, and fallback-chain field
extraction over a :class:`MicroDocument`.

The *domain* layer only knows ``SiteAdapter``; adapters inheriting from
``MarkupAdapterBase`` structurally satisfy that Protocol.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Any
from urllib.parse import urlsplit

import structlog

from gleaner.domain.adapters import AdapterError, MarkupDocument, ParseContext, RawFields
from gleaner.domain.entities import CandidateLink, ListingPage
from gleaner.infrastructure.common import (
    compact_code,
    extract_code,
    find_size,
    has_search_indicator,
    is_navigation_text,
    resolve_url,
    to_int,
)
from gleaner.infrastructure.markup import Element, MicroDocument

DEFAULT_CAPABILITIES: tuple[str, ...] = ("detail_extraction", "search_links")

MAGNET_PREFIX = "magnet:?"
MAGNET_SELECTOR = 'a[href^="magnet:"]'

_MAX_TITLE_LENGTH = 200
_IMAGE_ATTRS = ("src", "data-src", "data-original", "data-lazy-src")

LinkStrategy = Callable[[MicroDocument, ListingPage], list[CandidateLink]]


def base_score(keyword: str, title: str, code: str) -> float:
    """Adapter-level relevance of a candidate to the search keyword.

    50 without a keyword.  Otherwise: exact code +40 (substring +30),
    exact title +30 (title contains keyword +20), capped at 100.
    """
    if not keyword:
        return 50.0

    score = 0.0
    kw = keyword.strip().lower()
    kw_code = compact_code(extract_code(keyword))

    if code:
        candidate = compact_code(code)
        if candidate in (kw_code, compact_code(kw)):
            score += 40
        elif kw_code and (kw_code in candidate or candidate in kw_code):
            score += 30

    lowered = title.strip().lower()
    if lowered:
        if lowered == kw:
            score += 30
        elif kw in lowered:
            score += 20

    return min(100.0, score)


def detect_link_type(url: str, name: str) -> str:
    url_l = url.lower()
    name_l = name.lower()

    if url_l.startswith("magnet:") or "磁力" in name_l:
        return "magnet"
    if ".torrent" in url_l or "种子" in name_l or "torrent" in name_l:
        return "torrent"
    if url_l.startswith("ed2k:") or "电驴" in name_l:
        return "ed2k"
    if url_l.startswith("ftp://") or "ftp" in name_l:
        return "ftp"
    if "pan.baidu.com" in url_l or "百度网盘" in name_l:
        return "baidu_pan"
    if "drive.google.com" in url_l or "google drive" in name_l:
        return "google_drive"
    if "stream" in url_l or "play" in url_l or "在线" in name_l:
        return "stream"
    return "download"


def clean_text(text: str) -> str:
    return " ".join(text.split())


class MarkupAdapterBase:
    """Shared base for site adapters.

    Subclasses **must** set:
    - ``source_id``
    - ``_detail_patterns`` (regexes matched against the URL path)

    Subclasses **must** override:
    - ``_strategies()`` (ordered listing-page strategies)
    - ``_parse_fields()`` (raw detail fields)

    Subclasses **may** override:
    - ``display_name``, ``description``, ``capabilities``, ``referer``
    - ``_reject_patterns`` (matched against path + query)
    - ``is_detail_url()`` for rules that are not pure path patterns
    """

    # --- Must be set by subclass ---
    source_id: str = ""
    _detail_patterns: tuple[re.Pattern[str], ...] = ()

    # --- Overridable defaults ---
    display_name: str = ""
    description: str = ""
    capabilities: tuple[str, ...] = DEFAULT_CAPABILITIES
    referer: str = ""
    _reject_patterns: tuple[re.Pattern[str], ...] = ()

    def __init__(self) -> None:
        if not self.source_id:
            raise ValueError(f"{type(self).__name__} must define source_id")
        self._log = structlog.get_logger(f"{__name__}.{self.source_id}")

    def __repr__(self) -> str:
        return f"<{type(self).__name__} source_id={self.source_id!r}>"

    # ------------------------------------------------------------------
    # Contract
    # ------------------------------------------------------------------

    def is_detail_url(self, url: str) -> bool:
        try:
            parts = urlsplit(url)
        except ValueError:
            return False
        if parts.scheme not in ("http", "https") or not parts.hostname:
            return False
        if has_search_indicator(url):
            return False

        target = parts.path + (f"?{parts.query}" if parts.query else "")
        if any(p.search(target) for p in self._reject_patterns):
            return False
        return any(p.search(parts.path) for p in self._detail_patterns)

    def extract_candidate_links(self, listing: ListingPage) -> list[CandidateLink]:
        """Run strategies in priority order; the first non-empty one wins."""
        doc = MicroDocument(listing.markup)
        for name, strategy in self._strategies():
            links = strategy(doc, listing)
            if links:
                self._log.debug(
                    "candidate_strategy_matched",
                    source=self.source_id,
                    strategy=name,
                    count=len(links),
                )
                return links

        self._log.debug(
            "candidate_strategies_exhausted",
            source=self.source_id,
            url=listing.origin_url,
        )
        return []

    def parse_detail(self, document: MarkupDocument, context: ParseContext) -> RawFields:
        """Parse a detail page into raw fields.

        Raises:
            AdapterError: Parsing failed, or neither a title nor a code
                could be found.
        """
        try:
            fields = self._parse_fields(document, context)
        except AdapterError:
            raise
        except Exception as exc:
            raise AdapterError(
                f"{self.source_id} failed to parse {context.detail_url}: {exc}"
            ) from exc

        if not fields.get("title") and not fields.get("code"):
            raise AdapterError(
                f"{self.source_id} found no title or code on {context.detail_url}"
            )
        return fields

    # ------------------------------------------------------------------
    # Subclass hooks
    # ------------------------------------------------------------------

    def _strategies(self) -> list[tuple[str, LinkStrategy]]:
        raise NotImplementedError(f"{type(self).__name__}._strategies() not implemented")

    def _parse_fields(self, doc: MarkupDocument, context: ParseContext) -> RawFields:
        raise NotImplementedError(
            f"{type(self).__name__}._parse_fields() not implemented"
        )

    # ------------------------------------------------------------------
    # Listing helpers
    # ------------------------------------------------------------------

    def _candidate(
        self,
        anchor: Element,
        listing: ListingPage,
        provenance: str,
        *,
        title: str = "",
        bonus: float = 0.0,
    ) -> CandidateLink | None:
        """Build a candidate from ``anchor`` or return None if it is not a detail link."""
        url = resolve_url(anchor.href, listing.origin_url)
        if not url or not self.is_detail_url(url):
            return None

        text = clean_text(title or anchor.title or anchor.text)[:_MAX_TITLE_LENGTH]
        if text and is_navigation_text(text):
            return None

        code = extract_code(text) or extract_code(urlsplit(url).path)
        text = text or code
        score = min(100.0, base_score(listing.search_keyword, text, code) + bonus)
        return CandidateLink(
            url=url,
            title=text,
            code=code,
            score=score,
            provenance=provenance,
        )

    def _anchors_to_candidates(
        self,
        anchors: list[Element],
        listing: ListingPage,
        provenance: str,
    ) -> list[CandidateLink]:
        out: list[CandidateLink] = []
        for anchor in anchors:
            link = self._candidate(anchor, listing, provenance)
            if link is not None:
                out.append(link)
        return out

    def _select_strategy(self, selector: str, provenance: str) -> LinkStrategy:
        """Strategy that turns every anchor matched by ``selector`` into a candidate."""

        def strategy(doc: MicroDocument, listing: ListingPage) -> list[CandidateLink]:
            return self._anchors_to_candidates(
                doc.query_selector_all(selector), listing, provenance
            )

        return strategy

    @staticmethod
    def _anchor_title(anchor: Element) -> str:
        """Best title for a card anchor: title attr, nested heading, image alt."""
        if anchor.title.strip():
            return anchor.title
        heading = anchor.query_selector(".title, .video-title, h3, h4")
        if heading is not None and heading.text:
            return heading.text
        img = anchor.query_selector("img")
        if img is not None:
            alt = img.get("alt") or img.title
            if len(alt.strip()) > 5:
                return alt
        return anchor.text

    def _card_strategy(self, selectors: tuple[str, ...], provenance: str) -> LinkStrategy:
        """Like :meth:`_select_strategy`, over card anchors, first selector with hits wins."""

        def strategy(doc: MicroDocument, listing: ListingPage) -> list[CandidateLink]:
            for selector in selectors:
                out: list[CandidateLink] = []
                for anchor in doc.query_selector_all(selector):
                    link = self._candidate(anchor, listing, provenance, title=self._anchor_title(anchor))
                    if link is not None:
                        out.append(link)
                if out:
                    return out
            return []

        return strategy

    # ------------------------------------------------------------------
    # Detail helpers (fallback chains: first selector with a result wins)
    # ------------------------------------------------------------------

    @staticmethod
    def _text(doc: MarkupDocument, *selectors: str, min_length: int = 1) -> str:
        for sel in selectors:
            for element in doc.query_selector_all(sel):
                text = clean_text(element.text)
                if len(text) >= min_length:
                    return text
        return ""

    @staticmethod
    def _texts(doc: MarkupDocument, *selectors: str, exclude: frozenset[str] = frozenset()) -> list[str]:
        for sel in selectors:
            texts = [clean_text(e.text) for e in doc.query_selector_all(sel)]
            texts = [t for t in texts if t and t not in exclude]
            if texts:
                return texts
        return []

    @staticmethod
    def _attr(doc: MarkupDocument, selector: str, attr: str) -> str:
        for element in doc.query_selector_all(selector):
            value = element.get(attr).strip()
            if value:
                return value
        return ""

    @staticmethod
    def _image_src(element: Element) -> str:
        for attr in _IMAGE_ATTRS:
            value = element.get(attr).strip()
            if value and not value.startswith("data:"):
                return value
        # Anchors wrapping a full-size image (``.bigImage``, ``.sample-box``)
        if element.tag == "a":
            return element.href.strip()
        return ""

    def _image(self, doc: MarkupDocument, base_url: str, *selectors: str) -> str:
        for sel in selectors:
            for element in doc.query_selector_all(sel):
                src = self._image_src(element)
                if src:
                    return resolve_url(src, base_url)
        return ""

    def _images(self, doc: MarkupDocument, base_url: str, *selectors: str) -> list[str]:
        for sel in selectors:
            urls = [
                resolve_url(src, base_url)
                for src in (self._image_src(e) for e in doc.query_selector_all(sel))
                if src
            ]
            urls = [u for u in urls if u]
            if urls:
                return urls
        return []

    def _actors(self, doc: MarkupDocument, base_url: str, *selectors: str) -> list[dict[str, str]]:
        for sel in selectors:
            actors: list[dict[str, str]] = []
            for element in doc.query_selector_all(sel):
                name = clean_text(element.text) or element.title.strip()
                if not name or name in ("-", "---"):
                    continue
                actor = {"name": name}
                href = element.href or (element.query_selector("a") or element).href
                if href:
                    actor["profileUrl"] = resolve_url(href, base_url)
                img = element.query_selector("img")
                if img is not None and self._image_src(img):
                    actor["avatar"] = resolve_url(self._image_src(img), base_url)
                actors.append(actor)
            if actors:
                return actors
        return []

    @staticmethod
    def _magnet_from(element: Element, container: Element | None = None) -> dict[str, Any] | None:
        uri = element.href.strip() or clean_text(element.text)
        if not uri.startswith(MAGNET_PREFIX):
            return None
        scope = container or element
        name = element.title.strip() or clean_text(element.text)
        if not name or name.startswith(MAGNET_PREFIX):
            name = "magnet"
        size_el = scope.query_selector(".size, .filesize")
        seeders_el = scope.query_selector(".seeders, .seeds")
        leechers_el = scope.query_selector(".leechers, .peers")
        return {
            "name": name,
            "uri": uri,
            "size": clean_text(size_el.text) if size_el else find_size(scope.text),
            "seeders": (to_int(seeders_el.text) or 0) if seeders_el else 0,
            "leechers": (to_int(leechers_el.text) or 0) if leechers_el else 0,
        }

    def _magnets(self, doc: MarkupDocument, selector: str = MAGNET_SELECTOR) -> list[dict[str, Any]]:
        out: list[dict[str, Any]] = []
        for element in doc.query_selector_all(selector):
            magnet = self._magnet_from(element)
            if magnet is not None:
                out.append(magnet)
        return out

    def _downloads(self, doc: MarkupDocument, base_url: str, *selectors: str) -> list[dict[str, str]]:
        for sel in selectors:
            links: list[dict[str, str]] = []
            for element in doc.query_selector_all(sel):
                href = element.href.strip()
                if not href or href.startswith("magnet:"):
                    continue
                url = resolve_url(href, base_url)
                if not url:
                    continue
                name = clean_text(element.text) or element.title.strip() or "download"
                size_el = element.query_selector(".size, .filesize")
                quality_el = element.query_selector(".quality, .resolution")
                links.append(
                    {
                        "name": name,
                        "url": url,
                        "type": detect_link_type(url, name),
                        "size": clean_text(size_el.text) if size_el else "",
                        "quality": clean_text(quality_el.text) if quality_el else "",
                    }
                )
            if links:
                return links
        return []

    def _code(self, doc: MarkupDocument, url: str, *selectors: str) -> str:
        for sel in selectors:
            for element in doc.query_selector_all(sel):
                code = extract_code(element.text)
                if code:
                    return code
        return extract_code(urlsplit(url).path)

    def _title(self, doc: MarkupDocument, *selectors: str) -> str:
        """First title-like text between 6 and 199 characters."""
        for sel in selectors:
            for element in doc.query_selector_all(sel):
                text = clean_text(element.text)
                if 5 < len(text) < _MAX_TITLE_LENGTH:
                    return text
        return ""

    # ------------------------------------------------------------------
    # Labeled info rows (``<p><span>導演:</span> <a>Name</a></p>``)
    # ------------------------------------------------------------------

    @staticmethod
    def _labeled_row(doc: MarkupDocument, row_selector: str, *labels: str) -> Element | None:
        for row in doc.query_selector_all(row_selector):
            if any(label in row.text for label in labels):
                return row
        return None

    def _labeled_value(self, doc: MarkupDocument, row_selector: str, *labels: str) -> str:
        row = self._labeled_row(doc, row_selector, *labels)
        if row is None:
            return ""

        value_el = row.query_selector(".value") or row.query_selector("a")
        if value_el is not None:
            value = clean_text(value_el.text)
            if value:
                return value

        text = clean_text(row.text)
        for label in labels:
            idx = text.find(label)
            if idx != -1:
                text = text[idx + len(label):]
                break
        return text.lstrip(":： ").strip()

    def _labeled_links(self, doc: MarkupDocument, row_selector: str, *labels: str) -> list[Element]:
        row = self._labeled_row(doc, row_selector, *labels)
        if row is None:
            return []
        return row.query_selector_all("a")

    # ------------------------------------------------------------------
    # Broad field chains for blog-style sites and the generic fallback
    # ------------------------------------------------------------------

    def _common_fields(self, doc: MarkupDocument, url: str) -> RawFields:
        return {
            "title": self._title(doc, "h1", ".video-title", ".post-title", ".entry-title", ".title", "title"),
            "code": self._code(doc, url, "h1", ".video-title", ".post-title", ".entry-title", ".title", "title"),
            "cover": self._image(
                doc, url, ".video-cover img", ".poster img", ".cover img", ".thumbnail img",
                ".featured-image img", ".entry-content img", 'img[class*="cover"]',
            ) or resolve_url(self._attr(doc, 'meta[property="og:image"]', "content"), url),
            "screenshots": self._images(
                doc, url, ".screenshots img", ".screenshot img", ".preview img", ".gallery img", 'img[class*="sample"]'
            ),
            "actors": self._actors(
                doc, url, ".actress a", ".performer a", ".actors a", ".cast a", ".stars a", ".models a", ".actress"
            ),
            "director": self._text(doc, ".director a", ".director"),
            "studio": self._text(doc, ".studio a", ".maker a", ".studio", ".maker"),
            "label": self._text(doc, ".label a", ".label"),
            "series": self._text(doc, ".series a", ".series"),
            "release_date": self._text(doc, ".release-date", ".date", ".published", "time"),
            "duration": self._text(doc, ".duration", ".runtime", ".length"),
            "quality": self._text(doc, ".quality"),
            "file_size": self._text(doc, ".file-size", ".filesize", ".size"),
            "resolution": self._text(doc, ".resolution"),
            "tags": self._texts(doc, ".tag a", ".genre a", ".category a", ".tags a", ".categories a"),
            "magnet_links": self._magnets(doc),
            "download_links": self._downloads(
                doc, url, 'a[href*="download"]', ".download-link", ".download-btn", 'a[href$=".torrent"]'
            ),
            "description": self._text(
                doc, ".description", ".summary", ".synopsis", ".intro", ".post-content p",
                ".entry-content p", ".content p", min_length=10,
            ),
            "rating": self._text(doc, ".rating", ".score"),
        }
