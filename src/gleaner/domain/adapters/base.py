"""Site adapter contract shared by all per-site implementations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from gleaner.domain.entities import CandidateLink, ListingPage

# Best-effort field bag produced by ``parse_detail``; the normalizer owns
# the canonical shape.
RawFields = dict[str, Any]


class MarkupDocument(Protocol):
    """Query-able view over raw markup (see infrastructure.markup)."""

    def query_selector(self, selector: str) -> Any: ...

    def query_selector_all(self, selector: str) -> list[Any]: ...


@dataclass(frozen=True)
class ParseContext:
    origin_url: str
    detail_url: str
    search_keyword: str = ""


@runtime_checkable
class SiteAdapter(Protocol):
    """
    Protocol for site adapters.

    An adapter binds one ``source_id`` and must implement:
    - is_detail_url(url) -> bool
    - extract_candidate_links(listing) -> list[CandidateLink]
    - parse_detail(document, context) -> RawFields (raises AdapterError)
    """

    source_id: str
    display_name: str
    description: str
    capabilities: tuple[str, ...]

    def is_detail_url(self, url: str) -> bool: ...

    def extract_candidate_links(self, listing: ListingPage) -> list[CandidateLink]: ...

    def parse_detail(
        self, document: MarkupDocument, context: ParseContext
    ) -> RawFields: ...
