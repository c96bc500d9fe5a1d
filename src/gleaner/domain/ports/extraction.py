"""Ports the extraction orchestrator depends on besides fetching and adapters."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol

from gleaner.domain.adapters.base import MarkupDocument, RawFields, SiteAdapter
from gleaner.domain.entities import CandidateLink, ExtractionRecord, ListingPage

# Builds a query-able document from raw markup
DocumentFactory = Callable[[str], MarkupDocument]


class LinkRankerPort(Protocol):
    def rank(
        self,
        candidates: list[CandidateLink],
        listing: ListingPage,
        adapter: SiteAdapter,
    ) -> list[CandidateLink]:
        """Filter, de-duplicate and order candidates, best first."""
        ...

    def select_detail_url(
        self,
        candidates: list[CandidateLink],
        listing: ListingPage,
        adapter: SiteAdapter,
    ) -> str:
        """Best detail URL; raises NoCandidateLinksError when nothing survives."""
        ...


class RecordNormalizerPort(Protocol):
    def normalize(
        self,
        raw: RawFields,
        *,
        source_id: str,
        origin_url: str,
        detail_url: str,
        now_ms: int | None = None,
    ) -> ExtractionRecord: ...


class RecordCachePort(Protocol):
    """URL-keyed record cache (see infrastructure.cache.CacheStore).

    Every method may raise CacheError.
    """

    async def get_record(self, url: str) -> ExtractionRecord | None: ...

    async def put_record(self, url: str, record: ExtractionRecord, ttl: int | None = None) -> None: ...

    async def delete_url(self, url: str) -> bool: ...

    async def stats(self) -> dict[str, Any]: ...

    async def clear(self) -> int: ...

    async def sweep(self) -> int: ...

    async def evict_lru(self, count: int) -> int: ...

    async def delete_matching(
        self,
        *,
        older_than_ms: int | None = None,
        source_id: str | None = None,
        min_size: int = 0,
        max_size: int | None = None,
    ) -> int: ...

    async def export(self) -> dict[str, Any]: ...

    async def import_(self, payload: Any) -> int: ...
