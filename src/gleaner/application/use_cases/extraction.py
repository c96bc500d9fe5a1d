"""Detail extraction use case: single items and bounded-concurrency batches."""

from __future__ import annotations

import asyncio
import inspect
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

import structlog

from gleaner.domain.adapters import (
    CacheError,
    ExtractionError,
    NetworkError,
    NoCandidateLinksError,
    ParseContext,
    SiteAdapter,
    ValidationError,
)
from gleaner.domain.entities import (
    BatchProgress,
    ExtractionItem,
    ExtractionOptions,
    ExtractionRecord,
    ExtractionStatus,
    ListingPage,
    ProgressCallback,
)
from gleaner.domain.ports import (
    AdapterRegistryPort,
    DocumentFactory,
    LinkRankerPort,
    PageFetcherPort,
    RecordCachePort,
    RecordNormalizerPort,
)
from gleaner.infrastructure.common import extract_code, is_http_url

log = structlog.get_logger(__name__)


class ExtractionState(str, Enum):
    INIT = "init"
    DETECT_SOURCE = "detect_source"
    CACHE_LOOKUP = "cache_lookup"
    DONE_CACHED = "done_cached"
    RESOLVE_DETAIL_URL = "resolve_detail_url"
    FETCH_DETAIL = "fetch_detail"
    PARSE = "parse"
    NORMALIZE = "normalize"
    CACHE_STORE = "cache_store"
    DONE_SUCCESS = "done_success"
    DONE_ERROR = "done_error"


@dataclass(frozen=True)
class OrchestratorSettings:
    """Configured defaults; :class:`ExtractionOptions` override the first four per call."""

    timeout_ms: int = 15_000
    enable_retry: bool = True
    enable_cache: bool = True
    max_concurrency: int = 4
    retry_delay_ms: int = 1000
    batch_delay_ms: int = 500
    min_content_length: int = 100
    max_batch_size: int = 20
    cache_ttl_seconds: int | None = 86400

    @classmethod
    def from_config(cls, extraction: Any, cache_ttl_seconds: int | None) -> OrchestratorSettings:
        return cls(
            timeout_ms=extraction.timeout_ms,
            enable_retry=extraction.enable_retry,
            enable_cache=extraction.enable_cache,
            max_concurrency=extraction.max_concurrency,
            retry_delay_ms=extraction.retry_delay_ms,
            batch_delay_ms=extraction.batch_delay_ms,
            min_content_length=extraction.min_content_length,
            max_batch_size=extraction.max_batch_size,
            cache_ttl_seconds=cache_ttl_seconds,
        )


@dataclass(frozen=True)
class _Effective:
    timeout_ms: int
    enable_retry: bool
    enable_cache: bool
    max_concurrency: int
    on_progress: ProgressCallback | None


class _Run:
    """Per-item state tracker; every transition is logged at debug level."""

    def __init__(self, item: ExtractionItem, started: int) -> None:
        self.item = item
        self.started = started
        self.source_id = item.source_hint or ""
        self.state = ExtractionState.INIT
        self.log = log.bind(item_id=item.id, url=item.url)

    def to(self, target: ExtractionState) -> None:
        self.log.debug("extraction_state", from_state=self.state.value, to_state=target.value)
        self.state = target


def _now_ms() -> int:
    return int(time.time() * 1000)


def search_keyword_for(item: ExtractionItem) -> str:
    """Keyword used to rank listing links: keyword, code, title, then the URL's code."""
    return item.keyword or item.code or item.title or extract_code(item.url)


def summarize_batch(records: list[ExtractionRecord], total_time_ms: int) -> dict[str, Any]:
    """Counters for a finished batch; cached records count as successful."""
    counts = {status: 0 for status in ExtractionStatus}
    by_source: dict[str, dict[str, int]] = {}
    for record in records:
        counts[record.extraction_status] += 1
        bucket = by_source.setdefault(
            record.source_id or "unknown", {"total": 0, "successful": 0, "failed": 0}
        )
        bucket["total"] += 1
        if record.extraction_status in (ExtractionStatus.SUCCESS, ExtractionStatus.CACHED):
            bucket["successful"] += 1
        elif record.extraction_status in (ExtractionStatus.ERROR, ExtractionStatus.TIMEOUT):
            bucket["failed"] += 1

    total = len(records)
    successful = counts[ExtractionStatus.SUCCESS] + counts[ExtractionStatus.CACHED]
    return {
        "total": total,
        "successful": successful,
        "cached": counts[ExtractionStatus.CACHED],
        "partial": counts[ExtractionStatus.PARTIAL],
        "failed": counts[ExtractionStatus.ERROR] + counts[ExtractionStatus.TIMEOUT],
        "totalTime": total_time_ms,
        "averageTime": round(total_time_ms / total) if total else 0,
        "successRate": round(successful * 100 / total) if total else 0,
        "cacheHitRate": round(counts[ExtractionStatus.CACHED] * 100 / total) if total else 0,
        "bySource": by_source,
    }


class ExtractionOrchestrator:
    """Runs the extraction state machine for one item or a batch of items.

    Flow per item:
        1. Detect source (hint, host table, generic)
        2. Cache lookup (hit -> ``cached``)
        3. Resolve the detail URL (listing pages are ranked)
        4. Fetch, parse, normalize
        5. Store successful records

    Steps 3-4 are retried once (when enabled) on retryable errors.  Every
    outcome is a record; this class never raises for a single item.
    """

    def __init__(
        self,
        registry: AdapterRegistryPort,
        fetcher: PageFetcherPort,
        ranker: LinkRankerPort,
        normalizer: RecordNormalizerPort,
        document_factory: DocumentFactory,
        cache: RecordCachePort | None = None,
        settings: OrchestratorSettings | None = None,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self.registry = registry
        self.fetcher = fetcher
        self.ranker = ranker
        self.normalizer = normalizer
        self.document_factory = document_factory
        self.cache = cache
        self.settings = settings or OrchestratorSettings()
        self._clock = clock

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def extract_single(
        self,
        item: ExtractionItem,
        options: ExtractionOptions | None = None,
    ) -> ExtractionRecord:
        opts = self._effective(options)
        run = _Run(item, started=self._clock())

        try:
            self._validate(item)

            run.to(ExtractionState.DETECT_SOURCE)
            run.source_id = item.source_hint or self.registry.detect_source(item.url)
            adapter = self.registry.get(run.source_id)
            run.source_id = adapter.source_id

            if opts.enable_cache and self.cache is not None:
                run.to(ExtractionState.CACHE_LOOKUP)
                cached = await self._cache_lookup(item)
                if cached is not None:
                    run.to(ExtractionState.DONE_CACHED)
                    return self._stamp(cached, item, run.started, ExtractionStatus.CACHED)

            attempts = 2 if opts.enable_retry else 1
            for attempt in range(attempts):
                try:
                    record = await self._attempt(run, adapter, opts)
                except ExtractionError as exc:
                    if not exc.retryable or attempt + 1 >= attempts:
                        raise
                    run.log.warning(
                        "extraction_retry",
                        attempt=attempt + 1,
                        state=run.state.value,
                        error=str(exc),
                        error_type=type(exc).__name__,
                    )
                    await asyncio.sleep(self.settings.retry_delay_ms / 1000)
                    continue

                record.retry_count = attempt
                break

            if opts.enable_cache and record.extraction_status is ExtractionStatus.SUCCESS:
                run.to(ExtractionState.CACHE_STORE)
                await self._cache_store(item, record)

            run.to(ExtractionState.DONE_SUCCESS)
            record = self._stamp(record, item, run.started)
            run.log.info(
                "extraction_completed",
                source=record.source_id,
                status=record.extraction_status.value,
                detail_url=record.detail_url,
                duration_ms=record.extraction_time_ms,
            )
            return record

        except ExtractionError as exc:
            run.log.warning(
                "extraction_failed",
                state=run.state.value,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            run.to(ExtractionState.DONE_ERROR)
            return self._failure(item, exc, run.started, run.source_id)
        except Exception as exc:
            run.log.error("extraction_crashed", state=run.state.value, exc_info=True)
            run.to(ExtractionState.DONE_ERROR)
            return self._failure(item, exc, run.started, run.source_id)

    async def extract_batch(
        self,
        items: list[ExtractionItem],
        options: ExtractionOptions | None = None,
    ) -> list[ExtractionRecord]:
        """Extract ``items`` in waves; results are in input order.

        Raises:
            ValidationError: More than ``max_batch_size`` items.
        """
        if not items:
            return []
        if len(items) > self.settings.max_batch_size:
            raise ValidationError(
                f"batch of {len(items)} items exceeds the limit of {self.settings.max_batch_size}"
            )

        opts = self._effective(options)
        total = len(items)
        results: list[ExtractionRecord] = []
        settled = 0

        async def run_one(item: ExtractionItem) -> ExtractionRecord:
            nonlocal settled
            record = await self.extract_single(item, options)
            settled += 1
            await self._notify(
                opts.on_progress,
                BatchProgress(
                    current=settled,
                    total=total,
                    status=record.extraction_status,
                    item_id=item.id,
                ),
            )
            return record

        log.info("batch_started", total=total, max_concurrency=opts.max_concurrency)
        for start in range(0, total, opts.max_concurrency):
            wave = items[start : start + opts.max_concurrency]
            outcomes = await asyncio.gather(
                *(run_one(item) for item in wave), return_exceptions=True
            )
            for item, outcome in zip(wave, outcomes):
                if isinstance(outcome, BaseException):
                    # Cancelled (or crashed) before producing a record
                    results.append(self._failure(item, outcome, self._clock()))
                else:
                    results.append(outcome)

            if start + opts.max_concurrency < total and self.settings.batch_delay_ms > 0:
                await asyncio.sleep(self.settings.batch_delay_ms / 1000)

        log.info(
            "batch_completed",
            total=total,
            succeeded=sum(1 for r in results if r.extraction_status is not ExtractionStatus.ERROR),
        )
        return results

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------

    async def _attempt(
        self,
        run: _Run,
        adapter: SiteAdapter,
        opts: _Effective,
    ) -> ExtractionRecord:
        item = run.item
        timeout = opts.timeout_ms / 1000
        keyword = search_keyword_for(item)

        run.to(ExtractionState.RESOLVE_DETAIL_URL)
        detail_url, markup = await self._resolve_detail_url(item, adapter, keyword, timeout)

        run.to(ExtractionState.FETCH_DETAIL)
        if markup is None:
            markup = await self.fetcher.fetch(detail_url, timeout=timeout, source_id=adapter.source_id)
        if len(markup) < self.settings.min_content_length:
            raise NetworkError(
                f"content too short ({len(markup)} chars) from {detail_url}"
            )

        run.to(ExtractionState.PARSE)
        raw = adapter.parse_detail(
            self.document_factory(markup),
            ParseContext(origin_url=item.url, detail_url=detail_url, search_keyword=keyword),
        )

        run.to(ExtractionState.NORMALIZE)
        return self.normalizer.normalize(
            raw,
            source_id=adapter.source_id,
            origin_url=item.url,
            detail_url=detail_url,
            now_ms=self._clock(),
        )

    async def _resolve_detail_url(
        self,
        item: ExtractionItem,
        adapter: SiteAdapter,
        keyword: str,
        timeout: float,
    ) -> tuple[str, str | None]:
        """Detail URL for ``item`` plus markup already fetched for it, if any."""
        if adapter.is_detail_url(item.url):
            return item.url, None

        markup = await self.fetcher.fetch(item.url, timeout=timeout, source_id=adapter.source_id)
        listing = ListingPage(markup=markup, origin_url=item.url, search_keyword=keyword)
        try:
            detail_url = self.ranker.select_detail_url(
                adapter.extract_candidate_links(listing), listing, adapter
            )
        except NoCandidateLinksError:
            # No usable links: treat the listing itself as the detail page
            log.info("detail_url_fallback", url=item.url, source=adapter.source_id)
            return item.url, markup

        log.debug("detail_url_resolved", listing=item.url, detail_url=detail_url)
        return detail_url, None

    async def _cache_lookup(self, item: ExtractionItem) -> ExtractionRecord | None:
        assert self.cache is not None
        try:
            record = await self.cache.get_record(item.url)
        except CacheError:
            log.warning("extraction_cache_read_failed", url=item.url, exc_info=True)
            return None
        if record is not None:
            log.info("extraction_cache_hit", url=item.url)
        return record

    async def _cache_store(self, item: ExtractionItem, record: ExtractionRecord) -> None:
        ttl = self.settings.cache_ttl_seconds
        if self.cache is None or not ttl or ttl <= 0:
            return
        try:
            await self.cache.put_record(item.url, record, ttl)
        except CacheError:
            log.warning("extraction_cache_write_failed", url=item.url, exc_info=True)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _effective(self, options: ExtractionOptions | None) -> _Effective:
        options = options or ExtractionOptions()
        s = self.settings

        def pick(value: Any, default: Any) -> Any:
            return default if value is None else value

        return _Effective(
            timeout_ms=max(1, pick(options.timeout_ms, s.timeout_ms)),
            enable_retry=pick(options.enable_retry, s.enable_retry),
            enable_cache=pick(options.enable_cache, s.enable_cache),
            max_concurrency=max(1, pick(options.max_concurrency, s.max_concurrency)),
            on_progress=options.on_progress,
        )

    @staticmethod
    def _validate(item: ExtractionItem) -> None:
        if not item.url:
            raise ValidationError("item has no URL")
        if not is_http_url(item.url):
            raise ValidationError(f"invalid URL: {item.url!r}")

    def _stamp(
        self,
        record: ExtractionRecord,
        item: ExtractionItem,
        started: int,
        status: ExtractionStatus | None = None,
    ) -> ExtractionRecord:
        record.item_id = item.id
        record.origin_url = item.url
        record.original_title = item.title
        record.extraction_time_ms = max(0, self._clock() - started)
        if status is not None:
            record.extraction_status = status
        return record

    def _failure(
        self,
        item: ExtractionItem,
        exc: BaseException,
        started: int,
        source_id: str = "",
    ) -> ExtractionRecord:
        status = (
            ExtractionStatus.TIMEOUT
            if isinstance(exc, TimeoutError)
            else ExtractionStatus.ERROR
        )
        record = ExtractionRecord(
            title=item.title,
            detail_url=item.url,
            source_id=source_id or item.source_hint or "",
            extraction_status=status,
            extraction_error=str(exc) or type(exc).__name__,
            extracted_at_ms=self._clock(),
        )
        return self._stamp(record, item, started)

    @staticmethod
    async def _notify(callback: ProgressCallback | None, progress: BatchProgress) -> None:
        if callback is None:
            return
        try:
            result = callback(progress)
            if inspect.isawaitable(result):
                await result
        except Exception:
            log.warning("progress_callback_failed", item_id=progress.item_id, exc_info=True)
