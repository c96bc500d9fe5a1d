"""Detail extraction endpoints."""

from __future__ import annotations

import time
import uuid
from typing import Any, Optional, cast

import structlog
from fastapi import APIRouter, Body, HTTPException, Query, Request

from gleaner.application.use_cases import UnknownAdapterError, summarize_batch
from gleaner.domain.adapters import ValidationError
from gleaner.domain.entities import (
    ExtractionItem,
    ExtractionOptions,
    ExtractionStatus,
)
from gleaner.infrastructure.common import is_http_url
from gleaner.interfaces.app_state import AppState
from gleaner.interfaces.composition import EngineContext

from .schemas import (
    ExtractBatchRequest,
    ExtractOptionsIn,
    ExtractSingleRequest,
    ReloadParserRequest,
    SearchResultIn,
)

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/detail", tags=["detail"])

# Upper bound on batch concurrency accepted from API callers
MAX_API_CONCURRENCY = 5

STATUS_MESSAGES: dict[ExtractionStatus, str] = {
    ExtractionStatus.SUCCESS: "Detail extraction completed",
    ExtractionStatus.CACHED: "Served from cache",
    ExtractionStatus.PARTIAL: "Partial data extracted",
    ExtractionStatus.ERROR: "Detail extraction failed",
    ExtractionStatus.TIMEOUT: "Extraction timed out",
}


def _engine(request: Request) -> EngineContext:
    return cast(AppState, request.app.state).engine


def _bad_request(exc: ValidationError) -> HTTPException:
    return HTTPException(status_code=400, detail=str(exc))


def _to_item(result: SearchResultIn, source_type: str | None) -> ExtractionItem:
    if not result.url:
        raise ValidationError("search result has no URL")
    if not is_http_url(result.url):
        raise ValidationError(f"invalid URL: {result.url!r}")
    return ExtractionItem(
        id=result.id or uuid.uuid4().hex[:12],
        url=result.url,
        title=result.title,
        source_hint=result.source_hint or source_type,
        keyword=result.keyword,
        code=result.code,
    )


def _to_options(options: ExtractOptionsIn, *, batch: bool = False) -> ExtractionOptions:
    concurrency = options.max_concurrency
    if batch and concurrency is not None:
        concurrency = min(concurrency, MAX_API_CONCURRENCY)
    return ExtractionOptions(
        timeout_ms=options.timeout,
        enable_retry=options.enable_retry,
        enable_cache=options.enable_cache,
        max_concurrency=concurrency,
    )


@router.post("/extract-single")
async def extract_single(body: ExtractSingleRequest, request: Request) -> dict[str, Any]:
    engine = _engine(request)
    started = time.perf_counter()
    try:
        item = _to_item(body.search_result, body.options.source_type)
    except ValidationError as exc:
        raise _bad_request(exc) from exc

    record = await engine.extract_single(item, _to_options(body.options))
    total_ms = int((time.perf_counter() - started) * 1000)
    return {
        "detailInfo": record.to_dict(),
        "metadata": {
            "totalTime": total_ms,
            "fromCache": record.extraction_status is ExtractionStatus.CACHED,
            "parser": record.source_id,
        },
        "message": STATUS_MESSAGES[record.extraction_status],
    }


@router.post("/extract-batch")
async def extract_batch(body: ExtractBatchRequest, request: Request) -> dict[str, Any]:
    engine = _engine(request)
    started = time.perf_counter()
    if not body.search_results:
        raise HTTPException(status_code=400, detail="searchResults must not be empty")

    try:
        items = [_to_item(r, body.options.source_type) for r in body.search_results]
        options = _to_options(body.options, batch=True)
        records = await engine.extract_batch(items, options)
    except ValidationError as exc:
        raise _bad_request(exc) from exc

    total_ms = int((time.perf_counter() - started) * 1000)
    stats = summarize_batch(records, total_ms)
    log.info(
        "batch_request_completed",
        total=stats["total"],
        successful=stats["successful"],
        failed=stats["failed"],
        duration_ms=total_ms,
    )
    return {
        "results": [r.to_dict() for r in records],
        "stats": stats,
        "summary": {
            "processed": stats["total"],
            "successful": stats["successful"],
            "failed": stats["failed"],
            "cached": stats["cached"],
            "message": (
                f"Batch extraction finished: {stats['successful']}/{stats['total']} "
                f"succeeded ({stats['successRate']}%)"
            ),
        },
    }


@router.get("/supported-sites")
async def supported_sites(request: Request) -> dict[str, Any]:
    sites = [
        {
            "sourceType": s.source_id,
            "displayName": s.display_name,
            "description": s.description,
            "capabilities": list(s.capabilities),
        }
        for s in _engine(request).list_supported_sources()
    ]
    return {"sites": sites, "metadata": {"totalSites": len(sites)}}


@router.get("/validate-parser")
async def validate_parser(
    request: Request,
    source_type: str = Query(default="", alias="sourceType"),
) -> dict[str, Any]:
    try:
        result = _engine(request).validate_adapter(source_type)
    except UnknownAdapterError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValidationError as exc:
        raise _bad_request(exc) from exc

    return {
        "validation": {
            "sourceType": result.source_id,
            "isValid": result.is_valid,
            "errors": list(result.errors),
            "capabilities": list(result.capabilities),
        }
    }


@router.post("/reload-parser")
async def reload_parser(body: ReloadParserRequest, request: Request) -> dict[str, Any]:
    try:
        evicted = _engine(request).reload_adapter(body.source_type)
    except UnknownAdapterError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValidationError as exc:
        raise _bad_request(exc) from exc

    return {"success": True, "sourceType": body.source_type, "wasCached": evicted}


@router.get("/cache/stats")
async def cache_stats(request: Request) -> dict[str, Any]:
    return {"stats": await _engine(request).cache_stats()}


@router.delete("/cache/clear")
async def cache_clear(
    request: Request,
    operation: str = Query(default="expired"),
    count: int = Query(default=10, ge=1),
    older_than: Optional[int] = Query(default=None, ge=0, alias="olderThan"),
    source_type: Optional[str] = Query(default=None, alias="sourceType"),
    min_size: int = Query(default=0, ge=0, alias="minSize"),
    max_size: Optional[int] = Query(default=None, ge=0, alias="maxSize"),
) -> dict[str, Any]:
    """Cleanup modes: expired (default), all, lru (``count``) and selective.

    Selective criteria: ``olderThan`` (days), ``sourceType``, ``minSize``
    and ``maxSize`` (bytes).
    """
    try:
        cleaned = await _engine(request).clear_cache(
            operation,
            count=count,
            older_than_days=older_than,
            source_id=source_type,
            min_size=min_size,
            max_size=max_size,
        )
    except ValidationError as exc:
        raise _bad_request(exc) from exc
    return {"operation": operation, "cleaned": cleaned}


@router.delete("/cache/delete")
async def cache_delete(request: Request, url: str = Query(default="")) -> dict[str, Any]:
    try:
        deleted = await _engine(request).delete_cache_entry(url)
    except ValidationError as exc:
        raise _bad_request(exc) from exc
    return {"deleted": deleted, "url": url}


@router.get("/cache/export")
async def cache_export(request: Request) -> dict[str, Any]:
    return await _engine(request).export_cache()


@router.post("/cache/import")
async def cache_import(request: Request, payload: Any = Body(...)) -> dict[str, Any]:
    try:
        imported = await _engine(request).import_cache(payload)
    except ValidationError as exc:
        raise _bad_request(exc) from exc
    return {"imported": imported}


@router.get("/config")
async def extraction_config(request: Request) -> dict[str, Any]:
    sections = _engine(request).config.to_sectioned_dict()
    return {
        key: sections[key]
        for key in ("extraction", "cache", "ranking", "normalizer")
    }
