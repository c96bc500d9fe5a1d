"""Composition root: builds the engine once and tears it down in order."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, cast

import httpx
import structlog
from fastapi import FastAPI

from gleaner.application.use_cases import (
    AdapterAdminUseCase,
    CacheAdminUseCase,
    ExtractionOrchestrator,
    OrchestratorSettings,
)
from gleaner.domain.entities import (
    AdapterValidation,
    ExtractionItem,
    ExtractionOptions,
    ExtractionRecord,
    SourceInfo,
)
from gleaner.infrastructure.adapters import AdapterRegistry
from gleaner.infrastructure.cache import (
    CacheStore,
    CacheSweeper,
    Clock,
    MemoryCacheAdapter,
    create_cache,
    system_clock,
)
from gleaner.infrastructure.config.schema import AppConfig
from gleaner.infrastructure.fetching import PageFetcher, build_http_client
from gleaner.infrastructure.markup import MicroDocument
from gleaner.infrastructure.normalization import NormalizerLimits, RecordNormalizer
from gleaner.infrastructure.ranking import LinkRanker, RankingWeights
from gleaner.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


class EngineContext:
    """Everything a caller needs, wired once per process (or per test)."""

    def __init__(
        self,
        config: AppConfig,
        registry: AdapterRegistry,
        cache: CacheStore,
        orchestrator: ExtractionOrchestrator,
        http_client: httpx.AsyncClient,
    ) -> None:
        self.config = config
        self.registry = registry
        self.cache = cache
        self.orchestrator = orchestrator
        self.http_client = http_client
        self.adapters = AdapterAdminUseCase(registry)
        self.cache_admin = CacheAdminUseCase(cache)
        self.sweeper = CacheSweeper(cache, interval_seconds=config.cache.sweep_interval_seconds)

    # --- Extraction ---
    async def extract_single(
        self, item: ExtractionItem, options: ExtractionOptions | None = None
    ) -> ExtractionRecord:
        return await self.orchestrator.extract_single(item, options)

    async def extract_batch(
        self, items: list[ExtractionItem], options: ExtractionOptions | None = None
    ) -> list[ExtractionRecord]:
        return await self.orchestrator.extract_batch(items, options)

    # --- Adapters ---
    def list_supported_sources(self) -> list[SourceInfo]:
        return self.adapters.list_supported_sources()

    def validate_adapter(self, source_id: str) -> AdapterValidation:
        return self.adapters.validate_adapter(source_id)

    def reload_adapter(self, source_id: str) -> bool:
        return self.adapters.reload_adapter(source_id)

    # --- Cache ---
    async def cache_stats(self) -> dict[str, Any]:
        return await self.cache_admin.cache_stats()

    async def clear_cache(self, operation: str = "expired", **criteria: Any) -> int:
        return await self.cache_admin.clear_cache(operation, **criteria)

    async def delete_cache_entry(self, url: str) -> bool:
        return await self.cache_admin.delete_cache_entry(url)

    async def export_cache(self) -> dict[str, Any]:
        return await self.cache_admin.export_cache()

    async def import_cache(self, payload: Any) -> int:
        return await self.cache_admin.import_cache(payload)


def _build_cache_store(config: AppConfig, clock: Clock) -> CacheStore:
    cfg = config.cache
    local = MemoryCacheAdapter(ttl_seconds=cfg.ttl_seconds, clock=clock)
    preferred = None
    if cfg.backend != "memory":
        preferred = create_cache(
            backend=cfg.backend,
            directory=str(cfg.directory),
            redis_url=cfg.redis_url,
            ttl_seconds=cfg.ttl_seconds,
            max_concurrent=cfg.max_concurrent,
        )
    return CacheStore(
        local,
        preferred,
        ttl_seconds=cfg.ttl_seconds,
        max_items=cfg.max_items,
        clock=clock,
    )


@asynccontextmanager
async def build_context(
    config: AppConfig,
    *,
    http_client: httpx.AsyncClient | None = None,
    clock: Clock = system_clock,
) -> AsyncIterator[EngineContext]:
    """Build the engine, yield it, then close cache and HTTP client.

    Order matters:
        1. Cache store (durable tier degrades to memory if unreachable)
        2. HTTP client (owned here unless injected)
        3. Adapter registry, ranker, normalizer
        4. Orchestrator
    """
    # 1) Cache
    cache = _build_cache_store(config, clock)
    await cache.__aenter__()
    log.info("cache_initialized", backend=config.cache.backend, tier=cache.tier_name)

    # 2) HTTP client
    owns_client = http_client is None
    client = http_client or build_http_client(
        timeout_seconds=config.http_timeout_seconds,
        user_agent=config.http_user_agent,
        follow_redirects=config.http_follow_redirects,
    )

    try:
        # 3) Adapters + ranking + normalization
        registry = AdapterRegistry(generic_max_anchors=config.ranking.generic_max_anchors)
        referers = {
            source.source_id: getattr(registry.get(source.source_id), "referer", "")
            for source in registry.list_sources()
        }
        fetcher = PageFetcher(client, referers={k: v for k, v in referers.items() if v})

        r = config.ranking
        ranker = LinkRanker(
            RankingWeights(
                code_exact_weight=r.code_exact_weight,
                code_partial_weight=r.code_partial_weight,
                similarity_weight=r.similarity_weight,
                provenance_bonus=r.provenance_bonus,
                high_confidence=frozenset(r.high_confidence),
            )
        )
        n = config.normalizer
        normalizer = RecordNormalizer(
            NormalizerLimits(
                max_screenshots=n.max_screenshots,
                max_download_links=n.max_download_links,
                max_magnet_links=n.max_magnet_links,
            )
        )

        # 4) Orchestrator
        orchestrator = ExtractionOrchestrator(
            registry=registry,
            fetcher=fetcher,
            ranker=ranker,
            normalizer=normalizer,
            document_factory=MicroDocument,
            cache=cache,
            settings=OrchestratorSettings.from_config(config.extraction, config.cache.ttl_seconds),
            clock=clock,
        )

        context = EngineContext(
            config=config,
            registry=registry,
            cache=cache,
            orchestrator=orchestrator,
            http_client=client,
        )
        log.info("engine_ready", sources=len(referers))
        yield context
    finally:
        if owns_client:
            await client.aclose()
            log.info("http_client_closed")
        await cache.aclose()
        log.info("cache_closed")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """FastAPI lifespan: one EngineContext plus the background cache sweeper."""
    state = cast(AppState, app.state)

    async with build_context(state.config) as context:
        state.engine = context
        context.sweeper.start()
        log.info("app_startup_complete")
        try:
            yield
        finally:
            await context.sweeper.stop()
            log.info("app_shutdown_complete")
