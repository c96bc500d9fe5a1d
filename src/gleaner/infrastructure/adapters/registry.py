"""Adapter registry with lazy construction and in-memory caching."""

from __future__ import annotations

import threading
from collections.abc import Callable

import structlog

from gleaner.domain.adapters import AdapterLoadError, SiteAdapter
from gleaner.domain.entities import AdapterValidation, SourceInfo
from gleaner.infrastructure.common import detect_source as detect_source_from_url

from .generic import DEFAULT_MAX_ANCHORS, GenericAdapter
from .jable import JableAdapter
from .javbus import JavBusAdapter
from .javdb import JavDBAdapter
from .javgg import JavGGAdapter
from .javguru import JavGuruAdapter
from .javmost import JavMostAdapter
from .sukebei import SukebeiAdapter

log = structlog.get_logger(__name__)

GENERIC_ID = "generic"

AdapterFactory = Callable[[], SiteAdapter]

_REQUIRED_METHODS = ("is_detail_url", "extract_candidate_links", "parse_detail")


class AdapterRegistry:
    """
    Lazy adapter registry.

    get():
      - constructs on first use and caches the instance
      - unknown ids and failed constructions fall back to the generic adapter

    reload():
      - evicts a cached instance; the next get() constructs a fresh one
    """

    def __init__(
        self,
        factories: dict[str, AdapterFactory] | None = None,
        *,
        generic_max_anchors: int = DEFAULT_MAX_ANCHORS,
    ) -> None:
        if factories is None:
            factories = {
                "javbus": JavBusAdapter,
                "javdb": JavDBAdapter,
                "jable": JableAdapter,
                "javgg": JavGGAdapter,
                "javmost": JavMostAdapter,
                "sukebei": SukebeiAdapter,
                "javguru": JavGuruAdapter,
                GENERIC_ID: lambda: GenericAdapter(max_anchors=generic_max_anchors),
            }
        self._factories = dict(factories)
        self._instances: dict[str, SiteAdapter] = {}
        self._lock = threading.Lock()

    def __contains__(self, source_id: object) -> bool:
        return source_id in self._factories

    def detect_source(self, url: str) -> str:
        source_id = detect_source_from_url(url)
        return source_id if source_id in self._factories else GENERIC_ID

    def get(self, source_id: str) -> SiteAdapter:
        key = source_id if source_id in self._factories else GENERIC_ID
        cached = self._instances.get(key)
        if cached is not None:
            return cached

        with self._lock:
            return self._construct(key)

    def reload(self, source_id: str) -> bool:
        with self._lock:
            evicted = self._instances.pop(source_id, None) is not None
        log.info("adapter_reloaded", source_id=source_id, was_cached=evicted)
        return evicted

    def cached_ids(self) -> list[str]:
        return sorted(self._instances)

    def list_sources(self) -> list[SourceInfo]:
        out: list[SourceInfo] = []
        for source_id in self._factories:
            adapter = self.get(source_id)
            if adapter.source_id != source_id:
                # Broken factory answered by the generic fallback
                continue
            out.append(
                SourceInfo(
                    source_id=adapter.source_id,
                    display_name=adapter.display_name,
                    description=adapter.description,
                    capabilities=tuple(adapter.capabilities),
                )
            )
        return out

    def validate(self, source_id: str) -> AdapterValidation:
        if source_id not in self._factories:
            return AdapterValidation(
                source_id=source_id,
                is_valid=False,
                errors=(f"unknown source '{source_id}'",),
            )

        try:
            adapter = self._factories[source_id]()
        except Exception as exc:
            return AdapterValidation(
                source_id=source_id,
                is_valid=False,
                errors=(f"construction failed: {exc}",),
            )

        errors = tuple(
            f"missing method '{name}'"
            for name in _REQUIRED_METHODS
            if not callable(getattr(adapter, name, None))
        )
        return AdapterValidation(
            source_id=source_id,
            is_valid=not errors,
            errors=errors,
            capabilities=tuple(getattr(adapter, "capabilities", ())),
        )

    def _construct(self, key: str) -> SiteAdapter:
        """Build and cache the adapter for ``key``; caller holds the lock.

        A failed construction is answered by the generic adapter, cached
        under its own id only.
        """
        cached = self._instances.get(key)
        if cached is not None:
            return cached
        try:
            adapter = self._factories[key]()
        except Exception as exc:
            if key == GENERIC_ID:
                log.error("generic_adapter_load_failed", error=str(exc))
                raise AdapterLoadError(f"generic adapter could not be constructed: {exc}") from exc
            log.warning("adapter_load_failed", source_id=key, error=str(exc), fallback=GENERIC_ID)
            return self._construct(GENERIC_ID)

        self._instances[key] = adapter
        log.info("adapter_loaded", source_id=adapter.source_id)
        return adapter
