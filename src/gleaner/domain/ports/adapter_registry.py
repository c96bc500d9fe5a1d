"""Port for site adapter lookup and lifecycle."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from gleaner.domain.adapters.base import SiteAdapter
from gleaner.domain.entities import AdapterValidation, SourceInfo


@runtime_checkable
class AdapterRegistryPort(Protocol):
    """Synchronous interface for adapter detection, retrieval and reload."""

    def __contains__(self, source_id: object) -> bool: ...
    def detect_source(self, url: str) -> str: ...
    def get(self, source_id: str) -> SiteAdapter: ...
    def reload(self, source_id: str) -> bool: ...
    def list_sources(self) -> list[SourceInfo]: ...
    def validate(self, source_id: str) -> AdapterValidation: ...
