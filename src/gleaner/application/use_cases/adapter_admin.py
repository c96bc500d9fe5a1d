"""Adapter administration: listing, validation and reload."""

from __future__ import annotations

import structlog

from gleaner.domain.adapters import ValidationError
from gleaner.domain.entities import AdapterValidation, SourceInfo
from gleaner.domain.ports import AdapterRegistryPort

log = structlog.get_logger(__name__)


class UnknownAdapterError(ValidationError):
    """Raised for a source id the registry has no factory for."""

    def __init__(self, source_id: str) -> None:
        super().__init__(f"unknown source '{source_id}'")
        self.source_id = source_id


class AdapterAdminUseCase:
    def __init__(self, registry: AdapterRegistryPort) -> None:
        self.registry = registry

    def list_supported_sources(self) -> list[SourceInfo]:
        return self.registry.list_sources()

    def validate_adapter(self, source_id: str) -> AdapterValidation:
        """
        Raises:
            ValidationError: ``source_id`` is empty.
            UnknownAdapterError: No such source.
        """
        self._require(source_id)
        result = self.registry.validate(source_id)
        log.info(
            "adapter_validated",
            source_id=source_id,
            is_valid=result.is_valid,
            errors=list(result.errors),
        )
        return result

    def reload_adapter(self, source_id: str) -> bool:
        """Evict the cached instance; True if one was cached.

        Raises:
            ValidationError: ``source_id`` is empty.
            UnknownAdapterError: No such source.
        """
        self._require(source_id)
        return self.registry.reload(source_id)

    def _require(self, source_id: str) -> None:
        if not source_id:
            raise ValidationError("missing source id")
        if source_id not in self.registry:
            raise UnknownAdapterError(source_id)
