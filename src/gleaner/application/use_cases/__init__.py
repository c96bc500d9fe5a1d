from .adapter_admin import AdapterAdminUseCase, UnknownAdapterError
from .cache_admin import CacheAdminUseCase
from .extraction import (
    ExtractionOrchestrator,
    ExtractionState,
    OrchestratorSettings,
    search_keyword_for,
    summarize_batch,
)

__all__ = [
    "AdapterAdminUseCase",
    "CacheAdminUseCase",
    "ExtractionOrchestrator",
    "ExtractionState",
    "OrchestratorSettings",
    "UnknownAdapterError",
    "search_keyword_for",
    "summarize_batch",
]
