from .base import MarkupDocument, ParseContext, RawFields, SiteAdapter
from .exceptions import (
    AdapterError,
    AdapterLoadError,
    CacheError,
    ExtractionError,
    FetchTimeoutError,
    NetworkError,
    NoCandidateLinksError,
    ValidationError,
)

__all__ = [
    "AdapterError",
    "AdapterLoadError",
    "CacheError",
    "ExtractionError",
    "FetchTimeoutError",
    "MarkupDocument",
    "NetworkError",
    "NoCandidateLinksError",
    "ParseContext",
    "RawFields",
    "SiteAdapter",
    "ValidationError",
]
