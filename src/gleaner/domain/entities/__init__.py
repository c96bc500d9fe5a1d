from __future__ import annotations

from .extraction import (
    AdapterValidation,
    BatchProgress,
    CastMember,
    DownloadLink,
    ExtractionItem,
    ExtractionOptions,
    ExtractionRecord,
    ExtractionStatus,
    MagnetLink,
    ProgressCallback,
    SourceInfo,
)
from .listing import CandidateLink, ListingPage

__all__ = [
    "AdapterValidation",
    "BatchProgress",
    "CandidateLink",
    "CastMember",
    "DownloadLink",
    "ExtractionItem",
    "ExtractionOptions",
    "ExtractionRecord",
    "ExtractionStatus",
    "ListingPage",
    "MagnetLink",
    "ProgressCallback",
    "SourceInfo",
]
