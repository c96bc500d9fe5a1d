"""Extraction error taxonomy."""

from __future__ import annotations


class ExtractionError(Exception):
    """Base class for all extraction errors.

    ``retryable`` tells the orchestrator whether one more attempt may help.
    """

    retryable: bool = False


class ValidationError(ExtractionError):
    """Raised for a malformed input item or URL."""


class AdapterError(ExtractionError):
    """Raised when a site adapter fails to parse a page it accepted."""

    retryable = True


class AdapterLoadError(AdapterError):
    """Raised when the generic adapter itself cannot be constructed."""

    retryable = False


class NetworkError(ExtractionError):
    """Raised on connection, DNS, protocol or non-2xx failures."""

    retryable = True


class FetchTimeoutError(ExtractionError, TimeoutError):
    """Raised when a fetch exceeds its per-call timeout."""

    retryable = True


class NoCandidateLinksError(ExtractionError):
    """Raised when link discovery finds nothing usable on a listing page."""


class CacheError(ExtractionError):
    """Raised by cache tiers; callers treat it as a miss or a no-op."""
