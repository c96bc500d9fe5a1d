"""Tests for the extraction error taxonomy."""

from __future__ import annotations

import pytest

from gleaner.domain.adapters import (
    AdapterError,
    AdapterLoadError,
    CacheError,
    ExtractionError,
    FetchTimeoutError,
    NetworkError,
    NoCandidateLinksError,
    ValidationError,
)


class TestRetryable:
    @pytest.mark.parametrize("exc_type", [AdapterError, NetworkError, FetchTimeoutError])
    def test_transient_errors_are_retryable(self, exc_type: type[ExtractionError]) -> None:
        assert exc_type("x").retryable is True

    @pytest.mark.parametrize(
        "exc_type",
        [ValidationError, AdapterLoadError, NoCandidateLinksError, CacheError],
    )
    def test_permanent_errors_are_not_retryable(self, exc_type: type[ExtractionError]) -> None:
        assert exc_type("x").retryable is False


class TestHierarchy:
    def test_all_errors_share_base(self) -> None:
        for exc_type in (ValidationError, AdapterError, NetworkError, CacheError):
            assert issubclass(exc_type, ExtractionError)

    def test_fetch_timeout_is_a_timeout(self) -> None:
        assert isinstance(FetchTimeoutError("slow"), TimeoutError)

    def test_adapter_load_error_is_adapter_error(self) -> None:
        assert issubclass(AdapterLoadError, AdapterError)
