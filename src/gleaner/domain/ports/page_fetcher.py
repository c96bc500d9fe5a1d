"""Port for fetching raw page markup."""

from __future__ import annotations

from typing import Protocol


class PageFetcherPort(Protocol):
    async def fetch(self, url: str, *, timeout: float, source_id: str = "") -> str:
        """Return the response body of ``url``.

        Raises:
            FetchTimeoutError: The call exceeded ``timeout`` seconds.
            NetworkError: Connection failure or non-2xx status.
        """
        ...
