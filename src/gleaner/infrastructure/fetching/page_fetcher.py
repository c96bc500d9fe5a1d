"""HTTP page fetcher on a shared httpx.AsyncClient."""

from __future__ import annotations

import asyncio

import httpx
import structlog

from gleaner.domain.adapters import FetchTimeoutError, NetworkError

log = structlog.get_logger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/131.0.0.0 Safari/537.36"
)

BROWSER_HEADERS: dict[str, str] = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "zh-CN,zh;q=0.8,en;q=0.6,ja;q=0.4",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}


def build_http_client(
    *,
    timeout_seconds: float = 15.0,
    user_agent: str = DEFAULT_USER_AGENT,
    follow_redirects: bool = True,
) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout_seconds),
        follow_redirects=follow_redirects,
        headers={"User-Agent": user_agent, **BROWSER_HEADERS},
    )


class PageFetcher:
    """Fetch page markup, mapping transport failures onto domain errors.

    The client is owned by the caller (composition root); ``referers``
    maps a source id to the Referer header sent for that site.
    """

    def __init__(self, client: httpx.AsyncClient, *, referers: dict[str, str] | None = None) -> None:
        self._client = client
        self._referers = dict(referers or {})

    async def fetch(self, url: str, *, timeout: float, source_id: str = "") -> str:
        headers: dict[str, str] = {}
        referer = self._referers.get(source_id)
        if referer:
            headers["Referer"] = referer

        try:
            async with asyncio.timeout(timeout):
                resp = await self._client.get(url, headers=headers, timeout=timeout)
            resp.raise_for_status()
        except (httpx.TimeoutException, TimeoutError) as exc:
            log.warning("fetch_timeout", url=url, timeout=timeout)
            raise FetchTimeoutError(f"request timed out after {timeout:g}s: {url}") from exc
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            log.warning("fetch_http_error", url=url, status=status)
            raise NetworkError(f"HTTP {status} for {url}") from exc
        except httpx.HTTPError as exc:
            log.warning("fetch_error", url=url, error=str(exc))
            raise NetworkError(f"request failed for {url}: {exc}") from exc

        log.debug("page_fetched", url=url, status=resp.status_code, length=len(resp.text))
        return resp.text
