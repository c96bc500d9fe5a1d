from .page_fetcher import BROWSER_HEADERS, DEFAULT_USER_AGENT, PageFetcher, build_http_client

__all__ = [
    "BROWSER_HEADERS",
    "DEFAULT_USER_AGENT",
    "PageFetcher",
    "build_http_client",
]
