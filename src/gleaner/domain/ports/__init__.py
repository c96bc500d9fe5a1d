from .adapter_registry import AdapterRegistryPort
from .cache import CachePort
from .extraction import DocumentFactory, LinkRankerPort, RecordCachePort, RecordNormalizerPort
from .page_fetcher import PageFetcherPort

__all__ = [
    "AdapterRegistryPort",
    "CachePort",
    "DocumentFactory",
    "LinkRankerPort",
    "PageFetcherPort",
    "RecordCachePort",
    "RecordNormalizerPort",
]
