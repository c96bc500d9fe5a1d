from .base import MarkupAdapterBase, base_score
from .generic import GenericAdapter
from .jable import JableAdapter
from .javbus import JavBusAdapter
from .javdb import JavDBAdapter
from .javgg import JavGGAdapter
from .javguru import JavGuruAdapter
from .javmost import JavMostAdapter
from .registry import GENERIC_ID, AdapterRegistry
from .sukebei import SukebeiAdapter

__all__ = [
    "GENERIC_ID",
    "AdapterRegistry",
    "GenericAdapter",
    "JableAdapter",
    "JavBusAdapter",
    "JavDBAdapter",
    "JavGGAdapter",
    "JavGuruAdapter",
    "JavMostAdapter",
    "MarkupAdapterBase",
    "SukebeiAdapter",
    "base_score",
]
