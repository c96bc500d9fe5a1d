"""Dependency-free markup querying (regex strategies, no browser engine)."""

from .document import MicroDocument, parse
from .element import Element, strip_markup
from .selectors import SelectorShape, classify, select

__all__ = [
    "Element",
    "MicroDocument",
    "SelectorShape",
    "classify",
    "parse",
    "select",
    "strip_markup",
]
