"""Selector classification and per-shape scanning strategies.

Only the selector idioms used by the site adapters are understood:
``tag``, ``.class``, ``tag.class``, ``#id``, ``[attr]`` with the ``=``,
``^=``, ``$=`` and ``*=`` operators (optionally tag-qualified), descendant
chains (``.movie-box img``) and comma-separated unions.  Anything else
classifies as ``UNSUPPORTED`` and matches nothing.

Every strategy is a pure function over a window of the raw markup:
``(source, selector, start, end) -> list[Element]``.  Offsets stay absolute
to the document source, so nested scans never copy the markup.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache

from .element import OPEN_TAG_RE, Element

AttrOp = str  # "", "=", "^=", "$=", "*="


class SelectorShape(str, Enum):
    TAG = "tag"
    CLASS = "class"
    TAG_CLASS = "tag_class"
    ID = "id"
    ATTRIBUTE = "attribute"
    DESCENDANT = "descendant"
    UNION = "union"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class SimpleSelector:
    tag: str = ""
    class_name: str = ""
    element_id: str = ""
    attr: str = ""
    op: AttrOp = ""
    value: str = ""

    @property
    def shape(self) -> SelectorShape:
        if self.attr:
            return SelectorShape.ATTRIBUTE
        if self.element_id:
            return SelectorShape.ID
        if self.tag and self.class_name:
            return SelectorShape.TAG_CLASS
        if self.class_name:
            return SelectorShape.CLASS
        return SelectorShape.TAG

    def matches(self, element: Element) -> bool:
        if self.tag and element.tag != self.tag:
            return False
        if self.class_name and self.class_name not in element.classes:
            return False
        if self.element_id and element.get("id") != self.element_id:
            return False
        if self.attr:
            if self.attr not in element.attrs:
                return False
            actual = element.attrs[self.attr]
            if self.op == "=":
                return actual == self.value
            if self.op == "^=":
                return actual.startswith(self.value)
            if self.op == "$=":
                return actual.endswith(self.value)
            if self.op == "*=":
                return self.value in actual
        return True


@dataclass(frozen=True)
class ParsedSelector:
    shape: SelectorShape
    # DESCENDANT: one chain; UNION: one chain per alternative
    chains: tuple[tuple[SimpleSelector, ...], ...] = ()


_SIMPLE_RE = re.compile(
    r"""^
    (?P<tag>[a-zA-Z][a-zA-Z0-9]*)?
    (?:\.(?P<cls>[\w-]+))?
    (?:\#(?P<id>[\w-]+))?
    (?:\[\s*(?P<attr>[\w-]+)\s*
        (?:(?P<op>[\^$*]?=)\s*["']?(?P<val>[^"'\]]*)["']?\s*)?
    \])?
    $""",
    re.VERBOSE,
)


def _parse_simple(token: str) -> SimpleSelector | None:
    if not token:
        return None
    m = _SIMPLE_RE.match(token)
    if m is None:
        return None
    sel = SimpleSelector(
        tag=(m.group("tag") or "").lower(),
        class_name=m.group("cls") or "",
        element_id=m.group("id") or "",
        attr=(m.group("attr") or "").lower(),
        op=m.group("op") or "",
        value=m.group("val") or "",
    )
    if not (sel.tag or sel.class_name or sel.element_id or sel.attr):
        return None
    return sel


def _parse_chain(part: str) -> tuple[SimpleSelector, ...] | None:
    tokens = part.replace(">", " ").split()
    chain: list[SimpleSelector] = []
    for token in tokens:
        simple = _parse_simple(token)
        if simple is None:
            return None
        chain.append(simple)
    return tuple(chain) or None


def _split_union(selector: str) -> list[str]:
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for ch in selector:
        if ch == "[":
            depth += 1
        elif ch == "]":
            depth = max(0, depth - 1)
        if ch == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(ch)
    parts.append("".join(current).strip())
    return [p for p in parts if p]


@lru_cache(maxsize=512)
def classify(selector: str) -> ParsedSelector:
    """Classify ``selector`` into a shape category (pure, memoized)."""
    alternatives = _split_union(selector.strip())
    if not alternatives:
        return ParsedSelector(SelectorShape.UNSUPPORTED)

    chains: list[tuple[SimpleSelector, ...]] = []
    for alt in alternatives:
        chain = _parse_chain(alt)
        if chain is None:
            return ParsedSelector(SelectorShape.UNSUPPORTED)
        chains.append(chain)

    if len(chains) > 1:
        return ParsedSelector(SelectorShape.UNION, tuple(chains))
    if len(chains[0]) > 1:
        return ParsedSelector(SelectorShape.DESCENDANT, tuple(chains))
    return ParsedSelector(chains[0][0].shape, tuple(chains))


# ---------------------------------------------------------------------------
# Scanning strategies
# ---------------------------------------------------------------------------


@lru_cache(maxsize=64)
def _tag_open_re(tag: str) -> re.Pattern[str]:
    return re.compile(rf"<({re.escape(tag)})(?=[\s/>])([^>]*)>", re.IGNORECASE)


def _iter_candidates(
    source: str, sel: SimpleSelector, start: int, end: int
) -> list[Element]:
    pattern = _tag_open_re(sel.tag) if sel.tag else OPEN_TAG_RE
    out: list[Element] = []
    for m in pattern.finditer(source, start, end):
        element = Element.from_match(source, m)
        if sel.matches(element):
            out.append(element)
    return out


def scan_tag(source: str, sel: SimpleSelector, start: int, end: int) -> list[Element]:
    return _iter_candidates(source, sel, start, end)


def scan_class(source: str, sel: SimpleSelector, start: int, end: int) -> list[Element]:
    if source.find(sel.class_name, start, end) == -1:
        return []
    return _iter_candidates(source, sel, start, end)


def scan_id(source: str, sel: SimpleSelector, start: int, end: int) -> list[Element]:
    if source.find(sel.element_id, start, end) == -1:
        return []
    found = _iter_candidates(source, sel, start, end)
    return found[:1]


def scan_attribute(
    source: str, sel: SimpleSelector, start: int, end: int
) -> list[Element]:
    if source.find(sel.attr, start, end) == -1:
        return []
    return _iter_candidates(source, sel, start, end)


Strategy = Callable[[str, SimpleSelector, int, int], list[Element]]

STRATEGIES: dict[SelectorShape, Strategy] = {
    SelectorShape.TAG: scan_tag,
    SelectorShape.CLASS: scan_class,
    SelectorShape.TAG_CLASS: scan_class,
    SelectorShape.ID: scan_id,
    SelectorShape.ATTRIBUTE: scan_attribute,
}


def _scan_chain(
    source: str, chain: tuple[SimpleSelector, ...], start: int, end: int
) -> list[Element]:
    head, rest = chain[0], chain[1:]
    containers = STRATEGIES[head.shape](source, head, start, end)
    if not rest:
        return containers

    seen: set[int] = set()
    out: list[Element] = []
    for container in containers:
        inner_start, inner_end = container.inner_bounds
        if inner_start >= inner_end:
            continue
        for element in _scan_chain(source, rest, inner_start, inner_end):
            if element.start in seen:
                continue
            seen.add(element.start)
            out.append(element)
    out.sort(key=lambda e: e.start)
    return out


def select(source: str, selector: str, start: int = 0, end: int | None = None) -> list[Element]:
    """Resolve ``selector`` over ``source[start:end]`` in document order."""
    parsed = classify(selector)
    if parsed.shape is SelectorShape.UNSUPPORTED:
        return []

    stop = len(source) if end is None else end
    if parsed.shape is not SelectorShape.UNION:
        return _scan_chain(source, parsed.chains[0], start, stop)

    merged: dict[int, Element] = {}
    for chain in parsed.chains:
        for element in _scan_chain(source, chain, start, stop):
            merged.setdefault(element.start, element)
    return [merged[pos] for pos in sorted(merged)]
