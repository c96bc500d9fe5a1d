"""Element view over a slice of raw markup."""

from __future__ import annotations

import html
import re
from functools import cached_property, lru_cache

OPEN_TAG_RE = re.compile(r"<([a-zA-Z][a-zA-Z0-9]*)(?=[\s/>])([^>]*)>")

_ATTR_RE = re.compile(
    r"""([^\s=/>"']+)(?:\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s>"']+)))?"""
)

VOID_TAGS = frozenset(
    {"area", "base", "br", "col", "embed", "hr", "img", "input",
     "link", "meta", "source", "track", "wbr"}
)

_SCRIPT_STYLE_RE = re.compile(
    r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL
)
_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")


@lru_cache(maxsize=64)
def _balance_re(tag: str) -> re.Pattern[str]:
    return re.compile(rf"<(/?)({re.escape(tag)})(?=[\s/>])[^>]*>", re.IGNORECASE)


def parse_attributes(raw: str) -> dict[str, str]:
    """Parse a raw attribute string into a dict (names lower-cased, first wins)."""
    attrs: dict[str, str] = {}
    for m in _ATTR_RE.finditer(raw):
        name = m.group(1).lower()
        if name in attrs:
            continue
        value = m.group(2)
        if value is None:
            value = m.group(3)
        if value is None:
            value = m.group(4)
        attrs[name] = html.unescape(value) if value else ""
    return attrs


def strip_markup(fragment: str) -> str:
    """Tag-stripped, entity-decoded, whitespace-collapsed text of ``fragment``."""
    text = _SCRIPT_STYLE_RE.sub(" ", fragment)
    text = _COMMENT_RE.sub(" ", text)
    text = _TAG_RE.sub(" ", text)
    text = html.unescape(text)
    return _WS_RE.sub(" ", text).strip()


class Element:
    """One element found in a document.

    The opening tag is parsed eagerly; the matching close tag (and with it
    the inner markup and text) is located lazily on first access.
    """

    def __init__(
        self,
        source: str,
        tag: str,
        attrs: dict[str, str],
        start: int,
        open_end: int,
        self_closing: bool = False,
    ) -> None:
        self._source = source
        self.tag = tag
        self.attrs = attrs
        self.start = start
        self._open_end = open_end
        self._self_closing = self_closing

    @classmethod
    def from_match(cls, source: str, m: re.Match[str]) -> Element:
        raw_attrs = m.group(2) or ""
        return cls(
            source=source,
            tag=m.group(1).lower(),
            attrs=parse_attributes(raw_attrs),
            start=m.start(),
            open_end=m.end(),
            self_closing=raw_attrs.rstrip().endswith("/"),
        )

    def __repr__(self) -> str:
        return f"<Element {self.tag} at {self.start} attrs={self.attrs!r}>"

    # --- Attributes ---

    def get(self, name: str, default: str = "") -> str:
        return self.attrs.get(name.lower(), default)

    @property
    def href(self) -> str:
        return self.get("href")

    @property
    def title(self) -> str:
        return self.get("title")

    @property
    def class_name(self) -> str:
        return self.get("class")

    @property
    def onclick(self) -> str:
        return self.get("onclick")

    @cached_property
    def classes(self) -> frozenset[str]:
        return frozenset(self.class_name.split())

    # --- Content ---

    @cached_property
    def inner_bounds(self) -> tuple[int, int]:
        """``(start, end)`` of the inner markup within the document source.

        Unbalanced markup degrades to "until end of document".
        """
        if self._self_closing or self.tag in VOID_TAGS:
            return (self._open_end, self._open_end)

        depth = 1
        for m in _balance_re(self.tag).finditer(self._source, self._open_end):
            if m.group(1):
                depth -= 1
                if depth == 0:
                    return (self._open_end, m.start())
            elif not m.group(0).rstrip(">").rstrip().endswith("/"):
                depth += 1
        return (self._open_end, len(self._source))

    @property
    def inner_html(self) -> str:
        start, end = self.inner_bounds
        return self._source[start:end]

    @cached_property
    def text(self) -> str:
        return strip_markup(self.inner_html)

    # --- Scoped queries ---

    def query_selector_all(self, selector: str) -> list[Element]:
        from .selectors import select

        start, end = self.inner_bounds
        if start >= end:
            return []
        return select(self._source, selector, start, end)

    def query_selector(self, selector: str) -> Element | None:
        found = self.query_selector_all(selector)
        return found[0] if found else None
