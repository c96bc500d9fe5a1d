"""MicroDocument - query-able view over raw markup without a browser engine."""

from __future__ import annotations

from functools import cached_property

from .element import Element, strip_markup
from .selectors import select

DEFAULT_MEMO_SIZE = 64


class MicroDocument:
    """Parsed markup answering the selector idioms in :mod:`.selectors`.

    Results per selector are memoized for the document's lifetime.  The memo
    is bounded: once ``memo_size`` selectors are cached it is cleared
    wholesale, since a document only ever sees a small fixed selector set.

    An unmatched (or unsupported) selector yields an empty result, never an
    exception.
    """

    def __init__(self, markup: str, *, memo_size: int = DEFAULT_MEMO_SIZE) -> None:
        self.markup = markup or ""
        self._memo: dict[str, tuple[Element, ...]] = {}
        self._memo_size = max(1, memo_size)

    def query_selector_all(self, selector: str) -> list[Element]:
        cached = self._memo.get(selector)
        if cached is None:
            if len(self._memo) >= self._memo_size:
                self._memo.clear()
            cached = tuple(select(self.markup, selector))
            self._memo[selector] = cached
        return list(cached)

    def query_selector(self, selector: str) -> Element | None:
        found = self.query_selector_all(selector)
        return found[0] if found else None

    @property
    def memo_entries(self) -> int:
        return len(self._memo)

    @cached_property
    def text(self) -> str:
        return strip_markup(self.markup)


def parse(markup: str) -> MicroDocument:
    return MicroDocument(markup)
