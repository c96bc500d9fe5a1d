"""Tests for the dependency-free markup document."""

from __future__ import annotations

import pytest

from gleaner.infrastructure.markup import (
    MicroDocument,
    SelectorShape,
    classify,
    strip_markup,
)

# ---------------------------------------------------------------------------
# Fixture HTML
# ---------------------------------------------------------------------------

_CARDS_HTML = """\
<html><body>
<div id="results" class="list">
  <div class="item card">
    <a class="title" href="/v/1" title="First &amp; best">First</a>
    <img src="/a.jpg" data-src="/a-lazy.jpg" alt="poster">
    <span class="meta">2020</span>
  </div>
  <div class="item">
    <a href="/v/2">Second <b>bold</b></a>
    <div class="item nested"><a href="/v/3">Third</a></div>
  </div>
  <br/>
  <a href="magnet:?xt=urn:btih:1">magnet</a>
  <a href="https://cdn.test/file.torrent">torrent</a>
</div>
<script>var x = "<a href='/not-a-link'>";</script>
</body></html>
"""


# ---------------------------------------------------------------------------
# classify
# ---------------------------------------------------------------------------


class TestClassify:
    @pytest.mark.parametrize(
        ("selector", "shape"),
        [
            ("a", SelectorShape.TAG),
            (".item", SelectorShape.CLASS),
            ("div.item", SelectorShape.TAG_CLASS),
            ("#results", SelectorShape.ID),
            ("[data-src]", SelectorShape.ATTRIBUTE),
            ('a[href^="magnet:"]', SelectorShape.ATTRIBUTE),
            (".item a", SelectorShape.DESCENDANT),
            (".item a, .title", SelectorShape.UNION),
            ("a:nth-child(2)", SelectorShape.UNSUPPORTED),
            ("", SelectorShape.UNSUPPORTED),
        ],
    )
    def test_shapes(self, selector: str, shape: SelectorShape) -> None:
        assert classify(selector).shape is shape

    def test_is_memoized(self) -> None:
        assert classify(".memo-me") is classify(".memo-me")


# ---------------------------------------------------------------------------
# MicroDocument queries
# ---------------------------------------------------------------------------


class TestQueries:
    def test_tag(self) -> None:
        doc = MicroDocument(_CARDS_HTML)
        hrefs = [a.href for a in doc.query_selector_all("a")]
        assert hrefs[:3] == ["/v/1", "/v/2", "/v/3"]

    def test_class_matches_whole_class_tokens(self) -> None:
        doc = MicroDocument(_CARDS_HTML)
        assert len(doc.query_selector_all(".item")) == 3
        assert doc.query_selector_all(".ite") == []

    def test_tag_class(self) -> None:
        doc = MicroDocument(_CARDS_HTML)
        assert [e.tag for e in doc.query_selector_all("a.title")] == ["a"]

    def test_id_returns_single_element(self) -> None:
        doc = MicroDocument(_CARDS_HTML)
        found = doc.query_selector_all("#results")
        assert len(found) == 1
        assert found[0].classes == frozenset({"list"})

    @pytest.mark.parametrize(
        ("selector", "count"),
        [
            ("[data-src]", 1),
            ('a[href^="magnet:"]', 1),
            ('a[href$=".torrent"]', 1),
            ('a[href*="/v/"]', 3),
            ('a[href="/v/2"]', 1),
        ],
    )
    def test_attribute_operators(self, selector: str, count: int) -> None:
        assert len(MicroDocument(_CARDS_HTML).query_selector_all(selector)) == count

    def test_descendant_is_deduplicated_for_nested_containers(self) -> None:
        doc = MicroDocument(_CARDS_HTML)
        hrefs = [a.href for a in doc.query_selector_all(".item a")]
        assert hrefs == ["/v/1", "/v/2", "/v/3"]

    def test_union_in_document_order(self) -> None:
        doc = MicroDocument(_CARDS_HTML)
        tags = [e.tag for e in doc.query_selector_all("span.meta, img")]
        assert tags == ["img", "span"]

    def test_unsupported_selector_matches_nothing(self) -> None:
        assert MicroDocument(_CARDS_HTML).query_selector_all("a:first-child") == []

    def test_query_selector_none_when_unmatched(self) -> None:
        assert MicroDocument(_CARDS_HTML).query_selector(".missing") is None


# ---------------------------------------------------------------------------
# Element content
# ---------------------------------------------------------------------------


class TestElement:
    def test_attributes_are_entity_decoded(self) -> None:
        anchor = MicroDocument(_CARDS_HTML).query_selector("a.title")
        assert anchor is not None
        assert anchor.title == "First & best"

    def test_text_strips_nested_tags(self) -> None:
        doc = MicroDocument(_CARDS_HTML)
        anchor = doc.query_selector('a[href="/v/2"]')
        assert anchor is not None
        assert anchor.text == "Second bold"

    def test_void_element_has_no_content(self) -> None:
        img = MicroDocument(_CARDS_HTML).query_selector("img")
        assert img is not None
        assert img.inner_html == ""
        assert img.get("data-src") == "/a-lazy.jpg"

    def test_nested_same_tag_is_balanced(self) -> None:
        doc = MicroDocument(_CARDS_HTML)
        outer = doc.query_selector_all(".item")[1]
        assert "Third" in outer.text
        assert "magnet" not in outer.text

    def test_scoped_query_stays_inside_element(self) -> None:
        first = MicroDocument(_CARDS_HTML).query_selector(".card")
        assert first is not None
        assert [a.href for a in first.query_selector_all("a")] == ["/v/1"]

    def test_unclosed_element_runs_to_end(self) -> None:
        doc = MicroDocument("<div class='x'><p>open paragraph")
        div = doc.query_selector(".x")
        assert div is not None
        assert div.text == "open paragraph"


# ---------------------------------------------------------------------------
# Memo and text helpers
# ---------------------------------------------------------------------------


class TestMemo:
    def test_results_are_memoized_per_selector(self) -> None:
        doc = MicroDocument(_CARDS_HTML)
        doc.query_selector_all("a")
        doc.query_selector_all("a")
        assert doc.memo_entries == 1

    def test_memo_is_bounded(self) -> None:
        doc = MicroDocument(_CARDS_HTML, memo_size=2)
        for selector in ("a", "img", "span", ".item"):
            doc.query_selector_all(selector)
        assert doc.memo_entries <= 2

    def test_memoized_result_is_a_fresh_list(self) -> None:
        doc = MicroDocument(_CARDS_HTML)
        doc.query_selector_all("a").clear()
        assert doc.query_selector_all("a")


class TestStripMarkup:
    def test_drops_scripts_and_comments(self) -> None:
        text = strip_markup("<p>a<!-- hidden --></p><script>b()</script><p>c&nbsp;d</p>")
        assert text == "a c d"

    def test_document_text(self) -> None:
        assert MicroDocument("<h1>Hello</h1>\n<p>world</p>").text == "Hello world"
