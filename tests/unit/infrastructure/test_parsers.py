"""Tests for infrastructure parsers."""

from __future__ import annotations

from gleaner.infrastructure.common.parsers import (
    find_size,
    parse_date_iso,
    parse_duration_minutes,
)


class TestParseDateIso:
    def test_iso_passthrough(self) -> None:
        assert parse_date_iso("2020-01-31") == "2020-01-31"

    def test_slashes_without_padding(self) -> None:
        assert parse_date_iso("2020/1/31") == "2020-01-31"

    def test_cjk_date(self) -> None:
        assert parse_date_iso("2020年1月31日") == "2020-01-31"

    def test_embedded_in_label(self) -> None:
        assert parse_date_iso("Release: 2020.01.31") == "2020-01-31"

    def test_impossible_date_is_dropped(self) -> None:
        assert parse_date_iso("2020-02-31") == ""

    def test_garbage_is_dropped(self) -> None:
        assert parse_date_iso("yesterday") == ""

    def test_empty(self) -> None:
        assert parse_date_iso("") == ""


class TestParseDurationMinutes:
    def test_cjk_minutes(self) -> None:
        assert parse_duration_minutes("120分鐘") == 120

    def test_english_minutes(self) -> None:
        assert parse_duration_minutes("95 min") == 95

    def test_hh_mm_ss(self) -> None:
        assert parse_duration_minutes("01:59:00") == 119

    def test_mm_ss(self) -> None:
        assert parse_duration_minutes("119:30") == 119

    def test_bare_number(self) -> None:
        assert parse_duration_minutes(" 120 ") == 120

    def test_unparsable(self) -> None:
        assert parse_duration_minutes("long") == 0


class TestFindSize:
    def test_finds_size_in_text(self) -> None:
        assert find_size("Size: 4.5 GiB, 3 files") == "4.5 GiB"

    def test_no_size(self) -> None:
        assert find_size("nothing here") == ""
