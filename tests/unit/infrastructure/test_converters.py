"""Tests for infrastructure converters."""

from __future__ import annotations

from gleaner.infrastructure.common.converters import to_float, to_int


class TestToInt:
    def test_none_returns_none(self) -> None:
        assert to_int(None) is None

    def test_int_passthrough(self) -> None:
        assert to_int(42) == 42

    def test_float_truncates(self) -> None:
        assert to_int(12.7) == 12

    def test_string_with_commas(self) -> None:
        assert to_int("1,234") == 1234

    def test_labelled_string(self) -> None:
        assert to_int("Seeders: 42") == 42

    def test_empty_string_returns_none(self) -> None:
        assert to_int("") is None

    def test_bool_returns_none(self) -> None:
        assert to_int(True) is None


class TestToFloat:
    def test_fraction_takes_first_number(self) -> None:
        assert to_float("4.5 / 5") == 4.5

    def test_decimal_comma(self) -> None:
        assert to_float("8,2") == 8.2

    def test_negative(self) -> None:
        assert to_float("-3") == -3.0

    def test_unparsable_returns_none(self) -> None:
        assert to_float("n/a") is None

    def test_number_passthrough(self) -> None:
        assert to_float(7) == 7.0
