import pytest

from flood_control.utils import (
    clamp,
    mean,
    median,
    normalize_text,
    parse_amount,
    parse_iso_date,
    parse_year,
    round_half_up,
    truncate_label,
)


class TestMedian:

    def test_odd(self):
        assert median([10, 20, 30]) == 20

    def test_even(self):
        assert median([10, 20, 30, 40]) == 25

    def test_unsorted_input(self):
        assert median([40, 10, 30, 20]) == 25

    def test_empty_is_zero(self):
        assert median([]) == 0.0

    def test_single(self):
        assert median([-7.5]) == -7.5


class TestMean:

    def test_values(self):
        assert mean([1, 2, 3, 4]) == 2.5

    def test_empty_is_undefined(self):
        assert mean([]) is None


def test_clamp():
    assert clamp(150.0, 0.0, 100.0) == 100.0
    assert clamp(-3.0, 0.0, 100.0) == 0.0
    assert clamp(42.0, 0.0, 100.0) == 42.0


class TestFieldParsing:

    def test_amount(self):
        assert parse_amount(" 12,500.50 ") == 12500.5
        assert parse_amount("") is None
        assert parse_amount("TBA") is None

    def test_iso_date_strict(self):
        assert parse_iso_date("2023-12-31").isoformat() == "2023-12-31"
        assert parse_iso_date("2023-1-5") is None
        assert parse_iso_date("12/31/2023") is None
        assert parse_iso_date("2023-13-01") is None

    def test_year(self):
        assert parse_year(" 2021 ") == 2021
        assert parse_year("2021.0") is None
        assert parse_year(None) is None


def test_normalize_text_collapses_whitespace():
    assert normalize_text("  Region  IV-A\n") == "Region IV-A"
    assert normalize_text(None) == ""


@pytest.mark.parametrize("value,expected", [(2.125, 2.13), (2.124, 2.12), (None, None), ("x", None)])
def test_round_half_up(value, expected):
    assert round_half_up(value, 2) == expected


def test_truncate_label():
    assert truncate_label("Short", 10) == "Short"
    assert truncate_label("A very long contractor name", 10) == "A very l.."
