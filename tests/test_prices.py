"""Tests for price and quantity parsing."""

import pytest

from shopcheck.tools.prices import amounts_match, format_amount, parse_amount, parse_quantity


@pytest.mark.parametrize("raw, expected", [
    ("1200.00", 1200.0),
    ("$45.00", 45.0),
    ("  11.00 ", 11.0),
    ("Price: 1590.00 USD", 1590.0),
    ("-5.00", 5.0),
    ("", 0.0),
    ("free", 0.0),
    (".", 0.0),
    (None, 0.0),
])
def test_parse_amount(raw, expected):
    assert parse_amount(raw) == expected


def test_parse_amount_strips_thousands_comma():
    """The comma is dropped, so a thousands separator reads correctly."""
    assert parse_amount("$1,234.56") == 1234.56


def test_parse_amount_cannot_read_decimal_comma():
    """A comma used as decimal mark is lost: documented lossy behaviour."""
    assert parse_amount("1.234,56") == pytest.approx(1.23456)


def test_parse_amount_uses_leading_number_only():
    assert parse_amount("1.2.3") == 1.2


@pytest.mark.parametrize("raw", ["$1,234.56", "0.5", "45", "1200.00", "$0.07", "19.9"])
def test_parse_amount_stable_on_formatted_output(raw):
    value = parse_amount(raw)
    assert parse_amount(format_amount(value)) == value


def test_format_amount():
    assert format_amount(1234.5) == "$1234.50"


@pytest.mark.parametrize("raw, expected", [
    ("5", 5),
    (" 12 ", 12),
    ("3 pcs", 3),
    ("", 1),
    ("abc", 1),
    ("0", 1),
    (None, 1),
])
def test_parse_quantity(raw, expected):
    assert parse_quantity(raw) == expected


def test_amounts_match_is_strict_at_tolerance():
    assert amounts_match(10.009, 10.0)
    assert not amounts_match(10.01, 10.0)
    assert not amounts_match(1200.0, 1200.01)


def test_amounts_match_just_under_tolerance():
    assert amounts_match(10.0099996, 10.0)
    assert not amounts_match(45.01, 45.0)
