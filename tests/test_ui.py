"""Tests for selector helpers."""

from shopcheck.core.ui import has_text, nth, within


def test_nth_and_within_compose():
    row = nth(".cart-item-row", 1)

    assert within(row, ".qty-input") == ".cart-item-row >> nth=1 >> .qty-input"


def test_has_text_plain():
    assert has_text("label", "Next Day Air") == 'label:has-text("Next Day Air")'


def test_has_text_escapes_quotes():
    assert has_text("label", 'HDD "Turbo" 320 GB') == r'label:has-text("HDD \"Turbo\" 320 GB")'
    assert has_text("label", "C:\\Windows") == r'label:has-text("C:\\Windows")'
