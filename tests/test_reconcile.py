"""Tests for cart and order total reconciliation."""

from shopcheck.core.models import CartSnapshot, LineItem
from shopcheck.tools.reconcile import (
    verify_line_invariants,
    verify_price_consistency,
    verify_quantity_update,
    verify_total_invariant,
)


def make_snapshot(items=(), subtotal=None, shipping=0.0, tax=0.0, total=None):
    items = tuple(items)
    if subtotal is None:
        subtotal = sum(i.line_subtotal for i in items)
    if total is None:
        total = subtotal + shipping + tax
    return CartSnapshot(items=items, subtotal=subtotal, shipping=shipping, tax=tax, total=total)


def line(name, unit_price, quantity, line_subtotal=None):
    if line_subtotal is None:
        line_subtotal = unit_price * quantity
    return LineItem(name=name, unit_price=unit_price, quantity=quantity, line_subtotal=line_subtotal)


def test_single_computer_cart_totals_reconcile():
    snapshot = make_snapshot([line("Build your own computer", 1200.00, 1)])

    assert snapshot.total == 1200.00
    result = verify_total_invariant(snapshot)
    assert result.valid
    assert "Expected Total: 1200.00" in result.details
    assert "Valid: ✓" in result.details


def test_line_invariants_report_every_line():
    snapshot = make_snapshot([
        line("Laptop", 1590.00, 1),
        line("Sneaker", 11.00, 2, line_subtotal=20.00),
        line("Belt", 45.00, 5),
    ])

    result = verify_line_invariants(snapshot)

    assert not result.valid
    assert len(result.details) == 3
    assert result.details[0] == "Laptop: 1590.00 × 1 = 1590.00 (Actual: 1590.00) - ✓"
    assert result.details[1] == "Sneaker: 11.00 × 2 = 22.00 (Actual: 20.00) - ✗"
    assert result.details[2].endswith("✓")


def test_line_invariants_valid_cart():
    snapshot = make_snapshot([line("Belt", 45.00, 5, line_subtotal=225.00)])

    assert verify_line_invariants(snapshot).valid


def test_empty_cart_is_valid():
    result = verify_line_invariants(CartSnapshot.empty())

    assert result.valid
    assert result.details == ()


def test_line_difference_of_one_cent_fails():
    snapshot = make_snapshot([line("Belt", 45.00, 1, line_subtotal=45.01)])

    assert not verify_line_invariants(snapshot).valid


def test_total_difference_of_one_cent_fails():
    snapshot = make_snapshot([line("Belt", 10.00, 1)], total=10.01)

    assert not verify_total_invariant(snapshot).valid


def test_total_within_tolerance_passes():
    snapshot = make_snapshot([line("Belt", 10.00, 1)], total=10.005)

    assert verify_total_invariant(snapshot).valid


def test_total_includes_shipping_and_tax():
    snapshot = make_snapshot([line("Laptop", 1590.00, 1)], shipping=10.00, tax=80.00, total=1680.00)

    assert verify_total_invariant(snapshot).valid
    assert not verify_total_invariant(snapshot.model_copy(update={"total": 1590.00})).valid


def test_total_uses_displayed_subtotal_not_line_sum():
    """A server-side discount shows up in the subtotal, not the line rows."""
    snapshot = make_snapshot([line("Laptop", 1590.00, 1)], subtotal=1500.00, total=1500.00)

    result = verify_total_invariant(snapshot)

    assert result.valid
    assert "Items Subtotal: 1590.00" in result.details
    assert "Displayed Subtotal: 1500.00" in result.details


def test_price_consistency_matches_by_first_word():
    snapshot = make_snapshot([line("14.1-inch Laptop", 1590.00, 1), line("Blue and green Sneaker", 11.00, 1)])

    result = verify_price_consistency({"14.1-inch Laptop": 1590.00, "Blue and green Sneaker": 12.00}, snapshot)

    assert not result.valid
    assert result.details[0].endswith("✓")
    assert result.details[1].endswith("✗")


def test_price_consistency_skips_products_not_in_cart():
    snapshot = make_snapshot([line("Laptop", 1590.00, 1)])

    result = verify_price_consistency({"Sneaker": 11.00}, snapshot)

    assert result.valid
    assert "not found in cart" in result.details[0]


def test_quantity_update_reprices_line():
    before = make_snapshot([line("Casual Golf Belt", 45.00, 1)])
    after = make_snapshot([line("Casual Golf Belt", 45.00, 5, line_subtotal=225.00)])

    result = verify_quantity_update(before, after, 0, 5)

    assert result.valid
    assert "45.00 × 5 = 225.00" in result.details[0]


def test_quantity_update_detects_stale_subtotal():
    before = make_snapshot([line("Casual Golf Belt", 45.00, 1)])
    after = make_snapshot([line("Casual Golf Belt", 45.00, 5, line_subtotal=45.00)])

    assert not verify_quantity_update(before, after, 0, 5).valid


def test_quantity_update_missing_row():
    before = make_snapshot([line("Belt", 45.00, 1)])

    result = verify_quantity_update(before, CartSnapshot.empty(), 0, 5)

    assert not result.valid
    assert "missing" in result.details[0]
