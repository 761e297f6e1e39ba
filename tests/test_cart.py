"""Tests for cart snapshots and cart actions on a fake storefront page."""

import pytest

from shopcheck.core.errors import CartError, UIAccessError
from shopcheck.core.ui import nth, within
from shopcheck.tools.cart import (
    APPLY_DISCOUNT_BUTTON,
    CART_LOCATORS,
    CHECKOUT_BUTTON,
    CONFIRM_LOCATORS,
    DISCOUNT_CODE_INPUT,
    REMOVE_CHECKBOXES,
    TERMS_CHECKBOX,
    UPDATE_CART_BUTTON,
    apply_discount_code,
    open_cart,
    proceed_to_checkout,
    read_cart,
    read_confirm_snapshot,
    remove_item,
    update_item_quantity,
)
from shopcheck.tools.reconcile import verify_quantity_update

from fakes import render_cart


async def test_read_cart_rows_in_rendered_order(port):
    render_cart(
        port,
        rows=[
            ("Build your own computer", "1200.00", "1", "1200.00"),
            ("Blue and green Sneaker", "11.00", "2", "22.00"),
        ],
        subtotal="1222.00",
        total="1222.00",
    )

    snapshot = await read_cart(port)

    assert [item.name for item in snapshot.items] == ["Build your own computer", "Blue and green Sneaker"]
    assert snapshot.items[1].unit_price == 11.0
    assert snapshot.items[1].quantity == 2
    assert snapshot.items[1].line_subtotal == 22.0
    assert snapshot.subtotal == 1222.0
    assert snapshot.total == 1222.0


async def test_hidden_shipping_and_tax_read_as_zero(port):
    render_cart(port, rows=[("Laptop", "1590.00", "1", "1590.00")], subtotal="1590.00", total="1590.00")

    snapshot = await read_cart(port)

    assert snapshot.shipping == 0.0
    assert snapshot.tax == 0.0


async def test_visible_shipping_and_tax_are_read(port):
    render_cart(
        port,
        rows=[("Laptop", "1590.00", "1", "1590.00")],
        subtotal="1590.00",
        shipping="10.00",
        tax="0.00",
        total="1600.00",
    )

    snapshot = await read_cart(port)

    assert snapshot.shipping == 10.0
    assert snapshot.total == 1600.0


async def test_unparsable_quantity_defaults_to_one(port):
    render_cart(port, rows=[("Belt", "45.00", "", "45.00")], subtotal="45.00", total="45.00")

    snapshot = await read_cart(port)

    assert snapshot.items[0].quantity == 1


async def test_missing_cart_region_is_an_empty_snapshot(port):
    snapshot = await read_cart(port)

    assert snapshot.items == ()
    assert (snapshot.subtotal, snapshot.shipping, snapshot.tax, snapshot.total) == (0, 0, 0, 0)


async def test_snapshot_is_immutable(port):
    render_cart(port, rows=[("Belt", "45.00", "1", "45.00")], subtotal="45.00", total="45.00")
    snapshot = await read_cart(port)

    with pytest.raises(Exception):
        snapshot.total = 0.0


async def test_missing_subtotal_surfaces(port):
    render_cart(port, rows=[], subtotal="0.00", total="0.00")
    del port.texts[CART_LOCATORS.subtotal]

    with pytest.raises(UIAccessError):
        await read_cart(port)


async def test_read_confirm_snapshot_reads_quantity_text(port):
    render_cart(
        port,
        rows=[("Laptop", "1590.00", "2", "3180.00")],
        subtotal="3180.00",
        shipping="0.00",
        tax="0.00",
        total="3180.00",
        locators=CONFIRM_LOCATORS,
    )

    snapshot = await read_confirm_snapshot(port)

    assert snapshot.items[0].quantity == 2
    assert snapshot.total == 3180.0


async def test_update_quantity_then_reprices(port):
    render_cart(port, rows=[("Casual Golf Belt", "45.00", "1", "45.00")], subtotal="45.00", total="45.00")
    before = await read_cart(port)

    def rerender(page):
        render_cart(page, rows=[("Casual Golf Belt", "45.00", "5", "225.00")], subtotal="225.00", total="225.00")

    port.on_click[UPDATE_CART_BUTTON] = rerender

    await update_item_quantity(port, 0, 5)
    after = await read_cart(port)

    qty_input = within(nth(CART_LOCATORS.rows, 0), CART_LOCATORS.quantity)
    assert ("fill", qty_input, "5") in port.actions
    assert after.items[0].line_subtotal == 225.0
    assert verify_quantity_update(before, after, 0, 5).valid


async def test_update_quantity_rejects_missing_row(port):
    render_cart(port, rows=[("Belt", "45.00", "1", "45.00")], subtotal="45.00", total="45.00")

    with pytest.raises(CartError):
        await update_item_quantity(port, 3, 2)


async def test_update_quantity_rejects_non_positive(port):
    with pytest.raises(CartError):
        await update_item_quantity(port, 0, 0)


async def test_remove_item(port):
    render_cart(port, rows=[("Belt", "45.00", "1", "45.00")], subtotal="45.00", total="45.00")

    await remove_item(port, 0)

    assert port.index_of("check", nth(REMOVE_CHECKBOXES, 0)) < port.index_of("click", UPDATE_CART_BUTTON)


async def test_proceed_to_checkout_accepts_terms_first(port):
    port.show(CHECKOUT_BUTTON)

    await proceed_to_checkout(port)

    assert port.index_of("check", TERMS_CHECKBOX) < port.index_of("click", CHECKOUT_BUTTON)


async def test_proceed_to_checkout_with_empty_cart(port):
    with pytest.raises(CartError):
        await proceed_to_checkout(port)


async def test_open_cart_navigates(port):
    await open_cart(port)

    assert port.did("navigate", "/cart")


async def test_apply_discount_code(port):
    await apply_discount_code(port, "SPRING10")

    assert ("fill", DISCOUNT_CODE_INPUT, "SPRING10") in port.actions
    assert port.index_of("fill", DISCOUNT_CODE_INPUT) < port.index_of("click", APPLY_DISCOUNT_BUTTON)
