"""Read and change the shopping cart."""

from dataclasses import dataclass

from ..core.errors import CartError
from ..core.logging import get_logger
from ..core.models import CartSnapshot, LineItem
from ..core.ui import UIPort, nth, within
from .prices import parse_amount, parse_quantity

logger = get_logger(__name__)

CART_PATH = "/cart"

# Timeout constants (in milliseconds)
PAGE_LOAD_DELAY = 500  # Settle delay after cart-changing actions

UPDATE_CART_BUTTON = 'input[name="updatecart"]'
REMOVE_CHECKBOXES = 'input[name="removefromcart"]'
TERMS_CHECKBOX = "#termsofservice"
CHECKOUT_BUTTON = "#checkout"
DISCOUNT_CODE_INPUT = "#discountcouponcode"
APPLY_DISCOUNT_BUTTON = 'input[name="applydiscountcouponcode"]'


@dataclass(frozen=True)
class SnapshotLocators:
    """Where a cart-like summary renders its rows and totals."""

    region: str
    rows: str
    name: str
    unit_price: str
    quantity: str
    line_subtotal: str
    subtotal: str
    shipping: str
    tax: str
    total: str
    quantity_is_input: bool = True


CART_LOCATORS = SnapshotLocators(
    region=".cart",
    rows=".cart-item-row",
    name=".product-name",
    unit_price=".product-unit-price",
    quantity=".qty-input",
    line_subtotal=".product-subtotal",
    subtotal=".order-subtotal .cart-total-right .product-price, .order-subtotal .product-price",
    shipping=".shipping-cost .cart-total-right .product-price, .shipping-cost .product-price",
    tax=".tax-value .cart-total-right .product-price, .tax-value .product-price",
    total=".order-total .cart-total-right .product-price, .order-total .product-price",
)

# Order summary shown in the checkout's confirm step
CONFIRM_LOCATORS = SnapshotLocators(
    region="#opc-confirm_order .cart-total",
    rows="#opc-confirm_order .cart-item-row",
    name=".product-name",
    unit_price=".product-unit-price",
    quantity=".product-quantity",
    line_subtotal=".product-subtotal",
    subtotal=".cart-total .order-subtotal .product-price",
    shipping=".cart-total .shipping-cost .product-price",
    tax=".cart-total .tax-value .product-price",
    total=".cart-total .order-total .product-price",
    quantity_is_input=False,
)


async def read_snapshot(port: UIPort, locators: SnapshotLocators) -> CartSnapshot:
    """
    Read rows and totals into a fresh CartSnapshot.

    A missing summary region means an empty cart, not an error. Shipping and
    tax that are not rendered read as 0.

    Args:
        port: UI session
        locators: Where the summary lives

    Returns:
        CartSnapshot of what is rendered right now
    """
    if await port.count(locators.region) == 0:
        logger.info("Cart region not present, treating cart as empty", region=locators.region)
        return CartSnapshot.empty()

    items = []
    row_count = await port.count(locators.rows)
    for index in range(row_count):
        row = nth(locators.rows, index)

        name = await port.read_text(within(row, locators.name))
        unit_price = await port.read_text(within(row, locators.unit_price))
        if locators.quantity_is_input:
            quantity = await port.read_value(within(row, locators.quantity))
        else:
            quantity = await port.read_text(within(row, locators.quantity))
        line_subtotal = await port.read_text(within(row, locators.line_subtotal))

        items.append(LineItem(
            name=name.strip(),
            unit_price=parse_amount(unit_price),
            quantity=parse_quantity(quantity),
            line_subtotal=parse_amount(line_subtotal),
        ))

    snapshot = CartSnapshot(
        items=tuple(items),
        subtotal=parse_amount(await port.read_text(locators.subtotal)),
        shipping=await _read_optional_amount(port, locators.shipping),
        tax=await _read_optional_amount(port, locators.tax),
        total=parse_amount(await port.read_text(locators.total)),
    )

    logger.debug(
        "Read cart snapshot",
        items=snapshot.item_count,
        subtotal=snapshot.subtotal,
        shipping=snapshot.shipping,
        tax=snapshot.tax,
        total=snapshot.total,
    )
    return snapshot


async def _read_optional_amount(port: UIPort, locator: str) -> float:
    """Amount of a summary field that may not be rendered yet (0 when hidden)."""
    if await port.is_visible(locator):
        return parse_amount(await port.read_text(locator))
    return 0.0


async def read_cart(port: UIPort) -> CartSnapshot:
    """Snapshot of the shopping cart page."""
    return await read_snapshot(port, CART_LOCATORS)


async def read_confirm_snapshot(port: UIPort) -> CartSnapshot:
    """Snapshot of the order summary in the checkout's confirm step."""
    return await read_snapshot(port, CONFIRM_LOCATORS)


async def open_cart(port: UIPort) -> None:
    """Navigate to the shopping cart page."""
    logger.info("Opening cart")
    await port.navigate(CART_PATH)
    await port.pause(PAGE_LOAD_DELAY)


async def cart_item_count(port: UIPort) -> int:
    return await port.count(CART_LOCATORS.rows)


async def _require_row(port: UIPort, index: int) -> str:
    count = await cart_item_count(port)
    if not 0 <= index < count:
        raise CartError(f"Cart has {count} rows, no row at index {index}")
    return nth(CART_LOCATORS.rows, index)


async def update_item_quantity(port: UIPort, index: int, quantity: int) -> None:
    """
    Change one row's quantity and submit the cart form.

    Raises:
        CartError: If the row does not exist or quantity is not positive
    """
    if quantity < 1:
        raise CartError(f"Quantity must be positive, got {quantity}")

    row = await _require_row(port, index)
    logger.info("Updating cart quantity", index=index, quantity=quantity)

    await port.set_value(within(row, CART_LOCATORS.quantity), str(quantity))
    await port.click(UPDATE_CART_BUTTON)
    await port.pause(PAGE_LOAD_DELAY)


async def remove_item(port: UIPort, index: int) -> None:
    """Tick a row's remove box and submit the cart form."""
    await _require_row(port, index)
    logger.info("Removing cart row", index=index)

    await port.check(nth(REMOVE_CHECKBOXES, index))
    await port.click(UPDATE_CART_BUTTON)
    await port.pause(PAGE_LOAD_DELAY)


async def apply_discount_code(port: UIPort, code: str) -> None:
    logger.info("Applying discount code")
    await port.set_value(DISCOUNT_CODE_INPUT, code)
    await port.click(APPLY_DISCOUNT_BUTTON)
    await port.pause(PAGE_LOAD_DELAY)


async def proceed_to_checkout(port: UIPort) -> None:
    """
    Accept the terms of service and start checkout.

    Raises:
        CartError: If the cart is empty (no checkout button)
    """
    if not await port.is_visible(CHECKOUT_BUTTON):
        raise CartError("Checkout button not visible - is the cart empty?")

    logger.info("Proceeding to checkout")
    await port.check(TERMS_CHECKBOX)
    await port.click(CHECKOUT_BUTTON)
    await port.pause(PAGE_LOAD_DELAY)
