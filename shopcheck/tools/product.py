"""Product pages: price, quantity, configurable options, add to cart."""

from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Mapping

from ..core.errors import CartError, ProductError
from ..core.logging import get_logger
from ..core.models import ProductSelection
from ..core.ui import UIPort, has_text
from .prices import parse_amount

logger = get_logger(__name__)

# Timeout constants (in milliseconds)
PAGE_LOAD_DELAY = 500  # Settle delay after navigation
OPTIONS_SETTLE_DELAY = 500  # Price re-render after option changes
ADD_TO_CART_DELAY = 1000  # Wait for the notification bar after adding
NOTIFICATION_TIMEOUT = 5000  # Wait for the notification bar to appear
ADD_BUTTON_TIMEOUT = 5000  # Wait for the add to cart button on the product page

PRODUCT_TITLE = ".product-name h1"
PRODUCT_PRICE = ".product-price"
QUANTITY_INPUT = ".add-to-cart input.qty-input"
ADD_TO_CART_BUTTON = 'input[id^="add-to-cart-button"]'
NOTIFICATION_BAR = "#bar-notification"
ADDED_MESSAGE = "the product has been added"


class OptionKind(str, Enum):
    SELECT = "select"
    RADIO = "radio"
    CHECKBOX = "checkbox"


# Attribute name -> (widget kind, locator for the widget). Radio and checkbox
# options are found by their label text, so they carry no locator.
PRODUCT_OPTIONS = {
    "processor": (OptionKind.SELECT, 'select[id*="product_attribute"][id*="1"]'),
    "ram": (OptionKind.SELECT, 'select[id*="product_attribute"][id*="2"]'),
    "hdd": (OptionKind.RADIO, None),
    "os": (OptionKind.RADIO, None),
    "software": (OptionKind.CHECKBOX, None),
}


async def _apply_select(port: UIPort, locator: str, value: Any) -> bool:
    if not await port.is_visible(locator):
        return False
    await port.select_option(locator, str(value))
    return True


async def _check_by_label(port: UIPort, text: str) -> bool:
    """Tick the input whose <label> contains text, if such a label is shown."""
    label = has_text("label", text)
    if not await port.is_visible(label):
        return False
    target = await port.get_attribute(label, "for")
    if not target:
        return False
    await port.check(f"#{target}")
    return True


async def _apply_radio(port: UIPort, locator: str, value: Any) -> bool:
    return await _check_by_label(port, str(value))


async def _apply_checkboxes(port: UIPort, locator: str, value: Any) -> bool:
    values = [value] if isinstance(value, str) else list(value or [])
    applied = False
    for text in values:
        applied = await _check_by_label(port, str(text)) or applied
    return applied


OPTION_APPLIERS: Dict[OptionKind, Callable[[UIPort, str, Any], Awaitable[bool]]] = {
    OptionKind.SELECT: _apply_select,
    OptionKind.RADIO: _apply_radio,
    OptionKind.CHECKBOX: _apply_checkboxes,
}


async def apply_options(port: UIPort, options: Mapping[str, Any]) -> Dict[str, bool]:
    """
    Configure product attributes that the current product exposes.

    Options the product does not offer (unknown names, hidden widgets,
    missing labels) are skipped without error.

    Returns:
        Mapping of option name to whether it was applied
    """
    applied = {}
    for name, value in options.items():
        if value in (None, "", []):
            continue

        kind, locator = PRODUCT_OPTIONS.get(name, (None, None))
        if kind is None:
            logger.debug("Unknown product option, skipping", option=name)
            applied[name] = False
            continue

        applied[name] = await OPTION_APPLIERS[kind](port, locator, value)
        if not applied[name]:
            logger.debug("Product option not offered, skipping", option=name, kind=kind.value)

    if applied:
        await port.pause(OPTIONS_SETTLE_DELAY)
    logger.info("Applied product options", applied=applied)
    return applied


async def open_product(port: UIPort, url: str) -> None:
    logger.info("Opening product page", url=url)
    await port.navigate(url)
    await port.pause(PAGE_LOAD_DELAY)


async def read_product_price(port: UIPort) -> float:
    return parse_amount(await port.read_text(PRODUCT_PRICE))


async def read_product_name(port: UIPort) -> str:
    return (await port.read_text(PRODUCT_TITLE)).strip()


async def set_quantity(port: UIPort, quantity: int) -> None:
    await port.set_value(QUANTITY_INPUT, str(quantity))


async def add_to_cart(port: UIPort, selection: ProductSelection, verify: bool = True) -> Dict[str, Any]:
    """
    Open a product, configure it, set the quantity and add it to the cart.

    Args:
        port: UI session
        selection: Product, quantity and options
        verify: Check the notification bar afterwards

    Returns:
        dict with status, product name and applied options

    Raises:
        ProductError: If the product page offers no add to cart button
        CartError: If verify is set and the storefront does not confirm the add
    """
    await open_product(port, selection.identifier)

    if not await port.wait_visible(ADD_TO_CART_BUTTON, ADD_BUTTON_TIMEOUT):
        logger.error("Add to cart button not found", url=selection.identifier)
        raise ProductError(f"Product page {selection.identifier} has no add to cart button")

    applied = await apply_options(port, selection.options) if selection.options else {}
    await set_quantity(port, selection.quantity)

    logger.info("Adding product to cart", product=selection.name, quantity=selection.quantity)
    await port.click(ADD_TO_CART_BUTTON)
    await port.pause(ADD_TO_CART_DELAY)

    if verify:
        await verify_added_to_cart(port)

    return {
        "status": "success",
        "product": selection.name,
        "quantity": selection.quantity,
        "options_applied": applied,
    }


async def verify_added_to_cart(port: UIPort) -> str:
    """
    Check the notification bar for the "added to cart" message.

    Returns:
        The notification text

    Raises:
        CartError: If no confirmation is shown
    """
    if not await port.wait_visible(NOTIFICATION_BAR, NOTIFICATION_TIMEOUT):
        raise CartError("No notification shown after adding product to cart")

    message = (await port.read_text(NOTIFICATION_BAR)).strip()
    if ADDED_MESSAGE not in message.lower():
        logger.error("Add to cart not confirmed", notification=message)
        raise CartError(f"Product was not added to cart: {message}")

    return message
