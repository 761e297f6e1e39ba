"""
Check the arithmetic of cart and order summaries.

Checks never raise on a mismatch: they return a verdict plus diagnostics so
the caller decides whether a discrepancy fails the run.
"""

from typing import Mapping, Tuple

from pydantic import BaseModel, ConfigDict

from ..core.logging import get_logger
from ..core.models import CartSnapshot
from .prices import amounts_match

logger = get_logger(__name__)

PASS_MARK = "✓"
FAIL_MARK = "✗"


class LineCheck(BaseModel):
    model_config = ConfigDict(frozen=True)

    valid: bool
    details: Tuple[str, ...] = ()


class TotalCheck(BaseModel):
    model_config = ConfigDict(frozen=True)

    valid: bool
    details: str = ""


class PriceCheck(BaseModel):
    model_config = ConfigDict(frozen=True)

    valid: bool
    details: Tuple[str, ...] = ()


def _mark(ok: bool) -> str:
    return PASS_MARK if ok else FAIL_MARK


def verify_line_invariants(snapshot: CartSnapshot) -> LineCheck:
    """
    Check unit price × quantity against every line subtotal.

    One diagnostic per line, pass or fail, for the audit trail. An empty
    cart is valid.
    """
    details = []
    valid = True

    for item in snapshot.items:
        expected = item.unit_price * item.quantity
        line_ok = amounts_match(item.line_subtotal, expected)
        details.append(
            f"{item.name}: {item.unit_price:.2f} × {item.quantity} = {expected:.2f} "
            f"(Actual: {item.line_subtotal:.2f}) - {_mark(line_ok)}"
        )
        valid = valid and line_ok

    if not valid:
        logger.warning("Line subtotal mismatch", details=details)
    return LineCheck(valid=valid, details=tuple(details))


def verify_total_invariant(snapshot: CartSnapshot) -> TotalCheck:
    """
    Check total against displayed subtotal + shipping + tax.

    The storefront's own subtotal is authoritative here; the naive line sum
    is reported for information only since server-side rounding and discounts
    may differ from it.
    """
    expected_total = snapshot.subtotal + snapshot.shipping + snapshot.tax
    valid = amounts_match(snapshot.total, expected_total)

    details = "\n".join([
        f"Items Subtotal: {snapshot.items_subtotal:.2f}",
        f"Displayed Subtotal: {snapshot.subtotal:.2f}",
        f"Shipping: {snapshot.shipping:.2f}",
        f"Tax: {snapshot.tax:.2f}",
        f"Expected Total: {expected_total:.2f}",
        f"Actual Total: {snapshot.total:.2f}",
        f"Valid: {_mark(valid)}",
    ])

    if not valid:
        logger.warning(
            "Order total mismatch",
            expected_total=round(expected_total, 2),
            actual_total=snapshot.total,
        )
    return TotalCheck(valid=valid, details=details)


def verify_price_consistency(expected_prices: Mapping[str, float], snapshot: CartSnapshot) -> PriceCheck:
    """
    Compare product page prices with the unit prices in the cart.

    Each product is matched to the first cart line containing the first word
    of its name. Products without a matching line are reported but do not
    fail the check.
    """
    details = []
    valid = True

    for name, page_price in expected_prices.items():
        words = name.split()
        item = snapshot.find(words[0]) if words else None
        if item is None:
            details.append(f"{name}: not found in cart - skipped")
            continue

        price_ok = amounts_match(item.unit_price, page_price)
        details.append(
            f"{name}: page {page_price:.2f} vs cart {item.unit_price:.2f} - {_mark(price_ok)}"
        )
        valid = valid and price_ok

    return PriceCheck(valid=valid, details=tuple(details))


def verify_quantity_update(
    before: CartSnapshot,
    after: CartSnapshot,
    index: int,
    new_quantity: int,
) -> LineCheck:
    """
    Check that a quantity change re-priced the line.

    The line's new subtotal must equal its earlier unit price × new_quantity.
    """
    if index >= before.item_count or index >= after.item_count:
        return LineCheck(
            valid=False,
            details=(f"Row {index} missing (before: {before.item_count} rows, after: {after.item_count} rows)",),
        )

    unit_price = before.items[index].unit_price
    updated = after.items[index]
    expected = unit_price * new_quantity
    valid = amounts_match(updated.line_subtotal, expected) and updated.quantity == new_quantity

    return LineCheck(
        valid=valid,
        details=(
            f"{updated.name}: {unit_price:.2f} × {new_quantity} = {expected:.2f} "
            f"(Actual: {updated.line_subtotal:.2f}, quantity {updated.quantity}) - {_mark(valid)}",
        ),
    )
