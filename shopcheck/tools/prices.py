"""
Parse rendered price and quantity text.

Parsing is deliberately lossy: every character that is not a digit or a
decimal point is dropped before the number is read. The storefront renders
amounts with a single decimal point and at most a comma as thousands
separator, so "$1,234.56" reads as 1234.56. A comma used as the decimal mark
("1.234,56") cannot be recovered and reads as 1.23456.
"""

import re

# Amounts closer than this are considered equal
TOLERANCE = 0.01
# Float noise allowance; 10.01 - 10.00 comes out just under 0.01
FLOAT_EPSILON = 1e-9

_NON_NUMERIC = re.compile(r"[^0-9.]")
_LEADING_DECIMAL = re.compile(r"\d*(?:\.\d*)?")
_LEADING_INT = re.compile(r"\s*\+?(\d+)")


def parse_amount(raw: str) -> float:
    """
    Convert rendered currency text to a non-negative amount.

    Only the longest leading decimal number of the stripped text is used, so
    "1.2.3" reads as 1.2. Empty or unparsable text reads as 0.0.
    """
    cleaned = _NON_NUMERIC.sub("", raw or "")
    number = _LEADING_DECIMAL.match(cleaned).group()
    try:
        return float(number)
    except ValueError:
        return 0.0


def format_amount(value: float) -> str:
    """Render an amount the way the storefront does ("$1234.56")."""
    return f"${value:.2f}"


def parse_quantity(raw: str) -> int:
    """Leading integer of a quantity field; 1 when missing or not positive."""
    match = _LEADING_INT.match(raw or "")
    if not match:
        return 1
    quantity = int(match.group(1))
    return quantity if quantity > 0 else 1


def amounts_match(actual: float, expected: float) -> bool:
    """Strict tolerance comparison: a difference of exactly 0.01 fails."""
    return abs(actual - expected) < TOLERANCE - FLOAT_EPSILON
