from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

MONEY_PLACES = Decimal("0.01")
QUANTITY_PLACES = Decimal("0.001")


def quantize_money(value: Decimal) -> Decimal:
    """Round to cents, half-up."""
    return Decimal(value).quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)


def quantize_quantity(value: Decimal) -> Decimal:
    return Decimal(value).quantize(QUANTITY_PLACES, rounding=ROUND_HALF_UP)


def format_number(value: Decimal) -> str:
    """
    Plain rendering used inside generated descriptions.

    No trailing zeros and never exponent notation:
    Decimal("500.000") -> "500", Decimal("2.50") -> "2.5".
    """
    d = Decimal(value)
    if d == d.to_integral_value():
        return str(int(d))
    return format(d.normalize(), "f")


def format_grouped(value: Decimal) -> str:
    """Thousands-separated rendering for report rows (500000 -> "500,000")."""
    d = Decimal(value)
    if d == d.to_integral_value():
        return f"{int(d):,}"
    return f"{quantize_money(d):,.2f}"


def format_money(value: Decimal, currency: Optional[str] = None) -> str:
    text = format_grouped(value)
    return f"{text} {currency}" if currency else text


def to_json_number(value: Optional[Decimal]):
    """JSON-friendly number (int when integral, float otherwise)."""
    if value is None:
        return None
    d = Decimal(value)
    if d == d.to_integral_value():
        return int(d)
    return float(d)
