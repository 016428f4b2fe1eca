# orders/services/pricing.py

"""
KEY PRICING

Volume tiers (per key):
    >= 100  3.00
    >= 50   3.50
    >= 25   4.00
    >= 10   4.50
    else    KEY_BASE_PRICE
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings

from keybank.services.generation import MAX_BATCH
from orders.services.exceptions import OrderValidationError

TWOPLACES = Decimal("0.01")

KEY_PRICE_TIERS = (
    (100, Decimal("3.00")),
    (50, Decimal("3.50")),
    (25, Decimal("4.00")),
    (10, Decimal("4.50")),
)


@dataclass(frozen=True)
class KeyQuote:
    quantity: int
    unit_price: Decimal
    total: Decimal


def _money(x: Decimal) -> Decimal:
    return x.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def unit_price_for(quantity: int) -> Decimal:
    for threshold, price in KEY_PRICE_TIERS:
        if quantity >= threshold:
            return price
    return _money(Decimal(str(settings.MARKETPLACE["KEY_BASE_PRICE"])))


def key_price(quantity) -> KeyQuote:
    if isinstance(quantity, bool):
        raise OrderValidationError("quantity must be a whole number")
    try:
        qty = int(quantity)
    except (TypeError, ValueError) as exc:
        raise OrderValidationError("quantity must be a whole number") from exc
    if qty < 1 or qty > MAX_BATCH:
        raise OrderValidationError(f"quantity must be between 1 and {MAX_BATCH}")

    unit = unit_price_for(qty)
    return KeyQuote(quantity=qty, unit_price=unit, total=_money(unit * qty))
