# smartbazaar/pricing.py
"""Order pricing and settlement split.

The buyer pays `subtotal + delivery_charge`. The platform commission is taken
out of the farmer's side only and is rounded half-up to whole rupees, since
PKR amounts here carry no paisa.
"""
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from .exceptions import InvalidInput

WHOLE_UNIT = Decimal("1")


@dataclass(frozen=True)
class Pricing:
    subtotal: Decimal
    commission: Decimal
    farmer_earning: Decimal
    total_price: Decimal
    delivery_charge: Decimal


def _to_decimal(value, field: str) -> Decimal:
    if isinstance(value, bool):
        raise InvalidInput(f"{field} must be a number")
    try:
        parsed = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidInput(f"{field} must be a number")
    if not parsed.is_finite():
        raise InvalidInput(f"{field} must be a finite number")
    return parsed


def compute_pricing(price_per_unit, quantity, delivery_charge, commission_rate) -> Pricing:
    price = _to_decimal(price_per_unit, "price_per_unit")
    qty = _to_decimal(quantity, "quantity")
    delivery = _to_decimal(delivery_charge, "delivery_charge")
    rate = _to_decimal(commission_rate, "commission_rate")

    if price <= 0:
        raise InvalidInput("price_per_unit must be greater than zero")
    if qty <= 0:
        raise InvalidInput("quantity must be greater than zero")
    if delivery < 0:
        raise InvalidInput("delivery_charge cannot be negative")
    if rate < 0 or rate > 1:
        raise InvalidInput("commission_rate must be between 0 and 1")

    subtotal = price * qty
    commission = (subtotal * rate).quantize(WHOLE_UNIT, rounding=ROUND_HALF_UP)
    return Pricing(
        subtotal=subtotal,
        commission=commission,
        farmer_earning=subtotal - commission,
        total_price=subtotal + delivery,
        delivery_charge=delivery,
    )
