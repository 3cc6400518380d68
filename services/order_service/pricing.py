"""
Shipping, tax and total for an order subtotal.

The storefront computes the same figures on its side before checkout, so the
constants and the rounding rule here must not drift from it.
"""
import math
from dataclasses import dataclass

BASE_SHIPPING = 50
FREE_SHIPPING_THRESHOLD = 250
REMOTE_REGION_SURCHARGE = 150
REMOTE_REGIONS = frozenset({"Jammu and Kashmir", "Arunachal Pradesh", "Ladakh"})
TAX_RATE = 0.18  # GST
AMOUNT_TOLERANCE = 0.01
# Absorbs float error only: 200.01 - 200.0 evaluates to 0.010000000000005
_FLOAT_SLACK = 1e-9


@dataclass(frozen=True)
class Pricing:
    subtotal: float
    shipping_cost: float
    tax_amount: float
    total: float


def round_half_up(value: float) -> int:
    # Matches the storefront's Math.round: .5 goes up, even for negatives
    return math.floor(value + 0.5)


def calculate_shipping(subtotal: float, region: str) -> float:
    shipping = 0 if subtotal >= FREE_SHIPPING_THRESHOLD else BASE_SHIPPING
    surcharge = REMOTE_REGION_SURCHARGE if region in REMOTE_REGIONS else 0
    return shipping + surcharge


def calculate_tax(subtotal: float) -> int:
    return round_half_up(subtotal * TAX_RATE)


def calculate_pricing(subtotal: float, region: str) -> Pricing:
    shipping_cost = calculate_shipping(subtotal, region)
    tax_amount = calculate_tax(subtotal)
    return Pricing(
        subtotal=subtotal,
        shipping_cost=shipping_cost,
        tax_amount=tax_amount,
        total=subtotal + shipping_cost + tax_amount,
    )


def amounts_match(expected: float, received: float) -> bool:
    return abs(expected - received) <= AMOUNT_TOLERANCE + _FLOAT_SLACK
