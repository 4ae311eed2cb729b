"""
Pricing Calculator

Stateless order pricing. Amounts are Decimals rounded half-up to cents.
Taxes use a configurable flat rate (0 until a tax engine exists).
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Sequence

from .models import EnrichedItem, PricingBreakdown

CENTS = Decimal("0.01")


def round_money(amount: Decimal) -> Decimal:
    return Decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)


def calculate_item_total(quantity: int, unit_price: Decimal) -> Decimal:
    """unit_price * quantity, rounded to cents"""
    if quantity < 0 or unit_price < 0:
        raise ValueError("Quantity and unit price must be non-negative")
    return round_money(Decimal(unit_price) * quantity)


class PricingCalculator:
    """Default PricingCalculatorProtocol implementation"""

    def __init__(self, tax_rate: Optional[Decimal] = None):
        self.tax_rate = Decimal(tax_rate) if tax_rate is not None else Decimal("0")

    def calculate(self, items: Sequence[EnrichedItem]) -> PricingBreakdown:
        subtotal = round_money(sum(
            (calculate_item_total(item.quantity, item.unit_price) for item in items),
            Decimal("0"),
        ))
        taxes = round_money(subtotal * self.tax_rate)
        return PricingBreakdown(
            subtotal=subtotal,
            taxes=taxes,
            total_amount=subtotal + taxes,
        )
