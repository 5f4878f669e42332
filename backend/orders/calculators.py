"""
Pure order financial calculations.

Nothing here touches the database: the calculator receives items, rates,
discounts and the tip, and returns the totals the order must carry. The
order service refetches the rows under a lock and persists the result.

Usage:
    from orders.calculators import recompute
    totals = recompute(items, rates, discounts=order.discounts.all(), tip=order.tip)
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, List, Optional

from payments.money import ZERO, quantize, percent_of


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    tax_amount: Decimal
    service_charge: Decimal
    discount: Decimal
    tip: Decimal
    total: Decimal
    discount_amounts: List[Decimal] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "subtotal": self.subtotal,
            "tax_amount": self.tax_amount,
            "service_charge": self.service_charge,
            "discount": self.discount,
            "tip": self.tip,
            "total": self.total,
        }


class OrderCalculator:
    """
    Calculates subtotal, tax, service charge, discount and total for a set of
    order items.

    Items are duck-typed: anything with ``total_price`` and ``is_void``.
    Discounts need ``discount_type`` ("PERCENTAGE" or "FLAT") and ``value``.
    Rates are percentages (5.00 means 5 %).
    """

    def __init__(self, rates, currency: str = "USD"):
        self.rates = rates
        self.currency = currency

    def calculate_subtotal(self, items: Iterable) -> Decimal:
        subtotal = sum(
            (Decimal(str(item.total_price)) for item in items if not item.is_void),
            ZERO,
        )
        return quantize(self.currency, subtotal)

    def calculate_tax(self, subtotal: Decimal) -> Decimal:
        return percent_of(self.currency, subtotal, self.rates.tax_rate)

    def calculate_service_charge(self, subtotal: Decimal) -> Decimal:
        return percent_of(self.currency, subtotal, self.rates.service_charge_rate)

    def calculate_discounts(self, subtotal: Decimal, discounts: Iterable) -> List[Decimal]:
        """
        Amount of each discount, in application order. The running sum never
        exceeds the subtotal; a discount that would cross it is trimmed.
        """
        amounts = []
        remaining = subtotal
        for discount in discounts:
            if discount.discount_type == "PERCENTAGE":
                amount = percent_of(self.currency, subtotal, discount.value)
            else:
                amount = quantize(self.currency, discount.value)

            amount = max(min(amount, remaining), ZERO)
            remaining -= amount
            amounts.append(amount)
        return amounts

    def calculate_totals(self, items: Iterable, discounts: Iterable = (), tip: Optional[Decimal] = None) -> OrderTotals:
        subtotal = self.calculate_subtotal(items)
        tax_amount = self.calculate_tax(subtotal)
        service_charge = self.calculate_service_charge(subtotal)
        discount_amounts = self.calculate_discounts(subtotal, discounts)
        discount = quantize(self.currency, sum(discount_amounts, ZERO))
        tip = quantize(self.currency, tip or ZERO)

        total = subtotal + tax_amount + service_charge + tip - discount

        return OrderTotals(
            subtotal=subtotal,
            tax_amount=tax_amount,
            service_charge=service_charge,
            discount=discount,
            tip=tip,
            total=quantize(self.currency, total),
            discount_amounts=discount_amounts,
        )


def recompute(items: Iterable, rates, discounts: Iterable = (), tip: Optional[Decimal] = None, currency: str = "USD") -> OrderTotals:
    """Functional entry point: the totals an order with these inputs must carry."""
    return OrderCalculator(rates, currency=currency).calculate_totals(items, discounts, tip)
