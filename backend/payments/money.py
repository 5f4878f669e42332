"""
Monetary precision helpers for ledger calculations.

Every amount the ledger persists passes through ``quantize``; every
allocation that must conserve a total (split bills, tip shares, discount
and tip apportionment) runs on integer minor units so that the parts always
sum exactly to the whole.

Amounts are passed as Decimal, str or int, never as float. Rounding
is ROUND_HALF_EVEN throughout, and a Decimal is quantized before it is
turned into minor units.
"""

from decimal import Decimal, ROUND_HALF_EVEN, getcontext
from typing import List, Union

getcontext().prec = 28

Number = Union[Decimal, str, int]

ZERO = Decimal("0.00")

# Currency minor unit exponents (how many decimal places)
CURRENCY_EXPONENT = {
    "USD": 2,
    "EUR": 2,
    "GBP": 2,
    "INR": 2,
    "PKR": 2,
    "AED": 2,
    "JPY": 0,
    "KWD": 3,
    "BHD": 3,
    "OMR": 3,
}


def currency_exponent(currency: str) -> int:
    """
    Get the number of decimal places for a currency.

    Examples:
        >>> currency_exponent("USD")
        2
        >>> currency_exponent("JPY")
        0
    """
    return CURRENCY_EXPONENT.get(currency.upper(), 2)


def quantize_decimal(currency: str) -> Decimal:
    """Smallest unit of a currency, e.g. Decimal('0.01') for USD."""
    return Decimal(10) ** -currency_exponent(currency)


def quantize(currency: str, amount: Number) -> Decimal:
    """
    Round to currency decimals using banker's rounding (ROUND_HALF_EVEN).

    Examples:
        >>> quantize("USD", "10.127")
        Decimal('10.13')
        >>> quantize("USD", "10.125")
        Decimal('10.12')
    """
    return Decimal(str(amount)).quantize(quantize_decimal(currency), rounding=ROUND_HALF_EVEN)


def to_minor(currency: str, amount: Number) -> int:
    """
    Convert to minor units (e.g., cents) after quantization.

    Examples:
        >>> to_minor("USD", "10.127")
        1013
    """
    quantized = quantize(currency, amount)
    return int((quantized * (10 ** currency_exponent(currency))).to_integral_value())


def from_minor(currency: str, minor: int) -> Decimal:
    """
    Convert from minor units back to a quantized Decimal.

    Examples:
        >>> from_minor("USD", 1013)
        Decimal('10.13')
    """
    return quantize(currency, Decimal(minor) / (10 ** currency_exponent(currency)))


def percent_of(currency: str, amount: Number, rate: Number) -> Decimal:
    """
    Apply a percentage rate (5.00 means 5 %) to an amount and quantize.

    Examples:
        >>> percent_of("USD", "300.00", "5")
        Decimal('15.00')
    """
    return quantize(currency, Decimal(str(amount)) * Decimal(str(rate)) / Decimal("100"))


def split_evenly_minor(total_minor: int, parts: int) -> List[int]:
    """
    Divide total_minor into ``parts`` integer shares.

    The integer-division remainder goes to the first share, so the shares sum
    exactly to total_minor.

    Examples:
        >>> split_evenly_minor(1000, 3)
        [334, 333, 333]
    """
    if parts <= 0:
        raise ValueError("parts must be a positive integer")

    base, remainder = divmod(total_minor, parts)
    shares = [base] * parts
    shares[0] += remainder
    return shares


def allocate_minor(weights: List[int], total_minor: int) -> List[int]:
    """
    Allocate total_minor across items proportionally by weights.

    Largest-remainder apportionment on exact integer arithmetic:
    1. Floor each proportional share
    2. Hand out the leftover cents to the largest fractional residuals
    3. Break ties by index (earlier lines first)

    Guarantees sum(result) == total_minor whenever any weight is positive.

    Examples:
        >>> allocate_minor([100, 100, 100], 100)
        [34, 33, 33]
        >>> allocate_minor([1000, 1500, 2000], 100)
        [22, 33, 45]
    """
    total_weight = sum(weights)

    if total_weight == 0 or total_minor == 0:
        return [0] * len(weights)

    floors = []
    residuals = []
    for index, weight in enumerate(weights):
        share, residual = divmod(weight * total_minor, total_weight)
        floors.append(share)
        residuals.append((residual, index))

    remainder = total_minor - sum(floors)

    residuals.sort(key=lambda x: (-x[0], x[1]))

    result = floors[:]
    for i in range(remainder):
        _, idx = residuals[i]
        result[idx] += 1

    return result


def validate_minor_sum(components: List[int], expected_total: int, context: str = "", tolerance: int = 0) -> None:
    """
    Raise ValueError when sum(components) is more than ``tolerance`` minor
    units away from expected_total.

    Examples:
        >>> validate_minor_sum([50, 30, 21], 100)
        ValueError: Minor unit sum mismatch: expected 100, got 101 (diff: +1)
    """
    actual = sum(components)
    if abs(actual - expected_total) <= tolerance:
        return

    where = f" {context}" if context else ""
    raise ValueError(
        f"Minor unit sum mismatch{where}: expected {expected_total}, got {actual} "
        f"(diff: {actual - expected_total:+d})"
    )


def within_tolerance(currency: str, left: Number, right: Number, tolerance: Number) -> bool:
    """True when two amounts differ by no more than ``tolerance``."""
    return abs(quantize(currency, left) - quantize(currency, right)) <= Decimal(str(tolerance))
