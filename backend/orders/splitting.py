"""
Split-bill calculation strategies.

A split request is a tagged variant: ``SplitRequest(split_type, payload)``.
SplitStrategyFactory dispatches it to one of four strategies, each a pure
calculation from an OrderSnapshot to a list of SplitLine values. Nothing in
this module reads or writes the database; SplitBillService persists the
lines as one atomic batch.

Every strategy except CUSTOM reconciles its lines so that each money
component, and therefore the total, sums exactly to the order's figure.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Sequence, Tuple

from core_backend.exceptions import ValidationError
from payments.money import (
    ZERO,
    allocate_minor,
    currency_exponent,
    from_minor,
    quantize,
    split_evenly_minor,
    to_minor,
    validate_minor_sum,
    within_tolerance,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ItemSnapshot:
    id: str
    total_price: Decimal
    quantity: int = 1
    seat_number: Optional[int] = None


@dataclass(frozen=True)
class OrderSnapshot:
    """The figures of an order at the moment it is split."""
    order_number: str
    subtotal: Decimal
    tax_amount: Decimal
    service_charge: Decimal
    discount: Decimal
    tip: Decimal
    total: Decimal
    tax_rate: Decimal
    service_charge_rate: Decimal
    items: Tuple[ItemSnapshot, ...] = ()
    currency: str = "USD"
    tolerance: Decimal = Decimal("0.01")


@dataclass
class SplitLine:
    split_number: int
    subtotal: Decimal
    tax_amount: Decimal
    service_charge: Decimal
    discount: Decimal
    tip: Decimal
    total: Decimal
    item_ids: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class SplitRequest:
    split_type: str
    payload: Any


def _lines_from_components(currency: str, components: Dict[str, List[int]], item_ids=None) -> List[SplitLine]:
    lines = []
    count = len(components["subtotal"])
    for index in range(count):
        values = {name: from_minor(currency, parts[index]) for name, parts in components.items()}
        total = values["subtotal"] + values["tax_amount"] + values["service_charge"] + values["tip"] - values["discount"]
        lines.append(
            SplitLine(
                split_number=index + 1,
                total=quantize(currency, total),
                item_ids=list(item_ids[index]) if item_ids else [],
                **values,
            )
        )
    return lines


def reconcile_minor(currency: str, raw_amounts: Sequence[Decimal], target_minor: int) -> Tuple[List[int], int]:
    """
    Round each raw amount to minor units, then nudge lines one unit at a time
    until they sum to ``target_minor``.

    Lines whose rounding moved them furthest from their raw value are nudged
    first. Returns the reconciled amounts and the signed adjustment applied.
    """
    scale = Decimal(10) ** currency_exponent(currency)
    rounded = [to_minor(currency, amount) for amount in raw_amounts]
    diff = target_minor - sum(rounded)
    if diff == 0 or not rounded:
        return rounded, diff

    residuals = [(Decimal(str(amount)) * scale - rounded[i], i) for i, amount in enumerate(raw_amounts)]
    if diff > 0:
        # Lines rounded down the most receive the missing units
        residuals.sort(key=lambda x: (-x[0], x[1]))
    else:
        residuals.sort(key=lambda x: (x[0], x[1]))

    step = 1 if diff > 0 else -1
    for k in range(abs(diff)):
        _, idx = residuals[k % len(residuals)]
        rounded[idx] += step

    return rounded, diff


class SplitStrategy(ABC):
    """Abstract base for split calculations."""

    split_type: str = ""

    @abstractmethod
    def calculate(self, snapshot: OrderSnapshot, payload: Any) -> List[SplitLine]:
        """Return the split lines for ``snapshot``. Raise ValidationError on bad input."""
        pass


class EqualSplitStrategy(SplitStrategy):
    """
    Divide every component by N. Integer-division residue goes to the first
    split, so the totals sum exactly to the order total.
    """

    split_type = "EQUAL"

    def calculate(self, snapshot, payload):
        count = payload if isinstance(payload, int) and not isinstance(payload, bool) else None
        if count is None and isinstance(payload, (list, tuple)):
            count = len(payload)
        if not count or count < 1:
            raise ValidationError("EQUAL split requires a positive number of splits")

        currency = snapshot.currency
        components = {
            name: split_evenly_minor(to_minor(currency, getattr(snapshot, name)), count)
            for name in ("subtotal", "tax_amount", "service_charge", "discount", "tip")
        }
        return _lines_from_components(currency, components)


class ItemSplitStrategy(SplitStrategy):
    """
    Each split lists its member order items; every non-void item must be in
    exactly one split. Tax and service charge are recomputed per split from
    the outlet's rates, then reconciled to the order's figures.
    """

    split_type = "BY_ITEM"

    def _member_ids(self, snapshot: OrderSnapshot, entry: Dict) -> List[str]:
        return [str(item_id) for item_id in entry.get("item_ids") or []]

    def calculate(self, snapshot, payload):
        if not isinstance(payload, (list, tuple)) or not payload:
            raise ValidationError(f"{self.split_type} split requires a non-empty list of splits")
        if not snapshot.items:
            raise ValidationError(f"Order {snapshot.order_number} has no items to split")

        items_by_id = {item.id: item for item in snapshot.items}
        groups = [self._member_ids(snapshot, entry if isinstance(entry, dict) else {}) for entry in payload]
        self._validate_partition(snapshot, items_by_id, groups)

        currency = snapshot.currency
        subtotals = [
            quantize(currency, sum((items_by_id[item_id].total_price for item_id in group), ZERO))
            for group in groups
        ]
        subtotal_minor = [to_minor(currency, amount) for amount in subtotals]

        tax_minor = self._reconcile_component(
            snapshot, "tax_amount", subtotals, snapshot.tax_rate
        )
        service_minor = self._reconcile_component(
            snapshot, "service_charge", subtotals, snapshot.service_charge_rate
        )

        components = {
            "subtotal": subtotal_minor,
            "tax_amount": tax_minor,
            "service_charge": service_minor,
            "discount": allocate_minor(subtotal_minor, to_minor(currency, snapshot.discount)),
            "tip": allocate_minor(subtotal_minor, to_minor(currency, snapshot.tip)),
        }
        return _lines_from_components(currency, components, item_ids=groups)

    def _validate_partition(self, snapshot, items_by_id, groups):
        seen = {}
        for index, group in enumerate(groups, start=1):
            if not group:
                raise ValidationError(f"Split {index} has no items")
            for item_id in group:
                if item_id not in items_by_id:
                    raise ValidationError(
                        f"Item {item_id} is not an active item of order {snapshot.order_number}",
                        detail={"item_id": item_id, "split_number": index},
                    )
                if item_id in seen:
                    raise ValidationError(
                        f"Item {item_id} is assigned to splits {seen[item_id]} and {index}",
                        detail={"item_id": item_id, "split_numbers": [seen[item_id], index]},
                    )
                seen[item_id] = index

        unassigned = sorted(set(items_by_id) - set(seen))
        if unassigned:
            raise ValidationError(
                f"{len(unassigned)} item(s) are not assigned to any split",
                detail={"unassigned_item_ids": unassigned},
            )

    def _reconcile_component(self, snapshot, name, subtotals, rate) -> List[int]:
        currency = snapshot.currency
        raw = [subtotal * Decimal(str(rate)) / Decimal("100") for subtotal in subtotals]
        target = to_minor(currency, getattr(snapshot, name))
        reconciled, adjustment = reconcile_minor(currency, raw, target)

        if abs(adjustment) > len(subtotals):
            logger.warning(
                f"Order {snapshot.order_number}: per-split {name} at rate {rate}% is off the order's "
                f"{getattr(snapshot, name)} by {adjustment} minor units; check the outlet rate configuration"
            )
        elif adjustment:
            logger.info(
                f"Order {snapshot.order_number}: reconciled {name} across splits by {adjustment} minor units"
            )
        return reconciled


class SeatSplitStrategy(ItemSplitStrategy):
    """
    BY_ITEM with a seat shorthand: a split may list ``seat_numbers`` and every
    item ordered for those seats joins it, alongside any ``item_ids``.
    """

    split_type = "BY_SEAT"

    def _member_ids(self, snapshot, entry):
        member_ids = super()._member_ids(snapshot, entry)
        seats = {int(seat) for seat in entry.get("seat_numbers") or []}
        for item in snapshot.items:
            if item.seat_number in seats and item.id not in member_ids:
                member_ids.append(item.id)
        return member_ids


class CustomSplitStrategy(SplitStrategy):
    """
    Caller-supplied amounts. The amounts must sum to the order total within
    tolerance; the components are back-solved proportionally for reporting.
    """

    split_type = "CUSTOM"

    def calculate(self, snapshot, payload):
        if not isinstance(payload, (list, tuple)) or not payload:
            raise ValidationError("CUSTOM split requires a non-empty list of amounts")

        currency = snapshot.currency
        amounts = []
        for index, entry in enumerate(payload, start=1):
            raw = entry.get("amount") if isinstance(entry, dict) else entry
            try:
                amount = quantize(currency, raw)
            except (InvalidOperation, TypeError, ValueError):
                raise ValidationError(f"Split {index} has an invalid amount: {raw!r}")
            if amount <= ZERO:
                raise ValidationError(f"Split {index} amount must be greater than zero")
            amounts.append(amount)

        supplied = sum(amounts, ZERO)
        if not within_tolerance(currency, supplied, snapshot.total, snapshot.tolerance):
            raise ValidationError(
                f"Split amounts total {supplied} but order {snapshot.order_number} totals {snapshot.total}",
                detail={"supplied_total": str(supplied), "order_total": str(snapshot.total)},
            )

        weights = [to_minor(currency, amount) for amount in amounts]
        tax = allocate_minor(weights, to_minor(currency, snapshot.tax_amount))
        service = allocate_minor(weights, to_minor(currency, snapshot.service_charge))
        discount = allocate_minor(weights, to_minor(currency, snapshot.discount))
        tip = allocate_minor(weights, to_minor(currency, snapshot.tip))

        lines = []
        for index, amount in enumerate(amounts):
            subtotal_minor = weights[index] - tax[index] - service[index] - tip[index] + discount[index]
            lines.append(
                SplitLine(
                    split_number=index + 1,
                    subtotal=from_minor(currency, subtotal_minor),
                    tax_amount=from_minor(currency, tax[index]),
                    service_charge=from_minor(currency, service[index]),
                    discount=from_minor(currency, discount[index]),
                    tip=from_minor(currency, tip[index]),
                    total=amount,
                )
            )
        return lines


class SplitStrategyFactory:
    """Factory for getting the split strategy of a split type."""

    _strategies = {
        "EQUAL": EqualSplitStrategy(),
        "BY_ITEM": ItemSplitStrategy(),
        "BY_SEAT": SeatSplitStrategy(),
        "CUSTOM": CustomSplitStrategy(),
    }

    @classmethod
    def get_strategy(cls, split_type: str) -> SplitStrategy:
        strategy = cls._strategies.get(split_type)
        if strategy is None:
            raise ValidationError(f"Unknown split type '{split_type}'")
        return strategy


def calculate_splits(snapshot: OrderSnapshot, request: SplitRequest) -> List[SplitLine]:
    """Dispatch a split request to its strategy."""
    lines = SplitStrategyFactory.get_strategy(request.split_type).calculate(snapshot, request.payload)

    # CUSTOM amounts are only held to the tolerance; every other type is exact
    if request.split_type != "CUSTOM":
        currency = snapshot.currency
        validate_minor_sum(
            [to_minor(currency, line.total) for line in lines],
            to_minor(currency, snapshot.total),
            context=f"for {request.split_type} split of order {snapshot.order_number}",
        )
    return lines
