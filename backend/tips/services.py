from decimal import Decimal, InvalidOperation
from django.db import transaction
from django.utils import timezone
import logging

from core_backend.config import app_settings
from core_backend.exceptions import ValidationError
from outlets.services import OutletDirectory
from payments.money import ZERO, allocate_minor, from_minor, quantize, to_minor
from .models import TipAllocation, TipPool

logger = logging.getLogger(__name__)

# Share percentages are weighted at this precision before apportioning
SHARE_SCALE = 1000


class TipPoolService:
    """Divides pooled tips among employees. Pools are final once distributed."""

    @staticmethod
    def _money(value, label: str) -> Decimal:
        try:
            return quantize(app_settings.currency, value)
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError(f"{label} must be a decimal amount, got {value!r}")

    @staticmethod
    def allocate_by_share(total_tips, shares: list) -> list:
        """
        Turn percentage shares into cent-exact amounts.

        Args:
            total_tips: the pool total
            shares: list of {"employee_id": ..., "share_percent": ...}

        Returns:
            list of {"employee_id", "share_percent", "amount"} whose amounts
            sum exactly to total_tips (largest remainder, ties to the
            earlier entry)
        """
        currency = app_settings.currency
        total_tips = TipPoolService._money(total_tips, "Total tips")
        if not shares:
            raise ValidationError("At least one share is required")

        weights = []
        for share in shares:
            try:
                percent = Decimal(str(share["share_percent"]))
            except (KeyError, InvalidOperation, TypeError, ValueError):
                raise ValidationError(f"Invalid share for {share.get('employee_id')!r}")
            if percent < 0:
                raise ValidationError("Shares cannot be negative")
            weights.append(int(percent * SHARE_SCALE))

        if sum(weights) == 0:
            raise ValidationError("Shares must not all be zero")

        amounts = allocate_minor(weights, to_minor(currency, total_tips))
        return [
            {
                "employee_id": share["employee_id"],
                "share_percent": Decimal(str(share["share_percent"])),
                "amount": from_minor(currency, amount),
            }
            for share, amount in zip(shares, amounts)
        ]

    @staticmethod
    def validate_allocations(total_tips: Decimal, allocations: list) -> list:
        """Check every allocation rule before anything is written."""
        if not allocations:
            raise ValidationError("A tip pool needs at least one allocation")

        cleaned = []
        seen = set()
        for allocation in allocations:
            employee_id = allocation.get("employee_id")
            if not employee_id:
                raise ValidationError("Every allocation needs an employee_id")
            if employee_id in seen:
                raise ValidationError(
                    f"Employee {employee_id} appears more than once", detail={"employee_id": employee_id}
                )
            seen.add(employee_id)

            amount = TipPoolService._money(allocation.get("amount"), "Allocation amount")
            if amount < ZERO:
                raise ValidationError(
                    f"Allocation for {employee_id} cannot be negative", detail={"employee_id": employee_id}
                )
            share_percent = allocation.get("share_percent")
            cleaned.append(
                {
                    "employee_id": employee_id,
                    "share_percent": Decimal(str(share_percent)) if share_percent is not None else None,
                    "amount": amount,
                }
            )

        allocated = sum((allocation["amount"] for allocation in cleaned), ZERO)
        if abs(allocated - total_tips) > app_settings.rounding_tolerance:
            raise ValidationError(
                f"Allocations total {allocated} but the pool holds {total_tips}",
                detail={"allocated": str(allocated), "total_tips": str(total_tips)},
            )
        return cleaned

    @staticmethod
    def distribute_tips(outlet, date, total_tips, allocations: list, shift_type: str = "", created_by: str = None) -> TipPool:
        """
        Record a tip pool and its allocations.

        Validation runs before the transaction opens, so a rejected pool
        writes nothing. The pool and every allocation then commit together.
        """
        outlet = OutletDirectory.get_outlet(outlet)
        total_tips = TipPoolService._money(total_tips, "Total tips")
        if total_tips < ZERO:
            raise ValidationError("Total tips cannot be negative")
        cleaned = TipPoolService.validate_allocations(total_tips, allocations)

        with transaction.atomic():
            pool = TipPool.objects.create(
                outlet=outlet,
                date=date,
                shift_type=shift_type or "",
                total_tips=total_tips,
                created_by=created_by or "",
                distributed_at=timezone.now(),
            )
            TipAllocation.objects.bulk_create(
                [TipAllocation(tip_pool=pool, **allocation) for allocation in cleaned]
            )

        logger.info(
            f"Distributed tip pool {pool.pk} at {outlet.code} for {date}"
            f"{f' ({shift_type})' if shift_type else ''}: {total_tips} across {len(cleaned)} employee(s)"
        )
        return pool
