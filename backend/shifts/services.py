from decimal import Decimal, InvalidOperation
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction, IntegrityError
from django.db.models import F, Sum
from django.utils import timezone
import logging

from core_backend.config import app_settings
from core_backend.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from notifications.services import LedgerEvent, LedgerEventPublisher
from outlets.services import OutletDirectory
from payments.money import ZERO, quantize
from terminals.models import Terminal
from .models import CashDrop, Shift

logger = logging.getLogger(__name__)


def _money(value, label: str) -> Decimal:
    try:
        return quantize(app_settings.currency, value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{label} must be a decimal amount, got {value!r}")


class ShiftService:
    """Cashier shift ledger: open, cash drops, sales, close."""

    # Shift field accumulating each tender type; anything else is "other"
    TENDER_FIELDS = {
        "CASH": "cash_sales",
        "CARD": "card_sales",
    }

    @staticmethod
    def get_shift(shift_id, for_update: bool = False) -> Shift:
        if isinstance(shift_id, Shift):
            shift_id = shift_id.pk
        queryset = Shift.objects.select_for_update() if for_update else Shift.objects.all()
        try:
            return queryset.get(pk=shift_id)
        except (Shift.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError("Shift", shift_id)

    @staticmethod
    def get_open_shift(employee_id: str, outlet=None):
        """The employee's OPEN shift, or None."""
        shifts = Shift.objects.filter(employee_id=employee_id, status=Shift.ShiftStatus.OPEN)
        if outlet is not None:
            shifts = shifts.filter(outlet=outlet)
        return shifts.first()

    @staticmethod
    @transaction.atomic
    def open_shift(outlet, terminal, employee_id: str, opening_float=ZERO, notes: str = "") -> Shift:
        """
        Open a shift for an employee on a terminal.

        Raises:
            ConflictError: the employee or the terminal already has an OPEN shift
            ValidationError: negative float, inactive or foreign terminal
        """
        outlet = OutletDirectory.get_outlet(outlet)

        if isinstance(terminal, Terminal):
            terminal = terminal.pk
        try:
            terminal = Terminal.objects.get(pk=terminal)
        except (Terminal.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError("Terminal", terminal)

        if terminal.outlet_id != outlet.pk:
            raise ValidationError(
                f"Terminal {terminal.name} does not belong to outlet {outlet.code}",
                detail={"terminal_id": str(terminal.pk), "outlet_id": str(outlet.pk)},
            )
        if not terminal.is_active:
            raise ValidationError(f"Terminal {terminal.name} is not active")
        if not employee_id:
            raise ValidationError("An employee is required to open a shift")

        opening_float = _money(opening_float if opening_float is not None else ZERO, "Opening float")
        if opening_float < ZERO:
            raise ValidationError("Opening float cannot be negative")

        open_shifts = Shift.objects.filter(status=Shift.ShiftStatus.OPEN)
        if open_shifts.filter(employee_id=employee_id).exists():
            raise ConflictError(
                f"Employee {employee_id} already has an open shift",
                detail={"employee_id": employee_id},
            )
        if open_shifts.filter(terminal=terminal).exists():
            raise ConflictError(
                f"Terminal {terminal.name} is already in use by another open shift",
                detail={"terminal_id": str(terminal.pk)},
            )

        # The partial unique constraints settle any race the checks above miss
        try:
            with transaction.atomic():
                shift = Shift.objects.create(
                    outlet=outlet,
                    terminal=terminal,
                    employee_id=employee_id,
                    opening_float=opening_float,
                    notes=notes or "",
                )
        except IntegrityError:
            raise ConflictError(
                f"Employee {employee_id} or terminal {terminal.name} already has an open shift",
                detail={"employee_id": employee_id, "terminal_id": str(terminal.pk)},
            )

        logger.info(
            f"Opened shift {shift.pk} for {employee_id} on terminal {terminal.name} "
            f"with float {opening_float}"
        )
        return shift

    @staticmethod
    @transaction.atomic
    def record_cash_drop(shift_id, amount, reason: str = "", dropped_by: str = "") -> CashDrop:
        """
        Append a cash drop. Drops never touch cash_sales; they only lower
        the expected cash computed at close.
        """
        shift = ShiftService.get_shift(shift_id, for_update=True)

        if shift.status != Shift.ShiftStatus.OPEN:
            raise InvalidStateError(
                f"Cannot record a cash drop on a {shift.status} shift", current_state=shift.status
            )

        amount = _money(amount, "Cash drop amount")
        if amount <= ZERO:
            raise ValidationError("Cash drop amount must be greater than zero")

        drop = CashDrop.objects.create(
            shift=shift,
            amount=amount,
            reason=reason or "",
            dropped_by=dropped_by or shift.employee_id,
        )

        logger.info(f"Cash drop of {amount} on shift {shift.pk} by {drop.dropped_by}: {reason}")
        return drop

    @staticmethod
    @transaction.atomic
    def record_sale(shift, method: str, amount, tip=ZERO, tax=ZERO, discount=ZERO) -> Shift:
        """
        Accumulate one tender into an OPEN shift. Called by the payment
        service for every payment taken while the shift is open.
        """
        shift = ShiftService.get_shift(shift, for_update=True)

        if shift.status != Shift.ShiftStatus.OPEN:
            raise InvalidStateError(
                f"Cannot record sales on a {shift.status} shift", current_state=shift.status
            )

        amount = _money(amount, "Sale amount")
        tip = _money(tip or ZERO, "Tip")
        tax = _money(tax or ZERO, "Tax")
        discount = _money(discount or ZERO, "Discount")

        tender_field = ShiftService.TENDER_FIELDS.get(method, "other_sales")
        Shift.objects.filter(pk=shift.pk).update(
            **{tender_field: F(tender_field) + amount},
            total_sales=F("total_sales") + amount,
            total_tips=F("total_tips") + tip,
            total_tax=F("total_tax") + tax,
            total_discount=F("total_discount") + discount,
        )
        shift.refresh_from_db()

        logger.info(f"Shift {shift.pk}: recorded {method} sale {amount} (tip {tip})")
        return shift

    @staticmethod
    def total_cash_drops(shift: Shift) -> Decimal:
        return shift.cash_drops.aggregate(total=Sum("amount"))["total"] or ZERO

    @staticmethod
    @transaction.atomic
    def close_shift(shift_id, actual_cash, closing_float=None, notes: str = "", closed_by: str = "") -> Shift:
        """
        Count the drawer and close the shift.

        expected_cash = opening_float + cash_sales - sum(cash drops)
        variance = actual_cash - expected_cash
        """
        shift = ShiftService.get_shift(shift_id, for_update=True)

        if shift.status != Shift.ShiftStatus.OPEN:
            raise InvalidStateError(
                f"Shift {shift.pk} is already {shift.status}", current_state=shift.status
            )

        actual_cash = _money(actual_cash, "Actual cash")
        if actual_cash < ZERO:
            raise ValidationError("Actual cash cannot be negative")
        closing_float = (
            _money(closing_float, "Closing float") if closing_float is not None else shift.opening_float
        )

        expected_cash = shift.opening_float + shift.cash_sales - ShiftService.total_cash_drops(shift)

        shift.actual_cash = actual_cash
        shift.closing_float = closing_float
        shift.expected_cash = expected_cash
        shift.variance = actual_cash - expected_cash
        shift.end_time = timezone.now()
        shift.status = Shift.ShiftStatus.CLOSED
        shift.closed_by = closed_by or shift.employee_id
        if notes:
            shift.notes = f"{shift.notes}\n{notes}".strip()
        shift.save()

        LedgerEventPublisher.publish(
            LedgerEvent.SHIFT_CLOSED,
            {
                "shift_id": shift.pk,
                "outlet_id": shift.outlet_id,
                "employee_id": shift.employee_id,
                "expected_cash": shift.expected_cash,
                "actual_cash": shift.actual_cash,
                "variance": shift.variance,
                "total_sales": shift.total_sales,
            },
        )

        log = logger.warning if shift.variance != ZERO else logger.info
        log(
            f"Closed shift {shift.pk} for {shift.employee_id}: expected {expected_cash}, "
            f"counted {actual_cash}, variance {shift.variance}"
        )
        return shift

    @staticmethod
    def get_breakdown(shift_id) -> dict:
        """Cash and sales breakdown; expected figures are live for an OPEN shift."""
        shift = ShiftService.get_shift(shift_id)
        drops = ShiftService.total_cash_drops(shift)
        expected_cash = shift.opening_float + shift.cash_sales - drops

        return {
            "shift_id": shift.pk,
            "status": shift.status,
            "opening_float": shift.opening_float,
            "cash_sales": shift.cash_sales,
            "total_cash_drops": drops,
            "expected_cash": expected_cash,
            "actual_cash": shift.actual_cash,
            "variance": shift.variance,
            "card_sales": shift.card_sales,
            "other_sales": shift.other_sales,
            "total_sales": shift.total_sales,
            "total_tax": shift.total_tax,
            "total_discount": shift.total_discount,
            "total_tips": shift.total_tips,
        }

    @staticmethod
    @transaction.atomic
    def reconcile_shift(shift_id, reconciled_by: str, notes: str = "") -> Shift:
        """Mark a CLOSED shift as checked by a manager. Figures are not changed."""
        shift = ShiftService.get_shift(shift_id, for_update=True)

        if shift.status != Shift.ShiftStatus.CLOSED:
            raise InvalidStateError(
                f"Only CLOSED shifts can be reconciled; shift {shift.pk} is {shift.status}",
                current_state=shift.status,
            )
        if not reconciled_by:
            raise ValidationError("reconciled_by is required")

        shift.status = Shift.ShiftStatus.RECONCILED
        shift.notes = f"{shift.notes}\nReconciled by {reconciled_by}. {notes}".strip()
        shift.save(update_fields=["status", "notes"])

        logger.info(f"Shift {shift.pk} reconciled by {reconciled_by} (variance {shift.variance})")
        return shift
