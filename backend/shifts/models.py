import uuid
from decimal import Decimal
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from core_backend.exceptions import InvalidStateError


def money_field(**kwargs):
    kwargs.setdefault("max_digits", 12)
    kwargs.setdefault("decimal_places", 2)
    kwargs.setdefault("default", Decimal("0.00"))
    return models.DecimalField(**kwargs)


class Shift(models.Model):
    """
    One cashier working session on one terminal.

    Sales accumulate by tender while the shift is OPEN. At close,
    expected_cash = opening_float + cash_sales - sum(cash drops) and
    variance = actual_cash - expected_cash. The variance is reported, never
    corrected.
    """

    class ShiftStatus(models.TextChoices):
        OPEN = "OPEN", _("Open")
        CLOSED = "CLOSED", _("Closed")
        RECONCILED = "RECONCILED", _("Reconciled")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    outlet = models.ForeignKey("outlets.Outlet", on_delete=models.PROTECT, related_name="shifts")
    terminal = models.ForeignKey(
        "terminals.Terminal", on_delete=models.PROTECT, related_name="shifts"
    )
    employee_id = models.CharField(max_length=64, db_index=True)
    status = models.CharField(
        max_length=20, choices=ShiftStatus.choices, default=ShiftStatus.OPEN, db_index=True
    )

    opening_float = money_field()
    closing_float = money_field(null=True, blank=True, default=None)

    cash_sales = money_field()
    card_sales = money_field()
    other_sales = money_field()
    total_sales = money_field()
    total_tax = money_field()
    total_discount = money_field()
    total_tips = money_field()

    actual_cash = money_field(null=True, blank=True, default=None, help_text=_("Cash counted at close"))
    expected_cash = money_field(null=True, blank=True, default=None)
    variance = money_field(null=True, blank=True, default=None)

    start_time = models.DateTimeField(default=timezone.now)
    end_time = models.DateTimeField(null=True, blank=True)
    closed_by = models.CharField(max_length=64, blank=True)
    notes = models.TextField(blank=True)

    class Meta:
        ordering = ["-start_time"]
        indexes = [
            models.Index(fields=["outlet", "start_time"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["employee_id"],
                condition=models.Q(status="OPEN"),
                name="one_open_shift_per_employee",
            ),
            models.UniqueConstraint(
                fields=["terminal"],
                condition=models.Q(status="OPEN"),
                name="one_open_shift_per_terminal",
            ),
        ]

    def __str__(self):
        return f"Shift {self.pk} ({self.employee_id} on {self.terminal_id}) - {self.status}"


class CashDrop(models.Model):
    """Cash removed from the drawer during a shift. Immutable once recorded."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    shift = models.ForeignKey(Shift, on_delete=models.PROTECT, related_name="cash_drops")
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    reason = models.CharField(max_length=255, blank=True)
    dropped_by = models.CharField(max_length=64, blank=True)
    dropped_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["dropped_at"]

    def __str__(self):
        return f"Cash drop {self.amount} on shift {self.shift_id}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise InvalidStateError("Cash drops are immutable once recorded")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise InvalidStateError("Cash drops are immutable once recorded")
