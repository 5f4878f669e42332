import uuid
from decimal import Decimal
from django.db import models
from django.core.validators import MinValueValidator, MaxValueValidator
from django.utils.translation import gettext_lazy as _


class Outlet(models.Model):
    """
    A dine-in venue. Tax and service charge rates are stored as percentages
    (5.00 means 5 %) and are only ever read by the ledger.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    code = models.CharField(
        max_length=32,
        unique=True,
        help_text=_("Short unique code used on receipts and reports"),
    )
    tax_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00")), MaxValueValidator(Decimal("100.00"))],
        help_text=_("Tax rate as a percentage of the subtotal (e.g., 5.00 for 5%)"),
    )
    service_charge_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00")), MaxValueValidator(Decimal("100.00"))],
        help_text=_("Service charge as a percentage of the subtotal"),
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.code})"


class Table(models.Model):
    """
    A physical seating unit. ``current_order`` is set only while the table is
    OCCUPIED, and only the Table Binder writes it.
    """

    class TableStatus(models.TextChoices):
        AVAILABLE = "AVAILABLE", _("Available")
        OCCUPIED = "OCCUPIED", _("Occupied")
        RESERVED = "RESERVED", _("Reserved")
        CLEANING = "CLEANING", _("Cleaning")
        BLOCKED = "BLOCKED", _("Blocked")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    outlet = models.ForeignKey(Outlet, on_delete=models.CASCADE, related_name="tables")
    table_number = models.CharField(max_length=20)
    capacity = models.PositiveSmallIntegerField(default=4)
    section = models.CharField(max_length=50, blank=True)
    status = models.CharField(
        max_length=20,
        choices=TableStatus.choices,
        default=TableStatus.AVAILABLE,
        db_index=True,
    )
    current_order = models.ForeignKey(
        "orders.Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        help_text=_("The open order seated at this table, if any"),
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["outlet", "table_number"]
        constraints = [
            models.UniqueConstraint(
                fields=["outlet", "table_number"], name="unique_table_number_per_outlet"
            ),
            models.CheckConstraint(
                condition=models.Q(current_order__isnull=True) | models.Q(status="OCCUPIED"),
                name="table_current_order_only_when_occupied",
            ),
        ]

    def __str__(self):
        return f"Table {self.table_number} ({self.get_status_display()})"
