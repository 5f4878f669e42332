import re
import uuid
from decimal import Decimal
from django.db import models, transaction, IntegrityError
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from core_backend.config import app_settings
from core_backend.exceptions import InvalidStateError


def quantity_field(**kwargs):
    kwargs.setdefault("max_digits", 14)
    kwargs.setdefault("decimal_places", 3)
    kwargs.setdefault("default", Decimal("0.000"))
    return models.DecimalField(**kwargs)


def cost_field(**kwargs):
    kwargs.setdefault("max_digits", 12)
    kwargs.setdefault("decimal_places", 4)
    kwargs.setdefault("default", Decimal("0.0000"))
    return models.DecimalField(**kwargs)


class InventoryItem(models.Model):
    """
    A stocked ingredient or supply at one outlet.

    ``current_stock`` is a projection of the movement log and is only
    written by StockLedgerService, beside the movement that explains it.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    outlet = models.ForeignKey("outlets.Outlet", on_delete=models.PROTECT, related_name="inventory_items")
    sku = models.CharField(max_length=50)
    name = models.CharField(max_length=200)
    unit_of_measure = models.CharField(max_length=20, default="unit", help_text=_("e.g. kg, l, unit"))

    opening_stock = quantity_field(help_text=_("Stock on hand when the item was first stocked"))
    current_stock = quantity_field()
    reorder_point = quantity_field(help_text=_("Low-stock alert fires when stock falls to this level"))

    average_cost = cost_field(help_text=_("Weighted average unit cost"))
    last_cost = cost_field(help_text=_("Unit cost of the most recent receipt"))

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(fields=["outlet", "sku"], name="unique_sku_per_outlet"),
            models.CheckConstraint(
                condition=models.Q(current_stock__gte=0), name="inventory_stock_non_negative"
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.sku}): {self.current_stock} {self.unit_of_measure}"

    @property
    def is_low_stock(self) -> bool:
        return self.current_stock <= self.reorder_point


class StockMovement(models.Model):
    """
    One signed change to an item's stock. Append-only: for every item,
    opening_stock + sum(quantity) == current_stock.
    """

    class MovementType(models.TextChoices):
        ADJUSTMENT = "ADJUSTMENT", _("Manual Adjustment")
        WASTE = "WASTE", _("Waste")
        PURCHASE_RECEIPT = "PURCHASE_RECEIPT", _("Purchase Receipt")
        STOCK_COUNT = "STOCK_COUNT", _("Stock Count")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    item = models.ForeignKey(InventoryItem, on_delete=models.PROTECT, related_name="movements")
    movement_type = models.CharField(max_length=20, choices=MovementType.choices)
    quantity = models.DecimalField(
        max_digits=14,
        decimal_places=3,
        help_text=_("Change in quantity (positive for additions, negative for removals)"),
    )
    previous_stock = models.DecimalField(max_digits=14, decimal_places=3)
    new_stock = models.DecimalField(max_digits=14, decimal_places=3)

    unit_cost = models.DecimalField(max_digits=12, decimal_places=4, null=True, blank=True)
    total_cost = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)

    reference_type = models.CharField(
        max_length=30, blank=True, help_text=_("Document that caused the movement, e.g. WASTE_LOG")
    )
    reference_id = models.CharField(max_length=100, blank=True)
    reason = models.CharField(max_length=255)
    notes = models.TextField(blank=True)
    performed_by = models.CharField(max_length=64, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["item", "created_at"]),
            models.Index(fields=["reference_type", "reference_id"]),
        ]

    def __str__(self):
        return f"{self.movement_type}: {self.item.name} ({self.quantity:+}) - {self.created_at:%Y-%m-%d %H:%M}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise InvalidStateError("Stock movements are immutable once recorded")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise InvalidStateError("Stock movements are immutable once recorded")


class WasteLog(models.Model):
    """A waste write-off document; each line removes stock."""

    class WasteReason(models.TextChoices):
        EXPIRED = "EXPIRED", _("Expired")
        SPOILED = "SPOILED", _("Spoiled")
        DAMAGED = "DAMAGED", _("Damaged")
        PREPARATION = "PREPARATION", _("Preparation Error")
        OTHER = "OTHER", _("Other")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    outlet = models.ForeignKey("outlets.Outlet", on_delete=models.PROTECT, related_name="waste_logs")
    reason = models.CharField(max_length=20, choices=WasteReason.choices)
    notes = models.TextField(blank=True)
    recorded_by = models.CharField(max_length=64)
    total_cost = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"Waste ({self.reason}) at {self.outlet_id} - {self.created_at:%Y-%m-%d}"


class WasteLogItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    waste_log = models.ForeignKey(WasteLog, on_delete=models.CASCADE, related_name="items")
    item = models.ForeignKey(InventoryItem, on_delete=models.PROTECT, related_name="waste_lines")
    quantity = models.DecimalField(max_digits=14, decimal_places=3)
    unit_cost = models.DecimalField(max_digits=12, decimal_places=4)
    total_cost = models.DecimalField(max_digits=14, decimal_places=2)

    def __str__(self):
        return f"{self.quantity} x {self.item.name}"


class PurchaseOrder(models.Model):
    class POStatus(models.TextChoices):
        DRAFT = "DRAFT", _("Draft")
        SENT = "SENT", _("Sent")
        PARTIALLY_RECEIVED = "PARTIALLY_RECEIVED", _("Partially Received")
        RECEIVED = "RECEIVED", _("Received")
        CANCELLED = "CANCELLED", _("Cancelled")

    RECEIVABLE_STATUSES = {POStatus.SENT, POStatus.PARTIALLY_RECEIVED}

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    outlet = models.ForeignKey("outlets.Outlet", on_delete=models.PROTECT, related_name="purchase_orders")
    po_number = models.CharField(max_length=30)
    supplier_name = models.CharField(max_length=200)
    status = models.CharField(max_length=20, choices=POStatus.choices, default=POStatus.DRAFT)
    created_by = models.CharField(max_length=64, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(fields=["outlet", "po_number"], name="unique_po_number_per_outlet"),
        ]

    def __str__(self):
        return f"PO {self.po_number} ({self.supplier_name}) - {self.status}"


class PurchaseOrderItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    purchase_order = models.ForeignKey(PurchaseOrder, on_delete=models.CASCADE, related_name="items")
    item = models.ForeignKey(InventoryItem, on_delete=models.PROTECT, related_name="purchase_lines")
    ordered_quantity = models.DecimalField(max_digits=14, decimal_places=3)
    received_quantity = quantity_field()
    unit_cost = models.DecimalField(max_digits=12, decimal_places=4)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["purchase_order", "item"], name="unique_item_per_po"),
        ]

    def __str__(self):
        return f"{self.item.name}: {self.received_quantity}/{self.ordered_quantity}"

    @property
    def outstanding_quantity(self) -> Decimal:
        return max(self.ordered_quantity - self.received_quantity, Decimal("0.000"))


class GoodsReceipt(models.Model):
    """A delivery received against a purchase order, numbered GRN-YYYYMM-NNNN."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    purchase_order = models.ForeignKey(PurchaseOrder, on_delete=models.PROTECT, related_name="receipts")
    grn_number = models.CharField(max_length=30, unique=True, blank=True)
    received_by = models.CharField(max_length=64)
    notes = models.TextField(blank=True)
    total_cost = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    received_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-received_at"]

    def __str__(self):
        return f"{self.grn_number} for PO {self.purchase_order.po_number}"

    def save(self, *args, **kwargs):
        if self.grn_number:
            return super().save(*args, **kwargs)

        max_retries = 5
        for _attempt in range(max_retries):
            self.grn_number = self._generate_grn_number()
            try:
                with transaction.atomic():
                    return super().save(*args, **kwargs)
            except IntegrityError as exc:
                if "grn_number" not in str(exc).lower():
                    raise
                continue

        raise IntegrityError("Failed to generate a unique GRN number after multiple retries.")

    def _generate_grn_number(self):
        prefix = f"{app_settings.goods_receipt_prefix}-{self.received_at:%Y%m}-"
        last_receipt = (
            GoodsReceipt.objects.filter(grn_number__startswith=prefix).order_by("-grn_number").first()
        )

        next_number = 1
        if last_receipt:
            match = re.match(rf"^{re.escape(prefix)}(\d+)$", last_receipt.grn_number)
            if match:
                next_number = int(match.group(1)) + 1

        return f"{prefix}{next_number:04d}"
