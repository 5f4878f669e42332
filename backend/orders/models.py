import re
import uuid
from decimal import Decimal
from django.db import models, transaction, IntegrityError
from django.core.validators import MinValueValidator
from django.utils.translation import gettext_lazy as _
from django.utils import timezone

from core_backend.config import app_settings


def money_field(**kwargs):
    kwargs.setdefault("max_digits", 12)
    kwargs.setdefault("decimal_places", 2)
    kwargs.setdefault("default", Decimal("0.00"))
    return models.DecimalField(**kwargs)


class Order(models.Model):
    """
    One dine-in check.

    The monetary fields are a projection of the order's items, discounts and
    payments; they are written only by OrderCalculationService, which keeps
    total == subtotal + tax_amount + service_charge + tip - discount.
    """

    class OrderStatus(models.TextChoices):
        OPEN = "OPEN", _("Open")
        CLOSED = "CLOSED", _("Closed")
        VOID = "VOID", _("Void")

    class OrderType(models.TextChoices):
        DINE_IN = "DINE_IN", _("Dine In")
        TAKEAWAY = "TAKEAWAY", _("Takeaway")

    class PaymentStatus(models.TextChoices):
        UNPAID = "UNPAID", _("Unpaid")
        PARTIALLY_PAID = "PARTIALLY_PAID", _("Partially Paid")
        PAID = "PAID", _("Paid")

    TRANSITIONS = {
        OrderStatus.OPEN: {OrderStatus.CLOSED, OrderStatus.VOID},
        OrderStatus.CLOSED: set(),
        OrderStatus.VOID: set(),
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order_number = models.CharField(max_length=30, blank=True)
    outlet = models.ForeignKey(
        "outlets.Outlet", on_delete=models.PROTECT, related_name="orders"
    )
    table = models.ForeignKey(
        "outlets.Table",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="orders",
        help_text=_("Seating table; optional for takeaway orders"),
    )
    created_by = models.CharField(max_length=64, help_text=_("Employee who opened the order"))
    server = models.CharField(max_length=64, blank=True, help_text=_("Employee serving the table"))
    guest_count = models.PositiveSmallIntegerField(default=1)
    order_type = models.CharField(
        max_length=20, choices=OrderType.choices, default=OrderType.DINE_IN
    )
    status = models.CharField(
        max_length=20, choices=OrderStatus.choices, default=OrderStatus.OPEN, db_index=True
    )
    payment_status = models.CharField(
        max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.UNPAID
    )

    subtotal = money_field()
    tax_amount = money_field()
    service_charge = money_field()
    discount = money_field()
    tip = money_field()
    total = money_field()

    notes = models.TextField(blank=True)
    void_reason = models.CharField(max_length=255, blank=True)
    voided_by = models.CharField(max_length=64, blank=True)
    closed_by = models.CharField(max_length=64, blank=True)

    opened_at = models.DateTimeField(default=timezone.now)
    closed_at = models.DateTimeField(null=True, blank=True)
    voided_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-opened_at", "order_number"]
        indexes = [
            models.Index(fields=["outlet", "status"]),
            models.Index(fields=["outlet", "opened_at"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["outlet", "order_number"], name="unique_order_number_per_outlet"
            ),
            models.UniqueConstraint(
                fields=["table"],
                condition=models.Q(status="OPEN"),
                name="one_open_order_per_table",
            ),
            models.CheckConstraint(
                condition=models.Q(subtotal__gte=0)
                & models.Q(tax_amount__gte=0)
                & models.Q(service_charge__gte=0)
                & models.Q(discount__gte=0)
                & models.Q(tip__gte=0)
                & models.Q(total__gte=0),
                name="order_money_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(discount__lte=models.F("subtotal")),
                name="order_discount_within_subtotal",
            ),
        ]

    def __str__(self):
        return f"Order {self.order_number or self.pk} ({self.order_type}) - {self.status}"

    @property
    def is_open(self) -> bool:
        return self.status == self.OrderStatus.OPEN

    def can_transition_to(self, new_status) -> bool:
        return new_status in self.TRANSITIONS.get(self.status, set())

    def save(self, *args, **kwargs):
        # Generate order_number only if it's not already set
        if self.order_number:
            return super().save(*args, **kwargs)

        max_retries = 5
        for _attempt in range(max_retries):
            self.order_number = self._generate_sequential_order_number()
            try:
                with transaction.atomic():
                    return super().save(*args, **kwargs)
            except IntegrityError as exc:
                if "order_number" not in str(exc).lower():
                    raise
                # Another request took the number; try the next one
                continue

        raise IntegrityError("Failed to generate a unique order number after multiple retries.")

    def _generate_sequential_order_number(self):
        """
        Next sequential order number for this outlet, e.g. DIN-00042.
        """
        prefix = f"{app_settings.order_number_prefix}-"
        last_order = (
            Order.objects.filter(outlet_id=self.outlet_id, order_number__startswith=prefix)
            .order_by("-order_number")
            .first()
        )

        next_number = 1
        if last_order:
            match = re.match(rf"^{re.escape(prefix)}(\d+)$", last_order.order_number)
            if match:
                next_number = int(match.group(1)) + 1

        return f"{prefix}{next_number:05d}"


class OrderItem(models.Model):
    """
    One line of an order. Items are never deleted: voiding is a terminal
    status that keeps ``total_price`` for the audit trail and removes the
    line from every later subtotal.
    """

    class ItemStatus(models.TextChoices):
        PENDING = "PENDING", _("Pending")
        SENT = "SENT", _("Sent to Kitchen")
        READY = "READY", _("Ready")
        SERVED = "SERVED", _("Served")
        VOID = "VOID", _("Void")

    class CourseType(models.TextChoices):
        APPETIZER = "APPETIZER", _("Appetizer")
        MAIN = "MAIN", _("Main")
        DESSERT = "DESSERT", _("Dessert")
        BEVERAGE = "BEVERAGE", _("Beverage")

    # Kitchen progress is forward-only; skipping ahead is allowed.
    PROGRESSION = [ItemStatus.PENDING, ItemStatus.SENT, ItemStatus.READY, ItemStatus.SERVED]
    TERMINAL_STATUSES = {ItemStatus.SERVED, ItemStatus.VOID}

    # Timestamp stamped the first time an item enters a status
    STATUS_TIMESTAMPS = {
        ItemStatus.SENT: "sent_to_kitchen_at",
        ItemStatus.READY: "prepared_at",
        ItemStatus.SERVED: "served_at",
        ItemStatus.VOID: "voided_at",
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    menu_item = models.ForeignKey(
        "menu.MenuItem", on_delete=models.PROTECT, related_name="order_items"
    )
    name = models.CharField(max_length=200, help_text=_("Menu item name at the time of ordering"))
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text=_("Price copied from the menu when the item was ordered"),
    )
    total_price = models.DecimalField(
        max_digits=12, decimal_places=2, help_text=_("unit_price * quantity")
    )
    seat_number = models.PositiveSmallIntegerField(null=True, blank=True)
    course_number = models.PositiveSmallIntegerField(default=1)
    course_type = models.CharField(
        max_length=20, choices=CourseType.choices, default=CourseType.MAIN
    )
    modifiers = models.JSONField(default=list, blank=True)
    special_instructions = models.TextField(blank=True)

    status = models.CharField(
        max_length=20, choices=ItemStatus.choices, default=ItemStatus.PENDING, db_index=True
    )
    is_void = models.BooleanField(default=False)
    void_reason = models.CharField(max_length=255, blank=True)
    voided_by = models.CharField(max_length=64, blank=True)

    sent_to_kitchen_at = models.DateTimeField(null=True, blank=True)
    prepared_at = models.DateTimeField(null=True, blank=True)
    served_at = models.DateTimeField(null=True, blank=True)
    voided_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["order", "is_void"]),
        ]

    def __str__(self):
        return f"{self.quantity} x {self.name} in Order {self.order.order_number}"

    def save(self, *args, **kwargs):
        self.total_price = self.unit_price * self.quantity
        super().save(*args, **kwargs)

    @classmethod
    def can_transition(cls, current: str, new: str) -> bool:
        """
        Forward-only progression, VOID from any non-terminal status.
        Repeating the current status is not a transition.
        """
        if current in cls.TERMINAL_STATUSES:
            return False
        if new == cls.ItemStatus.VOID:
            return True
        if current not in cls.PROGRESSION or new not in cls.PROGRESSION:
            return False
        return cls.PROGRESSION.index(new) > cls.PROGRESSION.index(current)


class OrderDiscount(models.Model):
    """
    A discount applied to an order. PERCENTAGE amounts are re-derived from
    the subtotal on every recompute; FLAT amounts are capped at the subtotal.
    """

    class DiscountType(models.TextChoices):
        PERCENTAGE = "PERCENTAGE", _("Percentage")
        FLAT = "FLAT", _("Flat Amount")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="discounts")
    name = models.CharField(max_length=100)
    discount_type = models.CharField(max_length=20, choices=DiscountType.choices)
    value = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text=_("Discount value (e.g., 15.00 for 15% or 15.00 flat)"),
    )
    amount = money_field(help_text=_("Calculated discount amount as of the last recompute"))
    reason = models.CharField(max_length=255, blank=True)
    applied_by = models.CharField(max_length=64)
    approved_by = models.CharField(max_length=64, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]

    def __str__(self):
        return f"{self.name} ({self.discount_type} {self.value}) on Order {self.order.order_number}"


class SplitBill(models.Model):
    """
    One payable partition of an order. The non-void splits of an order form
    its split set; the set is created and voided as a whole.
    """

    class SplitType(models.TextChoices):
        EQUAL = "EQUAL", _("Equal")
        BY_SEAT = "BY_SEAT", _("By Seat")
        BY_ITEM = "BY_ITEM", _("By Item")
        CUSTOM = "CUSTOM", _("Custom Amount")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="split_bills")
    split_number = models.PositiveSmallIntegerField()
    split_type = models.CharField(max_length=20, choices=SplitType.choices)

    subtotal = money_field()
    tax_amount = money_field()
    service_charge = money_field()
    discount = money_field()
    tip = money_field()
    total = money_field()

    is_paid = models.BooleanField(default=False)
    paid_at = models.DateTimeField(null=True, blank=True)
    is_void = models.BooleanField(default=False)
    voided_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["order", "split_number"]
        constraints = [
            models.UniqueConstraint(
                fields=["order", "split_number"],
                condition=models.Q(is_void=False),
                name="unique_active_split_number_per_order",
            ),
        ]

    def __str__(self):
        return f"Split {self.split_number} ({self.split_type}) of Order {self.order.order_number}"


class SplitBillItem(models.Model):
    """Membership of an order item in a BY_ITEM / BY_SEAT split."""

    split_bill = models.ForeignKey(SplitBill, on_delete=models.CASCADE, related_name="items")
    order_item = models.ForeignKey(
        OrderItem, on_delete=models.PROTECT, related_name="split_memberships"
    )
    quantity = models.PositiveIntegerField(default=1)
    amount = money_field()

    class Meta:
        ordering = ["split_bill", "id"]

    def __str__(self):
        return f"{self.order_item.name} in split {self.split_bill.split_number}"
