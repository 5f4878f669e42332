import uuid
from decimal import Decimal
from django.db import models
from django.utils.translation import gettext_lazy as _


class Payment(models.Model):
    """
    A single tender taken against an order, optionally settling one split
    bill. ``amount`` is the bill portion; ``tip_amount`` is on top of it.
    """

    class PaymentMethod(models.TextChoices):
        CASH = "CASH", _("Cash")
        CARD = "CARD", _("Card")
        OTHER = "OTHER", _("Other")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey("orders.Order", on_delete=models.PROTECT, related_name="payments")
    split_bill = models.ForeignKey(
        "orders.SplitBill",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="payments",
    )
    shift = models.ForeignKey(
        "shifts.Shift",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="payments",
        help_text=_("Shift whose drawer/terminal took this payment"),
    )
    method = models.CharField(max_length=20, choices=PaymentMethod.choices)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    tip_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    processed_by = models.CharField(max_length=64)

    # Reference data from the card terminal; the ledger stores it verbatim
    card_last_four = models.CharField(max_length=4, blank=True)
    card_type = models.CharField(max_length=20, blank=True)
    transaction_reference = models.CharField(max_length=100, blank=True)
    auth_code = models.CharField(max_length=20, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["order", "created_at"]),
        ]

    def __str__(self):
        return f"{self.get_method_display()} payment of {self.amount} for Order {self.order.order_number}"

    @property
    def total_collected(self) -> Decimal:
        return self.amount + self.tip_amount
