import uuid
from decimal import Decimal
from django.db import models
from django.core.validators import MinValueValidator
from django.utils.translation import gettext_lazy as _


class MenuItem(models.Model):
    """
    A sellable dish. The ledger reads ``name`` and ``price`` once, when an
    order item is created; later price changes never touch existing orders.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    outlet = models.ForeignKey(
        "outlets.Outlet", on_delete=models.CASCADE, related_name="menu_items"
    )
    name = models.CharField(max_length=200)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    default_course_type = models.CharField(
        max_length=20,
        default="MAIN",
        help_text=_("Course an order item of this dish starts in"),
    )
    is_available = models.BooleanField(default=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.price})"
