import uuid
from django.db import models
from django.utils.translation import gettext_lazy as _


class Terminal(models.Model):
    """
    A registered point-of-sale device. At most one OPEN shift may be bound to
    a terminal at a time (enforced on the Shift table).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    outlet = models.ForeignKey(
        "outlets.Outlet", on_delete=models.CASCADE, related_name="terminals"
    )
    name = models.CharField(max_length=100)
    device_id = models.CharField(
        max_length=128,
        unique=True,
        help_text=_("Hardware identifier reported by the device"),
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["outlet", "name"]

    def __str__(self):
        return f"{self.name} ({self.device_id})"
