import uuid
from django.db import models
from django.utils.translation import gettext_lazy as _

from core_backend.exceptions import InvalidStateError


class ImmutableModel(models.Model):
    """Rows are written once, at creation, and never changed or deleted."""

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise InvalidStateError(f"{self.__class__.__name__} records are immutable once distributed")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise InvalidStateError(f"{self.__class__.__name__} records are immutable once distributed")


class TipPool(ImmutableModel):
    """
    Tips collected at an outlet for one business date (and optionally one
    shift type), divided among employees. The allocations always sum to
    ``total_tips`` within one cent.
    """

    class PoolStatus(models.TextChoices):
        DISTRIBUTED = "DISTRIBUTED", _("Distributed")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    outlet = models.ForeignKey("outlets.Outlet", on_delete=models.PROTECT, related_name="tip_pools")
    date = models.DateField()
    shift_type = models.CharField(max_length=30, blank=True, help_text=_("e.g. LUNCH, DINNER"))
    total_tips = models.DecimalField(max_digits=12, decimal_places=2)
    status = models.CharField(max_length=20, choices=PoolStatus.choices, default=PoolStatus.DISTRIBUTED)
    created_by = models.CharField(max_length=64, blank=True)
    distributed_at = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-date", "-created_at"]
        indexes = [
            models.Index(fields=["outlet", "date"]),
        ]

    def __str__(self):
        return f"Tip pool {self.date} {self.shift_type or ''} at {self.outlet_id}: {self.total_tips}".strip()


class TipAllocation(ImmutableModel):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tip_pool = models.ForeignKey(TipPool, on_delete=models.PROTECT, related_name="allocations")
    employee_id = models.CharField(max_length=64)
    share_percent = models.DecimalField(max_digits=6, decimal_places=3, null=True, blank=True)
    amount = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        ordering = ["employee_id"]
        constraints = [
            models.UniqueConstraint(fields=["tip_pool", "employee_id"], name="one_allocation_per_employee"),
        ]

    def __str__(self):
        return f"{self.employee_id}: {self.amount}"
