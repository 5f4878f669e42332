import django_filters

from core_backend.base import BaseFilterSet
from .models import Shift


class ShiftFilter(BaseFilterSet):
    outlet = django_filters.UUIDFilter(field_name="outlet_id")
    terminal = django_filters.UUIDFilter(field_name="terminal_id")
    status = django_filters.ChoiceFilter(choices=Shift.ShiftStatus.choices)

    class Meta:
        model = Shift
        fields = ["outlet", "terminal", "status", "employee_id", "start_time"]
