import django_filters

from core_backend.base import BaseFilterSet
from .models import Table


class TableFilter(BaseFilterSet):
    outlet = django_filters.UUIDFilter(field_name="outlet_id")
    status = django_filters.ChoiceFilter(choices=Table.TableStatus.choices)

    class Meta:
        model = Table
        fields = ["outlet", "status", "section"]
