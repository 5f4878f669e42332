import django_filters

from core_backend.base import BaseFilterSet
from .models import InventoryItem, PurchaseOrder, StockMovement


class InventoryItemFilter(BaseFilterSet):
    outlet = django_filters.UUIDFilter(field_name="outlet_id")
    low_stock = django_filters.BooleanFilter(method="filter_low_stock")

    class Meta:
        model = InventoryItem
        fields = ["outlet", "sku", "is_active"]

    def filter_low_stock(self, queryset, name, value):
        from django.db.models import F

        if value:
            return queryset.filter(current_stock__lte=F("reorder_point"))
        return queryset.filter(current_stock__gt=F("reorder_point"))


class StockMovementFilter(BaseFilterSet):
    item = django_filters.UUIDFilter(field_name="item_id")
    movement_type = django_filters.ChoiceFilter(choices=StockMovement.MovementType.choices)

    class Meta:
        model = StockMovement
        fields = ["item", "movement_type", "reference_type", "reference_id", "created_at"]


class PurchaseOrderFilter(BaseFilterSet):
    outlet = django_filters.UUIDFilter(field_name="outlet_id")
    status = django_filters.ChoiceFilter(choices=PurchaseOrder.POStatus.choices)

    class Meta:
        model = PurchaseOrder
        fields = ["outlet", "status", "supplier_name"]
