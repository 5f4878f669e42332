from rest_framework import serializers

from core_backend.base import BaseModelSerializer
from .models import Outlet, Table


class OutletSerializer(BaseModelSerializer):
    class Meta:
        model = Outlet
        fields = [
            "id",
            "name",
            "code",
            "tax_rate",
            "service_charge_rate",
            "is_active",
        ]


class TableSerializer(BaseModelSerializer):
    current_order_number = serializers.CharField(
        source="current_order.order_number", read_only=True, default=None
    )

    class Meta:
        model = Table
        fields = [
            "id",
            "outlet",
            "table_number",
            "capacity",
            "section",
            "status",
            "current_order",
            "current_order_number",
            "updated_at",
        ]
        read_only_fields = ["status", "current_order", "updated_at"]
        select_related_fields = ["outlet", "current_order"]


class TableStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Table.TableStatus.choices)
    changed_by = serializers.CharField(required=False, allow_blank=True, default="")
