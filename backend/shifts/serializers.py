from rest_framework import serializers

from core_backend.base import BaseModelSerializer, MoneyField
from .models import CashDrop, Shift


class CashDropSerializer(BaseModelSerializer):
    class Meta:
        model = CashDrop
        fields = ["id", "shift", "amount", "reason", "dropped_by", "dropped_at"]
        read_only_fields = fields


class ShiftSerializer(BaseModelSerializer):
    terminal_name = serializers.CharField(source="terminal.name", read_only=True)
    cash_drops = CashDropSerializer(many=True, read_only=True)

    class Meta:
        model = Shift
        fields = [
            "id",
            "outlet",
            "terminal",
            "terminal_name",
            "employee_id",
            "status",
            "opening_float",
            "closing_float",
            "cash_sales",
            "card_sales",
            "other_sales",
            "total_sales",
            "total_tax",
            "total_discount",
            "total_tips",
            "actual_cash",
            "expected_cash",
            "variance",
            "start_time",
            "end_time",
            "closed_by",
            "notes",
            "cash_drops",
        ]
        read_only_fields = fields
        select_related_fields = ["terminal"]
        prefetch_related_fields = ["cash_drops"]


class OpenShiftSerializer(serializers.Serializer):
    outlet_id = serializers.UUIDField()
    terminal_id = serializers.UUIDField()
    employee_id = serializers.CharField(max_length=64)
    opening_float = MoneyField(required=False, default="0.00")
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class CashDropCreateSerializer(serializers.Serializer):
    amount = MoneyField()
    reason = serializers.CharField(required=False, allow_blank=True, default="")
    dropped_by = serializers.CharField(required=False, allow_blank=True, default="")


class CloseShiftSerializer(serializers.Serializer):
    actual_cash = MoneyField()
    closing_float = MoneyField(required=False, allow_null=True, default=None)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    closed_by = serializers.CharField(required=False, allow_blank=True, default="")


class ReconcileShiftSerializer(serializers.Serializer):
    reconciled_by = serializers.CharField()
    notes = serializers.CharField(required=False, allow_blank=True, default="")
