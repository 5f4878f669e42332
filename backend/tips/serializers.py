from rest_framework import serializers

from core_backend.base import BaseModelSerializer, MoneyField
from .models import TipAllocation, TipPool


class TipAllocationSerializer(BaseModelSerializer):
    class Meta:
        model = TipAllocation
        fields = ["employee_id", "share_percent", "amount"]
        read_only_fields = fields


class TipPoolSerializer(BaseModelSerializer):
    allocations = TipAllocationSerializer(many=True, read_only=True)

    class Meta:
        model = TipPool
        fields = [
            "id",
            "outlet",
            "date",
            "shift_type",
            "total_tips",
            "status",
            "created_by",
            "distributed_at",
            "allocations",
        ]
        read_only_fields = fields
        prefetch_related_fields = ["allocations"]


class AllocationEntrySerializer(serializers.Serializer):
    employee_id = serializers.CharField(max_length=64)
    amount = MoneyField(required=False)
    share_percent = serializers.DecimalField(max_digits=6, decimal_places=3, min_value=0, required=False)

    def validate(self, data):
        if "amount" not in data and "share_percent" not in data:
            raise serializers.ValidationError("Give an amount or a share_percent.")
        return data


class DistributeTipsSerializer(serializers.Serializer):
    """
    Allocations are either explicit amounts, or share percentages that are
    converted to cent-exact amounts. Mixing the two is refused.
    """

    outlet_id = serializers.UUIDField()
    date = serializers.DateField()
    shift_type = serializers.CharField(max_length=30, required=False, allow_blank=True, default="")
    total_tips = MoneyField(min_value=0)
    created_by = serializers.CharField(required=False, allow_blank=True, default="")
    allocations = AllocationEntrySerializer(many=True)

    def validate_allocations(self, value):
        by_share = ["amount" not in entry for entry in value]
        if any(by_share) and not all(by_share):
            raise serializers.ValidationError("Use amounts or share percentages, not both.")
        return value

    @property
    def uses_shares(self) -> bool:
        allocations = self.validated_data["allocations"]
        return bool(allocations) and all("amount" not in entry for entry in allocations)
