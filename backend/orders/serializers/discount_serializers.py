from rest_framework import serializers

from core_backend.base import BaseModelSerializer, MoneyField
from orders.models import OrderDiscount


class OrderDiscountSerializer(BaseModelSerializer):
    class Meta:
        model = OrderDiscount
        fields = [
            "id",
            "name",
            "discount_type",
            "value",
            "amount",
            "reason",
            "applied_by",
            "approved_by",
            "created_at",
        ]
        read_only_fields = fields


class ApplyDiscountSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    discount_type = serializers.ChoiceField(choices=OrderDiscount.DiscountType.choices)
    value = MoneyField(min_value=0)
    applied_by = serializers.CharField()
    reason = serializers.CharField(required=False, allow_blank=True, default="")
    approved_by = serializers.CharField(required=False, allow_blank=True, default="")
