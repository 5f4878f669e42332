from decimal import Decimal
from rest_framework import serializers

from core_backend.base import BaseModelSerializer, MoneyField
from .models import Payment


class PaymentSerializer(BaseModelSerializer):
    split_number = serializers.IntegerField(source="split_bill.split_number", read_only=True, default=None)

    class Meta:
        model = Payment
        fields = [
            "id",
            "order",
            "split_bill",
            "split_number",
            "shift",
            "method",
            "amount",
            "tip_amount",
            "total_collected",
            "processed_by",
            "card_last_four",
            "card_type",
            "transaction_reference",
            "auth_code",
            "created_at",
        ]
        read_only_fields = fields
        select_related_fields = ["split_bill"]


class RecordPaymentSerializer(serializers.Serializer):
    method = serializers.ChoiceField(choices=Payment.PaymentMethod.choices)
    amount = MoneyField()
    tip_amount = MoneyField(required=False, default=Decimal("0.00"))
    processed_by = serializers.CharField()
    split_bill_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    shift_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    card_last_four = serializers.CharField(max_length=4, required=False, allow_blank=True, default="")
    card_type = serializers.CharField(required=False, allow_blank=True, default="")
    transaction_reference = serializers.CharField(required=False, allow_blank=True, default="")
    auth_code = serializers.CharField(required=False, allow_blank=True, default="")
