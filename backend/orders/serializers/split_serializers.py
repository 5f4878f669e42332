from rest_framework import serializers

from core_backend.base import BaseModelSerializer, MoneyField
from orders.models import SplitBill, SplitBillItem


class SplitBillItemSerializer(BaseModelSerializer):
    name = serializers.CharField(source="order_item.name", read_only=True)

    class Meta:
        model = SplitBillItem
        fields = ["order_item", "name", "quantity", "amount"]
        read_only_fields = fields


class SplitBillSerializer(BaseModelSerializer):
    items = SplitBillItemSerializer(many=True, read_only=True)

    class Meta:
        model = SplitBill
        fields = [
            "id",
            "split_number",
            "split_type",
            "subtotal",
            "tax_amount",
            "service_charge",
            "discount",
            "tip",
            "total",
            "is_paid",
            "paid_at",
            "items",
        ]
        read_only_fields = fields


class SplitEntrySerializer(serializers.Serializer):
    item_ids = serializers.ListField(child=serializers.UUIDField(), required=False, default=list)
    seat_numbers = serializers.ListField(
        child=serializers.IntegerField(min_value=1), required=False, default=list
    )
    amount = MoneyField(required=False)


class CreateSplitSetSerializer(serializers.Serializer):
    """
    EQUAL takes ``number_of_splits``; BY_ITEM / BY_SEAT take ``splits`` with
    item_ids (and seat_numbers for BY_SEAT); CUSTOM takes ``splits`` with
    amounts.
    """

    split_type = serializers.ChoiceField(choices=SplitBill.SplitType.choices)
    number_of_splits = serializers.IntegerField(min_value=1, required=False)
    splits = SplitEntrySerializer(many=True, required=False)

    def validate(self, data):
        split_type = data["split_type"]
        if split_type == SplitBill.SplitType.EQUAL:
            if not data.get("number_of_splits"):
                raise serializers.ValidationError({"number_of_splits": "Required for EQUAL splits."})
        elif not data.get("splits"):
            raise serializers.ValidationError({"splits": f"Required for {split_type} splits."})
        return data

    def to_payload(self):
        data = self.validated_data
        split_type = data["split_type"]
        if split_type == SplitBill.SplitType.EQUAL:
            return data["number_of_splits"]
        if split_type == SplitBill.SplitType.CUSTOM:
            return [{"amount": entry.get("amount")} for entry in data["splits"]]
        return [
            {
                "item_ids": [str(item_id) for item_id in entry.get("item_ids", [])],
                "seat_numbers": entry.get("seat_numbers", []),
            }
            for entry in data["splits"]
        ]
