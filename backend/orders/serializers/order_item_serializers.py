from rest_framework import serializers

from core_backend.base import BaseModelSerializer
from orders.models import OrderItem


class OrderItemSerializer(BaseModelSerializer):
    class Meta:
        model = OrderItem
        fields = [
            "id",
            "order",
            "menu_item",
            "name",
            "quantity",
            "unit_price",
            "total_price",
            "seat_number",
            "course_number",
            "course_type",
            "modifiers",
            "special_instructions",
            "status",
            "is_void",
            "void_reason",
            "voided_by",
            "sent_to_kitchen_at",
            "prepared_at",
            "served_at",
            "voided_at",
            "created_at",
        ]
        read_only_fields = fields


class ItemFieldsMixin(serializers.Serializer):
    """Item fields a caller may set when ordering or editing an item."""

    quantity = serializers.IntegerField(min_value=1)
    seat_number = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    course_number = serializers.IntegerField(min_value=1, required=False)
    course_type = serializers.ChoiceField(choices=OrderItem.CourseType.choices, required=False)
    modifiers = serializers.JSONField(required=False)
    special_instructions = serializers.CharField(required=False, allow_blank=True)


class AddItemSerializer(ItemFieldsMixin):
    menu_item_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1, default=1)


class UpdateOrderItemSerializer(ItemFieldsMixin):
    """All fields optional; only the fields sent are changed."""

    quantity = serializers.IntegerField(min_value=1, required=False)

    def validate(self, data):
        if not data:
            raise serializers.ValidationError("No changes supplied.")
        return data


class VoidItemSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")
    voided_by = serializers.CharField(required=False, allow_blank=True, default="")


class ItemStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderItem.ItemStatus.choices)
    performed_by = serializers.CharField(required=False, allow_blank=True, default="")
