from rest_framework import serializers

from core_backend.base import BaseModelSerializer
from orders.models import Order
from .discount_serializers import OrderDiscountSerializer
from .order_item_serializers import AddItemSerializer, OrderItemSerializer
from .split_serializers import SplitBillSerializer


class OrderSerializer(BaseModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    discounts = OrderDiscountSerializer(many=True, read_only=True)
    split_bills = serializers.SerializerMethodField()
    table_number = serializers.CharField(source="table.table_number", read_only=True, default=None)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "outlet",
            "table",
            "table_number",
            "created_by",
            "server",
            "guest_count",
            "order_type",
            "status",
            "payment_status",
            "subtotal",
            "tax_amount",
            "service_charge",
            "discount",
            "tip",
            "total",
            "notes",
            "void_reason",
            "voided_by",
            "closed_by",
            "opened_at",
            "closed_at",
            "voided_at",
            "items",
            "discounts",
            "split_bills",
        ]
        read_only_fields = fields
        select_related_fields = ["table"]
        prefetch_related_fields = ["items", "discounts", "split_bills__items"]

    def get_split_bills(self, obj):
        splits = [split for split in obj.split_bills.all() if not split.is_void]
        return SplitBillSerializer(splits, many=True).data


class OrderListSerializer(BaseModelSerializer):
    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "outlet",
            "table",
            "order_type",
            "status",
            "payment_status",
            "guest_count",
            "total",
            "opened_at",
            "closed_at",
        ]
        read_only_fields = fields


class OrderCreateSerializer(serializers.Serializer):
    outlet_id = serializers.UUIDField()
    table_id = serializers.UUIDField(required=False, allow_null=True)
    created_by = serializers.CharField()
    server = serializers.CharField(required=False, allow_blank=True, default="")
    guest_count = serializers.IntegerField(min_value=1, default=1)
    order_type = serializers.ChoiceField(choices=Order.OrderType.choices, default=Order.OrderType.DINE_IN)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    items = AddItemSerializer(many=True, required=False, default=list)


class CloseOrderSerializer(serializers.Serializer):
    closed_by = serializers.CharField(required=False, allow_blank=True, default="")


class VoidOrderSerializer(serializers.Serializer):
    reason = serializers.CharField()
    voided_by = serializers.CharField()


class FireCourseSerializer(serializers.Serializer):
    course_number = serializers.IntegerField(min_value=1, required=False, allow_null=True, default=None)
    performed_by = serializers.CharField(required=False, allow_blank=True, default="")
