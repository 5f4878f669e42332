from rest_framework import serializers

from core_backend.base import BaseModelSerializer
from .models import (
    GoodsReceipt,
    InventoryItem,
    PurchaseOrder,
    PurchaseOrderItem,
    StockMovement,
    WasteLog,
    WasteLogItem,
)


def quantity_field(**kwargs):
    return serializers.DecimalField(max_digits=14, decimal_places=3, **kwargs)


def unit_cost_field(**kwargs):
    return serializers.DecimalField(max_digits=12, decimal_places=4, **kwargs)


# ---------------------------------------------------------------------------
# Read serializers
# ---------------------------------------------------------------------------


class InventoryItemSerializer(BaseModelSerializer):
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = InventoryItem
        fields = [
            "id",
            "outlet",
            "sku",
            "name",
            "unit_of_measure",
            "opening_stock",
            "current_stock",
            "reorder_point",
            "average_cost",
            "last_cost",
            "is_low_stock",
            "is_active",
            "updated_at",
        ]
        read_only_fields = fields


class StockMovementSerializer(BaseModelSerializer):
    sku = serializers.CharField(source="item.sku", read_only=True)

    class Meta:
        model = StockMovement
        fields = [
            "id",
            "item",
            "sku",
            "movement_type",
            "quantity",
            "previous_stock",
            "new_stock",
            "unit_cost",
            "total_cost",
            "reference_type",
            "reference_id",
            "reason",
            "notes",
            "performed_by",
            "created_at",
        ]
        read_only_fields = fields
        select_related_fields = ["item"]


class WasteLogItemSerializer(BaseModelSerializer):
    sku = serializers.CharField(source="item.sku", read_only=True)

    class Meta:
        model = WasteLogItem
        fields = ["item", "sku", "quantity", "unit_cost", "total_cost"]
        read_only_fields = fields


class WasteLogSerializer(BaseModelSerializer):
    items = WasteLogItemSerializer(many=True, read_only=True)

    class Meta:
        model = WasteLog
        fields = ["id", "outlet", "reason", "notes", "recorded_by", "total_cost", "created_at", "items"]
        read_only_fields = fields
        prefetch_related_fields = ["items__item"]


class PurchaseOrderItemSerializer(BaseModelSerializer):
    sku = serializers.CharField(source="item.sku", read_only=True)

    class Meta:
        model = PurchaseOrderItem
        fields = ["item", "sku", "ordered_quantity", "received_quantity", "unit_cost"]
        read_only_fields = fields


class GoodsReceiptSerializer(BaseModelSerializer):
    class Meta:
        model = GoodsReceipt
        fields = ["id", "grn_number", "purchase_order", "received_by", "notes", "total_cost", "received_at"]
        read_only_fields = fields


class PurchaseOrderSerializer(BaseModelSerializer):
    items = PurchaseOrderItemSerializer(many=True, read_only=True)
    receipts = GoodsReceiptSerializer(many=True, read_only=True)

    class Meta:
        model = PurchaseOrder
        fields = [
            "id",
            "outlet",
            "po_number",
            "supplier_name",
            "status",
            "created_by",
            "created_at",
            "items",
            "receipts",
        ]
        read_only_fields = fields
        prefetch_related_fields = ["items__item", "receipts"]


# ---------------------------------------------------------------------------
# Command serializers
# ---------------------------------------------------------------------------


class InventoryItemCreateSerializer(serializers.Serializer):
    outlet_id = serializers.UUIDField()
    sku = serializers.CharField(max_length=50)
    name = serializers.CharField(max_length=200)
    unit_of_measure = serializers.CharField(max_length=20, required=False, default="unit")
    opening_stock = quantity_field(min_value=0, required=False, default=0)
    reorder_point = quantity_field(min_value=0, required=False, default=0)
    unit_cost = unit_cost_field(min_value=0, required=False, default=0)


class StockAdjustmentSerializer(serializers.Serializer):
    delta = quantity_field()
    reason = serializers.CharField(max_length=255)
    performed_by = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class StockCountSerializer(serializers.Serializer):
    counted_quantity = quantity_field(min_value=0)
    performed_by = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class StockLineSerializer(serializers.Serializer):
    item_id = serializers.UUIDField()
    quantity = quantity_field()
    unit_cost = unit_cost_field(min_value=0, required=False, allow_null=True, default=None)


class WasteLogCreateSerializer(serializers.Serializer):
    outlet_id = serializers.UUIDField()
    reason = serializers.ChoiceField(choices=WasteLog.WasteReason.choices)
    recorded_by = serializers.CharField()
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    lines = StockLineSerializer(many=True)


class PurchaseOrderCreateSerializer(serializers.Serializer):
    outlet_id = serializers.UUIDField()
    po_number = serializers.CharField(max_length=30)
    supplier_name = serializers.CharField(max_length=200)
    created_by = serializers.CharField(required=False, allow_blank=True, default="")
    lines = StockLineSerializer(many=True)


class ReceiveGoodsSerializer(serializers.Serializer):
    received_by = serializers.CharField()
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    lines = StockLineSerializer(many=True)
