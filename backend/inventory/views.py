from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from core_backend.base import ReadOnlyBaseViewSet
from .filters import InventoryItemFilter, PurchaseOrderFilter, StockMovementFilter
from .models import InventoryItem, PurchaseOrder, StockMovement, WasteLog
from .serializers import (
    GoodsReceiptSerializer,
    InventoryItemCreateSerializer,
    InventoryItemSerializer,
    PurchaseOrderCreateSerializer,
    PurchaseOrderSerializer,
    ReceiveGoodsSerializer,
    StockAdjustmentSerializer,
    StockCountSerializer,
    StockMovementSerializer,
    WasteLogCreateSerializer,
    WasteLogSerializer,
)
from .services import (
    PurchaseOrderService,
    PurchaseReceivingService,
    StockLedgerService,
    WasteService,
)


class InventoryItemViewSet(ReadOnlyBaseViewSet):
    """
    Stocked items. Stock levels are read-only here; they change only through
    the adjust, count, waste and receiving endpoints.
    """

    queryset = InventoryItem.objects.all()
    serializer_class = InventoryItemSerializer
    filterset_class = InventoryItemFilter
    search_fields = ["sku", "name"]
    ordering = ["name"]
    http_method_names = ["get", "post", "head", "options"]

    def create(self, request: Request, *args, **kwargs) -> Response:
        serializer = InventoryItemCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)

        item = StockLedgerService.create_item(data.pop("outlet_id"), **data)
        return Response(InventoryItemSerializer(item).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def adjust(self, request: Request, pk=None) -> Response:
        serializer = StockAdjustmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        movement = StockLedgerService.adjust_stock(pk, **serializer.validated_data)
        return Response(StockMovementSerializer(movement).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def count(self, request: Request, pk=None) -> Response:
        serializer = StockCountSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        movement = StockLedgerService.record_stock_count(pk, **serializer.validated_data)
        if movement is None:
            return Response({"detail": "Count matches the ledger; no movement recorded."})
        return Response(StockMovementSerializer(movement).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["get"])
    def movements(self, request: Request, pk=None) -> Response:
        item = self.get_object()
        queryset = item.movements.order_by("-created_at")

        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(StockMovementSerializer(page, many=True).data)
        return Response(StockMovementSerializer(queryset, many=True).data)

    @action(detail=True, methods=["get"])
    def audit(self, request: Request, pk=None) -> Response:
        """Compare current stock with the stock implied by the movement log."""
        return Response(StockLedgerService.verify_item(self.get_object()))


class StockMovementViewSet(ReadOnlyBaseViewSet):
    queryset = StockMovement.objects.all()
    serializer_class = StockMovementSerializer
    filterset_class = StockMovementFilter
    ordering = ["-created_at"]


class WasteLogViewSet(ReadOnlyBaseViewSet):
    queryset = WasteLog.objects.all()
    serializer_class = WasteLogSerializer
    ordering = ["-created_at"]
    filterset_fields = ["outlet", "reason"]
    http_method_names = ["get", "post", "head", "options"]

    def create(self, request: Request, *args, **kwargs) -> Response:
        serializer = WasteLogCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        waste_log = WasteService.log_waste(
            data["outlet_id"],
            data["reason"],
            [dict(line) for line in data["lines"]],
            recorded_by=data["recorded_by"],
            notes=data["notes"],
        )
        waste_log = self.get_queryset().get(pk=waste_log.pk)
        return Response(WasteLogSerializer(waste_log).data, status=status.HTTP_201_CREATED)


class PurchaseOrderViewSet(ReadOnlyBaseViewSet):
    queryset = PurchaseOrder.objects.all()
    serializer_class = PurchaseOrderSerializer
    filterset_class = PurchaseOrderFilter
    search_fields = ["po_number", "supplier_name"]
    ordering = ["-created_at"]
    http_method_names = ["get", "post", "head", "options"]

    def create(self, request: Request, *args, **kwargs) -> Response:
        serializer = PurchaseOrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        purchase_order = PurchaseOrderService.create_purchase_order(
            data["outlet_id"],
            data["po_number"],
            data["supplier_name"],
            [dict(line) for line in data["lines"]],
            created_by=data["created_by"],
        )
        return Response(self._po_data(purchase_order), status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def send(self, request: Request, pk=None) -> Response:
        purchase_order = PurchaseOrderService.send_purchase_order(pk)
        return Response(self._po_data(purchase_order))

    @action(detail=True, methods=["post"])
    def receive(self, request: Request, pk=None) -> Response:
        """Receive a delivery; returns the goods receipt (GRN)."""
        serializer = ReceiveGoodsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        receipt = PurchaseReceivingService.receive(
            pk,
            [dict(line) for line in data["lines"]],
            received_by=data["received_by"],
            notes=data["notes"],
        )
        return Response(GoodsReceiptSerializer(receipt).data, status=status.HTTP_201_CREATED)

    def _po_data(self, purchase_order) -> dict:
        purchase_order = PurchaseOrder.objects.prefetch_related("items__item", "receipts").get(pk=purchase_order.pk)
        return PurchaseOrderSerializer(purchase_order).data
