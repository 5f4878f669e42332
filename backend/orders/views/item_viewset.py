from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from core_backend.base import BaseViewSet
from orders.models import OrderItem
from orders.serializers import (
    AddItemSerializer,
    ItemStatusSerializer,
    OrderItemSerializer,
    UpdateOrderItemSerializer,
    VoidItemSerializer,
)
from orders.services import KitchenService, OrderItemService


class OrderItemViewSet(BaseViewSet):
    """
    A ViewSet for managing a specific item within an order.

    DELETE voids the item rather than removing the row; voided items stay on
    the order for the audit trail.
    """

    queryset = OrderItem.objects.all()
    serializer_class = OrderItemSerializer
    ordering = ["created_at"]
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def get_serializer_class(self):
        if self.action == "create":
            return AddItemSerializer
        if self.action == "partial_update":
            return UpdateOrderItemSerializer
        return OrderItemSerializer

    def get_queryset(self):
        """Filter items based on the order_pk provided in the URL."""
        queryset = super().get_queryset()
        return queryset.filter(order__pk=self.kwargs["order_pk"])

    def get_object(self):
        queryset = self.get_queryset()
        return get_object_or_404(queryset, pk=self.kwargs["pk"])

    def create(self, request: Request, *args, **kwargs) -> Response:
        serializer = AddItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        item = OrderItemService.add_item(self.kwargs["order_pk"], dict(serializer.validated_data))
        return Response(OrderItemSerializer(item).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request: Request, *args, **kwargs) -> Response:
        serializer = UpdateOrderItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        item = OrderItemService.mutate_item(
            self.kwargs["order_pk"], self.kwargs["pk"], dict(serializer.validated_data)
        )
        return Response(OrderItemSerializer(item).data)

    def destroy(self, request: Request, *args, **kwargs) -> Response:
        serializer = VoidItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        item = OrderItemService.void_item(
            self.kwargs["order_pk"],
            self.kwargs["pk"],
            reason=serializer.validated_data["reason"],
            voided_by=serializer.validated_data["voided_by"],
        )
        return Response(OrderItemSerializer(item).data)

    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request: Request, *args, **kwargs) -> Response:
        """Advance the item through the kitchen (SENT, READY, SERVED)."""
        serializer = ItemStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        item = KitchenService.transition_item(
            self.kwargs["order_pk"],
            self.kwargs["pk"],
            serializer.validated_data["status"],
            performed_by=serializer.validated_data["performed_by"],
        )
        return Response(OrderItemSerializer(item).data)
