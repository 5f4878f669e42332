from rest_framework import status
from rest_framework.exceptions import MethodNotAllowed
from rest_framework.request import Request
from rest_framework.response import Response

from core_backend.base import BaseViewSet
from orders.filters import OrderFilter
from orders.models import Order
from orders.serializers import (
    OrderCreateSerializer,
    OrderListSerializer,
    OrderSerializer,
)
from orders.services import OrderService

# Import action mixins
from .status_actions import StatusActionsMixin
from .billing_actions import BillingActionsMixin


class OrderViewSet(StatusActionsMixin, BillingActionsMixin, BaseViewSet):
    """
    ViewSet for orders.

    Orders are only changed through service-backed actions:
    - Lifecycle and kitchen (StatusActionsMixin)
    - Discounts, split bills and payments (BillingActionsMixin)
    """

    queryset = Order.objects.all()
    serializer_class = OrderSerializer
    filterset_class = OrderFilter
    search_fields = ["order_number", "server", "created_by"]
    ordering_fields = ["opened_at", "closed_at", "total", "order_number"]
    ordering = ["-opened_at"]
    http_method_names = ["get", "post", "delete", "head", "options"]

    def get_serializer_class(self):
        if self.action == "list":
            return OrderListSerializer
        if self.action == "create":
            return OrderCreateSerializer
        return OrderSerializer

    def create(self, request: Request, *args, **kwargs) -> Response:
        """Open an order with its initial items and seat it at the table."""
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = OrderService.create_order(
            outlet=data["outlet_id"],
            table=data.get("table_id"),
            items=[dict(item) for item in data.get("items", [])],
            created_by=data["created_by"],
            server=data.get("server", ""),
            guest_count=data.get("guest_count", 1),
            order_type=data.get("order_type", Order.OrderType.DINE_IN),
            notes=data.get("notes", ""),
        )
        return Response(self._order_data(order), status=status.HTTP_201_CREATED)

    def destroy(self, request: Request, *args, **kwargs) -> Response:
        # Orders are never deleted; voiding keeps the audit trail
        raise MethodNotAllowed(request.method, detail="Orders cannot be deleted; void the order instead.")

    def _order_data(self, order) -> dict:
        """Re-read the order with its prefetches and serialize it."""
        order = self.get_queryset().get(pk=order.pk)
        return OrderSerializer(order, context=self.get_serializer_context()).data
