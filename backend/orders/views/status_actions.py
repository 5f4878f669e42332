from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from orders.serializers import (
    CloseOrderSerializer,
    FireCourseSerializer,
    OrderItemSerializer,
    VoidOrderSerializer,
)
from orders.services import KitchenService, OrderService


class StatusActionsMixin:
    """
    Mixin for order lifecycle and kitchen actions

    This mixin provides action methods for OrderViewSet.
    """

    @action(detail=True, methods=["post"], url_path="close")
    def close(self, request: Request, pk=None) -> Response:
        """Close a served, fully paid order and free its table."""
        serializer = CloseOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = OrderService.close_order(pk, closed_by=serializer.validated_data["closed_by"])
        return Response(self._order_data(order))

    @action(detail=True, methods=["post"], url_path="void")
    def void(self, request: Request, pk=None) -> Response:
        """Void an unpaid order. A reason is mandatory."""
        serializer = VoidOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = OrderService.void_order(
            pk,
            reason=serializer.validated_data["reason"],
            voided_by=serializer.validated_data["voided_by"],
        )
        return Response(self._order_data(order))

    @action(detail=True, methods=["post"], url_path="fire")
    def fire(self, request: Request, pk=None) -> Response:
        """Send pending items (optionally one course) to the kitchen."""
        serializer = FireCourseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        items = KitchenService.fire_course(
            pk,
            course_number=serializer.validated_data["course_number"],
            performed_by=serializer.validated_data["performed_by"],
        )
        return Response(OrderItemSerializer(items, many=True).data)
