from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from orders.serializers import (
    ApplyDiscountSerializer,
    CreateSplitSetSerializer,
    OrderDiscountSerializer,
    SplitBillSerializer,
)
from orders.services import OrderDiscountService, OrderService, SplitBillService
from payments.serializers import PaymentSerializer, RecordPaymentSerializer
from payments.services import PaymentService


class BillingActionsMixin:
    """
    Mixin for discount, split-bill and payment actions

    This mixin provides action methods for OrderViewSet.
    """

    @action(detail=True, methods=["post"], url_path="discounts")
    def apply_discount(self, request: Request, pk=None) -> Response:
        serializer = ApplyDiscountSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        discount = OrderDiscountService.apply_discount(pk, **serializer.validated_data)
        return Response(OrderDiscountSerializer(discount).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["delete"], url_path=r"discounts/(?P<discount_pk>[^/.]+)")
    def remove_discount(self, request: Request, pk=None, discount_pk=None) -> Response:
        order = OrderDiscountService.remove_discount(
            pk, discount_pk, removed_by=request.query_params.get("removed_by", "")
        )
        return Response(self._order_data(order))

    @action(detail=True, methods=["get", "post"], url_path="splits")
    def splits(self, request: Request, pk=None) -> Response:
        """
        GET lists the active split set; POST creates one.

        The split set is all or nothing: a rejected partition leaves the
        order unsplit.
        """
        if request.method == "GET":
            order = OrderService.get_order(pk)
            return Response(SplitBillSerializer(SplitBillService.active_splits(order), many=True).data)

        serializer = CreateSplitSetSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        splits = SplitBillService.create_split_set(
            pk, serializer.validated_data["split_type"], serializer.to_payload()
        )
        return Response(SplitBillSerializer(splits, many=True).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="void-splits")
    def void_splits(self, request: Request, pk=None) -> Response:
        count = SplitBillService.void_split_set(pk, voided_by=request.data.get("voided_by", ""))
        return Response({"voided": count})

    @action(detail=True, methods=["get", "post"], url_path="payments")
    def payments(self, request: Request, pk=None) -> Response:
        """GET lists the order's payments; POST records one."""
        if request.method == "GET":
            order = OrderService.get_order(pk)
            return Response(PaymentSerializer(order.payments.select_related("split_bill"), many=True).data)

        serializer = RecordPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        payment = PaymentService.record_payment(pk, **serializer.validated_data)
        return Response(
            {
                "payment": PaymentSerializer(payment).data,
                "order": self._order_data(payment.order),
            },
            status=status.HTTP_201_CREATED,
        )
