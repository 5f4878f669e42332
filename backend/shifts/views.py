from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from core_backend.base import ReadOnlyBaseViewSet
from .filters import ShiftFilter
from .models import Shift
from .serializers import (
    CashDropCreateSerializer,
    CashDropSerializer,
    CloseShiftSerializer,
    OpenShiftSerializer,
    ReconcileShiftSerializer,
    ShiftSerializer,
)
from .services import ShiftService


class ShiftViewSet(ReadOnlyBaseViewSet):
    queryset = Shift.objects.all()
    serializer_class = ShiftSerializer
    filterset_class = ShiftFilter
    ordering = ["-start_time"]
    http_method_names = ["get", "post", "head", "options"]

    def create(self, request: Request, *args, **kwargs) -> Response:
        """Open a shift."""
        serializer = OpenShiftSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        shift = ShiftService.open_shift(
            data["outlet_id"],
            data["terminal_id"],
            data["employee_id"],
            opening_float=data["opening_float"],
            notes=data["notes"],
        )
        return Response(self._shift_data(shift), status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="cash-drops")
    def cash_drops(self, request: Request, pk=None) -> Response:
        serializer = CashDropCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        drop = ShiftService.record_cash_drop(pk, **serializer.validated_data)
        return Response(CashDropSerializer(drop).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def close(self, request: Request, pk=None) -> Response:
        serializer = CloseShiftSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        shift = ShiftService.close_shift(pk, **serializer.validated_data)
        return Response(self._shift_data(shift))

    @action(detail=True, methods=["post"])
    def reconcile(self, request: Request, pk=None) -> Response:
        serializer = ReconcileShiftSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        shift = ShiftService.reconcile_shift(pk, **serializer.validated_data)
        return Response(self._shift_data(shift))

    @action(detail=True, methods=["get"])
    def breakdown(self, request: Request, pk=None) -> Response:
        breakdown = ShiftService.get_breakdown(pk)
        return Response({key: str(value) if value is not None else None for key, value in breakdown.items()})

    def _shift_data(self, shift) -> dict:
        shift = Shift.objects.select_related("terminal").prefetch_related("cash_drops").get(pk=shift.pk)
        return ShiftSerializer(shift).data
