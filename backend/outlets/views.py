from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from core_backend.base import BaseViewSet, ReadOnlyBaseViewSet
from .filters import TableFilter
from .models import Outlet, Table
from .serializers import OutletSerializer, TableSerializer, TableStatusSerializer
from .services import TableService


class OutletViewSet(ReadOnlyBaseViewSet):
    """Outlet configuration is owned by the platform; the ledger only reads it."""

    queryset = Outlet.objects.all()
    serializer_class = OutletSerializer
    search_fields = ["name", "code"]
    ordering = ["name"]


class TableViewSet(BaseViewSet):
    queryset = Table.objects.all()
    serializer_class = TableSerializer
    filterset_class = TableFilter
    ordering = ["table_number"]
    http_method_names = ["get", "post", "patch", "head", "options"]

    @action(detail=True, methods=["post"], url_path="set-status")
    def set_status(self, request: Request, pk=None) -> Response:
        """Staff status change (cleaning, blocked, reserved, available)."""
        serializer = TableStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        table = TableService.set_status(
            pk,
            serializer.validated_data["status"],
            changed_by=serializer.validated_data["changed_by"],
        )
        return Response(TableSerializer(table).data)
