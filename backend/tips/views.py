from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response

from core_backend.base import ReadOnlyBaseViewSet
from .models import TipPool
from .serializers import DistributeTipsSerializer, TipPoolSerializer
from .services import TipPoolService


class TipPoolViewSet(ReadOnlyBaseViewSet):
    """Tip pools can be created and read; there is no update path."""

    queryset = TipPool.objects.all()
    serializer_class = TipPoolSerializer
    filterset_fields = ["outlet", "date", "shift_type"]
    ordering = ["-date", "-created_at"]
    http_method_names = ["get", "post", "head", "options"]

    def create(self, request: Request, *args, **kwargs) -> Response:
        serializer = DistributeTipsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        allocations = [dict(entry) for entry in data["allocations"]]
        if serializer.uses_shares:
            allocations = TipPoolService.allocate_by_share(data["total_tips"], allocations)

        pool = TipPoolService.distribute_tips(
            data["outlet_id"],
            data["date"],
            data["total_tips"],
            allocations,
            shift_type=data["shift_type"],
            created_by=data["created_by"],
        )
        pool = self.get_queryset().get(pk=pool.pk)
        return Response(TipPoolSerializer(pool).data, status=status.HTTP_201_CREATED)
