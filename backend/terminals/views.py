from core_backend.base import BaseViewSet
from .models import Terminal
from .serializers import TerminalSerializer


class TerminalViewSet(BaseViewSet):
    """
    Registered tills. Deactivating a terminal stops new shifts from opening
    on it; a shift already open runs to its close.
    """

    queryset = Terminal.objects.all()
    serializer_class = TerminalSerializer
    filterset_fields = ["outlet", "is_active"]
    search_fields = ["name", "device_id"]
    ordering = ["name"]
    http_method_names = ["get", "post", "patch", "head", "options"]
