from rest_framework import serializers

from core_backend.base import BaseModelSerializer
from shifts.models import Shift
from .models import Terminal


class TerminalSerializer(BaseModelSerializer):
    has_open_shift = serializers.SerializerMethodField()

    class Meta:
        model = Terminal
        fields = ["id", "outlet", "name", "device_id", "is_active", "has_open_shift", "created_at"]
        read_only_fields = ["created_at"]

    def get_has_open_shift(self, obj) -> bool:
        return obj.shifts.filter(status=Shift.ShiftStatus.OPEN).exists()
