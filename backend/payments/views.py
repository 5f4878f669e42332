import django_filters

from core_backend.base import BaseFilterSet, ReadOnlyBaseViewSet
from .models import Payment
from .serializers import PaymentSerializer


class PaymentFilter(BaseFilterSet):
    order = django_filters.UUIDFilter(field_name="order_id")
    shift = django_filters.UUIDFilter(field_name="shift_id")
    method = django_filters.ChoiceFilter(choices=Payment.PaymentMethod.choices)

    class Meta:
        model = Payment
        fields = ["order", "shift", "method", "processed_by", "created_at"]


class PaymentViewSet(ReadOnlyBaseViewSet):
    """Payments are recorded through the order endpoints; this is the read side."""

    queryset = Payment.objects.all()
    serializer_class = PaymentSerializer
    filterset_class = PaymentFilter
    search_fields = ["transaction_reference", "processed_by"]
    ordering = ["-created_at"]
