import django_filters
from datetime import datetime, time
from django.db.models import Q
from django.utils import timezone
from core_backend.base.filters import BaseFilterSet
from .models import Order


class OrderFilter(BaseFilterSet):
    """
    Filter for orders with business-day range filtering.

    ``date_range_gte``/``date_range_lte`` match orders opened OR closed in
    the range; ``date_filter_type`` narrows that to 'opened' or 'closed'.
    """

    date_range_gte = django_filters.DateFilter(method='filter_date_range')
    date_range_lte = django_filters.DateFilter(method='filter_date_range')
    date_filter_type = django_filters.ChoiceFilter(
        choices=[('all', 'All Activity'), ('opened', 'Opened Only'), ('closed', 'Closed Only')],
        method='filter_noop',
    )

    outlet = django_filters.UUIDFilter(field_name='outlet_id')
    table = django_filters.UUIDFilter(field_name='table_id')

    def filter_noop(self, queryset, name, value):
        # Read by filter_date_range
        return queryset

    def filter_date_range(self, queryset, name, value):
        bound = Q()
        field_names = {
            'opened': ['opened_at'],
            'closed': ['closed_at'],
        }.get(self.data.get('date_filter_type', 'all'), ['opened_at', 'closed_at'])

        if name == 'date_range_gte':
            lookup, moment = 'gte', datetime.combine(value, time.min)
        else:
            lookup, moment = 'lte', datetime.combine(value, time.max)
        moment = timezone.make_aware(moment)

        for field_name in field_names:
            bound |= Q(**{f'{field_name}__{lookup}': moment})
        return queryset.filter(bound)

    class Meta:
        model = Order
        fields = {
            'status': ['exact'],
            'payment_status': ['exact'],
            'order_type': ['exact'],
            'server': ['exact'],
        }
