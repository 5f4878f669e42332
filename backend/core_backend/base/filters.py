import django_filters
from django.db import models
from django.utils import timezone
from datetime import datetime, time


class FlexibleDateTimeFilter(django_filters.DateTimeFilter):
    """
    A DateTimeFilter that handles date-only inputs as full-day ranges.

    A value like "2025-11-11" on a 'lte'/'lt' lookup is moved to the end of
    that day; every other lookup keeps the start of day.
    """

    def filter(self, qs, value):
        if isinstance(value, datetime) and value.time() == time(0, 0, 0):
            if self.lookup_expr in ['lte', 'lt']:
                value = datetime.combine(value.date(), time.max)
                if timezone.is_naive(value):
                    value = timezone.make_aware(value)

        return super().filter(qs, value)


class BaseFilterSet(django_filters.FilterSet):
    """
    Base filter set with common filtering patterns.

    Automatically uses FlexibleDateTimeFilter for all DateTimeField filters.
    """

    @classmethod
    def filter_for_field(cls, field, field_name, lookup_expr='exact'):
        if isinstance(field, models.DateTimeField):
            return FlexibleDateTimeFilter(field_name=field_name, lookup_expr=lookup_expr)

        return super().filter_for_field(field, field_name, lookup_expr)
