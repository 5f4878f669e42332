"""
Core backend base components.

This package provides foundational classes that every ledger app builds its
API surface on, for consistency and maintainability.
"""

from .viewsets import BaseViewSet, ReadOnlyBaseViewSet
from .serializers import BaseModelSerializer, MoneyField
from .mixins import OptimizedQuerysetMixin
from .filters import BaseFilterSet

__all__ = [
    # ViewSets
    'BaseViewSet',
    'ReadOnlyBaseViewSet',

    # Serializers
    'BaseModelSerializer',
    'MoneyField',

    # Mixins
    'OptimizedQuerysetMixin',

    # Filters
    'BaseFilterSet',
]
