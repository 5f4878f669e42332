from rest_framework import serializers


class MoneyField(serializers.DecimalField):
    """Two-decimal monetary amount, rendered as a string."""

    def __init__(self, **kwargs):
        kwargs.setdefault("max_digits", 12)
        kwargs.setdefault("decimal_places", 2)
        super().__init__(**kwargs)


class BaseModelSerializer(serializers.ModelSerializer):
    """
    Base serializer that provides common functionality.

    Features:
    - Query optimization hints (select_related_fields / prefetch_related_fields)
      consumed by OptimizedQuerysetMixin
    - Common validation patterns
    """

    class Meta:
        # Default optimization fields (can be overridden)
        select_related_fields = []
        prefetch_related_fields = []

    def validate(self, data):
        """
        Base validation that can be extended by child classes.
        """
        data = super().validate(data)
        return data
