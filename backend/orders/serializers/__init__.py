"""
Orders serializers package - modular serializer layer.
"""

# Order item serializers
from .order_item_serializers import (
    OrderItemSerializer,
    AddItemSerializer,
    UpdateOrderItemSerializer,
    VoidItemSerializer,
    ItemStatusSerializer,
)

# Discount serializers
from .discount_serializers import (
    OrderDiscountSerializer,
    ApplyDiscountSerializer,
)

# Split serializers
from .split_serializers import (
    SplitBillSerializer,
    SplitBillItemSerializer,
    CreateSplitSetSerializer,
)

# Order serializers
from .order_serializers import (
    OrderSerializer,
    OrderListSerializer,
    OrderCreateSerializer,
    CloseOrderSerializer,
    VoidOrderSerializer,
    FireCourseSerializer,
)

__all__ = [
    # Order items
    'OrderItemSerializer',
    'AddItemSerializer',
    'UpdateOrderItemSerializer',
    'VoidItemSerializer',
    'ItemStatusSerializer',

    # Discounts
    'OrderDiscountSerializer',
    'ApplyDiscountSerializer',

    # Splits
    'SplitBillSerializer',
    'SplitBillItemSerializer',
    'CreateSplitSetSerializer',

    # Orders
    'OrderSerializer',
    'OrderListSerializer',
    'OrderCreateSerializer',
    'CloseOrderSerializer',
    'VoidOrderSerializer',
    'FireCourseSerializer',
]
