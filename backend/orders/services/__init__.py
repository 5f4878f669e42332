"""
Orders services package - the order aggregate's service layer.

- OrderService: order lifecycle (create, close, void)
- OrderCalculationService: locked refetch-and-recompute of order totals
- OrderItemService: item add, mutate and void
- KitchenService: forward-only item status progression
- OrderDiscountService: order-level discounts
- SplitBillService: split set creation and voiding
"""

# Core order operations
from .order_service import OrderService

# Calculation operations
from .calculation_service import OrderCalculationService

# Item management
from .item_service import OrderItemService

# Kitchen operations
from .kitchen_service import KitchenService

# Discount operations
from .discount_service import OrderDiscountService

# Split bills
from .split_service import SplitBillService

__all__ = [
    'OrderService',
    'OrderCalculationService',
    'OrderItemService',
    'KitchenService',
    'OrderDiscountService',
    'SplitBillService',
]
