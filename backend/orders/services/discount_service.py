from decimal import Decimal, InvalidOperation
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
import logging

from core_backend.config import app_settings
from core_backend.exceptions import NotFoundError, ValidationError
from orders.models import OrderDiscount
from payments.money import percent_of, quantize
from .calculation_service import OrderCalculationService
from .order_service import OrderService

logger = logging.getLogger(__name__)


class OrderDiscountService:
    """Order-level discounts."""

    @staticmethod
    @transaction.atomic
    def apply_discount(
        order_id,
        name: str,
        discount_type: str,
        value,
        applied_by: str,
        reason: str = "",
        approved_by: str = "",
    ) -> OrderDiscount:
        """
        Apply a PERCENTAGE or FLAT discount to an open order.

        Rejected when the discounts together would exceed the subtotal.
        """
        order = OrderService.get_order(order_id, for_update=True)
        OrderService.ensure_open(order, "apply a discount")
        OrderService.ensure_no_split_set(order, "apply a discount")
        OrderService.ensure_unpaid(order, "apply a discount")

        if discount_type not in OrderDiscount.DiscountType.values:
            raise ValidationError(f"Unknown discount type '{discount_type}'")
        try:
            value = Decimal(str(value))
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError(f"Invalid discount value {value!r}")
        if value <= 0:
            raise ValidationError("Discount value must be greater than zero")
        if discount_type == OrderDiscount.DiscountType.PERCENTAGE and value > 100:
            raise ValidationError("A percentage discount cannot exceed 100%")

        currency = app_settings.currency
        if discount_type == OrderDiscount.DiscountType.PERCENTAGE:
            amount = percent_of(currency, order.subtotal, value)
        else:
            amount = quantize(currency, value)

        if order.discount + amount > order.subtotal:
            raise ValidationError(
                f"Discount of {amount} would bring total discounts above the subtotal {order.subtotal}",
                detail={
                    "existing_discount": str(order.discount),
                    "requested": str(amount),
                    "subtotal": str(order.subtotal),
                },
            )

        discount = OrderDiscount.objects.create(
            order=order,
            name=name,
            discount_type=discount_type,
            value=value,
            amount=amount,
            reason=reason or "",
            applied_by=applied_by or "",
            approved_by=approved_by or "",
        )

        order = OrderCalculationService.recalculate_order_totals(order)
        discount.refresh_from_db()

        logger.info(
            f"Applied {discount_type} discount '{name}' ({discount.amount}) to order "
            f"{order.order_number} by {applied_by}; total now {order.total}"
        )
        return discount

    @staticmethod
    @transaction.atomic
    def remove_discount(order_id, discount_id, removed_by: str = ""):
        order = OrderService.get_order(order_id, for_update=True)
        OrderService.ensure_open(order, "remove a discount")
        OrderService.ensure_no_split_set(order, "remove a discount")
        OrderService.ensure_unpaid(order, "remove a discount")

        try:
            discount = order.discounts.get(pk=discount_id)
        except (OrderDiscount.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError("OrderDiscount", discount_id)

        discount.delete()
        order = OrderCalculationService.recalculate_order_totals(order)

        logger.info(
            f"Removed discount '{discount.name}' from order {order.order_number} "
            f"by {removed_by or 'unknown'}; total now {order.total}"
        )
        return order
