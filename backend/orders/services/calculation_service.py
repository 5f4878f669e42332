from django.db import transaction
import logging

from core_backend.config import app_settings
from orders.calculators import recompute
from orders.models import Order
from outlets.services import OutletDirectory

logger = logging.getLogger(__name__)


class OrderCalculationService:
    """Service for recomputing and persisting order totals."""

    @staticmethod
    @transaction.atomic
    def recalculate_order_totals(order: Order) -> Order:
        """
        Lock the order row, refetch its non-void items and discounts, and
        persist the totals they imply.

        The read happens after the lock is taken, so two concurrent item
        edits serialize here and the second recompute sees the first's
        items. Returns the refreshed order.
        """
        order = Order.objects.select_for_update().get(pk=order.pk)

        rates = OutletDirectory.get_outlet_rates(order.outlet_id)
        items = list(order.items.filter(is_void=False))
        discounts = list(order.discounts.order_by("created_at", "id"))

        totals = recompute(items, rates, discounts=discounts, tip=order.tip, currency=app_settings.currency)

        for discount, amount in zip(discounts, totals.discount_amounts):
            if discount.amount != amount:
                discount.amount = amount
                discount.save(update_fields=["amount"])

        for field_name, value in totals.as_dict().items():
            setattr(order, field_name, value)
        order.save(
            update_fields=[
                "subtotal",
                "tax_amount",
                "service_charge",
                "discount",
                "tip",
                "total",
                "updated_at",
            ]
        )

        logger.debug(
            f"Recalculated order {order.order_number}: subtotal={order.subtotal} "
            f"tax={order.tax_amount} service={order.service_charge} "
            f"discount={order.discount} tip={order.tip} total={order.total}"
        )
        return order
