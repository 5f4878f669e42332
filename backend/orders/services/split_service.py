from django.db import transaction
from django.utils import timezone
import logging

from core_backend.config import app_settings
from core_backend.exceptions import InvalidStateError
from orders.models import Order, SplitBill, SplitBillItem
from orders.splitting import ItemSnapshot, OrderSnapshot, SplitRequest, calculate_splits
from outlets.services import OutletDirectory
from .order_service import OrderService

logger = logging.getLogger(__name__)


class SplitBillService:
    """Creates and voids the split set of an order."""

    @staticmethod
    def build_snapshot(order: Order) -> OrderSnapshot:
        rates = OutletDirectory.get_outlet_rates(order.outlet_id)
        items = tuple(
            ItemSnapshot(
                id=str(item.pk),
                total_price=item.total_price,
                quantity=item.quantity,
                seat_number=item.seat_number,
            )
            for item in order.items.filter(is_void=False).order_by("created_at", "id")
        )
        return OrderSnapshot(
            order_number=order.order_number,
            subtotal=order.subtotal,
            tax_amount=order.tax_amount,
            service_charge=order.service_charge,
            discount=order.discount,
            tip=order.tip,
            total=order.total,
            tax_rate=rates.tax_rate,
            service_charge_rate=rates.service_charge_rate,
            items=items,
            currency=app_settings.currency,
            tolerance=app_settings.rounding_tolerance,
        )

    @staticmethod
    def active_splits(order: Order):
        return order.split_bills.filter(is_void=False).order_by("split_number")

    @staticmethod
    @transaction.atomic
    def create_split_set(order_id, split_type: str, splits) -> list:
        """
        Partition an open order into payable splits.

        Args:
            order_id: the order to split
            split_type: EQUAL, BY_SEAT, BY_ITEM or CUSTOM
            splits: the number of splits (EQUAL), a list of
                {"item_ids": [...], "seat_numbers": [...]} (BY_ITEM / BY_SEAT),
                or a list of {"amount": ...} (CUSTOM)

        Returns:
            list[SplitBill]: the created splits, all or nothing
        """
        order = OrderService.get_order(order_id, for_update=True)

        OrderService.ensure_open(order, "split the bill")
        if SplitBillService.active_splits(order).exists():
            raise InvalidStateError(
                f"Order {order.order_number} already has a split set; void it before splitting again",
                current_state="SPLIT",
            )
        if order.payments.exists():
            raise InvalidStateError(
                f"Order {order.order_number} already has payments and can no longer be split",
                current_state=order.payment_status,
            )

        snapshot = SplitBillService.build_snapshot(order)
        lines = calculate_splits(snapshot, SplitRequest(split_type=split_type, payload=splits))

        items_by_id = {str(item.pk): item for item in order.items.filter(is_void=False)}
        created = []
        memberships = []
        for line in lines:
            split = SplitBill.objects.create(
                order=order,
                split_number=line.split_number,
                split_type=split_type,
                subtotal=line.subtotal,
                tax_amount=line.tax_amount,
                service_charge=line.service_charge,
                discount=line.discount,
                tip=line.tip,
                total=line.total,
            )
            created.append(split)
            for item_id in line.item_ids:
                item = items_by_id[item_id]
                memberships.append(
                    SplitBillItem(
                        split_bill=split,
                        order_item=item,
                        quantity=item.quantity,
                        amount=item.total_price,
                    )
                )

        if memberships:
            SplitBillItem.objects.bulk_create(memberships)

        logger.info(
            f"Split order {order.order_number} ({order.total}) {split_type} into {len(created)} bills: "
            f"{[str(split.total) for split in created]}"
        )
        return created

    @staticmethod
    @transaction.atomic
    def void_split_set(order_id, voided_by: str = "") -> int:
        """
        Void the active split set of an order so it can be edited or split
        again. Refused once any split has been paid.
        """
        order = OrderService.get_order(order_id, for_update=True)
        OrderService.ensure_open(order, "void the split set")

        splits = SplitBillService.active_splits(order)
        if not splits.exists():
            raise InvalidStateError(
                f"Order {order.order_number} has no split set", current_state="UNSPLIT"
            )
        if splits.filter(is_paid=True).exists():
            raise InvalidStateError(
                f"Order {order.order_number} has paid splits; the split set can no longer be voided",
                current_state="PARTIALLY_PAID",
            )

        count = splits.update(is_void=True, voided_at=timezone.now())

        logger.info(f"Voided split set of order {order.order_number} ({count} bills) by {voided_by or 'unknown'}")
        return count
