from decimal import Decimal
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction, IntegrityError
from django.db.models import Sum
from django.utils import timezone
import logging

from core_backend.config import app_settings
from core_backend.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from notifications.services import LedgerEvent, LedgerEventPublisher
from orders.models import Order, OrderItem
from outlets.services import OutletDirectory, TableBinder
from .calculation_service import OrderCalculationService

logger = logging.getLogger(__name__)


class OrderService:
    """Order lifecycle: open, close and void."""

    @staticmethod
    def get_order(order_id, for_update: bool = False) -> Order:
        if isinstance(order_id, Order):
            order_id = order_id.pk
        queryset = Order.objects.select_for_update() if for_update else Order.objects.all()
        try:
            return queryset.get(pk=order_id)
        except (Order.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError("Order", order_id)

    @staticmethod
    def ensure_open(order: Order, action: str) -> None:
        if not order.is_open:
            raise InvalidStateError(
                f"Cannot {action}: order {order.order_number} is {order.status}",
                current_state=order.status,
            )

    @staticmethod
    def ensure_no_split_set(order: Order, action: str) -> None:
        """Split sets are immutable; edits need the set voided first."""
        if order.split_bills.filter(is_void=False).exists():
            raise InvalidStateError(
                f"Cannot {action}: order {order.order_number} has an active split set; void it first",
                current_state="SPLIT",
            )

    @staticmethod
    def ensure_unpaid(order: Order, action: str) -> None:
        """Recorded payments pin the bill; anything that moves the total is refused."""
        if order.payments.exists():
            raise InvalidStateError(
                f"Cannot {action}: order {order.order_number} already has payments",
                current_state=order.payment_status,
            )

    @staticmethod
    def amount_paid(order: Order) -> Decimal:
        """Bill amount plus tips collected so far."""
        paid = order.payments.aggregate(amount=Sum("amount"), tips=Sum("tip_amount"))
        return (paid["amount"] or Decimal("0.00")) + (paid["tips"] or Decimal("0.00"))

    @staticmethod
    @transaction.atomic
    def create_order(
        outlet,
        table,
        items: list = None,
        created_by: str = "",
        server: str = "",
        guest_count: int = 1,
        order_type: str = Order.OrderType.DINE_IN,
        notes: str = "",
    ) -> Order:
        """
        Open an order, add its initial items and seat it at the table.

        The order row, the item rows and the table flip to OCCUPIED commit
        together or not at all.

        Args:
            outlet: Outlet instance or id
            table: Table instance or id (optional for takeaway)
            items: list of item dicts (menu_item_id, quantity, seat_number, ...)
            created_by: employee reference for audit

        Returns:
            Order: the created order with computed totals
        """
        from .item_service import OrderItemService

        outlet = OutletDirectory.get_outlet(outlet)

        if order_type not in Order.OrderType.values:
            raise ValidationError(f"Unknown order type '{order_type}'")
        if guest_count is None or int(guest_count) < 1:
            raise ValidationError("Guest count must be at least 1")

        if table is not None:
            table = OutletDirectory.get_table(table, outlet=outlet)
        elif order_type == Order.OrderType.DINE_IN:
            raise ValidationError("A dine-in order needs a table")

        if table is not None and Order.objects.filter(table=table, status=Order.OrderStatus.OPEN).exists():
            raise ValidationError(
                f"Table {table.table_number} already has an open order",
                detail={"table_id": str(table.pk)},
            )

        try:
            order = Order.objects.create(
                outlet=outlet,
                table=table,
                created_by=created_by,
                server=server or created_by,
                guest_count=guest_count,
                order_type=order_type,
                notes=notes or "",
            )
        except IntegrityError:
            raise ConflictError(
                f"Table {table.table_number} was taken by a concurrent order",
                detail={"table_id": str(table.pk)},
            )

        if table is not None:
            TableBinder.bind(table, order)

        for item_data in items or []:
            OrderItemService.build_item(order, item_data)

        order = OrderCalculationService.recalculate_order_totals(order)

        logger.info(
            f"Opened order {order.order_number} at outlet {outlet.code} "
            f"(table={table.table_number if table else '-'}, items={len(items or [])}, total={order.total})"
        )
        return order

    @staticmethod
    @transaction.atomic
    def close_order(order_id, closed_by: str = "") -> Order:
        """
        Close a fully served and fully paid order and free its table.
        """
        order = OrderService.get_order(order_id, for_update=True)

        if not order.can_transition_to(Order.OrderStatus.CLOSED):
            raise InvalidStateError(
                f"Order {order.order_number} cannot be closed from {order.status}",
                current_state=order.status,
            )

        if app_settings.require_served_before_close:
            unserved = list(
                order.items.filter(is_void=False)
                .exclude(status=OrderItem.ItemStatus.SERVED)
                .values_list("id", flat=True)
            )
            if unserved:
                raise InvalidStateError(
                    f"Order {order.order_number} has {len(unserved)} item(s) not yet served",
                    current_state=order.status,
                    detail={"unserved_item_ids": [str(pk) for pk in unserved]},
                )

        unpaid_splits = list(
            order.split_bills.filter(is_void=False, is_paid=False).values_list("split_number", flat=True)
        )
        if unpaid_splits:
            raise InvalidStateError(
                f"Order {order.order_number} has unpaid split bills: {unpaid_splits}",
                current_state=order.status,
                detail={"unpaid_split_numbers": unpaid_splits},
            )

        outstanding = order.total - OrderService.amount_paid(order)
        if outstanding > app_settings.rounding_tolerance:
            raise InvalidStateError(
                f"Order {order.order_number} has an outstanding balance of {outstanding}",
                current_state=order.status,
                detail={"outstanding": str(outstanding)},
            )
        if outstanding < -app_settings.rounding_tolerance:
            raise InvalidStateError(
                f"Order {order.order_number} is overpaid by {-outstanding}",
                current_state=order.payment_status,
                detail={"outstanding": str(outstanding)},
            )

        order.status = Order.OrderStatus.CLOSED
        order.closed_at = timezone.now()
        order.closed_by = closed_by or ""
        order.save(update_fields=["status", "closed_at", "closed_by", "updated_at"])

        if order.table_id:
            TableBinder.release(order.table, order)

        LedgerEventPublisher.publish(
            LedgerEvent.ORDER_CLOSED,
            {
                "order_id": order.pk,
                "order_number": order.order_number,
                "outlet_id": order.outlet_id,
                "total": order.total,
                "closed_at": order.closed_at,
            },
        )

        logger.info(f"Closed order {order.order_number} with total {order.total}")
        return order

    @staticmethod
    @transaction.atomic
    def void_order(order_id, reason: str, voided_by: str) -> Order:
        """
        Abandon an open order that has taken no payment. Its items and totals
        stay as they were for the audit trail; any split set is voided and the
        table is freed.
        """
        order = OrderService.get_order(order_id, for_update=True)

        if not order.can_transition_to(Order.OrderStatus.VOID):
            raise InvalidStateError(
                f"Order {order.order_number} cannot be voided from {order.status}",
                current_state=order.status,
            )
        if not reason:
            raise ValidationError("A void reason is required")
        if order.payments.exists():
            raise InvalidStateError(
                f"Order {order.order_number} has recorded payments and cannot be voided",
                current_state=order.payment_status,
            )

        now = timezone.now()
        order.split_bills.filter(is_void=False).update(is_void=True, voided_at=now)

        order.status = Order.OrderStatus.VOID
        order.void_reason = reason
        order.voided_by = voided_by or ""
        order.voided_at = now
        order.save(update_fields=["status", "void_reason", "voided_by", "voided_at", "updated_at"])

        if order.table_id:
            TableBinder.release(order.table, order)

        LedgerEventPublisher.publish(
            LedgerEvent.ORDER_VOIDED,
            {
                "order_id": order.pk,
                "order_number": order.order_number,
                "outlet_id": order.outlet_id,
                "reason": reason,
                "voided_by": voided_by,
            },
        )

        logger.info(f"Voided order {order.order_number} by {voided_by}: {reason}")
        return order

    @staticmethod
    def update_payment_status(order: Order) -> Order:
        """
        Derive payment_status from the payments recorded so far. Must run
        inside the caller's transaction with the order row locked.
        """
        paid = OrderService.amount_paid(order)

        if paid <= 0:
            new_status = Order.PaymentStatus.UNPAID
        elif paid >= order.total - app_settings.rounding_tolerance:
            new_status = Order.PaymentStatus.PAID
        else:
            new_status = Order.PaymentStatus.PARTIALLY_PAID

        if order.payment_status != new_status:
            order.payment_status = new_status
            order.save(update_fields=["payment_status", "updated_at"])
            logger.info(f"Order {order.order_number} payment status -> {new_status}")
        return order
