from django.db import transaction
from django.utils import timezone
import logging

from core_backend.exceptions import InvalidStateError, ValidationError
from orders.models import OrderItem
from .item_service import OrderItemService
from .order_service import OrderService

logger = logging.getLogger(__name__)


class KitchenService:
    """Kitchen-to-table progress of order items."""

    @staticmethod
    def _stamp(item: OrderItem, new_status: str, now) -> list:
        """
        Stamp the timestamp of ``new_status`` and of any status skipped on
        the way, keeping timestamps already set.
        """
        updated = []
        start = OrderItem.PROGRESSION.index(item.status) + 1
        end = OrderItem.PROGRESSION.index(new_status) + 1
        for status in OrderItem.PROGRESSION[start:end]:
            field_name = OrderItem.STATUS_TIMESTAMPS.get(status)
            if field_name and getattr(item, field_name) is None:
                setattr(item, field_name, now)
                updated.append(field_name)
        return updated

    @staticmethod
    @transaction.atomic
    def transition_item(order_id, item_id, new_status: str, performed_by: str = "") -> OrderItem:
        """
        Move an item forward through PENDING -> SENT -> READY -> SERVED.

        Repeating the current status is a no-op, so a duplicate "send" keeps
        the first sent_to_kitchen_at. Backward moves and moves out of SERVED
        or VOID raise InvalidStateError. Voiding goes through
        OrderItemService.void_item so the order is recomputed.
        """
        if new_status not in OrderItem.ItemStatus.values:
            raise ValidationError(f"Unknown item status '{new_status}'")
        if new_status == OrderItem.ItemStatus.VOID:
            raise ValidationError("Use the void operation to void an item")

        order = OrderService.get_order(order_id)
        item = OrderItemService.get_item(order, item_id)

        if item.status == new_status:
            logger.debug(f"Item {item.pk} already {new_status}; nothing to do")
            return item

        if not OrderItem.can_transition(item.status, new_status):
            raise InvalidStateError(
                f"Item '{item.name}' cannot move from {item.status} to {new_status}",
                current_state=item.status,
            )
        OrderService.ensure_open(order, "update item status")

        updated_fields = KitchenService._stamp(item, new_status, timezone.now())
        item.status = new_status
        item.save(update_fields=["status", "updated_at", *updated_fields])

        logger.info(
            f"Item {item.name} on order {order.order_number} -> {new_status} "
            f"by {performed_by or 'unknown'}"
        )
        return item

    @staticmethod
    @transaction.atomic
    def fire_course(order_id, course_number: int = None, performed_by: str = "") -> list:
        """
        Send every PENDING item of the order (or of one course) to the kitchen.
        Returns the items that moved.
        """
        order = OrderService.get_order(order_id)
        OrderService.ensure_open(order, "send items to the kitchen")

        pending = order.items.filter(is_void=False, status=OrderItem.ItemStatus.PENDING)
        if course_number is not None:
            pending = pending.filter(course_number=course_number)

        fired = [
            KitchenService.transition_item(order.pk, item.pk, OrderItem.ItemStatus.SENT, performed_by)
            for item in pending
        ]

        logger.info(
            f"Fired {len(fired)} item(s) of order {order.order_number}"
            f"{f' course {course_number}' if course_number is not None else ''}"
        )
        return fired
