from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone
import logging

from core_backend.exceptions import InvalidStateError, NotFoundError, ValidationError
from menu.services import MenuCatalog
from orders.models import Order, OrderItem
from .calculation_service import OrderCalculationService
from .order_service import OrderService

logger = logging.getLogger(__name__)


class OrderItemService:
    """Service for managing order items - adding, updating, voiding."""

    MUTABLE_FIELDS = (
        "quantity",
        "seat_number",
        "course_number",
        "course_type",
        "modifiers",
        "special_instructions",
    )

    DEFAULT_VOID_REASON = "Item removed"

    @staticmethod
    def get_item(order: Order, item_id) -> OrderItem:
        """Fetch an item, requiring it to belong to ``order``."""
        try:
            return OrderItem.objects.select_for_update().get(pk=item_id, order=order)
        except (OrderItem.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError(
                "OrderItem",
                item_id,
                message=f"Item '{item_id}' not found on order {order.order_number}",
            )

    @staticmethod
    def _clean_changes(changes: dict) -> dict:
        """Validate item field values; shared by creation and mutation."""
        cleaned = {}
        for field_name, value in changes.items():
            if field_name == "quantity":
                try:
                    value = int(value)
                except (TypeError, ValueError):
                    raise ValidationError(f"Quantity must be a whole number, got {value!r}")
                if value < 1:
                    raise ValidationError("Quantity must be at least 1")
            elif field_name in ("seat_number", "course_number"):
                if value is not None:
                    try:
                        value = int(value)
                    except (TypeError, ValueError):
                        raise ValidationError(f"{field_name} must be a whole number, got {value!r}")
                    if value < 1:
                        raise ValidationError(f"{field_name} must be at least 1")
                elif field_name == "course_number":
                    raise ValidationError("course_number cannot be empty")
            elif field_name == "course_type":
                if value not in OrderItem.CourseType.values:
                    raise ValidationError(f"Unknown course type '{value}'")
            elif field_name == "modifiers":
                if value is None:
                    value = []
                if not isinstance(value, (list, dict)):
                    raise ValidationError("Modifiers must be a list or an object")
            elif field_name == "special_instructions":
                value = value or ""
            cleaned[field_name] = value
        return cleaned

    @staticmethod
    def build_item(order: Order, item_data: dict) -> OrderItem:
        """
        Create one order item, copying name and price from the menu catalog.
        Does not recompute; callers recompute once after all writes.
        """
        menu_item_id = item_data.get("menu_item_id") or item_data.get("menu_item")
        if not menu_item_id:
            raise ValidationError("Each item needs a menu_item_id")

        menu_item = MenuCatalog.get_menu_item(menu_item_id, outlet=order.outlet_id)

        fields = {key: item_data[key] for key in OrderItemService.MUTABLE_FIELDS if key in item_data}
        fields.setdefault("quantity", 1)
        fields.setdefault("course_type", menu_item.default_course_type)
        fields = OrderItemService._clean_changes(fields)

        item = OrderItem(
            order=order,
            menu_item=menu_item,
            name=menu_item.name,
            unit_price=menu_item.price,
            **fields,
        )
        item.save()
        return item

    @staticmethod
    @transaction.atomic
    def add_item(order_id, item_data: dict) -> OrderItem:
        """
        Append an item to an open order and recompute its totals.
        """
        order = OrderService.get_order(order_id, for_update=True)
        OrderService.ensure_open(order, "add items")
        OrderService.ensure_no_split_set(order, "add items")
        OrderService.ensure_unpaid(order, "add items")

        item = OrderItemService.build_item(order, item_data)
        order = OrderCalculationService.recalculate_order_totals(order)

        logger.info(
            f"Added {item.quantity} x {item.name} to order {order.order_number}; total now {order.total}"
        )
        return item

    @staticmethod
    @transaction.atomic
    def mutate_item(order_id, item_id, changes: dict) -> OrderItem:
        """
        Update quantity, seat, course, modifiers or instructions of a live
        item, then recompute the order from its items.

        Raises:
            NotFoundError: the item does not belong to the order
            InvalidStateError: the item is void or the order is not open
            ValidationError: unknown or invalid changes
        """
        order = OrderService.get_order(order_id, for_update=True)
        item = OrderItemService.get_item(order, item_id)

        if item.is_void:
            raise InvalidStateError(
                f"Item '{item.name}' is void and cannot be changed",
                current_state=item.status,
            )
        OrderService.ensure_open(order, "change items")
        OrderService.ensure_no_split_set(order, "change items")
        OrderService.ensure_unpaid(order, "change items")

        unknown = sorted(set(changes) - set(OrderItemService.MUTABLE_FIELDS))
        if unknown:
            raise ValidationError(
                f"Cannot change item field(s): {', '.join(unknown)}",
                detail={"allowed": list(OrderItemService.MUTABLE_FIELDS)},
            )

        for field_name, value in OrderItemService._clean_changes(changes).items():
            setattr(item, field_name, value)
        item.save()

        order = OrderCalculationService.recalculate_order_totals(order)

        logger.info(
            f"Updated item {item.pk} on order {order.order_number} ({', '.join(sorted(changes))}); "
            f"total now {order.total}"
        )
        return item

    @staticmethod
    @transaction.atomic
    def void_item(order_id, item_id, reason: str = "", voided_by: str = "") -> OrderItem:
        """
        Void an item. Its total_price is kept for the audit trail and the
        order is recomputed without it.
        """
        order = OrderService.get_order(order_id, for_update=True)
        item = OrderItemService.get_item(order, item_id)

        if item.is_void:
            raise InvalidStateError(f"Item '{item.name}' is already void", current_state=item.status)
        if not OrderItem.can_transition(item.status, OrderItem.ItemStatus.VOID):
            raise InvalidStateError(
                f"Item '{item.name}' cannot be voided from {item.status}",
                current_state=item.status,
            )
        OrderService.ensure_open(order, "void items")
        OrderService.ensure_no_split_set(order, "void items")
        OrderService.ensure_unpaid(order, "void items")

        item.is_void = True
        item.status = OrderItem.ItemStatus.VOID
        item.void_reason = reason or OrderItemService.DEFAULT_VOID_REASON
        item.voided_by = voided_by or ""
        item.voided_at = timezone.now()
        item.save(
            update_fields=["is_void", "status", "void_reason", "voided_by", "voided_at", "updated_at"]
        )

        order = OrderCalculationService.recalculate_order_totals(order)

        logger.info(
            f"Voided item {item.name} ({item.total_price}) on order {order.order_number} "
            f"by {voided_by or 'unknown'}: {item.void_reason}; total now {order.total}"
        )
        return item
