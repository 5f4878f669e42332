from decimal import Decimal, InvalidOperation, ROUND_HALF_EVEN
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
from outlets.services import OutletDirectory
from payments.money import ZERO, quantize
from .models import (
    GoodsReceipt,
    InventoryItem,
    PurchaseOrder,
    PurchaseOrderItem,
    StockMovement,
    WasteLog,
    WasteLogItem,
)

logger = logging.getLogger(__name__)

QUANTITY_STEP = Decimal("0.001")
COST_STEP = Decimal("0.0001")


def _quantity(value, label: str = "Quantity") -> Decimal:
    try:
        return Decimal(str(value)).quantize(QUANTITY_STEP, rounding=ROUND_HALF_EVEN)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{label} must be a decimal number, got {value!r}")


def _unit_cost(value) -> Decimal:
    try:
        cost = Decimal(str(value)).quantize(COST_STEP, rounding=ROUND_HALF_EVEN)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"Unit cost must be a decimal number, got {value!r}")
    if cost < 0:
        raise ValidationError("Unit cost cannot be negative")
    return cost


class StockLedgerService:
    """
    The single writer of InventoryItem.current_stock.

    Every change goes through adjust_stock, which writes the new stock level
    and the movement explaining it in the same transaction.
    """

    @staticmethod
    def get_item(item_id, for_update: bool = False, outlet=None) -> InventoryItem:
        if isinstance(item_id, InventoryItem):
            item_id = item_id.pk
        queryset = InventoryItem.objects.select_for_update() if for_update else InventoryItem.objects.all()
        if outlet is not None:
            queryset = queryset.filter(outlet=outlet)
        try:
            return queryset.get(pk=item_id)
        except (InventoryItem.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError("InventoryItem", item_id)

    @staticmethod
    @transaction.atomic
    def create_item(
        outlet,
        sku: str,
        name: str,
        unit_of_measure: str = "unit",
        opening_stock=0,
        reorder_point=0,
        unit_cost=0,
    ) -> InventoryItem:
        """Start stocking an item. Its opening stock is the base of the movement log."""
        outlet = OutletDirectory.get_outlet(outlet)
        opening_stock = _quantity(opening_stock, "Opening stock")
        reorder_point = _quantity(reorder_point, "Reorder point")
        if opening_stock < 0 or reorder_point < 0:
            raise ValidationError("Opening stock and reorder point cannot be negative")
        unit_cost = _unit_cost(unit_cost)

        try:
            with transaction.atomic():
                item = InventoryItem.objects.create(
                    outlet=outlet,
                    sku=sku,
                    name=name,
                    unit_of_measure=unit_of_measure or "unit",
                    opening_stock=opening_stock,
                    current_stock=opening_stock,
                    reorder_point=reorder_point,
                    average_cost=unit_cost,
                    last_cost=unit_cost,
                )
        except IntegrityError:
            raise ConflictError(f"SKU {sku} already exists at {outlet.code}", detail={"sku": sku})

        logger.info(f"Stocking {sku} ({name}) at {outlet.code} with {opening_stock} {item.unit_of_measure}")
        return item

    @staticmethod
    @transaction.atomic
    def adjust_stock(
        item_id,
        delta,
        reason: str,
        performed_by: str = None,
        movement_type: str = StockMovement.MovementType.ADJUSTMENT,
        reference_type: str = "",
        reference_id: str = "",
        unit_cost=None,
        notes: str = "",
    ) -> StockMovement:
        """
        Apply a signed stock change and record it.

        Raises:
            ValidationError: zero delta, missing reason, unknown movement type,
                or a change that would take stock below zero
        """
        delta = _quantity(delta, "Stock change")
        if delta == 0:
            raise ValidationError("Stock change must be non-zero")
        if not reason:
            raise ValidationError("A reason is required for every stock movement")
        if movement_type not in StockMovement.MovementType.values:
            raise ValidationError(f"Unknown movement type '{movement_type}'")

        item = StockLedgerService.get_item(item_id, for_update=True)

        previous_stock = item.current_stock
        new_stock = previous_stock + delta
        if new_stock < 0:
            logger.warning(
                f"Rejected stock change {delta} on {item.sku}: only {previous_stock} {item.unit_of_measure} on hand"
            )
            raise ValidationError(
                f"Insufficient stock for {item.name}. Required: {-delta}, Available: {previous_stock}",
                detail={"item_id": str(item.pk), "available": str(previous_stock), "requested": str(delta)},
            )

        total_cost = None
        if unit_cost is not None:
            unit_cost = _unit_cost(unit_cost)
            total_cost = quantize(app_settings.currency, delta * unit_cost)

        item.current_stock = new_stock
        item.save(update_fields=["current_stock", "updated_at"])

        movement = StockMovement.objects.create(
            item=item,
            movement_type=movement_type,
            quantity=delta,
            previous_stock=previous_stock,
            new_stock=new_stock,
            unit_cost=unit_cost,
            total_cost=total_cost,
            reference_type=reference_type or "",
            reference_id=str(reference_id or ""),
            reason=reason,
            notes=notes or "",
            performed_by=performed_by or "",
        )

        # Alert only when this movement crosses the reorder point downward
        if previous_stock > item.reorder_point >= new_stock:
            LedgerEventPublisher.publish(
                LedgerEvent.LOW_STOCK,
                {
                    "item_id": item.pk,
                    "outlet_id": item.outlet_id,
                    "sku": item.sku,
                    "name": item.name,
                    "current_stock": new_stock,
                    "reorder_point": item.reorder_point,
                },
            )
            logger.warning(f"{item.sku} fell to {new_stock} (reorder point {item.reorder_point})")

        logger.info(
            f"{movement_type} {delta:+} {item.unit_of_measure} of {item.sku}: "
            f"{previous_stock} -> {new_stock} by {performed_by or 'system'} ({reason})"
        )
        return movement

    @staticmethod
    @transaction.atomic
    def record_stock_count(item_id, counted_quantity, performed_by: str = None, notes: str = ""):
        """
        Bring stock in line with a physical count. Returns the STOCK_COUNT
        movement, or None when the count matches the ledger.
        """
        counted_quantity = _quantity(counted_quantity, "Counted quantity")
        if counted_quantity < 0:
            raise ValidationError("Counted quantity cannot be negative")

        item = StockLedgerService.get_item(item_id, for_update=True)
        delta = counted_quantity - item.current_stock
        if delta == 0:
            logger.info(f"Stock count of {item.sku} matches the ledger at {counted_quantity}")
            return None

        return StockLedgerService.adjust_stock(
            item,
            delta,
            reason="Physical stock count",
            performed_by=performed_by,
            movement_type=StockMovement.MovementType.STOCK_COUNT,
            unit_cost=item.average_cost,
            notes=notes,
        )

    @staticmethod
    def reconstruct_stock(item: InventoryItem) -> Decimal:
        """Stock level implied by the movement log: opening + sum(movements)."""
        moved = item.movements.aggregate(total=Sum("quantity"))["total"] or Decimal("0.000")
        return item.opening_stock + moved

    @staticmethod
    def verify_item(item: InventoryItem) -> dict:
        reconstructed = StockLedgerService.reconstruct_stock(item)
        consistent = reconstructed == item.current_stock
        if not consistent:
            logger.error(
                f"Stock ledger mismatch for {item.sku}: current {item.current_stock}, "
                f"movements imply {reconstructed}"
            )
        return {
            "item_id": item.pk,
            "sku": item.sku,
            "current_stock": item.current_stock,
            "reconstructed_stock": reconstructed,
            "consistent": consistent,
        }


class WasteService:
    @staticmethod
    @transaction.atomic
    def log_waste(outlet, reason: str, lines: list, recorded_by: str, notes: str = "") -> WasteLog:
        """
        Write off wasted stock. Each line is {"item_id": ..., "quantity": ...};
        every line becomes a negative WASTE movement costed at the item's
        average cost. One short line rejects the whole log.
        """
        outlet = OutletDirectory.get_outlet(outlet)

        if reason not in WasteLog.WasteReason.values:
            raise ValidationError(f"Unknown waste reason '{reason}'")
        if not lines:
            raise ValidationError("A waste log needs at least one line")
        if not recorded_by:
            raise ValidationError("recorded_by is required")

        seen = set()
        for line in lines:
            item_id = str(line.get("item_id"))
            if item_id in seen:
                raise ValidationError(f"Item {item_id} appears more than once in the waste log")
            seen.add(item_id)
            if _quantity(line.get("quantity")) <= 0:
                raise ValidationError("Waste quantities must be greater than zero")

        waste_log = WasteLog.objects.create(
            outlet=outlet, reason=reason, notes=notes or "", recorded_by=recorded_by
        )

        total_cost = ZERO
        for line in lines:
            item = StockLedgerService.get_item(line["item_id"], for_update=True, outlet=outlet)
            quantity = _quantity(line["quantity"])

            movement = StockLedgerService.adjust_stock(
                item,
                -quantity,
                reason=f"Waste: {waste_log.get_reason_display()}",
                performed_by=recorded_by,
                movement_type=StockMovement.MovementType.WASTE,
                reference_type="WASTE_LOG",
                reference_id=waste_log.pk,
                unit_cost=item.average_cost,
            )
            line_cost = abs(movement.total_cost)
            WasteLogItem.objects.create(
                waste_log=waste_log,
                item=item,
                quantity=quantity,
                unit_cost=item.average_cost,
                total_cost=line_cost,
            )
            total_cost += line_cost

        waste_log.total_cost = total_cost
        waste_log.save(update_fields=["total_cost"])

        logger.info(
            f"Logged waste {waste_log.pk} ({reason}) at {outlet.code}: {len(lines)} line(s), cost {total_cost}"
        )
        return waste_log


class PurchaseOrderService:
    @staticmethod
    def get_purchase_order(purchase_order_id, for_update: bool = False) -> PurchaseOrder:
        if isinstance(purchase_order_id, PurchaseOrder):
            purchase_order_id = purchase_order_id.pk
        queryset = PurchaseOrder.objects.select_for_update() if for_update else PurchaseOrder.objects.all()
        try:
            return queryset.get(pk=purchase_order_id)
        except (PurchaseOrder.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError("PurchaseOrder", purchase_order_id)

    @staticmethod
    @transaction.atomic
    def create_purchase_order(outlet, po_number: str, supplier_name: str, lines: list, created_by: str = "") -> PurchaseOrder:
        """Create a DRAFT purchase order; lines are {"item_id", "quantity", "unit_cost"}."""
        outlet = OutletDirectory.get_outlet(outlet)
        if not lines:
            raise ValidationError("A purchase order needs at least one line")

        try:
            with transaction.atomic():
                purchase_order = PurchaseOrder.objects.create(
                    outlet=outlet,
                    po_number=po_number,
                    supplier_name=supplier_name,
                    created_by=created_by or "",
                )
        except IntegrityError:
            raise ConflictError(
                f"Purchase order {po_number} already exists at {outlet.code}",
                detail={"po_number": po_number},
            )

        seen = set()
        for line in lines:
            item = StockLedgerService.get_item(line.get("item_id"), outlet=outlet)
            if item.pk in seen:
                raise ValidationError(f"Item {item.sku} appears more than once on the purchase order")
            seen.add(item.pk)

            quantity = _quantity(line.get("quantity"))
            if quantity <= 0:
                raise ValidationError("Ordered quantities must be greater than zero")
            PurchaseOrderItem.objects.create(
                purchase_order=purchase_order,
                item=item,
                ordered_quantity=quantity,
                unit_cost=_unit_cost(line["unit_cost"]) if line.get("unit_cost") is not None else item.last_cost,
            )

        logger.info(f"Created purchase order {po_number} for {supplier_name} with {len(lines)} line(s)")
        return purchase_order

    @staticmethod
    @transaction.atomic
    def send_purchase_order(purchase_order_id) -> PurchaseOrder:
        purchase_order = PurchaseOrderService.get_purchase_order(purchase_order_id, for_update=True)
        if purchase_order.status != PurchaseOrder.POStatus.DRAFT:
            raise InvalidStateError(
                f"Purchase order {purchase_order.po_number} is {purchase_order.status}, not DRAFT",
                current_state=purchase_order.status,
            )
        purchase_order.status = PurchaseOrder.POStatus.SENT
        purchase_order.save(update_fields=["status", "updated_at"])
        logger.info(f"Purchase order {purchase_order.po_number} sent to {purchase_order.supplier_name}")
        return purchase_order


class PurchaseReceivingService:
    @staticmethod
    def weighted_average_cost(current_stock: Decimal, average_cost: Decimal, quantity: Decimal, unit_cost: Decimal) -> Decimal:
        total_quantity = current_stock + quantity
        if total_quantity <= 0:
            return unit_cost
        value = current_stock * average_cost + quantity * unit_cost
        return (value / total_quantity).quantize(COST_STEP, rounding=ROUND_HALF_EVEN)

    @staticmethod
    @transaction.atomic
    def receive(purchase_order_id, lines: list, received_by: str, notes: str = "") -> GoodsReceipt:
        """
        Receive a delivery against a SENT or PARTIALLY_RECEIVED purchase order.

        Each line is {"item_id": ..., "quantity": ..., "unit_cost": optional};
        the unit cost defaults to the PO line's. Stock rises through
        PURCHASE_RECEIPT movements and the item's average cost is re-weighted.
        Receiving more than is outstanding on a line is refused.
        """
        purchase_order = PurchaseOrderService.get_purchase_order(purchase_order_id, for_update=True)

        if purchase_order.status not in PurchaseOrder.RECEIVABLE_STATUSES:
            raise InvalidStateError(
                f"Purchase order {purchase_order.po_number} cannot be received while {purchase_order.status}",
                current_state=purchase_order.status,
            )
        if not lines:
            raise ValidationError("A goods receipt needs at least one line")
        if not received_by:
            raise ValidationError("received_by is required")

        po_lines = {
            str(po_line.item_id): po_line
            for po_line in purchase_order.items.select_for_update()
        }

        receipt = GoodsReceipt.objects.create(
            purchase_order=purchase_order,
            received_by=received_by,
            notes=notes or "",
            received_at=timezone.now(),
        )

        total_cost = ZERO
        for line in lines:
            po_line = po_lines.get(str(line.get("item_id")))
            if po_line is None:
                raise NotFoundError(
                    "PurchaseOrderItem",
                    line.get("item_id"),
                    message=f"Item '{line.get('item_id')}' is not on purchase order {purchase_order.po_number}",
                )

            quantity = _quantity(line.get("quantity"))
            if quantity <= 0:
                raise ValidationError("Received quantities must be greater than zero")
            if quantity > po_line.outstanding_quantity:
                raise ValidationError(
                    f"Receiving {quantity} of {po_line.item.sku} exceeds the outstanding {po_line.outstanding_quantity}",
                    detail={"item_id": str(po_line.item_id), "outstanding": str(po_line.outstanding_quantity)},
                )
            unit_cost = _unit_cost(line["unit_cost"]) if line.get("unit_cost") is not None else po_line.unit_cost

            item = StockLedgerService.get_item(po_line.item_id, for_update=True)
            average_cost = PurchaseReceivingService.weighted_average_cost(
                item.current_stock, item.average_cost, quantity, unit_cost
            )

            movement = StockLedgerService.adjust_stock(
                item,
                quantity,
                reason=f"Received on {receipt.grn_number}",
                performed_by=received_by,
                movement_type=StockMovement.MovementType.PURCHASE_RECEIPT,
                reference_type="GOODS_RECEIPT",
                reference_id=receipt.pk,
                unit_cost=unit_cost,
            )
            InventoryItem.objects.filter(pk=item.pk).update(average_cost=average_cost, last_cost=unit_cost)

            po_line.received_quantity += quantity
            po_line.save(update_fields=["received_quantity"])
            total_cost += movement.total_cost

        fully_received = all(po_line.received_quantity >= po_line.ordered_quantity for po_line in po_lines.values())
        purchase_order.status = (
            PurchaseOrder.POStatus.RECEIVED if fully_received else PurchaseOrder.POStatus.PARTIALLY_RECEIVED
        )
        purchase_order.save(update_fields=["status", "updated_at"])

        receipt.total_cost = total_cost
        receipt.save(update_fields=["total_cost"])

        logger.info(
            f"Received {receipt.grn_number} on PO {purchase_order.po_number}: {len(lines)} line(s), "
            f"cost {total_cost}; PO now {purchase_order.status}"
        )
        return receipt
