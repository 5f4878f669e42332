"""
Stock Ledger Tests

current_stock is only ever written together with the movement that explains
it, so opening_stock + sum(movements) must always equal current_stock.
"""
import pytest
import re
from decimal import Decimal
from unittest import mock

from core_backend.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from inventory.models import InventoryItem, PurchaseOrder, StockMovement, WasteLog
from inventory.services import (
    PurchaseOrderService,
    PurchaseReceivingService,
    StockLedgerService,
    WasteService,
)
from inventory.tasks import daily_low_stock_sweep, verify_stock_ledger


@pytest.fixture
def flour(outlet):
    """10 kg on hand, reorder at 3 kg, 2.50 per kg"""
    return StockLedgerService.create_item(
        outlet, sku="FLR-001", name="Bread Flour", unit_of_measure="kg",
        opening_stock="10", reorder_point="3", unit_cost="2.50",
    )


@pytest.fixture
def butter(outlet):
    return StockLedgerService.create_item(
        outlet, sku="BTR-001", name="Butter", unit_of_measure="kg",
        opening_stock="4", reorder_point="1", unit_cost="8.00",
    )


@pytest.fixture
def sent_purchase_order(outlet, flour):
    """20 kg of flour at 3.00 per kg, already sent to the supplier"""
    purchase_order = PurchaseOrderService.create_purchase_order(
        outlet,
        po_number="PO-1001",
        supplier_name="Mill & Co",
        lines=[{"item_id": flour.id, "quantity": "20", "unit_cost": "3.00"}],
        created_by="chef-1",
    )
    return PurchaseOrderService.send_purchase_order(purchase_order.id)


@pytest.mark.django_db
class TestAdjustStock:

    def test_adjustment_writes_movement(self, flour):
        movement = StockLedgerService.adjust_stock(flour.id, "5", reason="Found a sack", performed_by="chef-1")

        flour.refresh_from_db()
        assert flour.current_stock == Decimal("15")
        assert movement.previous_stock == Decimal("10")
        assert movement.new_stock == Decimal("15")
        assert movement.movement_type == StockMovement.MovementType.ADJUSTMENT

    def test_negative_result_rejected_and_nothing_written(self, flour):
        with pytest.raises(ValidationError, match="Insufficient stock"):
            StockLedgerService.adjust_stock(flour.id, "-11", reason="Big bake")

        flour.refresh_from_db()
        assert flour.current_stock == Decimal("10")
        assert flour.movements.count() == 0

    def test_drain_to_exactly_zero(self, flour):
        StockLedgerService.adjust_stock(flour.id, "-10", reason="Big bake")

        flour.refresh_from_db()
        assert flour.current_stock == Decimal("0")

    def test_zero_change_rejected(self, flour):
        with pytest.raises(ValidationError, match="non-zero"):
            StockLedgerService.adjust_stock(flour.id, "0", reason="Nothing")

    def test_reason_required(self, flour):
        with pytest.raises(ValidationError, match="reason is required"):
            StockLedgerService.adjust_stock(flour.id, "1", reason="")

    def test_unknown_movement_type(self, flour):
        with pytest.raises(ValidationError, match="Unknown movement type"):
            StockLedgerService.adjust_stock(flour.id, "1", reason="x", movement_type="THEFT")

    def test_unknown_item(self, db):
        with pytest.raises(NotFoundError, match="InventoryItem"):
            StockLedgerService.adjust_stock("00000000-0000-0000-0000-000000000000", "1", reason="x")

    def test_movement_cost(self, flour):
        movement = StockLedgerService.adjust_stock(flour.id, "-2", reason="Spill", unit_cost="2.50")

        assert movement.total_cost == Decimal("-5.00")

    def test_movements_are_immutable(self, flour):
        movement = StockLedgerService.adjust_stock(flour.id, "1", reason="Recount")

        movement.quantity = Decimal("100")
        with pytest.raises(InvalidStateError):
            movement.save()
        with pytest.raises(InvalidStateError):
            movement.delete()

    def test_duplicate_sku_conflicts(self, outlet, flour):
        with pytest.raises(ConflictError, match="FLR-001 already exists"):
            StockLedgerService.create_item(outlet, sku="FLR-001", name="Another Flour")

    def test_same_sku_at_other_outlet(self, other_outlet, flour):
        item = StockLedgerService.create_item(other_outlet, sku="FLR-001", name="Bread Flour")

        assert item.outlet == other_outlet


@pytest.mark.django_db
class TestLedgerReconstruction:

    def test_reconstruct_matches_current(self, flour):
        StockLedgerService.adjust_stock(flour.id, "5", reason="Delivery")
        StockLedgerService.adjust_stock(flour.id, "-3.250", reason="Prep")
        StockLedgerService.adjust_stock(flour.id, "-0.750", reason="Prep")

        flour.refresh_from_db()
        assert StockLedgerService.reconstruct_stock(flour) == flour.current_stock == Decimal("11")
        assert StockLedgerService.verify_item(flour)["consistent"] is True

    def test_tampering_is_detected(self, flour, butter):
        StockLedgerService.adjust_stock(flour.id, "-1", reason="Prep")
        InventoryItem.objects.filter(pk=flour.pk).update(current_stock=Decimal("50"))

        flour.refresh_from_db()
        result = StockLedgerService.verify_item(flour)
        assert result["consistent"] is False
        assert result["reconstructed_stock"] == Decimal("9")

        audit = verify_stock_ledger()
        assert audit["status"] == "mismatch"
        assert audit["mismatched_skus"] == ["FLR-001"]

    def test_clean_audit(self, outlet, flour, butter):
        assert verify_stock_ledger(outlet_id=outlet.id) == {"status": "completed", "mismatched_skus": []}


@pytest.mark.django_db
class TestLowStock:

    def test_crossing_reorder_point_publishes_once(self, flour, mock_dispatch, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            StockLedgerService.adjust_stock(flour.id, "-7", reason="Big bake")
            StockLedgerService.adjust_stock(flour.id, "-1", reason="Small bake")

        mock_dispatch.assert_called_once_with("inventory.low_stock", mock.ANY)
        payload = mock_dispatch.call_args.args[1]
        assert payload["sku"] == "FLR-001"
        assert Decimal(payload["current_stock"]) == Decimal("3")

    def test_rejected_change_publishes_nothing(self, flour, mock_dispatch, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            with pytest.raises(ValidationError):
                StockLedgerService.adjust_stock(flour.id, "-20", reason="Too much")

        mock_dispatch.assert_not_called()

    def test_daily_sweep(self, flour, butter):
        StockLedgerService.adjust_stock(butter.id, "-3.5", reason="Croissants")

        result = daily_low_stock_sweep()

        assert result["items_low"] == 1
        assert result["skus"] == ["BTR-001"]


@pytest.mark.django_db
class TestStockCount:

    def test_count_records_difference(self, flour):
        movement = StockLedgerService.record_stock_count(flour.id, "8.5", performed_by="chef-1")

        flour.refresh_from_db()
        assert movement.movement_type == StockMovement.MovementType.STOCK_COUNT
        assert movement.quantity == Decimal("-1.5")
        assert flour.current_stock == Decimal("8.5")

    def test_matching_count_records_nothing(self, flour):
        assert StockLedgerService.record_stock_count(flour.id, "10") is None
        assert flour.movements.count() == 0

    def test_negative_count_rejected(self, flour):
        with pytest.raises(ValidationError):
            StockLedgerService.record_stock_count(flour.id, "-1")


@pytest.mark.django_db
class TestWaste:

    def test_log_waste(self, outlet, flour, butter):
        waste_log = WasteService.log_waste(
            outlet,
            reason=WasteLog.WasteReason.SPOILED,
            lines=[{"item_id": flour.id, "quantity": "2"}, {"item_id": butter.id, "quantity": "0.5"}],
            recorded_by="chef-1",
        )

        flour.refresh_from_db()
        butter.refresh_from_db()
        assert flour.current_stock == Decimal("8")
        assert butter.current_stock == Decimal("3.5")
        # 2 x 2.50 + 0.5 x 8.00
        assert waste_log.total_cost == Decimal("9.00")
        assert waste_log.items.count() == 2
        assert flour.movements.get().movement_type == StockMovement.MovementType.WASTE

    def test_one_short_line_rejects_whole_log(self, outlet, flour, butter):
        with pytest.raises(ValidationError, match="Insufficient stock for Butter"):
            WasteService.log_waste(
                outlet,
                reason=WasteLog.WasteReason.DAMAGED,
                lines=[{"item_id": flour.id, "quantity": "2"}, {"item_id": butter.id, "quantity": "5"}],
                recorded_by="chef-1",
            )

        flour.refresh_from_db()
        assert flour.current_stock == Decimal("10")
        assert WasteLog.objects.count() == 0
        assert StockMovement.objects.count() == 0

    def test_duplicate_line_rejected(self, outlet, flour):
        with pytest.raises(ValidationError, match="more than once"):
            WasteService.log_waste(
                outlet,
                reason=WasteLog.WasteReason.OTHER,
                lines=[{"item_id": flour.id, "quantity": "1"}, {"item_id": flour.id, "quantity": "1"}],
                recorded_by="chef-1",
            )

    def test_unknown_reason_rejected(self, outlet, flour):
        with pytest.raises(ValidationError, match="Unknown waste reason"):
            WasteService.log_waste(
                outlet, reason="DROPPED", lines=[{"item_id": flour.id, "quantity": "1"}], recorded_by="chef-1"
            )

    def test_item_of_other_outlet_not_found(self, other_outlet, flour):
        with pytest.raises(NotFoundError):
            WasteService.log_waste(
                other_outlet,
                reason=WasteLog.WasteReason.OTHER,
                lines=[{"item_id": flour.id, "quantity": "1"}],
                recorded_by="chef-1",
            )


@pytest.mark.django_db
class TestPurchaseReceiving:

    def test_partial_then_full_receipt(self, flour, sent_purchase_order):
        first = PurchaseReceivingService.receive(
            sent_purchase_order.id, [{"item_id": flour.id, "quantity": "10"}], received_by="chef-1"
        )

        flour.refresh_from_db()
        sent_purchase_order.refresh_from_db()
        assert re.match(r"^GRN-\d{6}-0001$", first.grn_number)
        assert sent_purchase_order.status == PurchaseOrder.POStatus.PARTIALLY_RECEIVED
        assert flour.current_stock == Decimal("20")
        # (10 x 2.50 + 10 x 3.00) / 20
        assert flour.average_cost == Decimal("2.75")
        assert flour.last_cost == Decimal("3.00")
        assert first.total_cost == Decimal("30.00")

        second = PurchaseReceivingService.receive(
            sent_purchase_order.id, [{"item_id": flour.id, "quantity": "10", "unit_cost": "3.50"}], received_by="chef-1"
        )

        flour.refresh_from_db()
        sent_purchase_order.refresh_from_db()
        assert second.grn_number.endswith("-0002")
        assert sent_purchase_order.status == PurchaseOrder.POStatus.RECEIVED
        assert flour.current_stock == Decimal("30")
        assert flour.last_cost == Decimal("3.50")
        assert StockLedgerService.verify_item(flour)["consistent"] is True

    def test_over_receipt_rejected(self, flour, sent_purchase_order):
        with pytest.raises(ValidationError, match="exceeds the outstanding"):
            PurchaseReceivingService.receive(
                sent_purchase_order.id, [{"item_id": flour.id, "quantity": "25"}], received_by="chef-1"
            )

        flour.refresh_from_db()
        assert flour.current_stock == Decimal("10")

    def test_item_not_on_purchase_order(self, butter, sent_purchase_order):
        with pytest.raises(NotFoundError, match="not on purchase order PO-1001"):
            PurchaseReceivingService.receive(
                sent_purchase_order.id, [{"item_id": butter.id, "quantity": "1"}], received_by="chef-1"
            )

    def test_draft_purchase_order_cannot_be_received(self, outlet, flour):
        draft = PurchaseOrderService.create_purchase_order(
            outlet, "PO-2001", "Mill & Co", [{"item_id": flour.id, "quantity": "5"}]
        )

        with pytest.raises(InvalidStateError, match="while DRAFT"):
            PurchaseReceivingService.receive(draft.id, [{"item_id": flour.id, "quantity": "5"}], received_by="chef-1")

    def test_unit_cost_defaults_to_last_cost(self, outlet, flour):
        draft = PurchaseOrderService.create_purchase_order(
            outlet, "PO-2002", "Mill & Co", [{"item_id": flour.id, "quantity": "5"}]
        )

        assert draft.items.get().unit_cost == Decimal("2.50")

    def test_duplicate_po_number_conflicts(self, outlet, flour, sent_purchase_order):
        with pytest.raises(ConflictError, match="PO-1001 already exists"):
            PurchaseOrderService.create_purchase_order(
                outlet, "PO-1001", "Mill & Co", [{"item_id": flour.id, "quantity": "5"}]
            )

    def test_send_twice_rejected(self, sent_purchase_order):
        with pytest.raises(InvalidStateError, match="not DRAFT"):
            PurchaseOrderService.send_purchase_order(sent_purchase_order.id)

    def test_weighted_average_cost(self):
        cost = PurchaseReceivingService.weighted_average_cost(
            Decimal("0"), Decimal("0"), Decimal("5"), Decimal("4.1234")
        )

        assert cost == Decimal("4.1234")
