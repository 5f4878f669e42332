"""
Shift Ledger Tests

A shift accumulates sales by tender and reconciles the drawer at close:
expected_cash = opening_float + cash_sales - sum(cash drops), and
variance = actual_cash - expected_cash.
"""
import pytest
from decimal import Decimal
from unittest import mock

from core_backend.exceptions import ConflictError, InvalidStateError, NotFoundError, ValidationError
from shifts.models import CashDrop, Shift
from shifts.services import ShiftService


@pytest.mark.django_db
class TestOpenShift:

    def test_open_shift(self, open_shift, terminal):
        assert open_shift.status == Shift.ShiftStatus.OPEN
        assert open_shift.opening_float == Decimal("500.00")
        assert open_shift.terminal == terminal
        assert ShiftService.get_open_shift("cashier-1") == open_shift

    def test_second_shift_for_employee_conflicts(self, open_shift, outlet, second_terminal):
        with pytest.raises(ConflictError, match="cashier-1 already has an open shift"):
            ShiftService.open_shift(outlet, second_terminal, "cashier-1")

    def test_second_shift_on_terminal_conflicts(self, open_shift, outlet, terminal):
        with pytest.raises(ConflictError, match="already in use"):
            ShiftService.open_shift(outlet, terminal, "cashier-2")

    def test_terminal_of_other_outlet_rejected(self, outlet, other_outlet_terminal):
        with pytest.raises(ValidationError, match="does not belong to outlet"):
            ShiftService.open_shift(outlet, other_outlet_terminal, "cashier-1")

    def test_inactive_terminal_rejected(self, outlet, terminal):
        terminal.is_active = False
        terminal.save()

        with pytest.raises(ValidationError, match="not active"):
            ShiftService.open_shift(outlet, terminal, "cashier-1")

    def test_unknown_terminal(self, outlet):
        with pytest.raises(NotFoundError, match="Terminal"):
            ShiftService.open_shift(outlet, "00000000-0000-0000-0000-000000000000", "cashier-1")

    def test_negative_float_rejected(self, outlet, terminal):
        with pytest.raises(ValidationError, match="cannot be negative"):
            ShiftService.open_shift(outlet, terminal, "cashier-1", opening_float="-10")

    def test_new_shift_after_close(self, open_shift, outlet, terminal):
        ShiftService.close_shift(open_shift.id, actual_cash=Decimal("500.00"))

        shift = ShiftService.open_shift(outlet, terminal, "cashier-1", opening_float=Decimal("300.00"))

        assert shift.pk != open_shift.pk
        assert Shift.objects.filter(employee_id="cashier-1").count() == 2


@pytest.mark.django_db
class TestCashDrops:

    def test_record_cash_drop(self, open_shift):
        drop = ShiftService.record_cash_drop(open_shift.id, Decimal("300.00"), reason="Safe drop")

        open_shift.refresh_from_db()
        assert drop.dropped_by == "cashier-1"
        # Drops never touch sales
        assert open_shift.cash_sales == Decimal("0.00")
        assert ShiftService.total_cash_drops(open_shift) == Decimal("300.00")

    def test_cash_drop_must_be_positive(self, open_shift):
        with pytest.raises(ValidationError, match="greater than zero"):
            ShiftService.record_cash_drop(open_shift.id, Decimal("0.00"))

    def test_cash_drop_on_closed_shift_rejected(self, open_shift):
        ShiftService.close_shift(open_shift.id, actual_cash=Decimal("500.00"))

        with pytest.raises(InvalidStateError, match="CLOSED"):
            ShiftService.record_cash_drop(open_shift.id, Decimal("50.00"))

    def test_cash_drops_are_immutable(self, open_shift):
        drop = ShiftService.record_cash_drop(open_shift.id, Decimal("100.00"))

        drop.amount = Decimal("1.00")
        with pytest.raises(InvalidStateError, match="immutable"):
            drop.save()
        with pytest.raises(InvalidStateError, match="immutable"):
            drop.delete()

        assert CashDrop.objects.get(pk=drop.pk).amount == Decimal("100.00")


@pytest.mark.django_db
class TestCloseShift:

    def test_close_reports_variance(self, open_shift, mock_dispatch, django_capture_on_commit_callbacks):
        """
        Float 500, cash sales 2000, one 300 drop, 2150 counted:
        expected 2200, variance -50.
        """
        ShiftService.record_sale(open_shift, "CASH", Decimal("2000.00"))
        ShiftService.record_cash_drop(open_shift.id, Decimal("300.00"))

        with django_capture_on_commit_callbacks(execute=True):
            shift = ShiftService.close_shift(open_shift.id, actual_cash=Decimal("2150.00"), closed_by="manager-1")

        assert shift.status == Shift.ShiftStatus.CLOSED
        assert shift.expected_cash == Decimal("2200.00")
        assert shift.variance == Decimal("-50.00")
        assert shift.end_time is not None
        assert shift.closing_float == Decimal("500.00")

        mock_dispatch.assert_called_once_with("shift.closed", mock.ANY)
        payload = mock_dispatch.call_args.args[1]
        assert payload["variance"] == "-50.00"
        assert payload["expected_cash"] == "2200.00"

    @pytest.mark.parametrize(
        "events, actual_cash",
        [
            ([], "500.00"),
            ([("CASH", "120.00"), ("CARD", "80.00")], "615.50"),
            ([("DROP", "250.00")], "250.00"),
            ([("CASH", "1000.00"), ("DROP", "400.00"), ("CARD", "75.25")], "1100.00"),
            (
                [
                    ("CASH", "310.40"),
                    ("DROP", "200.00"),
                    ("CARD", "99.99"),
                    ("CASH", "45.60"),
                    ("DROP", "100.00"),
                    ("OTHER", "12.00"),
                    ("DROP", "0.01"),
                ],
                "556.00",
            ),
        ],
        ids=["no-activity", "sales-no-drops", "drop-only", "one-drop-mixed", "several-drops-mixed"],
    )
    def test_variance_for_drop_sequences(self, open_shift, events, actual_cash):
        cash_sales = Decimal("0.00")
        drops = Decimal("0.00")
        for kind, amount in events:
            amount = Decimal(amount)
            if kind == "DROP":
                ShiftService.record_cash_drop(open_shift.id, amount)
                drops += amount
            else:
                ShiftService.record_sale(open_shift, kind, amount)
                if kind == "CASH":
                    cash_sales += amount

        shift = ShiftService.close_shift(open_shift.id, actual_cash=Decimal(actual_cash))

        expected = open_shift.opening_float + cash_sales - drops
        assert shift.expected_cash == expected
        assert shift.variance == Decimal(actual_cash) - expected
        assert shift.cash_drops.count() == sum(1 for kind, _ in events if kind == "DROP")

    def test_card_sales_do_not_count_towards_cash(self, open_shift):
        ShiftService.record_sale(open_shift, "CARD", Decimal("800.00"), tip=Decimal("40.00"))

        shift = ShiftService.close_shift(open_shift.id, actual_cash=Decimal("500.00"))

        assert shift.expected_cash == Decimal("500.00")
        assert shift.variance == Decimal("0.00")
        assert shift.card_sales == Decimal("800.00")
        assert shift.total_tips == Decimal("40.00")

    def test_close_twice_rejected(self, open_shift):
        ShiftService.close_shift(open_shift.id, actual_cash=Decimal("500.00"))

        with pytest.raises(InvalidStateError, match="already CLOSED"):
            ShiftService.close_shift(open_shift.id, actual_cash=Decimal("500.00"))

    def test_negative_count_rejected(self, open_shift):
        with pytest.raises(ValidationError, match="cannot be negative"):
            ShiftService.close_shift(open_shift.id, actual_cash=Decimal("-1.00"))

        open_shift.refresh_from_db()
        assert open_shift.status == Shift.ShiftStatus.OPEN

    def test_breakdown_is_live_while_open(self, open_shift):
        ShiftService.record_sale(open_shift, "CASH", Decimal("120.00"), tax=Decimal("10.00"))
        ShiftService.record_cash_drop(open_shift.id, Decimal("20.00"))

        breakdown = ShiftService.get_breakdown(open_shift.id)

        assert breakdown["expected_cash"] == Decimal("600.00")
        assert breakdown["total_cash_drops"] == Decimal("20.00")
        assert breakdown["total_tax"] == Decimal("10.00")
        assert breakdown["variance"] is None


@pytest.mark.django_db
class TestReconcileShift:

    def test_reconcile_closed_shift(self, open_shift):
        ShiftService.close_shift(open_shift.id, actual_cash=Decimal("490.00"))

        shift = ShiftService.reconcile_shift(open_shift.id, reconciled_by="manager-1", notes="Short 10, till miscount")

        assert shift.status == Shift.ShiftStatus.RECONCILED
        assert shift.variance == Decimal("-10.00")
        assert "manager-1" in shift.notes

    def test_reconcile_open_shift_rejected(self, open_shift):
        with pytest.raises(InvalidStateError, match="Only CLOSED shifts"):
            ShiftService.reconcile_shift(open_shift.id, reconciled_by="manager-1")

    def test_reconcile_needs_manager(self, open_shift):
        ShiftService.close_shift(open_shift.id, actual_cash=Decimal("500.00"))

        with pytest.raises(ValidationError, match="reconciled_by"):
            ShiftService.reconcile_shift(open_shift.id, reconciled_by="")
