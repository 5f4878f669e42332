"""
Ledger Event Tests

Events leave the ledger only after the transaction that produced them
commits, and a failing broker or subscriber never reaches the caller.
"""
import pytest
from decimal import Decimal
from unittest import mock

from django.db import transaction

from notifications.services import LedgerEvent, LedgerEventPublisher
from notifications.signals import ledger_event_dispatched
from notifications.tasks import dispatch_ledger_event


@pytest.mark.django_db
class TestLedgerEventPublisher:

    def test_event_waits_for_commit(self, mock_dispatch, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks() as callbacks:
            LedgerEventPublisher.publish(LedgerEvent.ORDER_CLOSED, {"total": Decimal("330.00")})
            mock_dispatch.assert_not_called()

        assert len(callbacks) == 1
        callbacks[0]()
        mock_dispatch.assert_called_once_with("order.closed", {"total": "330.00"})

    def test_rolled_back_work_sends_nothing(self, mock_dispatch, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            try:
                with transaction.atomic():
                    LedgerEventPublisher.publish(LedgerEvent.SHIFT_CLOSED, {"variance": Decimal("-50.00")})
                    raise RuntimeError("boom")
            except RuntimeError:
                pass

        mock_dispatch.assert_not_called()

    def test_broker_failure_is_logged_not_raised(self, mock_dispatch, django_capture_on_commit_callbacks):
        mock_dispatch.side_effect = ConnectionError("broker down")

        with mock.patch("notifications.services.logger") as logger:
            with django_capture_on_commit_callbacks(execute=True):
                LedgerEventPublisher.publish(LedgerEvent.LOW_STOCK, {"sku": "FLR-001"})

        logger.error.assert_called_once()
        assert "inventory.low_stock" in logger.error.call_args.args[0]

    def test_unknown_event_rejected(self):
        with pytest.raises(ValueError, match="Unknown ledger event"):
            LedgerEventPublisher.publish("order.exploded", {})


class TestDispatchTask:

    def test_receivers_get_event(self):
        received = []

        def receiver(sender, event_type, payload, **kwargs):
            received.append((event_type, payload))

        ledger_event_dispatched.connect(receiver)
        try:
            result = dispatch_ledger_event.apply(args=("order.closed", {"total": "330.00"})).get()
        finally:
            ledger_event_dispatched.disconnect(receiver)

        assert result["status"] == "dispatched"
        assert result["receivers"] >= 1
        assert received == [("order.closed", {"total": "330.00"})]

    def test_failing_receiver_does_not_stop_others(self):
        received = []

        def broken(sender, **kwargs):
            raise RuntimeError("push service down")

        def healthy(sender, event_type, **kwargs):
            received.append(event_type)

        ledger_event_dispatched.connect(broken)
        ledger_event_dispatched.connect(healthy)
        try:
            with mock.patch("notifications.tasks.logger") as logger:
                result = dispatch_ledger_event.apply(args=("shift.closed", {})).get()
        finally:
            ledger_event_dispatched.disconnect(broken)
            ledger_event_dispatched.disconnect(healthy)

        assert received == ["shift.closed"]
        assert result["status"] == "dispatched"
        assert "push service down" in logger.error.call_args.args[0]

    def test_failing_receiver_is_not_retried(self):
        def broken(sender, **kwargs):
            raise RuntimeError("push service down")

        ledger_event_dispatched.connect(broken)
        try:
            with mock.patch.object(dispatch_ledger_event, "retry") as retry:
                result = dispatch_ledger_event.apply(args=("order.voided", {})).get()
        finally:
            ledger_event_dispatched.disconnect(broken)

        retry.assert_not_called()
        assert result["receivers"] == 0


@pytest.mark.django_db
class TestPaymentRecordedEvent:

    def test_payment_becomes_ledger_event(self, open_order, mock_dispatch, django_capture_on_commit_callbacks):
        from payments.services import PaymentService

        with django_capture_on_commit_callbacks(execute=True):
            payment = PaymentService.record_payment(
                open_order.id, "CARD", Decimal("100.00"), tip_amount=Decimal("5.00"), processed_by="cashier-1"
            )

        mock_dispatch.assert_called_once_with("payment.recorded", mock.ANY)
        payload = mock_dispatch.call_args.args[1]
        assert payload["payment_id"] == str(payment.pk)
        assert payload["order_number"] == open_order.order_number
        assert payload["amount"] == "100.00"
        assert payload["tip_amount"] == "5.00"
        assert payload["payment_status"] == "PARTIALLY_PAID"
        assert payload["shift_id"] is None

    def test_nothing_sent_for_rejected_payment(self, open_order, mock_dispatch, django_capture_on_commit_callbacks):
        from core_backend.exceptions import ValidationError
        from payments.services import PaymentService

        with django_capture_on_commit_callbacks(execute=True):
            with pytest.raises(ValidationError):
                PaymentService.record_payment(open_order.id, "CASH", Decimal("400.00"), processed_by="cashier-1")

        mock_dispatch.assert_not_called()
