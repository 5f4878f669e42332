import logging
import uuid
from datetime import date, datetime
from decimal import Decimal

from django.db import transaction

logger = logging.getLogger(__name__)


class LedgerEvent:
    ORDER_CLOSED = "order.closed"
    ORDER_VOIDED = "order.voided"
    SHIFT_CLOSED = "shift.closed"
    LOW_STOCK = "inventory.low_stock"
    PAYMENT_RECORDED = "payment.recorded"

    ALL = (ORDER_CLOSED, ORDER_VOIDED, SHIFT_CLOSED, LOW_STOCK, PAYMENT_RECORDED)


def _serialize(value):
    if isinstance(value, dict):
        return {key: _serialize(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_serialize(item) for item in value]
    if isinstance(value, (Decimal, uuid.UUID)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


class LedgerEventPublisher:
    """
    Fire-and-forget delivery of ledger events to the notification worker.

    Events are queued with ``transaction.on_commit``: nothing is sent for a
    rolled-back unit of work, and a failing broker never undoes a commit.
    """

    @staticmethod
    def publish(event_type: str, payload: dict) -> None:
        if event_type not in LedgerEvent.ALL:
            raise ValueError(f"Unknown ledger event '{event_type}'")

        message = _serialize(payload)

        def dispatch():
            """Deferred dispatch - runs after the transaction commits"""
            from .tasks import dispatch_ledger_event

            try:
                dispatch_ledger_event.delay(event_type, message)
                logger.info(f"Queued ledger event {event_type}")
            except Exception as e:
                # Log but don't raise - the ledger write is already committed
                logger.error(f"Failed to queue ledger event {event_type}: {e}")

        transaction.on_commit(dispatch)
