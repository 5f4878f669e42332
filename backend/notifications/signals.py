from django.dispatch import Signal, receiver
import logging

from payments.signals import payment_recorded
from .services import LedgerEvent, LedgerEventPublisher

logger = logging.getLogger(__name__)

# Sent by the dispatch task for every ledger event that reached the worker.
# Receivers get ``event_type`` and ``payload``.
ledger_event_dispatched = Signal()


@receiver(payment_recorded)
def handle_payment_recorded(sender, payment, order, **kwargs):
    """
    Forward a committed payment to the event worker as ``payment.recorded``.
    """
    LedgerEventPublisher.publish(
        LedgerEvent.PAYMENT_RECORDED,
        {
            "payment_id": payment.pk,
            "order_id": order.pk,
            "order_number": order.order_number,
            "method": payment.method,
            "amount": payment.amount,
            "tip_amount": payment.tip_amount,
            "payment_status": order.payment_status,
            "shift_id": payment.shift_id,
        },
    )
    logger.debug(f"Forwarded payment {payment.pk} on order {order.order_number}")
