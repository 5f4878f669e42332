from celery import shared_task
import logging

from .signals import ledger_event_dispatched

logger = logging.getLogger(__name__)


@shared_task
def dispatch_ledger_event(event_type, payload):
    """
    Hand a committed ledger event to in-process subscribers.

    Delivery channels (push, email, dashboards) connect to
    ``ledger_event_dispatched``; a failing receiver is logged and does not
    stop the others. The task is not retried.

    Returns:
        dict: Event type and the number of receivers that handled it
    """
    logger.info(f"Dispatching ledger event {event_type}: {payload}")

    results = ledger_event_dispatched.send_robust(
        sender=dispatch_ledger_event, event_type=event_type, payload=payload
    )

    failures = [(receiver, result) for receiver, result in results if isinstance(result, Exception)]
    for receiver, error in failures:
        logger.error(f"Ledger event receiver {receiver} failed for {event_type}: {error}")

    return {
        "status": "dispatched",
        "event_type": event_type,
        "receivers": len(results) - len(failures),
    }
