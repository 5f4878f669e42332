from celery import shared_task
import logging

from .models import InventoryItem
from .services import StockLedgerService

logger = logging.getLogger(__name__)


@shared_task
def daily_low_stock_sweep():
    """
    Daily list of items at or below their reorder point.

    Real-time alerts fire only when a movement crosses the reorder point;
    this sweep is the safety net for items that have stayed low.
    """
    from django.db.models import F

    low_items = list(
        InventoryItem.objects.filter(is_active=True, current_stock__lte=F("reorder_point"))
        .values_list("sku", flat=True)
    )

    if low_items:
        logger.warning(f"{len(low_items)} item(s) at or below reorder point: {low_items}")

    logger.info(f"Daily low stock sweep completed: {len(low_items)} items")

    return {
        "status": "completed",
        "items_low": len(low_items),
        "skus": low_items,
    }


@shared_task
def verify_stock_ledger(outlet_id=None):
    """
    Nightly audit: every item's current_stock must equal its opening stock
    plus the sum of its movements.
    """
    items = InventoryItem.objects.all()
    if outlet_id is not None:
        items = items.filter(outlet_id=outlet_id)

    mismatched = [
        str(result["sku"])
        for result in (StockLedgerService.verify_item(item) for item in items)
        if not result["consistent"]
    ]

    logger.info(f"Stock ledger audit: {items.count()} item(s), {len(mismatched)} mismatch(es)")

    return {
        "status": "completed" if not mismatched else "mismatch",
        "mismatched_skus": mismatched,
    }
