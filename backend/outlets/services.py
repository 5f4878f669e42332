from dataclasses import dataclass
from decimal import Decimal
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction

from core_backend.exceptions import NotFoundError, InvalidStateError, ValidationError
from .models import Outlet, Table

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutletRates:
    """Percentage rates applied to an order subtotal."""
    tax_rate: Decimal
    service_charge_rate: Decimal

    @property
    def combined_rate(self) -> Decimal:
        return self.tax_rate + self.service_charge_rate


def _lookup(model, entity, identifier, **filters):
    try:
        return model.objects.get(pk=identifier, **filters)
    except (model.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFoundError(entity, identifier)


class OutletDirectory:
    """Read-only lookups of outlet configuration and tables."""

    @staticmethod
    def get_outlet(outlet_id) -> Outlet:
        if isinstance(outlet_id, Outlet):
            return outlet_id
        return _lookup(Outlet, "Outlet", outlet_id)

    @staticmethod
    def get_table(table_id, outlet=None) -> Table:
        """
        Fetch a table, optionally requiring it to belong to ``outlet``.
        A table of another outlet is reported as not found.
        """
        if isinstance(table_id, Table):
            table_id = table_id.pk
        filters = {"outlet": outlet} if outlet is not None else {}
        return _lookup(Table, "Table", table_id, **filters)

    @staticmethod
    def get_outlet_rates(outlet_id) -> OutletRates:
        outlet = OutletDirectory.get_outlet(outlet_id)
        return OutletRates(
            tax_rate=outlet.tax_rate,
            service_charge_rate=outlet.service_charge_rate,
        )


class TableBinder:
    """
    Keeps a table's occupancy in step with the order lifecycle.

    Both operations run inside the caller's transaction and lock the table
    row. ``release`` only acts while the table is still bound to the given
    order, so a staff status change made since the order opened is kept.
    """

    @staticmethod
    def bind(table: Table, order) -> Table:
        table = Table.objects.select_for_update().get(pk=table.pk)

        if table.status != Table.TableStatus.AVAILABLE:
            raise ValidationError(
                f"Table {table.table_number} is not available (status: {table.status})",
                detail={"table_id": str(table.pk), "status": table.status},
            )

        table.status = Table.TableStatus.OCCUPIED
        table.current_order = order
        table.save(update_fields=["status", "current_order", "updated_at"])

        logger.info(f"Table {table.table_number} bound to order {order.order_number}")
        return table

    @staticmethod
    def release(table: Table, order) -> bool:
        """
        Free the table if it is still bound to ``order``.

        Returns True when the table was released.
        """
        if table is None:
            return False

        table = Table.objects.select_for_update().get(pk=table.pk)

        if table.current_order_id != order.pk:
            logger.info(
                f"Table {table.table_number} no longer bound to order {order.order_number} "
                f"(status: {table.status}); leaving it unchanged"
            )
            return False

        table.status = Table.TableStatus.AVAILABLE
        table.current_order = None
        table.save(update_fields=["status", "current_order", "updated_at"])

        logger.info(f"Table {table.table_number} released by order {order.order_number}")
        return True


class TableService:
    """Staff-initiated table status changes."""

    @staticmethod
    @transaction.atomic
    def set_status(table_id, new_status: str, changed_by: str = "") -> Table:
        if new_status not in Table.TableStatus.values:
            raise ValidationError(f"Unknown table status '{new_status}'")

        if new_status == Table.TableStatus.OCCUPIED:
            raise ValidationError("Tables become occupied only by opening an order")

        table = OutletDirectory.get_table(table_id)
        table = Table.objects.select_for_update().get(pk=table.pk)

        if table.current_order_id and new_status == Table.TableStatus.AVAILABLE:
            raise InvalidStateError(
                f"Table {table.table_number} still has an open order; close or void it first",
                current_state=table.status,
            )

        if table.current_order_id:
            logger.warning(
                f"Table {table.table_number} detached from order {table.current_order_id} "
                f"by staff ({changed_by or 'unknown'}) -> {new_status}"
            )
            table.current_order = None

        table.status = new_status
        table.save(update_fields=["status", "current_order", "updated_at"])

        logger.info(f"Table {table.table_number} set to {new_status} by {changed_by or 'unknown'}")
        return table
