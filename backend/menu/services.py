import logging

from django.core.exceptions import ValidationError as DjangoValidationError

from core_backend.exceptions import NotFoundError, ValidationError
from .models import MenuItem

logger = logging.getLogger(__name__)


class MenuCatalog:
    """Read-only menu lookups used when order items are created."""

    @staticmethod
    def get_menu_item(menu_item_id, outlet=None) -> MenuItem:
        """
        Fetch a menu item. An item of a different outlet is reported as not
        found; an unavailable item is rejected.
        """
        filters = {"outlet": outlet} if outlet is not None else {}
        try:
            menu_item = MenuItem.objects.get(pk=menu_item_id, **filters)
        except (MenuItem.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError("MenuItem", menu_item_id)

        if not menu_item.is_available:
            raise ValidationError(
                f"Menu item '{menu_item.name}' is not available",
                detail={"menu_item_id": str(menu_item.pk)},
            )
        return menu_item
