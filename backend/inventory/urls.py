from django.urls import path, include
from rest_framework import routers

from .views import (
    InventoryItemViewSet,
    PurchaseOrderViewSet,
    StockMovementViewSet,
    WasteLogViewSet,
)

app_name = "inventory"

router = routers.DefaultRouter()
router.register(r"inventory/items", InventoryItemViewSet, basename="inventory-item")
router.register(r"inventory/movements", StockMovementViewSet, basename="stock-movement")
router.register(r"inventory/waste-logs", WasteLogViewSet, basename="waste-log")
router.register(r"inventory/purchase-orders", PurchaseOrderViewSet, basename="purchase-order")

urlpatterns = [
    path("", include(router.urls)),
]
