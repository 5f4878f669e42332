from django.urls import path, include
from rest_framework import routers

from .views import OutletViewSet, TableViewSet

app_name = "outlets"

router = routers.DefaultRouter()
router.register(r"outlets", OutletViewSet, basename="outlet")
router.register(r"tables", TableViewSet, basename="table")

urlpatterns = [
    path("", include(router.urls)),
]
