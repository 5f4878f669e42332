from django.urls import path, include
from rest_framework import routers

from .views import TipPoolViewSet

app_name = "tips"

router = routers.DefaultRouter()
router.register(r"tip-pools", TipPoolViewSet, basename="tip-pool")

urlpatterns = [
    path("", include(router.urls)),
]
