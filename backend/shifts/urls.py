from django.urls import path, include
from rest_framework import routers

from .views import ShiftViewSet

app_name = "shifts"

router = routers.DefaultRouter()
router.register(r"shifts", ShiftViewSet, basename="shift")

urlpatterns = [
    path("", include(router.urls)),
]
