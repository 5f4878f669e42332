from django.urls import path, include
from rest_framework import routers

from .views import TerminalViewSet

app_name = "terminals"

router = routers.DefaultRouter()
router.register(r"terminals", TerminalViewSet, basename="terminal")

urlpatterns = [
    path("", include(router.urls)),
]
