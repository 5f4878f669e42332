"""
URL configuration for the RMS ledger backend.

Each ledger app contributes its own router under /api/.
"""

from django.http import JsonResponse
from django.urls import path, include


def health_check(request):
    """Simple health check endpoint that doesn't require authentication"""
    return JsonResponse({"status": "ok", "message": "Backend is running"})


urlpatterns = [
    path("api/health/", health_check, name="health_check"),
    path("api/", include("outlets.urls")),
    path("api/", include("terminals.urls")),
    path("api/", include("orders.urls")),
    path("api/", include("payments.urls")),
    path("api/", include("shifts.urls")),
    path("api/", include("inventory.urls")),
    path("api/", include("tips.urls")),
]
