"""
Root conftest.py for all backend tests.

This file makes fixtures available to all test files across all apps.
"""
import pytest
from unittest import mock

from core_backend.celery import app as celery_app
from core_backend.config import app_settings


# ============================================================================
# AUTO-USE FIXTURES (Run automatically for every test)
# ============================================================================

@pytest.fixture(autouse=True)
def eager_celery():
    """
    Run ledger event tasks in-process.

    Events only reach the task once the surrounding transaction commits, so
    tests that assert on delivery use django_capture_on_commit_callbacks.
    """
    previous = celery_app.conf.task_always_eager
    celery_app.conf.task_always_eager = True
    yield
    celery_app.conf.task_always_eager = previous


@pytest.fixture(autouse=True)
def reload_ledger_settings():
    """
    Reload app_settings after each test so a test that overrides RMS_LEDGER
    does not leak its policy into the next one.
    """
    yield
    app_settings.reload()


# ============================================================================
# API CLIENT FIXTURES
# ============================================================================

@pytest.fixture
def api_client():
    """
    Provide DRF API client for API tests.

    Usage:
        def test_my_api(api_client):
            response = api_client.get('/api/orders/')
            assert response.status_code == 200
    """
    from rest_framework.test import APIClient
    return APIClient()


# ============================================================================
# EVENT FIXTURES
# ============================================================================

@pytest.fixture
def mock_dispatch():
    """
    Patch the ledger event task's ``delay``.

    Usage:
        def test_event(mock_dispatch, django_capture_on_commit_callbacks):
            with django_capture_on_commit_callbacks(execute=True):
                OrderService.close_order(order.id)
            mock_dispatch.assert_called_once()
    """
    with mock.patch("notifications.tasks.dispatch_ledger_event.delay") as delay:
        yield delay


# ============================================================================
# IMPORT ALL FIXTURES FROM core_backend/tests/fixtures.py
# ============================================================================
from core_backend.tests.fixtures import *
