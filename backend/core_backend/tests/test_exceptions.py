"""
Error taxonomy and exception handler tests.
"""
import pytest
from rest_framework import status
from rest_framework.exceptions import NotAuthenticated

from core_backend.exceptions import (
    ConflictError,
    InvalidStateError,
    LedgerError,
    NotFoundError,
    ValidationError,
    ledger_exception_handler,
)


class TestTaxonomy:

    @pytest.mark.parametrize(
        "error,code,http_status",
        [
            (ValidationError("bad input"), "validation_error", status.HTTP_400_BAD_REQUEST),
            (NotFoundError("Order", "42"), "not_found", status.HTTP_404_NOT_FOUND),
            (InvalidStateError("nope", current_state="CLOSED"), "invalid_state", status.HTTP_409_CONFLICT),
            (ConflictError("taken"), "conflict", status.HTTP_409_CONFLICT),
        ],
    )
    def test_codes(self, error, code, http_status):
        assert isinstance(error, LedgerError)
        assert error.code == code
        assert error.status_code == http_status

    def test_not_found_message(self):
        error = NotFoundError("Order", "42")

        assert str(error) == "Order '42' not found"
        assert error.detail == {"entity": "Order", "id": "42"}

    def test_invalid_state_carries_current_state(self):
        error = InvalidStateError("Cannot close", current_state="VOID", detail={"order": "DIN-00001"})

        assert error.detail == {"order": "DIN-00001", "current_state": "VOID"}

    def test_default_message_is_docstring(self):
        assert ConflictError().message == "Concurrent uniqueness violation."


class TestExceptionHandler:

    def test_ledger_error_envelope(self):
        response = ledger_exception_handler(InvalidStateError("Order is CLOSED", current_state="CLOSED"), {})

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data == {
            "error": {
                "code": "invalid_state",
                "message": "Order is CLOSED",
                "detail": {"current_state": "CLOSED"},
            }
        }

    def test_other_errors_fall_through_to_drf(self):
        response = ledger_exception_handler(NotAuthenticated(), {})

        assert response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)

    def test_unhandled_errors_return_none(self):
        assert ledger_exception_handler(RuntimeError("boom"), {}) is None
