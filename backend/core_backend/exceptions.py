"""
Ledger exception taxonomy and the DRF exception handler that maps it to HTTP.

Services raise these inside their atomic blocks, so the triggering
transaction is always rolled back before the error reaches the caller.
"""

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class LedgerError(Exception):
    """Base exception for ledger errors."""

    code = "ledger_error"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message=None, detail=None):
        self.message = message or self.__class__.__doc__ or self.code
        self.detail = detail or {}
        super().__init__(self.message)

    def as_dict(self):
        return {"code": self.code, "message": self.message, "detail": self.detail}


class ValidationError(LedgerError):
    """Malformed or invariant-violating input."""

    code = "validation_error"
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(LedgerError):
    """Referenced entity does not exist or does not belong to the stated parent."""

    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity=None, identifier=None, message=None, detail=None):
        self.entity = entity
        self.identifier = identifier
        if message is None and entity:
            message = f"{entity} '{identifier}' not found"
        detail = detail or ({"entity": entity, "id": str(identifier)} if entity else None)
        super().__init__(message, detail)


class InvalidStateError(LedgerError):
    """Operation is not legal from the entity's current state."""

    code = "invalid_state"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message=None, current_state=None, detail=None):
        self.current_state = current_state
        if current_state is not None:
            detail = {**(detail or {}), "current_state": str(current_state)}
        super().__init__(message, detail)


class ConflictError(LedgerError):
    """Concurrent uniqueness violation."""

    code = "conflict"
    status_code = status.HTTP_409_CONFLICT


def ledger_exception_handler(exc, context):
    """
    Map ledger errors to a stable JSON envelope; defer everything else to DRF.
    """
    if isinstance(exc, LedgerError):
        request = context.get("request")
        view = context.get("view")
        logger.warning(
            f"Ledger error {exc.code} in {view.__class__.__name__ if view else 'unknown view'}: {exc.message}",
            extra={
                "status_code": exc.status_code,
                "path": getattr(request, "path", None),
                "method": getattr(request, "method", None),
            },
        )
        return Response({"error": exc.as_dict()}, status=exc.status_code)

    return exception_handler(exc, context)
