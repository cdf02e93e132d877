# FILE: app/services/errors.py
from __future__ import annotations

from typing import Any, Optional


class InventoryError(RuntimeError):
    """
    Base for every domain failure raised by the services.
    The API layer turns these into the standard error envelope.
    """
    status_code: int = 400
    code: str = "INVENTORY_ERROR"

    def __init__(
        self,
        msg: str,
        *,
        details: Any = None,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
    ):
        super().__init__(msg)
        self.msg = msg
        self.details = details
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code


class ValidationFailure(InventoryError):
    status_code = 400
    code = "VALIDATION_FAILED"


class NotFound(InventoryError):
    status_code = 404
    code = "NOT_FOUND"


class ConflictError(InventoryError):
    status_code = 409
    code = "CONFLICT"


class InvalidState(ConflictError):
    """Operation not allowed in the record's current status."""
    status_code = 400
    code = "INVALID_STATE"


class InsufficientStock(InventoryError):
    status_code = 400
    code = "INSUFFICIENT_STOCK"

    def __init__(self, msg: str, *, available=None, requested=None, items=None):
        if items is not None:
            details = {"items": items}
        else:
            details = {"available": available, "requested": requested}
        super().__init__(msg, details=details)
        self.available = available
        self.requested = requested
        self.items = items
