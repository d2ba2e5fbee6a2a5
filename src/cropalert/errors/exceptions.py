"""Errors raised to API callers.

Delivery, storage and source failures are reported as status values and never
raised; only bad caller input surfaces as an exception. Each subclass fixes its
own ``code`` and HTTP ``status_code``.
"""

from typing import Any


class CropAlertError(Exception):
    code = "ENGINE_ERROR"
    status_code = 500

    def __init__(self, message: str, details: dict[str, Any] | list[Any] | None = None):
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationError(CropAlertError):
    """Malformed config update or request body."""

    code = "VALIDATION_ERROR"
    status_code = 400


class NotFoundError(CropAlertError):
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource: str, resource_id: str):
        super().__init__(f"{resource} '{resource_id}' not found", {"resource": resource, "id": resource_id})
