# citaplanner/core/exceptions.py
"""
Error taxonomy surfaced to HTTP callers.

Every error carries an HTTP status and a stable machine-readable ``kind`` so
clients never have to parse messages.
"""
from typing import Any, Dict, Optional


class CitaPlannerError(Exception):
    """Base class for errors returned to the caller."""

    status_code: int = 500
    kind: str = "internal_error"
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"error": self.kind, "detail": self.message}
        if self.details:
            data["details"] = self.details
        return data


class TenantNotFound(CitaPlannerError):
    """Host maps to no tenant and there is no master tenant to fall back to."""
    status_code = 404
    kind = "tenant_not_found"
    default_message = "Tenant not found"


class TenantUnavailable(CitaPlannerError):
    status_code = 503
    kind = "tenant_maintenance"
    default_message = "This business is under maintenance"


class Unauthorized(CitaPlannerError):
    status_code = 401
    kind = "access_denied"
    default_message = "Access denied"


class SessionInvalid(CitaPlannerError):
    status_code = 403
    kind = "session_invalid"
    default_message = "Session invalid"


class TenantMismatch(CitaPlannerError):
    status_code = 403
    kind = "tenant_mismatch"
    default_message = "Token does not belong to this tenant"


class Forbidden(CitaPlannerError):
    status_code = 403
    kind = "forbidden"
    default_message = "Insufficient permissions"


class ResourceNotFound(CitaPlannerError):
    status_code = 404
    kind = "not_found"
    default_message = "Resource not found"


class InvalidScheduleData(CitaPlannerError):
    status_code = 422
    kind = "invalid_schedule"
    default_message = "Invalid schedule data"


class InvalidBooking(CitaPlannerError):
    status_code = 422
    kind = "invalid_booking"
    default_message = "Invalid booking request"


class SlotConflict(CitaPlannerError):
    """Requested interval collides with a scheduled or completed appointment."""
    status_code = 409
    kind = "slot_conflict"
    default_message = "Slot no longer available, please choose another time"


class InvalidStatusTransition(CitaPlannerError):
    status_code = 409
    kind = "invalid_status_transition"
    default_message = "Invalid appointment status transition"


class DuplicateResource(CitaPlannerError):
    status_code = 409
    kind = "duplicate"
    default_message = "Resource already exists"


class InfrastructureError(CitaPlannerError):
    status_code = 500
    kind = "infrastructure_error"
    default_message = "Storage unavailable, please try again later"
