"""
Reservation Error Taxonomy

Every error raised by the reservation engine carries a stable ``code`` and
the HTTP status the API answers with. Translation to the response body
happens in ``apps.bookings.exceptions`` only.
"""

from __future__ import annotations

from typing import Any, Iterable

from shared.domain.errors import DomainError


class ReservationError(DomainError):
    code = "reservation_error"
    http_status = 500
    retryable = False

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        payload = {"error": self.message, "code": self.code}
        payload.update(self.details)
        return payload


class ValidationError(ReservationError):
    """Bad input. Never retried automatically."""

    code = "validation_error"
    http_status = 400

    def __init__(self, message: str, field: str | None = None, **details: Any):
        if field:
            details["field"] = field
        super().__init__(message, **details)
        self.field = field


class PricingInputError(ReservationError):
    """Guest count or stay length that cannot be priced."""

    code = "pricing_input_error"
    http_status = 400


class PermissionDeniedError(ReservationError):
    code = "permission_denied"
    http_status = 403


class PropertyNotFoundError(ReservationError):
    code = "property_not_found"
    http_status = 404

    def __init__(self, property_id: Any):
        super().__init__(f"Property {property_id} not found", property_id=property_id)
        self.property_id = property_id


class BookingNotFoundError(ReservationError):
    code = "booking_not_found"
    http_status = 404

    def __init__(self, booking_id: Any):
        super().__init__(f"Booking {booking_id} not found", booking_id=booking_id)
        self.booking_id = booking_id


class UnavailableError(ReservationError):
    """The requested dates conflict with bookings, blocks or stay rules.

    Safe to retry with different dates; ``conflicts`` lists what is in the
    way so the caller can suggest alternatives.
    """

    code = "unavailable"
    http_status = 409
    retryable = True

    def __init__(self, message: str, conflicts: Iterable = (), restrictions: Iterable = ()):
        self.conflicts = list(conflicts)
        self.restrictions = list(restrictions)
        super().__init__(
            message,
            conflicts=[c.to_dict() for c in self.conflicts],
            restrictions=[r.to_dict() for r in self.restrictions],
        )


class LockConflictError(ReservationError):
    """Someone else is booking overlapping dates right now. Retry after a backoff."""

    code = "lock_conflict"
    http_status = 409
    retryable = True

    def __init__(self, property_id: Any, check_in, check_out, expires_at=None):
        details: dict[str, Any] = {
            "property_id": property_id,
            "check_in": check_in.isoformat(),
            "check_out": check_out.isoformat(),
        }
        if expires_at is not None:
            details["retry_after"] = expires_at.isoformat()
        super().__init__("A booking for these dates is already in progress", **details)
        self.expires_at = expires_at


class PersistenceError(ReservationError):
    """The store is unreachable or rejected a write."""

    code = "persistence_error"
    http_status = 500
    retryable = True
