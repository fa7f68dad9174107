"""Error taxonomy for the booking core.

Every failure a caller can observe is one of these. Each carries a stable
``code``, the HTTP status the API answers with, and whether retrying the
same call can succeed.
"""
from typing import Optional


class BookingError(Exception):
    """Base class for booking core errors."""
    code = "BOOKING_ERROR"
    status_code = 400
    retryable = False


class ValidationError(BookingError):
    """Malformed or missing input (bad selection, past or off-grid instant)."""
    code = "VALIDATION_ERROR"
    status_code = 422


class ConflictError(BookingError):
    """Slot was taken between the availability read and the booking write."""
    code = "SLOT_TAKEN"
    status_code = 409
    retryable = True


class AuthError(BookingError):
    """No acting account was supplied."""
    code = "AUTH_REQUIRED"
    status_code = 401


class OwnershipError(AuthError):
    """Acting account does not own the appointment."""
    code = "NOT_OWNER"
    status_code = 403


class NotFoundError(BookingError):
    """Unknown appointment, practitioner or specialty."""
    code = "NOT_FOUND"
    status_code = 404


class InvalidStateError(BookingError):
    """Operation is illegal for the appointment's current status."""
    code = "INVALID_STATE"
    status_code = 409


class DependencyError(BookingError):
    """Appointment store unavailable. Retry with backoff."""
    code = "DEPENDENCY_ERROR"
    status_code = 503
    retryable = True

    def __init__(self, message: str, retry_after: Optional[int] = None):
        super().__init__(message)
        self.retry_after = retry_after
