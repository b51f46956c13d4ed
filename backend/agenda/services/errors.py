"""
Domain exception hierarchy for the booking core.

Every error carries the HTTP status and the machine-readable code the API
returns, so routers can let them propagate to the exception handler.
"""


class AgendaError(Exception):
    """Base class for all booking-core errors."""

    status_code = 500
    code = "internal_error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.code)


class InvalidTimeZone(AgendaError):
    """Raised when an IANA zone identifier is unknown or malformed."""

    status_code = 400
    code = "invalid_timezone"


class InvalidDate(AgendaError):
    """Raised on malformed calendar dates."""

    status_code = 400
    code = "invalid_date"


class InvalidStart(AgendaError):
    """Raised when a booking start cannot be normalised to a UTC instant."""

    status_code = 400
    code = "invalid_start"


class InvalidAvailabilityRange(AgendaError):
    """Raised in strict mode for ranges whose end is not after their start."""

    status_code = 400
    code = "invalid_range"


class TenantNotFound(AgendaError):
    status_code = 404
    code = "owner_not_found"


class EventTypeNotFound(AgendaError):
    """Event type does not exist, belongs to another tenant, or is inactive."""

    status_code = 404
    code = "event_type_not_found"


class BookingNotFound(AgendaError):
    status_code = 404
    code = "not_found"


class SlotTaken(AgendaError):
    """Overlap detected inside the locked re-check."""

    status_code = 409
    code = "slot_taken"


class InternalError(AgendaError):
    """Storage or transport failure."""


class BookingLockTimeout(InternalError):
    status_code = 503
    code = "lock_timeout"
