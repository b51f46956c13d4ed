from .tables import (
    BOOKING_STATUSES,
    Availability,
    Base,
    Bookings,
    CalendarSettings,
    EventTypes,
    GoogleTokens,
    Tenants,
    metadata,
)

__all__ = [
    "BOOKING_STATUSES",
    "Availability",
    "Base",
    "Bookings",
    "CalendarSettings",
    "EventTypes",
    "GoogleTokens",
    "Tenants",
    "metadata",
]
