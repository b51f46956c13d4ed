# backend/agenda/services/slots/availability.py
"""
Slots for an event type on a tenant-local day.

Resolves the day's UTC window, loads availability ranges for the local
weekday and the confirmed bookings touching the window, then delegates to
calculate_day_slots. Read-only: takes no locks.
"""

import logging
from datetime import date, datetime, timedelta, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...models import EventTypes, Tenants
from ...repositories.availability import AvailabilityRepository
from ...repositories.bookings import BookingRepository
from ..errors import EventTypeNotFound, InternalError
from ..timezones import day_bounds_utc, local_weekday, parse_calendar_date, resolve_zone
from .calculator import Slot, calculate_day_slots
from .config import SlotsConfig, get_slots_config

logger = logging.getLogger(__name__)


def calculate_event_type_slots(
    db: Session,
    tenant: Tenants,
    event_type: EventTypes,
    target_date: str | date,
    config: SlotsConfig | None = None,
    now: datetime | None = None,
) -> list[Slot]:
    """
    Calculate available slots for an event type.

    Raises:
        InvalidDate / InvalidTimeZone: bad input
        EventTypeNotFound: inactive or foreign event type
        InternalError: storage failure
    """
    config = config or get_slots_config()
    day = parse_calendar_date(target_date)
    zone = resolve_zone(tenant.timezone)

    if not event_type.is_active or event_type.tenant_id != tenant.id:
        raise EventTypeNotFound()

    # Step 1: UTC window of the local day
    window_start, window_end = day_bounds_utc(day, zone)

    try:
        # Step 2: availability for the local weekday
        ranges = AvailabilityRepository(db).ranges_for(tenant.id, local_weekday(day))
        if not ranges:
            return []

        # Step 3: confirmed bookings touching the window
        bookings = BookingRepository(db).overlapping(tenant.id, window_start, window_end)
    except SQLAlchemyError as e:
        logger.exception(f"Slot lookup failed for tenant={tenant.id}, date={day}")
        raise InternalError(str(e)) from e

    not_before = None
    if config.hide_past_slots:
        now = now or datetime.now(timezone.utc)
        not_before = now + timedelta(minutes=config.min_notice_minutes)

    # Step 4: generate
    return calculate_day_slots(
        target_date=day,
        zone=zone,
        ranges=ranges,
        duration_min=event_type.duration_min,
        buffer_min=event_type.buffer_min or 0,
        bookings=bookings,
        not_before=not_before,
    )
