# backend/agenda/routers/admin.py
"""
Tenant admin endpoints.

Authentication is enforced upstream; the tenant comes from ?u= / X-Owner-User.
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from ..config import get_settings
from ..database import get_db
from ..models import Tenants
from ..redis_client import redis_client
from ..repositories.availability import AvailabilityRepository
from ..repositories.bookings import BookingFilters, BookingRepository
from ..schemas.availability import AvailabilityRead, AvailabilityResponse, AvailabilityUpdate
from ..schemas.bookings import (
    BookingAdminRead,
    BookingCreate,
    BookingCreated,
    BookingEventType,
    BookingsPage,
    BookingStatusChanged,
    BookingStatusUpdate,
)
from ..services.booking_writer import BookingWriter
from ..services.slots.config import minutes_to_time_str
from ..services.timezones import day_bounds_utc, to_utc_iso
from .deps import create_booking_from_request, get_tenant

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


# ── Availability ─────────────────────────────────────────────────────────


@router.get("/availability", response_model=AvailabilityResponse)
def get_availability(
    tenant: Tenants = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    rows = AvailabilityRepository(db).list_all(tenant.id)
    return AvailabilityResponse(items=[
        AvailabilityRead(
            id=str(row.id),
            weekday=row.weekday,
            start_min=row.start_min,
            end_min=row.end_min,
            start=minutes_to_time_str(row.start_min),
            end=minutes_to_time_str(row.end_min),
        )
        for row in rows
    ])


@router.put("/availability")
def put_availability(
    data: AvailabilityUpdate,
    tenant: Tenants = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    """Replace the ranges of every weekday present in the body."""
    inserted = AvailabilityRepository(db).replace_days(
        tenant.id,
        [(day.weekday, [(r.start_min, r.end_min) for r in day.ranges]) for day in data.days],
    )
    logger.info(f"Availability updated for tenant={tenant.id}: {inserted} ranges")
    return {"ok": True, "inserted": inserted}


# ── Bookings ─────────────────────────────────────────────────────────────


@router.get("/bookings", response_model=BookingsPage)
def list_bookings(
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, alias="pageSize"),
    status_filter: str | None = Query(None, alias="status"),
    event_type_slug: str | None = Query(None, alias="eventType"),
    target_date: str | None = Query(None, alias="date", description="YYYY-MM-DD, tenant-local"),
    tenant: Tenants = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    """Paginated bookings, newest first."""
    page_size = min(page_size, get_settings().admin_page_size_max)

    window_start = window_end = None
    if target_date:
        window_start, window_end = day_bounds_utc(target_date, tenant.timezone)

    # Unknown status values are ignored rather than rejected
    filters = BookingFilters(
        status=status_filter if status_filter in ("confirmed", "cancelled") else None,
        event_type_slug=event_type_slug or None,
        window_start=window_start,
        window_end=window_end,
    )

    rows = BookingRepository(db).list_page(tenant.id, filters, page=page, page_size=page_size)

    return BookingsPage(
        items=[
            BookingAdminRead(
                id=str(booking.id),
                event_type=BookingEventType(
                    id=str(event_type.id),
                    name=event_type.name,
                    slug=event_type.slug,
                    color_hex=event_type.color_hex,
                ),
                guest_name=booking.guest_name,
                guest_email=booking.guest_email,
                starts_at=to_utc_iso(booking.starts_at),
                ends_at=to_utc_iso(booking.ends_at),
                status=booking.status,
                duration_min=booking.duration_minutes,
                buffer_min=booking.buffer_minutes,
            )
            for booking, event_type in rows
        ],
        page=page,
        page_size=page_size,
        timezone=tenant.timezone,
    )


@router.post("/bookings", response_model=BookingCreated)
def create_booking(
    data: BookingCreate,
    background_tasks: BackgroundTasks,
    tenant: Tenants = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    booking_id = create_booking_from_request(db, tenant, data, background_tasks)
    return BookingCreated(id=str(booking_id))


@router.put("/bookings/{booking_id}/status", response_model=BookingStatusChanged)
def update_booking_status(
    booking_id: int,
    data: BookingStatusUpdate,
    tenant: Tenants = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    """Cancel or re-confirm. Repeating the current status is a no-op."""
    changed = BookingWriter(db, redis=redis_client).set_status(tenant.id, booking_id, data.status)
    return BookingStatusChanged(changed=1 if changed else 0)
