# backend/agenda/routers/public.py
"""
Public (guest-facing) endpoints.

GET  /public/event-types          - active event types of the tenant
GET  /public/slots                - bookable slots for an event type on a day
POST /public/book                 - conflict-checked booking
GET  /public/booking/{id}/ics     - calendar file for a booking
"""

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import EventTypes, Tenants
from ..repositories.bookings import BookingRepository
from ..repositories.tenants import TenantRepository
from ..schemas.bookings import BookingCreate, BookingCreated
from ..schemas.event_types import EventTypePublic, EventTypesResponse
from ..schemas.slots import SlotRead, SlotsDayResponse
from ..services.errors import EventTypeNotFound
from ..services.ics import render_booking_ics
from ..services.slots import calculate_event_type_slots
from .deps import create_booking_from_request, get_tenant

router = APIRouter(prefix="/public", tags=["public"])


@router.get("/event-types", response_model=EventTypesResponse)
def list_event_types(
    tenant: Tenants = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    items = TenantRepository(db).list_active_event_types(tenant.id)
    return EventTypesResponse(items=[
        EventTypePublic(
            id=str(et.id),
            slug=et.slug,
            name=et.name,
            description=et.description,
            duration_min=et.duration_min,
        )
        for et in items
    ])


@router.get("/slots", response_model=SlotsDayResponse)
def get_slots(
    event_type_slug: str = Query(..., alias="eventType", min_length=1),
    target_date: str = Query(..., alias="date", description="YYYY-MM-DD, tenant-local"),
    tenant: Tenants = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    """Bookable slots for an event type on a tenant-local day."""
    event_type: EventTypes | None = TenantRepository(db).get_event_type_by_slug(tenant.id, event_type_slug)
    if not event_type:
        raise EventTypeNotFound()

    slots = calculate_event_type_slots(db, tenant, event_type, target_date)
    return SlotsDayResponse(slots=[SlotRead(iso=s.iso, label=s.label) for s in slots])


@router.post("/book", response_model=BookingCreated)
def book(
    data: BookingCreate,
    background_tasks: BackgroundTasks,
    tenant: Tenants = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    booking_id = create_booking_from_request(db, tenant, data, background_tasks)
    return BookingCreated(id=str(booking_id))


@router.get("/booking/{booking_id}/ics")
def booking_ics(
    booking_id: int,
    tenant: Tenants = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    booking = BookingRepository(db).get(tenant.id, booking_id)
    if not booking:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="not_found")

    ics = render_booking_ics(booking, booking.event_type.name, tenant.name)
    return Response(
        content=ics,
        media_type="text/calendar; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="booking-{booking.id}.ics"',
            "Cache-Control": "no-store",
        },
    )
