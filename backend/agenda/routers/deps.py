# backend/agenda/routers/deps.py
"""
Shared router dependencies.

The tenant is resolved from ?u=<slug> or the X-Owner-User header.
"""

from fastapi import BackgroundTasks, Depends, Header, HTTPException, Query, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Tenants
from ..redis_client import redis_client
from ..repositories.tenants import TenantRepository
from ..schemas.bookings import BookingCreate
from ..services.booking_writer import BookingWriter
from ..services.errors import EventTypeNotFound
from ..services.google_calendar import sync_booking_to_google


def get_tenant(
    u: str | None = Query(None, description="Tenant slug"),
    x_owner_user: str | None = Header(None),
    db: Session = Depends(get_db),
) -> Tenants:
    slug = (u or "").strip().lower() or (x_owner_user or "").strip().lower()
    if not slug:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="user_required")

    tenant = TenantRepository(db).get_active_by_slug(slug)
    if not tenant:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="owner_not_found")
    return tenant


def create_booking_from_request(
    db: Session,
    tenant: Tenants,
    data: BookingCreate,
    background_tasks: BackgroundTasks,
) -> int:
    """Resolve the event type slug and run the conflict-checked insert."""
    event_type = TenantRepository(db).get_event_type_by_slug(tenant.id, data.event_type)
    if not event_type:
        raise EventTypeNotFound()

    writer = BookingWriter(
        db,
        redis=redis_client,
        # Calendar sync runs after the response; its failure never reaches the guest
        on_committed=lambda booking_id: background_tasks.add_task(sync_booking_to_google, booking_id),
    )
    return writer.create(
        tenant_id=tenant.id,
        event_type_id=event_type.id,
        guest_name=data.guest_name,
        guest_email=data.guest_email,
        start=data.start_iso,
    )
