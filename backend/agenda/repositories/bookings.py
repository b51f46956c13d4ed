# backend/agenda/repositories/bookings.py
"""
Bookings storage.

Overlap is always tested on the padded interval [starts_at, blocked_until),
where blocked_until = ends_at + the buffer of the booking's own event type
(snapshotted when the booking was made).
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from ..models import Bookings, EventTypes
from ..services.timezones import from_db_utc, to_db_utc


@dataclass(frozen=True)
class BookingInterval:
    """A confirmed booking as seen by the slot calculator."""
    start: datetime  # aware UTC
    end: datetime
    buffer_after_minutes: int = 0

    @property
    def padded_end(self) -> datetime:
        return self.end + timedelta(minutes=self.buffer_after_minutes)


@dataclass(frozen=True)
class BookingFilters:
    status: str | None = None
    event_type_slug: str | None = None
    window_start: datetime | None = None
    window_end: datetime | None = None


class BookingRepository:
    def __init__(self, db: Session):
        self.db = db

    # ── Read ─────────────────────────────────────────────────────────────

    def overlapping(
        self,
        tenant_id: int,
        window_start: datetime,
        window_end: datetime,
    ) -> list[BookingInterval]:
        """Confirmed bookings whose padded interval intersects the window."""
        rows = (
            self.db.query(Bookings.starts_at, Bookings.ends_at, Bookings.buffer_minutes)
            .filter(
                Bookings.tenant_id == tenant_id,
                Bookings.status == "confirmed",
                Bookings.starts_at < to_db_utc(window_end),
                Bookings.blocked_until > to_db_utc(window_start),
            )
            .order_by(Bookings.starts_at.asc())
            .all()
        )
        return [
            BookingInterval(
                start=from_db_utc(row.starts_at),
                end=from_db_utc(row.ends_at),
                buffer_after_minutes=row.buffer_minutes or 0,
            )
            for row in rows
        ]

    def conflicts(
        self,
        tenant_id: int,
        start: datetime,
        padded_end: datetime,
        lock: bool = False,
        exclude_id: int | None = None,
    ) -> list[int]:
        """Ids of confirmed bookings clashing with [start, padded_end)."""
        query = (
            self.db.query(Bookings.id)
            .filter(
                Bookings.tenant_id == tenant_id,
                Bookings.status == "confirmed",
                Bookings.starts_at < to_db_utc(padded_end),
                Bookings.blocked_until > to_db_utc(start),
            )
        )
        if exclude_id is not None:
            query = query.filter(Bookings.id != exclude_id)
        if lock:
            query = query.with_for_update()
        return [row.id for row in query.all()]

    def get(self, tenant_id: int, booking_id: int) -> Bookings | None:
        return (
            self.db.query(Bookings)
            .filter(Bookings.id == booking_id, Bookings.tenant_id == tenant_id)
            .first()
        )

    def list_page(
        self,
        tenant_id: int,
        filters: BookingFilters | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> list[tuple[Bookings, EventTypes]]:
        """Newest first, joined with the event type."""
        filters = filters or BookingFilters()
        query = (
            self.db.query(Bookings, EventTypes)
            .join(
                EventTypes,
                (EventTypes.id == Bookings.event_type_id) & (EventTypes.tenant_id == Bookings.tenant_id),
            )
            .filter(Bookings.tenant_id == tenant_id)
        )
        if filters.status:
            query = query.filter(Bookings.status == filters.status)
        if filters.event_type_slug:
            query = query.filter(EventTypes.slug == filters.event_type_slug)
        if filters.window_start is not None and filters.window_end is not None:
            query = query.filter(
                Bookings.starts_at < to_db_utc(filters.window_end),
                Bookings.ends_at > to_db_utc(filters.window_start),
            )

        offset = (max(1, page) - 1) * page_size
        return (
            query.order_by(Bookings.starts_at.desc(), Bookings.id.desc())
            .offset(offset)
            .limit(page_size)
            .all()
        )

    # ── Write ────────────────────────────────────────────────────────────

    def insert(
        self,
        tenant_id: int,
        event_type_id: int,
        guest_name: str,
        guest_email: str,
        start: datetime,
        duration_minutes: int,
        buffer_minutes: int,
    ) -> Bookings:
        """Add a confirmed booking to the current transaction (flushed, not committed)."""
        end = start + timedelta(minutes=duration_minutes)
        booking = Bookings(
            tenant_id=tenant_id,
            event_type_id=event_type_id,
            guest_name=guest_name,
            guest_email=guest_email,
            starts_at=to_db_utc(start),
            ends_at=to_db_utc(end),
            blocked_until=to_db_utc(end + timedelta(minutes=buffer_minutes)),
            duration_minutes=duration_minutes,
            buffer_minutes=buffer_minutes,
            status="confirmed",
        )
        self.db.add(booking)
        self.db.flush()
        return booking
