# backend/agenda/services/booking_writer.py
"""
Conflict-checked booking writes.

The critical section is check-then-insert: without serialisation two
requests for the same instant can both pass the check and both insert.
Per tenant, the writer therefore holds:

1. the in-process tenant lock (TenantLockRegistry), and
2. inside one transaction, SELECT ... FOR UPDATE on the tenant row and on
   the clashing bookings (row locks on PostgreSQL / MySQL),

across both the re-check read and the insert. A partial unique index on
confirmed (tenant_id, starts_at) backs this up; its violation is reported
as SlotTaken too.

Side effects (event emission, calendar sync) run after commit and after
the lock is released. Their failures are logged, never raised.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from redis import Redis
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import Settings, get_settings
from ..models import BOOKING_STATUSES
from ..repositories.bookings import BookingRepository
from ..repositories.tenants import TenantRepository
from .errors import (
    BookingNotFound,
    EventTypeNotFound,
    InternalError,
    InvalidStart,
    SlotTaken,
    TenantNotFound,
)
from .events import emit_event
from .tenant_locks import TenantLockRegistry, tenant_locks
from .timezones import from_db_utc, parse_start_instant, to_utc_iso

logger = logging.getLogger(__name__)

OnCommitted = Callable[[int], None]


class BookingWriter:
    """Creates bookings and changes their status without breaking non-overlap."""

    def __init__(
        self,
        db: Session,
        locks: TenantLockRegistry | None = None,
        settings: Settings | None = None,
        on_committed: OnCommitted | None = None,
        redis: Redis | None = None,
    ):
        self.db = db
        self.locks = locks or tenant_locks
        self.settings = settings or get_settings()
        self.on_committed = on_committed
        self.redis = redis
        self.bookings = BookingRepository(db)
        self.tenants = TenantRepository(db)

    # ── Create ───────────────────────────────────────────────────────────

    def create(
        self,
        tenant_id: int,
        event_type_id: int,
        guest_name: str,
        guest_email: str,
        start: str | datetime,
    ) -> int:
        """
        Create a confirmed booking.

        Returns:
            New booking id.

        Raises:
            InvalidStart, TenantNotFound, EventTypeNotFound: before any transaction
            SlotTaken: overlap found in the locked re-check
            BookingLockTimeout / InternalError: lock or storage failure
        """
        # Step 1: validation, outside the critical section
        start_utc = parse_start_instant(start)

        try:
            tenant = self.tenants.get_active(tenant_id)
            if not tenant:
                raise TenantNotFound()
            event_type = self.tenants.get_event_type(tenant_id, event_type_id)
            if not event_type:
                raise EventTypeNotFound()
            duration_min = event_type.duration_min
            buffer_min = event_type.buffer_min or 0
            event_type_name = event_type.name
        except SQLAlchemyError as e:
            raise InternalError(str(e)) from e
        finally:
            # Close the read transaction so the locked re-check sees fresh rows
            self.db.rollback()

        try:
            end_utc = start_utc + timedelta(minutes=duration_min)
            padded_end = end_utc + timedelta(minutes=buffer_min)
        except OverflowError as e:
            raise InvalidStart(f"Start too close to the end of the calendar: {to_utc_iso(start_utc)}") from e

        # Steps 2-3: locked re-check + insert
        with self.locks.hold(tenant_id, timeout=self.settings.booking_lock_timeout_seconds):
            booking_id = self._insert_locked(
                tenant_id=tenant_id,
                event_type_id=event_type_id,
                guest_name=guest_name,
                guest_email=guest_email,
                start=start_utc,
                padded_end=padded_end,
                duration_min=duration_min,
                buffer_min=buffer_min,
            )

        logger.info(
            f"Booking created: booking_id={booking_id}, tenant={tenant_id}, "
            f"event_type={event_type_id} ({event_type_name}), start={to_utc_iso(start_utc)}"
        )

        # Step 4: best-effort side effects
        self._after_commit("booking_created", booking_id, {
            "tenant_id": tenant_id,
            "event_type_id": event_type_id,
            "starts_at": to_utc_iso(start_utc),
            "ends_at": to_utc_iso(end_utc),
        })
        if self.on_committed is not None:
            try:
                self.on_committed(booking_id)
            except Exception:
                logger.exception(f"Post-commit hook failed for booking {booking_id}")

        return booking_id

    def _insert_locked(
        self,
        tenant_id: int,
        event_type_id: int,
        guest_name: str,
        guest_email: str,
        start: datetime,
        padded_end: datetime,
        duration_min: int,
        buffer_min: int,
    ) -> int:
        try:
            self.tenants.lock(tenant_id)
            clash = self.bookings.conflicts(tenant_id, start, padded_end, lock=True)
            if clash:
                self.db.rollback()
                logger.info(
                    f"Slot taken: tenant={tenant_id}, start={to_utc_iso(start)}, clashes with {clash}"
                )
                raise SlotTaken()

            booking = self.bookings.insert(
                tenant_id=tenant_id,
                event_type_id=event_type_id,
                guest_name=guest_name,
                guest_email=guest_email,
                start=start,
                duration_minutes=duration_min,
                buffer_minutes=buffer_min,
            )
            booking_id = booking.id
            self.db.commit()
            return booking_id
        except SlotTaken:
            raise
        except IntegrityError as e:
            self.db.rollback()
            logger.info(f"Slot taken (unique index): tenant={tenant_id}, start={to_utc_iso(start)}")
            raise SlotTaken() from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(f"Booking insert failed for tenant={tenant_id}")
            raise InternalError(str(e)) from e
        except Exception:
            self.db.rollback()
            raise

    # ── Status ───────────────────────────────────────────────────────────

    def set_status(self, tenant_id: int, booking_id: int, status: str) -> bool:
        """
        Move a booking between confirmed and cancelled.

        Returns:
            True if the status changed, False if it already had it.

        Raises:
            BookingNotFound: unknown booking for this tenant
            SlotTaken: re-confirming would overlap another confirmed booking
        """
        if status not in BOOKING_STATUSES:
            raise ValueError(f"Unknown booking status: {status!r}")

        try:
            booking = self.bookings.get(tenant_id, booking_id)
            if not booking:
                raise BookingNotFound()
            if booking.status == status:
                return False
        except SQLAlchemyError as e:
            raise InternalError(str(e)) from e
        finally:
            self.db.rollback()

        with self.locks.hold(tenant_id, timeout=self.settings.booking_lock_timeout_seconds):
            changed = self._set_status_locked(tenant_id, booking_id, status)

        if changed:
            event_type = "booking_cancelled" if status == "cancelled" else "booking_confirmed"
            logger.info(f"Booking {booking_id} (tenant={tenant_id}) → {status}")
            self._after_commit(event_type, booking_id, {"tenant_id": tenant_id})
        return changed

    def _set_status_locked(self, tenant_id: int, booking_id: int, status: str) -> bool:
        try:
            self.tenants.lock(tenant_id)
            booking = self.bookings.get(tenant_id, booking_id)
            if not booking:
                self.db.rollback()
                raise BookingNotFound()
            if booking.status == status:
                self.db.rollback()
                return False

            if status == "confirmed":
                clash = self.bookings.conflicts(
                    tenant_id,
                    from_db_utc(booking.starts_at),
                    from_db_utc(booking.blocked_until),
                    lock=True,
                    exclude_id=booking.id,
                )
                if clash:
                    self.db.rollback()
                    logger.info(f"Cannot re-confirm booking {booking_id}: clashes with {clash}")
                    raise SlotTaken()

            booking.status = status
            self.db.commit()
            return True
        except (SlotTaken, BookingNotFound):
            raise
        except IntegrityError as e:
            self.db.rollback()
            raise SlotTaken() from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(f"Status update failed for booking {booking_id}")
            raise InternalError(str(e)) from e
        except Exception:
            self.db.rollback()
            raise

    # ── Helpers ──────────────────────────────────────────────────────────

    def _after_commit(self, event_type: str, booking_id: int, payload: dict) -> None:
        try:
            emit_event(event_type, {"booking_id": booking_id, **payload}, redis=self.redis)
        except Exception:
            logger.exception(f"Failed to emit {event_type} for booking {booking_id}")
