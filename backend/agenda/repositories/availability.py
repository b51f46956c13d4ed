# backend/agenda/repositories/availability.py
"""
Weekly availability ranges per tenant.

Ranges are tenant-local minutes of the day ([0, 1440]) keyed by weekday
(0 = Sunday). They are stored as given and never merged; the slot
calculator walks each range independently.
"""

import logging
from collections.abc import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import get_settings
from ..models import Availability
from ..services.errors import InternalError, InvalidAvailabilityRange

logger = logging.getLogger(__name__)


class AvailabilityRepository:
    def __init__(self, db: Session):
        self.db = db

    def ranges_for(self, tenant_id: int, weekday: int) -> list[tuple[int, int]]:
        """(start_min, end_min) pairs ascending by start. Empty when unset."""
        rows = (
            self.db.query(Availability.start_min, Availability.end_min)
            .filter(Availability.tenant_id == tenant_id, Availability.weekday == weekday)
            .order_by(Availability.start_min.asc(), Availability.end_min.asc())
            .all()
        )
        return [(row.start_min, row.end_min) for row in rows]

    def list_all(self, tenant_id: int) -> list[Availability]:
        return (
            self.db.query(Availability)
            .filter(Availability.tenant_id == tenant_id)
            .order_by(Availability.weekday.asc(), Availability.start_min.asc())
            .all()
        )

    def replace_days(
        self,
        tenant_id: int,
        days: Iterable[tuple[int, Iterable[tuple[int, int]]]],
        strict: bool | None = None,
    ) -> int:
        """
        Replace the ranges of every weekday listed in `days`.

        Weekdays not listed keep their ranges. Ranges with end <= start are
        dropped, or rejected when strict (nothing is written then).

        Returns:
            Number of ranges inserted.
        """
        if strict is None:
            strict = get_settings().strict_availability_ranges

        cleaned: list[tuple[int, list[tuple[int, int]]]] = []
        for weekday, ranges in days:
            kept = []
            for start_min, end_min in ranges:
                if end_min <= start_min:
                    if strict:
                        raise InvalidAvailabilityRange(
                            f"Range {start_min}-{end_min} on weekday {weekday} ends before it starts"
                        )
                    logger.info(
                        f"Dropping empty availability range {start_min}-{end_min} "
                        f"(tenant={tenant_id}, weekday={weekday})"
                    )
                    continue
                kept.append((start_min, end_min))
            cleaned.append((weekday, kept))

        inserted = 0
        try:
            for weekday, ranges in cleaned:
                (
                    self.db.query(Availability)
                    .filter(Availability.tenant_id == tenant_id, Availability.weekday == weekday)
                    .delete(synchronize_session=False)
                )
                for start_min, end_min in ranges:
                    self.db.add(Availability(
                        tenant_id=tenant_id,
                        weekday=weekday,
                        start_min=start_min,
                        end_min=end_min,
                    ))
                    inserted += 1
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(f"Failed to replace availability for tenant={tenant_id}")
            raise InternalError(str(e)) from e

        return inserted
