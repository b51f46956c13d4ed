# backend/agenda/services/slots/calculator.py
"""
Slot generation for one event type on one tenant-local day.

Pure function of its inputs:
✓ availability ranges (tenant-local minutes, never merged)
✓ event type duration + buffer-after
✓ existing confirmed bookings, each with its own buffer-after

Rules:
- candidates step by the event duration from each range's own start
- the padded candidate [s, s + duration + buffer) must end inside the range
  (ending exactly on the range end is fine)
- the padded candidate must not intersect any booking's padded interval
  [b.start, b.end + b.buffer_after)
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo

from ..timezones import format_local_label, local_minute_to_utc, resolve_zone, to_utc_iso


@dataclass(frozen=True, order=True)
class Slot:
    """A bookable start instant (aware UTC) with its tenant-local label."""
    instant: datetime
    label: str

    @property
    def iso(self) -> str:
        return to_utc_iso(self.instant)


def calculate_day_slots(
    target_date: date,
    zone: str | tzinfo,
    ranges: Iterable[tuple[int, int]],
    duration_min: int,
    buffer_min: int,
    bookings: Sequence = (),
    not_before: datetime | None = None,
) -> list[Slot]:
    """
    Calculate bookable slots.

    Args:
        target_date: Tenant-local calendar date
        zone: Tenant IANA zone
        ranges: (start_min, end_min) availability ranges for the weekday
        duration_min: Event type duration (also the step)
        buffer_min: Event type buffer-after
        bookings: BookingInterval-like objects with start and padded_end (UTC)
        not_before: Drop candidates starting before this instant

    Returns:
        Ascending list of Slot. Empty list = no slots.
    """
    if duration_min <= 0:
        raise ValueError(f"duration_min must be positive, got {duration_min}")
    if buffer_min < 0:
        raise ValueError(f"buffer_min must be >= 0, got {buffer_min}")

    tz = resolve_zone(zone)
    step = timedelta(minutes=duration_min)
    padded = timedelta(minutes=duration_min + buffer_min)

    busy = [
        (b.start, b.padded_end)
        for b in bookings
    ]

    instants: set[datetime] = set()

    for start_min, end_min in ranges:
        if end_min <= start_min:
            continue

        range_start = local_minute_to_utc(target_date, start_min, tz)
        range_end = local_minute_to_utc(target_date, end_min, tz)

        s = range_start
        while s + padded <= range_end:
            if not_before is None or s >= not_before:
                s_end = s + padded
                if not any(s < b_end and s_end > b_start for b_start, b_end in busy):
                    instants.add(s)
            s += step

    # Overlapping ranges can produce the same instant twice
    return [Slot(instant=s, label=format_local_label(s, tz)) for s in sorted(instants)]
