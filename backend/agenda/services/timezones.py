# backend/agenda/services/timezones.py
"""
Tenant-local calendar ↔ UTC conversions.

Tenants configure availability in local wall-clock minutes; bookings are
stored as naive UTC. Everything here is pure and DST aware: offsets are
looked up for the specific date, never assumed fixed.
"""

import re
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import InvalidDate, InvalidStart, InvalidTimeZone

MINUTES_PER_DAY = 24 * 60

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def resolve_zone(zone: str | tzinfo) -> tzinfo:
    """Return a tzinfo for an IANA identifier (or pass a tzinfo through)."""
    if isinstance(zone, tzinfo):
        return zone
    if not isinstance(zone, str) or not zone.strip():
        raise InvalidTimeZone(f"Invalid time zone: {zone!r}")
    try:
        return ZoneInfo(zone.strip())
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise InvalidTimeZone(f"Unknown time zone: {zone!r}") from e


def parse_calendar_date(value: str | date) -> date:
    """Accept a date or a strict "YYYY-MM-DD" string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _DATE_RE.match(value.strip()):
        raise InvalidDate(f"Date must be in YYYY-MM-DD format, got {value!r}")
    try:
        return date.fromisoformat(value.strip())
    except ValueError as e:
        raise InvalidDate(f"Invalid calendar date: {value!r}") from e


def local_weekday(target_date: date) -> int:
    """Weekday with 0 = Sunday .. 6 = Saturday."""
    return target_date.isoweekday() % 7


def day_bounds_utc(target_date: str | date, zone: str | tzinfo) -> tuple[datetime, datetime]:
    """
    Half-open UTC interval [start, end) covering the local day.

    A spring-forward day yields 23 hours, a fall-back day 25 hours.
    """
    day = parse_calendar_date(target_date)
    tz = resolve_zone(zone)
    start_local = datetime.combine(day, time(0, 0), tzinfo=tz)
    end_local = datetime.combine(day + timedelta(days=1), time(0, 0), tzinfo=tz)
    return start_local.astimezone(timezone.utc), end_local.astimezone(timezone.utc)


def local_minute_to_utc(target_date: date, minute: int, zone: str | tzinfo) -> datetime:
    """
    UTC instant of the local wall-clock time `minute` minutes after midnight.

    Minute 1440 is the next local midnight. Times inside a DST gap resolve
    with the pre-transition offset.
    """
    if not 0 <= minute <= MINUTES_PER_DAY:
        raise ValueError(f"minute must be within [0, {MINUTES_PER_DAY}], got {minute}")
    tz = resolve_zone(zone)
    if minute == MINUTES_PER_DAY:
        local = datetime.combine(target_date + timedelta(days=1), time(0, 0), tzinfo=tz)
    else:
        local = datetime.combine(target_date, time(minute // 60, minute % 60), tzinfo=tz)
    return local.astimezone(timezone.utc)


def format_local_label(instant: datetime, zone: str | tzinfo) -> str:
    """Tenant-local "HH:MM" label for a UTC instant."""
    return instant.astimezone(resolve_zone(zone)).strftime("%H:%M")


def parse_start_instant(value: str | datetime) -> datetime:
    """
    Normalise a requested booking start to an aware UTC datetime.

    ISO 8601 strings (with "Z" or an offset) are converted to UTC; naive
    values are taken as UTC already.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value.strip():
        try:
            dt = datetime.fromisoformat(value.strip())
        except ValueError as e:
            raise InvalidStart(f"Unparseable start: {value!r}") from e
    else:
        raise InvalidStart(f"Unparseable start: {value!r}")

    try:
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        else:
            dt = dt.astimezone(timezone.utc)
        # A booking needs room for at least a day after its start
        dt + timedelta(days=1)
    except (OverflowError, ValueError) as e:
        raise InvalidStart(f"Start cannot be normalised to UTC: {value!r}") from e
    return dt


# ── Storage helpers ──────────────────────────────────────────────────────


def to_db_utc(dt: datetime) -> datetime:
    """Aware → naive UTC for storage."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def from_db_utc(dt: datetime) -> datetime:
    """Naive UTC from storage → aware UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_utc_iso(dt: datetime) -> str:
    """ISO 8601 UTC string with a Z suffix, e.g. 2024-06-05T13:00:00Z."""
    return from_db_utc(dt).strftime("%Y-%m-%dT%H:%M:%SZ")
