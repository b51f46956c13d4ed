# backend/agenda/services/ics.py
"""iCalendar (RFC 5545) export of a single booking."""

from datetime import datetime

from ..models import Bookings
from .timezones import from_db_utc

PRODID = "-//Agenda//Booking//EN"


def _ics_utc(dt: datetime) -> str:
    return from_db_utc(dt).strftime("%Y%m%dT%H%M%SZ")


def _escape(value: str) -> str:
    return (
        value.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
        .replace("\r", "\\n")
        .replace("\n", "\\n")
    )


def render_booking_ics(booking: Bookings, event_type_name: str, owner_name: str) -> str:
    status = "CANCELLED" if booking.status == "cancelled" else "CONFIRMED"
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODID}",
        "METHOD:REQUEST",
        "BEGIN:VEVENT",
        f"UID:booking-{booking.id}@agenda",
        f"DTSTAMP:{_ics_utc(booking.created_at or booking.starts_at)}",
        f"DTSTART:{_ics_utc(booking.starts_at)}",
        f"DTEND:{_ics_utc(booking.ends_at)}",
        f"SUMMARY:{_escape(f'{event_type_name} — {booking.guest_name}')}",
        f"DESCRIPTION:{_escape(f'Booking #{booking.id} with {owner_name}')}",
        f"STATUS:{status}",
        "END:VEVENT",
        "END:VCALENDAR",
    ]
    return "\r\n".join(lines) + "\r\n"
