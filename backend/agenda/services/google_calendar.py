"""
backend/agenda/services/google_calendar.py

Google Calendar sync for bookings (post-commit side effect).

Handles:
- Calendar event creation for a freshly committed booking
- Remembering the created event id on the booking

Tokens are written by the OAuth flow, which lives outside this service.
Nothing here may fail a booking: every error is logged and reported in
the returned dict.
"""

import logging
from datetime import datetime

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ..config import get_settings
from ..models import Bookings, CalendarSettings, EventTypes, GoogleTokens, Tenants
from .timezones import from_db_utc

logger = logging.getLogger(__name__)

TOKEN_URI = "https://oauth2.googleapis.com/token"
SCOPES = ["https://www.googleapis.com/auth/calendar.events"]
DEFAULT_CALENDAR_ID = "primary"


def _get_calendar_service(access_token: str | None, refresh_token: str | None):
    """Build Google Calendar API service client."""
    settings = get_settings()
    credentials = Credentials(
        token=access_token,
        refresh_token=refresh_token,
        token_uri=TOKEN_URI,
        client_id=settings.google_client_id,
        client_secret=settings.google_client_secret,
        scopes=SCOPES,
    )
    return build("calendar", "v3", credentials=credentials, cache_discovery=False)


def build_event_body(booking: dict) -> dict:
    """
    Calendar event payload for a booking.

    Args:
        booking: Dictionary with keys:
            - id: int
            - starts_at / ends_at: aware datetimes
            - timezone: tenant IANA zone
            - event_type_name: str
            - guest_name / guest_email: str
    """
    starts_at: datetime = booking["starts_at"]
    ends_at: datetime = booking["ends_at"]
    event_type_name = booking.get("event_type_name", "Booking")

    return {
        "summary": f"{event_type_name} — {booking['guest_name']}",
        "description": f"Booking #{booking['id']} ({event_type_name})",
        "start": {
            "dateTime": starts_at.isoformat(),
            "timeZone": booking["timezone"],
        },
        "end": {
            "dateTime": ends_at.isoformat(),
            "timeZone": booking["timezone"],
        },
        "attendees": [
            {"email": booking["guest_email"], "displayName": booking["guest_name"]},
        ],
        "reminders": {"useDefault": True},
    }


def create_event(
    access_token: str | None,
    refresh_token: str | None,
    calendar_id: str,
    booking: dict,
) -> dict:
    """
    Create a calendar event for a booking.

    Returns:
        {"event_id": str, "html_link": str}

    Raises:
        HttpError: If API call fails
    """
    service = _get_calendar_service(access_token, refresh_token)

    try:
        created_event = service.events().insert(
            calendarId=calendar_id,
            body=build_event_body(booking),
            sendUpdates="all",
        ).execute()

        logger.info(f"Created Google Calendar event: {created_event.get('id')}")

        return {
            "event_id": created_event.get("id"),
            "html_link": created_event.get("htmlLink"),
        }
    except HttpError as e:
        logger.error(f"Failed to create calendar event: {e}")
        raise


def sync_booking_to_google(
    booking_id: int,
    session_factory: sessionmaker | None = None,
    create=create_event,
) -> dict:
    """
    Push a committed booking to the tenant's Google Calendar.

    Runs detached from the request (FastAPI background task) with its own
    session.

    Returns:
        {"ok": True, "event_id": ..., "calendar_id": ...} or
        {"ok": False, "reason": ...}
    """
    if not get_settings().calendar_sync_enabled:
        return {"ok": False, "reason": "sync_disabled"}

    if session_factory is None:
        from ..database import SessionLocal
        session_factory = SessionLocal

    db = session_factory()
    try:
        row = (
            db.query(Bookings, EventTypes, Tenants)
            .join(EventTypes, EventTypes.id == Bookings.event_type_id)
            .join(Tenants, Tenants.id == Bookings.tenant_id)
            .filter(Bookings.id == booking_id)
            .first()
        )
        if not row:
            logger.warning(f"Calendar sync: booking {booking_id} not found")
            return {"ok": False, "reason": "not_found"}
        booking, event_type, tenant = row

        cal_settings = db.get(CalendarSettings, tenant.id)
        if cal_settings and not cal_settings.sync_enabled:
            logger.info(f"Booking {booking_id} not synced: sync disabled for tenant={tenant.id}")
            return {"ok": False, "reason": "sync_disabled"}

        tokens = db.get(GoogleTokens, tenant.id)
        if not tokens or not tokens.refresh_token:
            logger.info(f"Booking {booking_id} not synced: no Google token for tenant={tenant.id}")
            return {"ok": False, "reason": "no_google_token"}

        calendar_id = (cal_settings.calendar_id if cal_settings else None) or DEFAULT_CALENDAR_ID

        result = create(
            tokens.access_token,
            tokens.refresh_token,
            calendar_id,
            {
                "id": booking.id,
                "starts_at": from_db_utc(booking.starts_at),
                "ends_at": from_db_utc(booking.ends_at),
                "timezone": tenant.timezone,
                "event_type_name": event_type.name,
                "guest_name": booking.guest_name,
                "guest_email": booking.guest_email,
            },
        )

        booking.google_event_id = result.get("event_id")
        booking.google_calendar_id = calendar_id
        db.commit()

        logger.info(
            f"Booking {booking_id} synced to Google Calendar: event_id={booking.google_event_id}"
        )
        return {"ok": True, "event_id": booking.google_event_id, "calendar_id": calendar_id}
    except (HttpError, SQLAlchemyError) as e:
        db.rollback()
        logger.error(f"Calendar sync failed for booking {booking_id}: {e}")
        return {"ok": False, "reason": "error"}
    except Exception:
        db.rollback()
        logger.exception(f"Calendar sync error for booking {booking_id}")
        return {"ok": False, "reason": "error"}
    finally:
        db.close()
