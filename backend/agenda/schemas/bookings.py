# backend/agenda/schemas/bookings.py

import re
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class BookingCreate(BaseModel):
    """Request body for public and admin booking."""
    event_type: str = Field(alias="eventType", min_length=1, description="Event type slug")
    guest_name: str = Field(alias="guestName", min_length=1)
    guest_email: str = Field(alias="guestEmail")
    start_iso: str = Field(alias="startISO", description="Start instant, UTC ISO 8601")

    model_config = {"populate_by_name": True}

    @field_validator("guest_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("guestName must not be blank")
        return v

    @field_validator("guest_email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip()
        if not _EMAIL_RE.match(v):
            raise ValueError("guestEmail must be a valid email address")
        return v


class BookingCreated(BaseModel):
    ok: bool = True
    id: str


class BookingStatusUpdate(BaseModel):
    status: Literal["confirmed", "cancelled"]


class BookingStatusChanged(BaseModel):
    ok: bool = True
    changed: int


class BookingEventType(BaseModel):
    id: str
    name: str
    slug: str
    color_hex: Optional[str] = Field(None, alias="colorHex")

    model_config = {"populate_by_name": True}


class BookingAdminRead(BaseModel):
    id: str
    event_type: BookingEventType = Field(alias="eventType")
    guest_name: str = Field(alias="guestName")
    guest_email: str = Field(alias="guestEmail")
    starts_at: str = Field(alias="startsAt")
    ends_at: str = Field(alias="endsAt")
    status: str
    duration_min: int = Field(alias="durationMin")
    buffer_min: int = Field(alias="bufferMin")

    model_config = {"populate_by_name": True}


class BookingsPage(BaseModel):
    items: list[BookingAdminRead]
    page: int
    page_size: int = Field(alias="pageSize")
    timezone: str

    model_config = {"populate_by_name": True}
