# backend/agenda/schemas/availability.py

from pydantic import BaseModel, Field


class RangeIn(BaseModel):
    start_min: int = Field(ge=0, le=1440)
    end_min: int = Field(ge=0, le=1440)


class DayIn(BaseModel):
    weekday: int = Field(ge=0, le=6, description="0 = Sunday .. 6 = Saturday")
    ranges: list[RangeIn] = []


class AvailabilityUpdate(BaseModel):
    days: list[DayIn] = []


class AvailabilityRead(BaseModel):
    id: str
    weekday: int
    start_min: int
    end_min: int
    start: str = Field(description="HH:MM")
    end: str = Field(description="HH:MM")


class AvailabilityResponse(BaseModel):
    items: list[AvailabilityRead]
