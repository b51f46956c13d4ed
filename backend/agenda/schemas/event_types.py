# backend/agenda/schemas/event_types.py

from typing import Optional

from pydantic import BaseModel, Field


class EventTypePublic(BaseModel):
    id: str
    slug: str
    name: str
    description: Optional[str] = None
    duration_min: int = Field(alias="durationMin")

    model_config = {"from_attributes": True, "populate_by_name": True}


class EventTypesResponse(BaseModel):
    items: list[EventTypePublic]
