# backend/agenda/schemas/slots.py
"""
Pydantic schemas for slots API.
"""

from pydantic import BaseModel, Field


class SlotRead(BaseModel):
    """A single bookable start."""
    iso: str = Field(description="UTC start, e.g. 2024-06-05T13:00:00Z")
    label: str = Field(description="Tenant-local HH:MM")

    model_config = {"from_attributes": True}


class SlotsDayResponse(BaseModel):
    """Response with bookable slots for one event type on one day."""
    slots: list[SlotRead]

    model_config = {"from_attributes": True}
