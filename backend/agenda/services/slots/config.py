# backend/agenda/services/slots/config.py
"""
Slot calculation configuration.
"""

from dataclasses import dataclass

from ...config import get_settings


@dataclass(frozen=True)
class SlotsConfig:
    """
    Configuration for slot generation.

    Attributes:
        hide_past_slots: Drop candidates starting before now + min_notice_minutes
        min_notice_minutes: Minimum lead time before a slot can be offered
    """
    hide_past_slots: bool = False
    min_notice_minutes: int = 0

    def __post_init__(self):
        if self.min_notice_minutes < 0:
            raise ValueError(f"min_notice_minutes must be >= 0, got {self.min_notice_minutes}")


def get_slots_config() -> SlotsConfig:
    settings = get_settings()
    return SlotsConfig(
        hide_past_slots=settings.hide_past_slots,
        min_notice_minutes=settings.min_notice_minutes,
    )


def minutes_to_time_str(minutes: int) -> str:
    """Convert minutes of the day to "HH:MM" (1440 → "24:00")."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
