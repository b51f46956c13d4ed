# backend/agenda/services/slots/__init__.py
"""
Slots calculation module.

calculator: pure generation from ranges + bookings
availability: loads tenant data and runs the calculator
"""

from .config import SlotsConfig, get_slots_config
from .calculator import Slot, calculate_day_slots
from .availability import calculate_event_type_slots

__all__ = [
    "SlotsConfig",
    "get_slots_config",
    "Slot",
    "calculate_day_slots",
    "calculate_event_type_slots",
]
