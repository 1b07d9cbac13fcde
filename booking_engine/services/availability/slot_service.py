"""
Slot Generation Service

Cuts a day's availability windows into discrete bookable slots for a
service duration, keeping a buffer free after each slot.
"""
from datetime import date
from typing import List, Optional
import logging

from booking_engine.config.settings import get_settings
from booking_engine.schemas.availability import TimeSlot
from booking_engine.services.availability.availability_service import AvailabilityService
from booking_engine.utils.time_utils import from_minutes, to_minutes

logger = logging.getLogger(__name__)


def generate_slots_for_windows(
        windows: List[TimeSlot],
        duration_minutes: int,
        buffer_minutes: int = 0,
        granularity_minutes: int = 15
) -> List[TimeSlot]:
    """
    Slots for a list of windows.

    Windows are walked in the order given and their slots concatenated;
    nothing is sorted or merged. A slot starting at `cursor` fits when
    cursor + duration + buffer <= window end, but the emitted end is
    cursor + duration.
    """
    if granularity_minutes <= 0:
        raise ValueError("granularity_minutes must be a positive number of minutes")

    slots = []
    footprint = duration_minutes + buffer_minutes

    for window in windows:
        window_start = to_minutes(window.start)
        window_end = to_minutes(window.end)

        cursor = window_start
        while cursor + footprint <= window_end:
            slots.append(TimeSlot(
                start=from_minutes(cursor),
                end=from_minutes(cursor + duration_minutes),
            ))
            cursor += granularity_minutes

    return slots


class SlotService:
    """Bookable slots for a staff member on a date"""

    def __init__(self, availability_service: AvailabilityService, granularity_minutes: Optional[int] = None):
        self.availability_service = availability_service
        if granularity_minutes is None:
            granularity_minutes = get_settings().SLOT_GRANULARITY_MINUTES
        self.granularity_minutes = granularity_minutes

    def generate_slots(
            self,
            staff_id,
            target_date: date,
            duration_minutes: int,
            buffer_minutes: int = 0,
            granularity_minutes: Optional[int] = None
    ) -> List[TimeSlot]:
        day = self.availability_service.get_daily_availability(staff_id, target_date)

        if day is None or not day.available:
            return []

        if granularity_minutes is None:
            granularity_minutes = self.granularity_minutes

        slots = generate_slots_for_windows(day.time_slots, duration_minutes, buffer_minutes, granularity_minutes)
        logger.debug(f"Generated {len(slots)} slots for staff {staff_id} on {target_date}")
        return slots
