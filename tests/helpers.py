"""Builders shared by the test modules"""
import uuid
from datetime import date, datetime
from typing import List

from booking_engine.schemas.availability import (
    AvailabilityScheduleSchema,
    DaySchedule,
    TimeSlot,
)
from booking_engine.schemas.recurrence import RecurrencePattern

# Calendar anchors used across tests (January 2025)
MONDAY = date(2025, 1, 6)
TUESDAY = date(2025, 1, 7)
WEDNESDAY = date(2025, 1, 8)
SATURDAY = date(2025, 1, 11)
NEXT_MONDAY = date(2025, 1, 13)

STAFF_ID = uuid.UUID("11111111-1111-1111-1111-111111111111")


def slots(*pairs) -> List[TimeSlot]:
    return [TimeSlot(start=start, end=end) for start, end in pairs]


def weekday_schedule(day_of_week: int, *pairs) -> DaySchedule:
    return DaySchedule(day_of_week=day_of_week, time_slots=slots(*pairs))


def make_schedule(**overrides) -> AvailabilityScheduleSchema:
    data = {
        "id": uuid.uuid4(),
        "staff_id": STAFF_ID,
        "weekly_schedule": [weekday_schedule(1, ("09:00", "17:00"))],
        "effective_from": date(2024, 1, 1),
        "effective_to": None,
        "created_at": datetime(2024, 1, 1, 8, 0),
    }
    data.update(overrides)
    return AvailabilityScheduleSchema(**data)


def make_pattern(**overrides) -> RecurrencePattern:
    data = {
        "id": uuid.uuid4(),
        "frequency": "weekly",
        "interval": 1,
        "day_of_week": 1,
        "start_time": "14:00",
        "duration_minutes": 60,
        "time_zone": "America/New_York",
        "start_date": datetime(2025, 1, 6),
    }
    data.update(overrides)
    return RecurrencePattern(**data)


class InMemoryScheduleGateway:
    """Schedule gateway over a plain list, in storage order"""

    def __init__(self, schedules=None):
        self.schedules = list(schedules or [])
        self.calls = []

    def fetch_candidate_schedules(self, staff_id, as_of):
        self.calls.append((staff_id, as_of))
        return [
            s for s in self.schedules
            if s.staff_id == staff_id and s.is_active_on(as_of)
        ]
