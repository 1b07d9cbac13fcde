"""
Pydantic schemas for availability schedules and resolved days
"""
import datetime as dt
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, field_validator

from booking_engine.models.availability import ExceptionKind


def _strip_time(value):
    # exceptions and overrides are keyed by calendar date only
    if isinstance(value, dt.datetime):
        return value.date()
    return value


class TimeSlot(BaseModel):
    """A contiguous time-of-day window, "HH:MM" 24h strings"""
    start: str = Field(..., description="Window start, HH:MM")
    end: str = Field(..., description="Window end, HH:MM")


class DaySchedule(BaseModel):
    """Regular hours for one weekday"""
    day_of_week: int = Field(..., ge=0, le=6, description="0=Sunday ... 6=Saturday")
    time_slots: List[TimeSlot] = Field(default_factory=list)


class ScheduleException(BaseModel):
    """Time off (unavailable) or special hours (custom_hours) on one date"""
    model_config = ConfigDict(from_attributes=True)

    date: dt.date
    kind: ExceptionKind
    time_slots: List[TimeSlot] = Field(default_factory=list)
    reason: Optional[str] = ""

    @field_validator("date", mode="before")
    @classmethod
    def calendar_date(cls, v):
        return _strip_time(v)


class ScheduleOverride(BaseModel):
    """Extra availability on one date, independent of the weekday"""
    model_config = ConfigDict(from_attributes=True)

    date: dt.date
    time_slots: List[TimeSlot] = Field(default_factory=list)

    @field_validator("date", mode="before")
    @classmethod
    def calendar_date(cls, v):
        return _strip_time(v)


class AvailabilityScheduleSchema(BaseModel):
    """A staff member's schedule for one effective period"""
    model_config = ConfigDict(from_attributes=True)

    id: Optional[UUID] = None
    staff_id: UUID
    weekly_schedule: List[DaySchedule] = Field(default_factory=list)
    exceptions: List[ScheduleException] = Field(default_factory=list)
    overrides: List[ScheduleOverride] = Field(default_factory=list)
    effective_from: dt.date
    effective_to: Optional[dt.date] = None
    created_at: Optional[dt.datetime] = None

    @field_validator("effective_from", "effective_to", mode="before")
    @classmethod
    def calendar_dates(cls, v):
        return _strip_time(v)

    def is_active_on(self, target: dt.date) -> bool:
        """effective_from <= target <= effective_to (open-ended when unset)"""
        if target < self.effective_from:
            return False
        return self.effective_to is None or target <= self.effective_to


class AvailabilityScheduleCreate(BaseModel):
    """Schema for creating a schedule"""
    staff_id: UUID
    weekly_schedule: List[DaySchedule] = Field(default_factory=list)
    exceptions: List[ScheduleException] = Field(default_factory=list)
    overrides: List[ScheduleOverride] = Field(default_factory=list)
    effective_from: Optional[dt.date] = None  # defaults to today
    effective_to: Optional[dt.date] = None

    @field_validator("effective_from", "effective_to", mode="before")
    @classmethod
    def calendar_dates(cls, v):
        return _strip_time(v)


class DailyAvailability(BaseModel):
    """Resolved windows for one staff member on one date"""
    available: bool
    reason: Optional[str] = None
    time_slots: List[TimeSlot] = Field(default_factory=list)
