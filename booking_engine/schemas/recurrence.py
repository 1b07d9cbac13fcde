"""
Pydantic schemas for recurring booking patterns
"""
import enum
from datetime import date, datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, field_validator

from booking_engine.models.recurring_booking import (
    RecurrenceFrequency,
    RecurringStatus,
    PaymentPlan,
)


def _promote_date(value):
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime(value.year, value.month, value.day)
    return value


class RecurrencePattern(BaseModel):
    """
    Read model consumed by the recurrence engine.

    frequency stays a plain string so unknown values reach the engine,
    which answers them with None instead of failing validation.
    """
    model_config = ConfigDict(from_attributes=True)

    id: Optional[UUID] = None
    client_id: Optional[UUID] = None
    staff_id: Optional[UUID] = None
    service_id: Optional[UUID] = None

    frequency: str
    interval: int = 1
    day_of_week: Optional[int] = None
    day_of_month: Optional[int] = None

    start_time: Optional[str] = None
    duration_minutes: Optional[int] = None
    time_zone: Optional[str] = None  # carried through, never applied

    start_date: datetime
    end_date: Optional[datetime] = None
    occurrence_limit: Optional[int] = None

    generated_booking_ids: List[str] = Field(default_factory=list)
    status: RecurringStatus = RecurringStatus.ACTIVE
    payment_plan: PaymentPlan = PaymentPlan.PER_SESSION
    version: Optional[int] = None

    @field_validator("frequency", mode="before")
    @classmethod
    def frequency_value(cls, v):
        if isinstance(v, enum.Enum):
            return v.value
        return v

    @field_validator("interval", mode="before")
    @classmethod
    def default_interval(cls, v):
        # 0 and None both mean "every period"
        return v or 1

    @field_validator("generated_booking_ids", mode="before")
    @classmethod
    def booking_ids_as_strings(cls, v):
        return [str(i) for i in (v or [])]

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def promote_dates(cls, v):
        return _promote_date(v)


def recurrence_errors(
        frequency,
        duration_minutes,
        interval,
        start_time,
        time_zone,
        start_date,
        day_of_week,
        day_of_month
) -> List[str]:
    """Every rule a recurring pattern breaks, in a fixed order"""
    errors = []
    allowed = [f.value for f in RecurrenceFrequency]
    if isinstance(frequency, enum.Enum):
        frequency = frequency.value

    if not frequency or frequency not in allowed:
        errors.append("frequency must be one of weekly, biweekly, or monthly")

    if duration_minutes is None or duration_minutes <= 0:
        errors.append("duration must be a positive number")

    if interval is not None and interval <= 0:
        errors.append("interval must be a positive number")

    if not start_time:
        errors.append("startTime is required")

    if not time_zone:
        errors.append("timeZone is required")

    if not start_date:
        errors.append("startDate is required")

    if frequency in ("weekly", "biweekly") and day_of_week is None:
        errors.append("dayOfWeek is required for weekly or biweekly recurrences")

    if frequency == "monthly" and day_of_month is None:
        errors.append("dayOfMonth is required for monthly recurrences")

    return errors


class RecurringBookingCreate(BaseModel):
    """
    Payload for creating a recurring booking.
    Fields are optional here; business rules are checked by collect_errors()
    so every problem is reported at once.
    """
    client_id: UUID
    staff_id: UUID
    service_id: UUID

    frequency: Optional[str] = None
    interval: Optional[int] = 1
    day_of_week: Optional[int] = Field(None, ge=0, le=6)
    day_of_month: Optional[int] = Field(None, ge=1, le=31)

    start_time: Optional[str] = None
    duration_minutes: Optional[int] = None
    time_zone: Optional[str] = None

    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    occurrence_limit: Optional[int] = Field(None, ge=1)

    status: RecurringStatus = RecurringStatus.ACTIVE
    payment_plan: PaymentPlan = PaymentPlan.PER_SESSION

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def promote_dates(cls, v):
        return _promote_date(v)

    def collect_errors(self) -> List[str]:
        return recurrence_errors(
            self.frequency,
            self.duration_minutes,
            self.interval,
            self.start_time,
            self.time_zone,
            self.start_date,
            self.day_of_week,
            self.day_of_month,
        )


# Optional columns an update may set back to null
CLEARABLE_FIELDS = {"day_of_week", "day_of_month", "end_date", "occurrence_limit"}


class RecurringBookingUpdate(BaseModel):
    """
    Partial update of a stored pattern.

    Only fields that were actually sent are applied. Rules are checked
    against the merged result, so switching to monthly without a
    day_of_month is caught even though the request never mentions it.
    """
    frequency: Optional[str] = None
    interval: Optional[int] = None
    day_of_week: Optional[int] = Field(None, ge=0, le=6)
    day_of_month: Optional[int] = Field(None, ge=1, le=31)

    start_time: Optional[str] = None
    duration_minutes: Optional[int] = None
    time_zone: Optional[str] = None

    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    occurrence_limit: Optional[int] = Field(None, ge=1)

    payment_plan: Optional[PaymentPlan] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def promote_dates(cls, v):
        return _promote_date(v)

    def changes(self) -> dict:
        """Sent fields, minus nulls for columns that cannot be cleared"""
        return {
            field: value
            for field, value in self.model_dump(exclude_unset=True).items()
            if value is not None or field in CLEARABLE_FIELDS
        }

    def _resolved(self, existing, field):
        changes = self.changes()
        if field in changes:
            return changes[field]
        return getattr(existing, field, None)

    def collect_errors(self, existing) -> List[str]:
        return recurrence_errors(
            self._resolved(existing, "frequency"),
            self._resolved(existing, "duration_minutes"),
            self._resolved(existing, "interval"),
            self._resolved(existing, "start_time"),
            self._resolved(existing, "time_zone"),
            self._resolved(existing, "start_date"),
            self._resolved(existing, "day_of_week"),
            self._resolved(existing, "day_of_month"),
        )


class RecurringBookingStats(BaseModel):
    total_recurring: int
    active_recurring: int
    by_status: dict = Field(default_factory=dict)
