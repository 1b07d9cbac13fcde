# booking_engine/models/__init__.py
from .base import Base
from .availability import (
    AvailabilitySchedule,
    AvailabilityException,
    AvailabilityOverride,
    ExceptionKind,
)
from .recurring_booking import RecurringBooking, RecurrenceFrequency, RecurringStatus, PaymentPlan

__all__ = [
    "Base",
    "AvailabilitySchedule",
    "AvailabilityException",
    "AvailabilityOverride",
    "ExceptionKind",
    "RecurringBooking",
    "RecurrenceFrequency",
    "RecurringStatus",
    "PaymentPlan",
]
