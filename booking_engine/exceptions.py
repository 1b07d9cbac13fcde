"""Faults raised by the booking engine.

Expected outcomes (no schedule configured, day off, series ended) are
returned as sentinel values instead.
"""
from typing import List, Optional


class BookingEngineError(Exception):
    """Base class for booking engine faults"""


class RecordNotFoundError(BookingEngineError):
    def __init__(self, kind: str, record_id):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} {record_id} not found")


class ConcurrentModificationError(BookingEngineError):
    """The persisted record changed between read and write; re-fetch and retry"""

    def __init__(self, record_id, message: Optional[str] = None):
        self.record_id = record_id
        super().__init__(message or f"Recurring booking {record_id} was modified concurrently")


class InvalidStatusTransitionError(BookingEngineError):
    def __init__(self, record_id, current: str, target: str):
        self.record_id = record_id
        self.current = current
        self.target = target
        super().__init__(
            f"Recurring booking {record_id} cannot move from '{current}' to '{target}'"
        )


class RecurrenceValidationError(BookingEngineError):
    """Creation payload failed the recurring pattern rules"""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


class ScheduleConflictError(BookingEngineError):
    """The staff member already has a schedule covering that date"""

    def __init__(self, staff_id, as_of):
        self.staff_id = staff_id
        self.as_of = as_of
        super().__init__(f"Availability already exists for staff {staff_id} on {as_of}")
