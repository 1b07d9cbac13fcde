# ===== booking_engine/services/recurrence/pattern_repository.py =====
"""SQLAlchemy-backed gateway for recurring booking patterns"""
from typing import Optional
import logging

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from booking_engine.exceptions import ConcurrentModificationError, RecordNotFoundError
from booking_engine.models.recurring_booking import RecurringBooking
from booking_engine.schemas.recurrence import RecurrencePattern

logger = logging.getLogger(__name__)


class PatternRepository:

    def __init__(self, db: Session):
        self.db = db

    def fetch_pattern(self, pattern_id) -> Optional[RecurrencePattern]:
        record = self.db.query(RecurringBooking).filter_by(id=pattern_id).first()
        if not record:
            return None
        return RecurrencePattern.model_validate(record)

    def append_generated_booking(
            self,
            pattern_id,
            booking_id,
            expected_version: Optional[int] = None
    ) -> RecurrencePattern:
        """
        Append one booking id as a compare-and-swap on the row version.

        Raises ConcurrentModificationError when the row changed since it
        was read (or differs from expected_version); the caller re-fetches
        and retries.
        """
        record = self.db.query(RecurringBooking).filter_by(id=pattern_id).first()
        if not record:
            raise RecordNotFoundError("Recurring booking", pattern_id)

        if expected_version is not None and record.version != expected_version:
            raise ConcurrentModificationError(
                pattern_id,
                f"Recurring booking {pattern_id} is at version {record.version}, expected {expected_version}"
            )

        # JSON columns are not mutation-tracked: assign a new list
        record.generated_booking_ids = list(record.generated_booking_ids or []) + [str(booking_id)]

        try:
            self.db.commit()
        except StaleDataError as exc:
            self.db.rollback()
            logger.warning(f"Lost append race on recurring booking {pattern_id}: {exc}")
            raise ConcurrentModificationError(pattern_id) from exc

        self.db.refresh(record)
        return RecurrencePattern.model_validate(record)
