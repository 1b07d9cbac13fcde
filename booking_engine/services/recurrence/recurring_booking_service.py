# ============================================================================
# booking_engine/services/recurrence/recurring_booking_service.py
# ============================================================================
"""Service for managing recurring booking patterns"""
from datetime import datetime
from typing import Dict, List, Optional, Set
import logging

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from booking_engine.config.settings import get_settings
from booking_engine.exceptions import (
    ConcurrentModificationError,
    InvalidStatusTransitionError,
    RecordNotFoundError,
    RecurrenceValidationError,
)
from booking_engine.models.recurring_booking import RecurringBooking, RecurrenceFrequency, RecurringStatus
from booking_engine.schemas.recurrence import (
    RecurrencePattern,
    RecurringBookingCreate,
    RecurringBookingStats,
    RecurringBookingUpdate,
)
from booking_engine.services.recurrence.pattern_repository import PatternRepository
from booking_engine.services.recurrence.recurrence_service import RecurrenceService

logger = logging.getLogger(__name__)

# Statuses each transition may start from; cancelled and completed are terminal
ALLOWED_TRANSITIONS: Dict[RecurringStatus, Set[RecurringStatus]] = {
    RecurringStatus.PAUSED: {RecurringStatus.ACTIVE},
    RecurringStatus.ACTIVE: {RecurringStatus.PAUSED},
    RecurringStatus.CANCELLED: {RecurringStatus.ACTIVE, RecurringStatus.PAUSED},
    RecurringStatus.COMPLETED: {RecurringStatus.ACTIVE, RecurringStatus.PAUSED},
}


class RecurringBookingService:
    """Handles recurring booking operations"""

    @staticmethod
    def create(db: Session, payload: RecurringBookingCreate) -> RecurringBooking:
        """Validate and store a new pattern"""
        errors = payload.collect_errors()
        if errors:
            raise RecurrenceValidationError(errors)

        recurring = RecurringBooking(
            client_id=payload.client_id,
            staff_id=payload.staff_id,
            service_id=payload.service_id,
            frequency=RecurrenceFrequency(payload.frequency),
            interval=payload.interval or 1,
            day_of_week=payload.day_of_week,
            day_of_month=payload.day_of_month,
            start_time=payload.start_time,
            duration_minutes=payload.duration_minutes,
            time_zone=payload.time_zone,
            start_date=payload.start_date,
            end_date=payload.end_date,
            occurrence_limit=payload.occurrence_limit,
            generated_booking_ids=[],
            status=payload.status,
            payment_plan=payload.payment_plan,
        )

        db.add(recurring)
        db.commit()
        db.refresh(recurring)

        logger.info(f"Created {recurring.frequency.value} recurring booking {recurring.id}")
        return recurring

    @staticmethod
    def update(db: Session, recurring_id, payload: RecurringBookingUpdate) -> RecurringBooking:
        """Apply the sent fields after checking the merged pattern"""
        recurring = RecurringBookingService.get(db, recurring_id)
        if not recurring:
            raise RecordNotFoundError("Recurring booking", recurring_id)

        changes = payload.changes()
        if not changes:
            raise RecurrenceValidationError(["No valid fields provided for update"])

        errors = payload.collect_errors(recurring)
        if errors:
            raise RecurrenceValidationError(errors)

        if "frequency" in changes:
            changes["frequency"] = RecurrenceFrequency(changes["frequency"])

        for field, value in changes.items():
            setattr(recurring, field, value)

        db.commit()
        db.refresh(recurring)

        logger.info(f"Updated recurring booking {recurring_id}: {', '.join(sorted(changes))}")
        return recurring

    @staticmethod
    def get(db: Session, recurring_id) -> Optional[RecurringBooking]:
        return db.query(RecurringBooking).filter_by(id=recurring_id).first()

    @staticmethod
    def find_all(
            db: Session,
            client_id=None,
            staff_id=None,
            service_id=None,
            status: Optional[RecurringStatus] = None
    ) -> List[RecurringBooking]:
        """Filtered list, newest first"""
        query = db.query(RecurringBooking)

        if client_id:
            query = query.filter(RecurringBooking.client_id == client_id)
        if staff_id:
            query = query.filter(RecurringBooking.staff_id == staff_id)
        if service_id:
            query = query.filter(RecurringBooking.service_id == service_id)
        if status:
            query = query.filter(RecurringBooking.status == status)

        return query.order_by(RecurringBooking.created_at.desc()).all()

    @staticmethod
    def find_by_client(db: Session, client_id) -> List[RecurringBooking]:
        return (
            db.query(RecurringBooking)
            .filter(RecurringBooking.client_id == client_id)
            .order_by(RecurringBooking.start_date.desc())
            .all()
        )

    @staticmethod
    def find_by_staff(db: Session, staff_id) -> List[RecurringBooking]:
        return (
            db.query(RecurringBooking)
            .filter(RecurringBooking.staff_id == staff_id)
            .order_by(RecurringBooking.start_date.desc())
            .all()
        )

    @staticmethod
    def find_active(db: Session, now: Optional[datetime] = None) -> List[RecurringBooking]:
        """Active patterns that have not passed their end date"""
        now = now or datetime.now()
        return (
            db.query(RecurringBooking)
            .filter(
                RecurringBooking.status == RecurringStatus.ACTIVE,
                or_(
                    RecurringBooking.end_date.is_(None),
                    RecurringBooking.end_date >= now,
                ),
            )
            .all()
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @staticmethod
    def pause(db: Session, recurring_id) -> RecurringBooking:
        return RecurringBookingService._transition(db, recurring_id, RecurringStatus.PAUSED)

    @staticmethod
    def resume(db: Session, recurring_id) -> RecurringBooking:
        return RecurringBookingService._transition(db, recurring_id, RecurringStatus.ACTIVE)

    @staticmethod
    def cancel(db: Session, recurring_id, now: Optional[datetime] = None) -> RecurringBooking:
        """Cancel all future occurrences; the series ends now"""
        return RecurringBookingService._transition(
            db, recurring_id, RecurringStatus.CANCELLED, end_date=now or datetime.now()
        )

    @staticmethod
    def mark_completed(db: Session, recurring_id) -> RecurringBooking:
        return RecurringBookingService._transition(db, recurring_id, RecurringStatus.COMPLETED)

    @staticmethod
    def _transition(
            db: Session,
            recurring_id,
            target: RecurringStatus,
            end_date: Optional[datetime] = None
    ) -> RecurringBooking:
        recurring = RecurringBookingService.get(db, recurring_id)
        if not recurring:
            raise RecordNotFoundError("Recurring booking", recurring_id)

        if recurring.status not in ALLOWED_TRANSITIONS[target]:
            raise InvalidStatusTransitionError(recurring_id, recurring.status.value, target.value)

        recurring.status = target
        if end_date is not None:
            recurring.end_date = end_date

        db.commit()
        db.refresh(recurring)

        logger.info(f"Recurring booking {recurring_id} is now {target.value}")
        return recurring

    # ------------------------------------------------------------------
    # Generated bookings
    # ------------------------------------------------------------------

    @staticmethod
    def add_booking(
            db: Session,
            recurring_id,
            booking_id,
            max_attempts: Optional[int] = None,
            repository: Optional[PatternRepository] = None
    ) -> RecurrencePattern:
        """
        Append a generated booking id, re-reading the pattern and retrying
        when another writer got there first.
        """
        max_attempts = max_attempts or get_settings().BOOKING_APPEND_MAX_ATTEMPTS
        repository = repository or PatternRepository(db)

        for attempt in range(1, max_attempts + 1):
            try:
                return repository.append_generated_booking(recurring_id, booking_id)
            except ConcurrentModificationError:
                if attempt == max_attempts:
                    logger.error(
                        f"Giving up appending booking {booking_id} to {recurring_id} "
                        f"after {max_attempts} attempts"
                    )
                    raise
                logger.warning(
                    f"Retrying append of booking {booking_id} to {recurring_id} "
                    f"(attempt {attempt + 1}/{max_attempts})"
                )

    @staticmethod
    def delete(db: Session, recurring_id) -> bool:
        recurring = RecurringBookingService.get(db, recurring_id)
        if not recurring:
            return False

        db.delete(recurring)
        db.commit()
        return True

    @staticmethod
    def get_stats(db: Session) -> RecurringBookingStats:
        rows = (
            db.query(RecurringBooking.status, func.count(RecurringBooking.id))
            .group_by(RecurringBooking.status)
            .all()
        )
        by_status = {status.value: count for status, count in rows}

        return RecurringBookingStats(
            total_recurring=sum(by_status.values()),
            active_recurring=by_status.get(RecurringStatus.ACTIVE.value, 0),
            by_status=by_status,
        )

    @staticmethod
    def complete_exhausted(
            db: Session,
            engine: Optional[RecurrenceService] = None,
            now: Optional[datetime] = None,
            batch_size: Optional[int] = None
    ) -> int:
        """
        Mark active patterns with no next occurrence as completed.

        Returns:
            int: number of patterns completed
        """
        engine = engine or RecurrenceService()
        now = now or datetime.now()
        batch_size = batch_size or get_settings().COMPLETION_SWEEP_BATCH_SIZE

        active_ids = [
            row.id for row in
            db.query(RecurringBooking.id)
            .filter(RecurringBooking.status == RecurringStatus.ACTIVE)
            .order_by(RecurringBooking.created_at)
            .all()
        ]

        completed = 0
        for offset in range(0, len(active_ids), batch_size):
            batch = (
                db.query(RecurringBooking)
                .filter(RecurringBooking.id.in_(active_ids[offset:offset + batch_size]))
                .all()
            )
            for recurring in batch:
                pattern = RecurrencePattern.model_validate(recurring)
                if engine.calculate_next_occurrence(pattern, now) is not None:
                    continue

                RecurringBookingService.mark_completed(db, recurring.id)
                completed += 1

        if completed:
            logger.info(f"complete_exhausted: {completed} recurring bookings marked completed")

        return completed
