# ============================================================================
# booking_engine/services/availability/schedule_service.py
# ============================================================================
"""Service for managing availability schedules"""
from datetime import date
from typing import List, Optional
import logging

from sqlalchemy.orm import Session

from booking_engine.exceptions import RecordNotFoundError, ScheduleConflictError
from booking_engine.models.availability import (
    AvailabilitySchedule,
    AvailabilityException,
    AvailabilityOverride,
)
from booking_engine.schemas.availability import (
    AvailabilityScheduleCreate,
    DaySchedule,
    ScheduleException,
    ScheduleOverride,
)
from booking_engine.services.availability.schedule_repository import ScheduleRepository
from booking_engine.utils.time_utils import as_date

logger = logging.getLogger(__name__)


def _slots_json(time_slots) -> list:
    return [slot.model_dump() for slot in time_slots]


class ScheduleService:
    """Handles schedule lifecycle: create, replace weekly hours, exceptions, overrides"""

    @staticmethod
    def create_schedule(db: Session, payload: AvailabilityScheduleCreate) -> AvailabilitySchedule:
        """
        Create a schedule for one effective period.

        Refuses when another schedule is already in effect for the staff
        member on the new effective_from date.
        """
        effective_from = payload.effective_from or date.today()
        if ScheduleRepository(db).fetch_candidate_schedules(payload.staff_id, effective_from):
            raise ScheduleConflictError(payload.staff_id, effective_from)

        schedule = AvailabilitySchedule(
            staff_id=payload.staff_id,
            weekly_schedule=[day.model_dump() for day in payload.weekly_schedule],
            effective_from=effective_from,
            effective_to=payload.effective_to,
        )
        for exc in payload.exceptions:
            schedule.exceptions.append(ScheduleService._exception_row(exc))
        for ovr in payload.overrides:
            schedule.overrides.append(ScheduleService._override_row(ovr))

        db.add(schedule)
        db.commit()
        db.refresh(schedule)

        logger.info(f"Created availability schedule {schedule.id} for staff {schedule.staff_id}")
        return schedule

    @staticmethod
    def get_schedule(db: Session, schedule_id) -> Optional[AvailabilitySchedule]:
        return db.query(AvailabilitySchedule).filter_by(id=schedule_id).first()

    @staticmethod
    def list_schedules_for_staff(db: Session, staff_id) -> List[AvailabilitySchedule]:
        """Every schedule for a staff member, newest period first"""
        return (
            db.query(AvailabilitySchedule)
            .filter(AvailabilitySchedule.staff_id == staff_id)
            .order_by(AvailabilitySchedule.effective_from.desc())
            .all()
        )

    @staticmethod
    def replace_weekly_schedule(
            db: Session,
            schedule_id,
            weekly_schedule: List[DaySchedule]
    ) -> AvailabilitySchedule:
        schedule = ScheduleService._require(db, schedule_id)
        schedule.weekly_schedule = [day.model_dump() for day in weekly_schedule]
        db.commit()
        db.refresh(schedule)
        return schedule

    @staticmethod
    def add_exception(db: Session, schedule_id, exception: ScheduleException) -> AvailabilitySchedule:
        """Add time off or special hours"""
        schedule = ScheduleService._require(db, schedule_id)
        schedule.exceptions.append(ScheduleService._exception_row(exception))
        db.commit()
        db.refresh(schedule)

        logger.info(
            f"Added {exception.kind.value} exception on {exception.date} to schedule {schedule_id}"
        )
        return schedule

    @staticmethod
    def remove_exception(db: Session, schedule_id, exception_date) -> AvailabilitySchedule:
        """Remove every exception on that calendar date"""
        schedule = ScheduleService._require(db, schedule_id)
        exception_date = as_date(exception_date)
        schedule.exceptions = [e for e in schedule.exceptions if e.date != exception_date]
        db.commit()
        db.refresh(schedule)
        return schedule

    @staticmethod
    def add_override(db: Session, schedule_id, override: ScheduleOverride) -> AvailabilitySchedule:
        """Add one-off availability"""
        schedule = ScheduleService._require(db, schedule_id)
        schedule.overrides.append(ScheduleService._override_row(override))
        db.commit()
        db.refresh(schedule)
        return schedule

    @staticmethod
    def remove_override(db: Session, schedule_id, override_date) -> AvailabilitySchedule:
        """Remove every override on that calendar date"""
        schedule = ScheduleService._require(db, schedule_id)
        override_date = as_date(override_date)
        schedule.overrides = [o for o in schedule.overrides if o.date != override_date]
        db.commit()
        db.refresh(schedule)
        return schedule

    @staticmethod
    def delete_schedule(db: Session, schedule_id) -> bool:
        schedule = ScheduleService.get_schedule(db, schedule_id)
        if not schedule:
            return False

        db.delete(schedule)
        db.commit()
        return True

    @staticmethod
    def _require(db: Session, schedule_id) -> AvailabilitySchedule:
        schedule = ScheduleService.get_schedule(db, schedule_id)
        if not schedule:
            raise RecordNotFoundError("Availability schedule", schedule_id)
        return schedule

    @staticmethod
    def _exception_row(exception: ScheduleException) -> AvailabilityException:
        return AvailabilityException(
            date=exception.date,
            kind=exception.kind,
            time_slots=_slots_json(exception.time_slots),
            reason=exception.reason or "",
        )

    @staticmethod
    def _override_row(override: ScheduleOverride) -> AvailabilityOverride:
        return AvailabilityOverride(
            date=override.date,
            time_slots=_slots_json(override.time_slots),
        )
