# ===== booking_engine/services/availability/schedule_repository.py =====
"""SQLAlchemy-backed gateway for availability schedules"""
from datetime import date
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from booking_engine.models.availability import AvailabilitySchedule
from booking_engine.schemas.availability import AvailabilityScheduleSchema


class ScheduleRepository:
    """Read side used by AvailabilityService"""

    def __init__(self, db: Session):
        self.db = db

    def fetch_candidate_schedules(self, staff_id, as_of: date) -> List[AvailabilityScheduleSchema]:
        """All schedules for the staff member whose effective period covers as_of"""
        records = (
            self.db.query(AvailabilitySchedule)
            .options(
                selectinload(AvailabilitySchedule.exceptions),
                selectinload(AvailabilitySchedule.overrides),
            )
            .filter(
                AvailabilitySchedule.staff_id == staff_id,
                AvailabilitySchedule.effective_from <= as_of,
                or_(
                    AvailabilitySchedule.effective_to.is_(None),
                    AvailabilitySchedule.effective_to >= as_of,
                ),
            )
            .all()
        )
        return [AvailabilityScheduleSchema.model_validate(r) for r in records]

    def fetch_active_schedule(self, staff_id, as_of: date, tie_break) -> Optional[AvailabilityScheduleSchema]:
        candidates = self.fetch_candidate_schedules(staff_id, as_of)
        if not candidates:
            return None
        return tie_break(candidates)
