"""Tests for schedule storage and the database-backed availability lookup"""
import uuid
from datetime import date

import pytest

from booking_engine.exceptions import RecordNotFoundError, ScheduleConflictError
from booking_engine.models.availability import AvailabilityException, ExceptionKind
from booking_engine.schemas.availability import (
    AvailabilityScheduleCreate,
    ScheduleException,
    ScheduleOverride,
)
from booking_engine.services.availability.availability_service import (
    AvailabilityService,
    most_recently_created,
)
from booking_engine.services.availability.schedule_repository import ScheduleRepository
from booking_engine.services.availability.schedule_service import ScheduleService
from helpers import MONDAY, SATURDAY, STAFF_ID, slots, weekday_schedule


def _create(db, **overrides):
    data = {
        "staff_id": STAFF_ID,
        "weekly_schedule": [weekday_schedule(day, ("09:00", "17:00")) for day in range(1, 6)],
        "effective_from": date(2025, 1, 1),
    }
    data.update(overrides)
    return ScheduleService.create_schedule(db, AvailabilityScheduleCreate(**data))


class TestScheduleService:

    def test_create_stores_weekly_schedule(self, db):
        schedule = _create(db)

        assert schedule.id is not None
        assert len(schedule.weekly_schedule) == 5
        assert schedule.weekly_schedule[0] == {
            "day_of_week": 1,
            "time_slots": [{"start": "09:00", "end": "17:00"}],
        }

    def test_create_defaults_effective_from_to_today(self, db):
        schedule = _create(db, effective_from=None)

        assert schedule.effective_from == date.today()

    def test_create_with_exceptions_and_overrides(self, db):
        schedule = _create(
            db,
            exceptions=[ScheduleException(date=date(2025, 12, 24), kind=ExceptionKind.UNAVAILABLE, reason="Holiday")],
            overrides=[ScheduleOverride(date=date(2025, 12, 20), time_slots=slots(("10:00", "14:00")))],
        )

        assert [e.reason for e in schedule.exceptions] == ["Holiday"]
        assert schedule.overrides[0].time_slots == [{"start": "10:00", "end": "14:00"}]

    def test_second_schedule_in_effect_is_refused(self, db):
        _create(db)

        with pytest.raises(ScheduleConflictError):
            _create(db, effective_from=date(2025, 3, 1))

        assert len(ScheduleService.list_schedules_for_staff(db, STAFF_ID)) == 1

    def test_schedule_after_previous_period_ends_is_allowed(self, db):
        _create(db, effective_from=date(2024, 1, 1), effective_to=date(2024, 12, 31))

        _create(db, effective_from=date(2025, 1, 1))

        assert len(ScheduleService.list_schedules_for_staff(db, STAFF_ID)) == 2

    def test_other_staff_does_not_conflict(self, db):
        _create(db)

        other = _create(db, staff_id=uuid.uuid4())

        assert other.id is not None

    def test_list_newest_period_first(self, db):
        _create(db, effective_from=date(2024, 1, 1), effective_to=date(2024, 12, 31))
        _create(db, effective_from=date(2025, 1, 1))
        _create(db, staff_id=uuid.uuid4())

        schedules = ScheduleService.list_schedules_for_staff(db, STAFF_ID)

        assert [s.effective_from for s in schedules] == [date(2025, 1, 1), date(2024, 1, 1)]

    def test_replace_weekly_schedule(self, db):
        schedule = _create(db)

        updated = ScheduleService.replace_weekly_schedule(db, schedule.id, [weekday_schedule(6, ("10:00", "12:00"))])

        assert updated.weekly_schedule == [{"day_of_week": 6, "time_slots": [{"start": "10:00", "end": "12:00"}]}]

    def test_add_and_remove_exception(self, db):
        schedule = _create(db)

        ScheduleService.add_exception(
            db, schedule.id, ScheduleException(date=MONDAY, kind=ExceptionKind.UNAVAILABLE, reason="Vacation")
        )
        assert len(ScheduleService.get_schedule(db, schedule.id).exceptions) == 1

        ScheduleService.remove_exception(db, schedule.id, MONDAY)
        assert ScheduleService.get_schedule(db, schedule.id).exceptions == []
        assert db.query(AvailabilityException).count() == 0

    def test_add_and_remove_override(self, db):
        schedule = _create(db)

        ScheduleService.add_override(db, schedule.id, ScheduleOverride(date=SATURDAY, time_slots=slots(("10:00", "14:00"))))
        assert len(ScheduleService.get_schedule(db, schedule.id).overrides) == 1

        ScheduleService.remove_override(db, schedule.id, SATURDAY)
        assert ScheduleService.get_schedule(db, schedule.id).overrides == []

    def test_missing_schedule_raises(self, db):
        with pytest.raises(RecordNotFoundError):
            ScheduleService.add_override(db, uuid.uuid4(), ScheduleOverride(date=SATURDAY))

    def test_delete(self, db):
        schedule = _create(db)

        assert ScheduleService.delete_schedule(db, schedule.id) is True
        assert ScheduleService.get_schedule(db, schedule.id) is None
        assert ScheduleService.delete_schedule(db, schedule.id) is False


class TestScheduleRepository:

    def test_candidates_filtered_by_effective_period(self, db):
        _create(db, effective_from=date(2024, 1, 1), effective_to=date(2024, 12, 31))
        current = _create(db, effective_from=date(2025, 1, 1))
        repository = ScheduleRepository(db)

        candidates = repository.fetch_candidate_schedules(STAFF_ID, MONDAY)

        assert [c.id for c in candidates] == [current.id]
        assert repository.fetch_candidate_schedules(STAFF_ID, date(2023, 6, 1)) == []

    def test_fetch_active_schedule_applies_tie_break(self, db):
        _create(db)
        repository = ScheduleRepository(db)

        assert repository.fetch_active_schedule(STAFF_ID, MONDAY, most_recently_created) is not None
        assert repository.fetch_active_schedule(uuid.uuid4(), MONDAY, most_recently_created) is None

    def test_end_to_end_resolution(self, db):
        schedule = _create(db)
        ScheduleService.add_exception(
            db, schedule.id, ScheduleException(date=date(2025, 12, 24), kind=ExceptionKind.UNAVAILABLE, reason="Holiday")
        )
        ScheduleService.add_override(
            db, schedule.id, ScheduleOverride(date=date(2025, 12, 20), time_slots=slots(("10:00", "14:00")))
        )
        service = AvailabilityService(ScheduleRepository(db))

        monday = service.get_daily_availability(STAFF_ID, MONDAY)
        holiday = service.get_daily_availability(STAFF_ID, date(2025, 12, 24))
        saturday_override = service.get_daily_availability(STAFF_ID, date(2025, 12, 20))
        saturday = service.get_daily_availability(STAFF_ID, SATURDAY)

        assert [(s.start, s.end) for s in monday.time_slots] == [("09:00", "17:00")]
        assert holiday.available is False and holiday.reason == "Holiday"
        assert [(s.start, s.end) for s in saturday_override.time_slots] == [("10:00", "14:00")]
        assert saturday.available is False
