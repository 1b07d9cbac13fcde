# ===== booking_engine/services/availability/availability_service.py =====
"""
Availability Service

Resolves the bookable windows of a staff member on a given day from
their active schedule, in strict precedence order:
- Exceptions (time off or custom hours on the date)
- Overrides (one-off extra availability on the date)
- Regular weekly schedule
"""
from datetime import date, datetime, timedelta
from typing import Callable, Dict, List, Optional
import logging

from booking_engine.config.settings import get_settings
from booking_engine.models.availability import ExceptionKind
from booking_engine.schemas.availability import AvailabilityScheduleSchema, DailyAvailability
from booking_engine.utils.time_utils import as_date, format_hhmm, sunday_first_weekday, to_minutes

logger = logging.getLogger(__name__)

NOT_SCHEDULED_REASON = "Not scheduled to work"

TieBreakPolicy = Callable[[List[AvailabilityScheduleSchema]], AvailabilityScheduleSchema]


def _created_key(schedule: AvailabilityScheduleSchema) -> float:
    if schedule.created_at is None:
        return float("-inf")
    return schedule.created_at.timestamp()


def most_recently_created(candidates: List[AvailabilityScheduleSchema]) -> AvailabilityScheduleSchema:
    """Newest record wins"""
    return max(candidates, key=_created_key)


def latest_effective_from(candidates: List[AvailabilityScheduleSchema]) -> AvailabilityScheduleSchema:
    """Most recently started period wins, newest record on ties"""
    return max(candidates, key=lambda s: (s.effective_from, _created_key(s)))


TIE_BREAK_POLICIES: Dict[str, TieBreakPolicy] = {
    "most_recently_created": most_recently_created,
    "latest_effective_from": latest_effective_from,
}


def get_tie_break_policy(name: str) -> TieBreakPolicy:
    try:
        return TIE_BREAK_POLICIES[name]
    except KeyError:
        raise ValueError(
            f"Unknown schedule tie-break policy '{name}'. "
            f"Expected one of: {', '.join(TIE_BREAK_POLICIES)}"
        )


def resolve_daily_availability(
        schedule: AvailabilityScheduleSchema,
        target_date: date
) -> DailyAvailability:
    """
    Resolve one date against a schedule.

    Exceptions beat overrides, overrides beat the weekly schedule. The
    order entries are stored in does not matter across those layers.
    """
    target_date = as_date(target_date)

    exception = next((e for e in schedule.exceptions if e.date == target_date), None)
    if exception is not None:
        if exception.kind == ExceptionKind.UNAVAILABLE:
            return DailyAvailability(available=False, reason=exception.reason, time_slots=[])
        if exception.kind == ExceptionKind.CUSTOM_HOURS:
            return DailyAvailability(available=True, time_slots=list(exception.time_slots))

    override = next((o for o in schedule.overrides if o.date == target_date), None)
    if override is not None:
        return DailyAvailability(available=True, time_slots=list(override.time_slots))

    weekday = sunday_first_weekday(target_date)
    day_schedule = next((d for d in schedule.weekly_schedule if d.day_of_week == weekday), None)

    if day_schedule is None or not day_schedule.time_slots:
        return DailyAvailability(available=False, reason=NOT_SCHEDULED_REASON, time_slots=[])

    return DailyAvailability(available=True, time_slots=list(day_schedule.time_slots))


class AvailabilityService:
    """
    Daily availability lookups on top of a schedule gateway.

    The gateway only needs fetch_candidate_schedules(staff_id, as_of)
    returning every schedule active on that date; picking one of several
    is left to the tie-break policy.
    """

    def __init__(self, gateway, tie_break: Optional[TieBreakPolicy] = None):
        self.gateway = gateway
        if tie_break is None:
            tie_break = get_tie_break_policy(get_settings().SCHEDULE_TIE_BREAK)
        self.tie_break = tie_break

    def get_active_schedule(self, staff_id, target_date) -> Optional[AvailabilityScheduleSchema]:
        target_date = as_date(target_date)
        candidates = self.gateway.fetch_candidate_schedules(staff_id, target_date)

        if not candidates:
            return None
        if len(candidates) > 1:
            logger.warning(
                f"{len(candidates)} overlapping schedules for staff {staff_id} on {target_date}, "
                f"resolving with tie-break policy"
            )
        return self.tie_break(candidates)

    def get_daily_availability(self, staff_id, target_date) -> Optional[DailyAvailability]:
        """None means no schedule is configured for that date, not an error"""
        schedule = self.get_active_schedule(staff_id, target_date)
        if schedule is None:
            logger.debug(f"No active schedule for staff {staff_id} on {as_date(target_date)}")
            return None

        return resolve_daily_availability(schedule, target_date)

    def is_available_at(self, staff_id, start_datetime: datetime, end_datetime: datetime) -> bool:
        """
        True when [start, end) fits entirely inside a single window.

        Two back-to-back windows are not joined: an interval crossing the
        boundary between them is not available.
        """
        day = self.get_daily_availability(staff_id, start_datetime.date())

        if day is None or not day.available:
            return False

        start = to_minutes(format_hhmm(start_datetime))
        end = to_minutes(format_hhmm(end_datetime))

        for slot in day.time_slots:
            if to_minutes(slot.start) <= start and end <= to_minutes(slot.end):
                return True

        return False

    def get_availability_range(
            self,
            staff_id,
            start_date,
            end_date
    ) -> Dict[str, DailyAvailability]:
        """
        Resolve every day in [start_date, end_date].

        Returns:
            dict: {"2026-01-15": DailyAvailability, ...}; days without an
            active schedule are left out
        """
        current_date = as_date(start_date)
        end_date = as_date(end_date)
        result = {}

        while current_date <= end_date:
            day = self.get_daily_availability(staff_id, current_date)
            if day is not None:
                result[current_date.strftime("%Y-%m-%d")] = day
            current_date += timedelta(days=1)

        return result
