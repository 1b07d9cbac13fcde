# ===== booking_engine/services/recurrence/recurrence_service.py =====
"""
Recurrence Service

Projects the occurrence dates of a recurring booking pattern:
- next occurrence after a given date
- bounded sequence of all occurrences
- the next N occurrences from a given date

Every loop here is capped, so pathological patterns always terminate.
"""
import calendar
import enum
from datetime import datetime, timedelta
from typing import List, Optional
import logging

from dateutil.relativedelta import relativedelta

from booking_engine.config.settings import get_settings
from booking_engine.models.recurring_booking import RecurrenceFrequency
from booking_engine.schemas.recurrence import RecurrencePattern
from booking_engine.utils.time_utils import as_datetime, sunday_first_weekday

logger = logging.getLogger(__name__)

WEEKDAY_STEP_DAYS = {
    RecurrenceFrequency.WEEKLY.value: 7,
    RecurrenceFrequency.BIWEEKLY.value: 14,
}


class IntervalStrategy(str, enum.Enum):
    """
    How weekly/biweekly patterns apply `interval`.

    LEGACY only multiplies by the interval when the cursor already sits on
    the target weekday; otherwise it jumps to the next target weekday.
    ANCHORED keeps every occurrence a whole number of
    (step * interval) days after the first target weekday on/after the
    start date.
    """
    LEGACY = "legacy"
    ANCHORED = "anchored"


class RecurrenceService:
    """Pure date arithmetic over RecurrencePattern records"""

    def __init__(
            self,
            interval_strategy: Optional[IntervalStrategy] = None,
            max_iterations: Optional[int] = None
    ):
        settings = get_settings()
        self.interval_strategy = IntervalStrategy(
            interval_strategy or settings.RECURRENCE_INTERVAL_STRATEGY
        )
        self.max_iterations = max_iterations or settings.RECURRENCE_MAX_ITERATIONS

    # ------------------------------------------------------------------
    # Next occurrence
    # ------------------------------------------------------------------

    def calculate_next_occurrence(self, pattern: RecurrencePattern, from_date) -> Optional[datetime]:
        """
        Next occurrence strictly after from_date, or None when the series
        has ended (end date reached, occurrence limit used up) or the
        frequency is unknown.
        """
        from_date = as_datetime(from_date)
        start_date = as_datetime(pattern.start_date)

        if self._series_ended(pattern, from_date):
            return None

        next_date = self._advance(pattern, from_date, start_date)
        if next_date is None:
            return None

        if next_date < start_date:
            # single retry from the declared start, never recursive
            if self._series_ended(pattern, start_date):
                return None
            next_date = self._advance(pattern, start_date, start_date)
            if next_date is None or next_date < start_date:
                logger.warning(
                    f"Recurring pattern {pattern.id} produced {next_date} before its start "
                    f"{start_date}, treating series as ended"
                )
                return None

        if pattern.end_date is not None and next_date > pattern.end_date:
            return None

        return next_date

    def _series_ended(self, pattern: RecurrencePattern, from_date: datetime) -> bool:
        if pattern.end_date is not None and from_date >= pattern.end_date:
            return True

        if pattern.occurrence_limit and len(pattern.generated_booking_ids) >= pattern.occurrence_limit:
            return True

        return False

    def _advance(self, pattern: RecurrencePattern, cursor: datetime, start_date: datetime) -> Optional[datetime]:
        interval = pattern.interval or 1

        if pattern.frequency in WEEKDAY_STEP_DAYS:
            step_days = WEEKDAY_STEP_DAYS[pattern.frequency]
            target = pattern.day_of_week
            if target is None:
                target = sunday_first_weekday(start_date)

            if self.interval_strategy == IntervalStrategy.ANCHORED:
                return self._advance_anchored(cursor, start_date, target, step_days * interval)
            return self._advance_legacy(cursor, target, step_days * interval)

        if pattern.frequency == RecurrenceFrequency.MONTHLY.value:
            target_day = pattern.day_of_month or start_date.day
            return self._advance_monthly(cursor, interval, target_day)

        logger.debug(f"Unknown recurrence frequency '{pattern.frequency}' on pattern {pattern.id}")
        return None

    @staticmethod
    def _advance_legacy(cursor: datetime, target_weekday: int, same_day_step: int) -> datetime:
        days_until = (target_weekday - sunday_first_weekday(cursor) + 7) % 7
        if days_until == 0:
            return cursor + timedelta(days=same_day_step)
        # interval is not applied here; existing series depend on it
        return cursor + timedelta(days=days_until)

    @staticmethod
    def _advance_anchored(cursor: datetime, start_date: datetime, target_weekday: int, period_days: int) -> datetime:
        anchor = start_date + timedelta(days=(target_weekday - sunday_first_weekday(start_date) + 7) % 7)
        if cursor < anchor:
            return anchor

        period = timedelta(days=period_days)
        periods_elapsed = (cursor - anchor) // period
        return anchor + period * (periods_elapsed + 1)

    @staticmethod
    def _advance_monthly(cursor: datetime, interval: int, target_day: int) -> datetime:
        advanced = cursor + relativedelta(months=interval)
        # day 31 in a 30-day month lands on the 30th, never in the next month
        last_day = calendar.monthrange(advanced.year, advanced.month)[1]
        return advanced.replace(day=min(target_day, last_day))

    # ------------------------------------------------------------------
    # Sequences
    # ------------------------------------------------------------------

    def generate_occurrence_dates(self, pattern: RecurrencePattern, max_count: Optional[int] = None) -> List[datetime]:
        """
        Occurrences from the start date on, at most max_count of them
        (default: one year of weekly sessions).
        """
        if max_count is None:
            max_count = get_settings().OCCURRENCE_GENERATION_LIMIT

        dates = []
        current_date = as_datetime(pattern.start_date)

        while len(dates) < max_count:
            next_date = self.calculate_next_occurrence(pattern, current_date)
            if next_date is None:
                break  # series ended

            dates.append(next_date)
            current_date = next_date + timedelta(days=1)

        return dates

    def get_upcoming_occurrences(
            self,
            pattern: RecurrencePattern,
            count: Optional[int] = None,
            from_date=None
    ) -> List[datetime]:
        """
        Up to `count` occurrences on or after from_date (default now).

        The start date itself counts as the first occurrence when it is
        not in the past. Fast-forwarding and collecting share one
        iteration budget.
        """
        settings = get_settings()
        limit = max(1, min(count or settings.UPCOMING_OCCURRENCES_DEFAULT, settings.UPCOMING_OCCURRENCES_MAX))
        now = as_datetime(from_date) if from_date is not None else datetime.now()

        occurrences = []
        current = as_datetime(pattern.start_date)
        iterations = 0

        # Skip past occurrences
        while current < now and iterations < self.max_iterations:
            next_date = self.calculate_next_occurrence(pattern, current)
            if next_date is None:
                return occurrences
            current = next_date
            iterations += 1

        if current >= now and iterations < self.max_iterations:
            occurrences.append(current)

        while len(occurrences) < limit and iterations < self.max_iterations:
            next_date = self.calculate_next_occurrence(pattern, current)
            if next_date is None:
                break
            current = next_date
            if current >= now:
                occurrences.append(current)
            iterations += 1

        if iterations >= self.max_iterations:
            logger.warning(
                f"Hit iteration ceiling ({self.max_iterations}) projecting pattern {pattern.id}"
            )

        return occurrences
