"""
Shift Scheduler Validator: gate for shifts that have not been worked yet.

Answers whether a proposed shift may be scheduled. Never reserves or persists it;
the caller commits the shift and must serialize scheduling per worker.
"""
import logging
import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from workhours.core.config import settings
from workhours.models.worked_interval import COUNTED_STATUSES
from workhours.schemas.rule_set import RuleConfig
from workhours.schemas.validation import ConflictType, ShiftConflict, ShiftValidationResult
from workhours.services.work_hour_validator import LUNCH_AFTER_HOURS
from workhours.stores.base import HistoryStore, HolidayCalendar, RuleSetStore, call_store, require_rule_set
from workhours.utils.holidays import get_calendar
from workhours.utils.timeutils import (
    fmt_hours, hours, is_weekend, local_day_start, net_hours, overlaps_night, to_local, to_utc, week_bounds,
)

logger = logging.getLogger(__name__)


class ShiftSchedulerValidator:

    def __init__(
        self,
        rule_sets: RuleSetStore,
        history: HistoryStore,
        calendar: HolidayCalendar | None = None,
    ):
        self.rule_sets = rule_sets
        self.history = history
        self.calendar = calendar or get_calendar()

    async def validate_proposed_shift(
        self,
        worker_id: uuid.UUID,
        start: datetime,
        end: datetime,
        break_minutes: int = 0,
        now: datetime | None = None,
    ) -> ShiftValidationResult:
        start, end = to_utc(start), to_utc(end)
        shift_hours = net_hours(start, end, break_minutes)
        now = to_utc(now) if now is not None else datetime.now(timezone.utc)
        day = to_local(start).date()

        rule_set = await require_rule_set(self.rule_sets, worker_id, day)
        rules = rule_set.config
        result = ShiftValidationResult()

        self._check_time_window(rules, start, end, result)
        self._check_calendar(rules, start, end, result)

        if shift_hours > rules.hours.max_hours_per_day:
            self._conflict(
                result, ConflictType.DAILY_LIMIT,
                f"Shift duration ({fmt_hours(shift_hours)}h) exceeds maximum daily hours "
                f"({fmt_hours(rules.hours.max_hours_per_day)}h)",
            )

        consecutive = await self._consecutive_days(
            worker_id, day, rules.scheduling.max_consecutive_days
        )
        if consecutive >= rules.scheduling.max_consecutive_days:
            self._conflict(
                result, ConflictType.MAX_CONSECUTIVE,
                f"Would exceed maximum consecutive working days ({rules.scheduling.max_consecutive_days})",
            )

        projected, working_days = await self._week_load(worker_id, start, end, shift_hours)
        if projected > rules.hours.max_hours_per_week:
            self._conflict(
                result, ConflictType.WEEKLY_LIMIT,
                f"Would exceed weekly hour limit ({fmt_hours(projected)}h > "
                f"{fmt_hours(rules.hours.max_hours_per_week)}h)",
            )

        free_days = 7 - len(working_days)
        if free_days < rules.scheduling.min_rest_days_per_week:
            self._conflict(
                result, ConflictType.MIN_REST_DAYS,
                f"Would leave {free_days} rest day(s) this week, "
                f"{rules.scheduling.min_rest_days_per_week} required",
            )

        await self._check_rest_period(rules, worker_id, start, result)

        notice = hours(start - now)
        if notice < rules.scheduling.advance_notice_hours:
            self._conflict(
                result, ConflictType.ADVANCE_NOTICE,
                f"Shift starts in {fmt_hours(notice)}h, "
                f"{rules.scheduling.advance_notice_hours}h notice required",
            )

        if result.can_schedule:
            self._recommend(rules, shift_hours, projected, result)

        logger.debug(
            "Proposed shift %s–%s for worker %s: %d conflict(s)",
            start.isoformat(), end.isoformat(), worker_id, len(result.conflicts),
        )
        return result

    # ── Checks ────────────────────────────────────────────────────────────────

    @staticmethod
    def _conflict(result: ShiftValidationResult, kind: ConflictType, message: str) -> None:
        result.conflicts.append(ShiftConflict(type=kind, message=message))

    def _check_time_window(
        self, rules: RuleConfig, start: datetime, end: datetime, result: ShiftValidationResult
    ) -> None:
        scheduling = rules.scheduling
        local_start, local_end = to_local(start), to_local(end)

        if scheduling.earliest_start and local_start.time() < scheduling.earliest_start:
            self._conflict(
                result, ConflictType.TIME_RESTRICTION,
                f"Start time {local_start:%H:%M} is before allowed earliest start time "
                f"{scheduling.earliest_start:%H:%M}",
            )
        if scheduling.latest_end:
            # Ending on a later local day is past any latest end
            if local_end.date() > local_start.date() or local_end.time() > scheduling.latest_end:
                self._conflict(
                    result, ConflictType.TIME_RESTRICTION,
                    f"End time {local_end:%H:%M} is after allowed latest end time "
                    f"{scheduling.latest_end:%H:%M}",
                )

    def _check_calendar(
        self, rules: RuleConfig, start: datetime, end: datetime, result: ShiftValidationResult
    ) -> None:
        scheduling = rules.scheduling
        day = to_local(start).date()

        if is_weekend(day) and not scheduling.weekend_work_allowed:
            self._conflict(
                result, ConflictType.WEEKEND_RESTRICTION,
                "Weekend work not allowed for this category",
            )
        if self.calendar.is_holiday(day) and not scheduling.holiday_work_allowed:
            name = self.calendar.holiday_name(day) or day.isoformat()
            self._conflict(
                result, ConflictType.HOLIDAY_RESTRICTION,
                f"Holiday work not allowed for this category ({name})",
            )
        if not scheduling.night_shift_allowed and overlaps_night(start, end):
            self._conflict(
                result, ConflictType.NIGHT_SHIFT_RESTRICTION,
                "Night work (23:00–06:00) not allowed for this category",
            )

    async def _consecutive_days(self, worker_id: uuid.UUID, day: date, limit: int) -> int:
        """Contiguous days with counted work immediately before day, capped by the lookback."""
        # never look back less than the limit, or the check could not fire
        lookback = max(settings.CONSECUTIVE_DAY_LOOKBACK_DAYS, limit)
        intervals = await call_store(
            "History store",
            self.history.intervals_in_range(
                worker_id,
                local_day_start(day - timedelta(days=lookback)),
                local_day_start(day),
                COUNTED_STATUSES,
            ),
        )
        worked = {to_local(i.clock_in).date() for i in intervals}

        count = 0
        check = day - timedelta(days=1)
        while count < lookback and check in worked:
            count += 1
            check -= timedelta(days=1)
        return count

    async def _week_load(
        self, worker_id: uuid.UUID, start: datetime, end: datetime, shift_hours: Decimal
    ) -> tuple[Decimal, set[date]]:
        """(projected weekly hours, local dates with work) for the week of start, proposed shift included."""
        week_start, week_end = week_bounds(start)
        worked = await call_store(
            "History store",
            self.history.intervals_in_range(worker_id, week_start, week_end, COUNTED_STATUSES),
        )
        planned = await call_store(
            "History store",
            self.history.scheduled_in_range(worker_id, week_start, week_end),
        )

        projected = shift_hours
        days = {to_local(start).date()}
        for interval in worked:
            projected += interval.duration_hours
            days.add(to_local(interval.clock_in).date())
        for shift in planned:
            if shift.starts_at == start and shift.ends_at == end:
                continue
            projected += shift.duration_hours
            days.add(to_local(shift.starts_at).date())
        return projected, days

    async def _check_rest_period(
        self, rules: RuleConfig, worker_id: uuid.UUID, start: datetime, result: ShiftValidationResult
    ) -> None:
        previous = await call_store(
            "History store", self.history.last_interval_before(worker_id, start)
        )
        planned = await call_store(
            "History store", self.history.last_scheduled_before(worker_id, start)
        )
        ends = [t for t in (
            previous.clock_out if previous is not None else None,
            planned.ends_at if planned is not None else None,
        ) if t is not None]
        if not ends:
            return

        rest = hours(start - max(ends))
        required = rules.breaks.rest_between_shifts
        if rest < required:
            self._conflict(
                result, ConflictType.REST_PERIOD,
                f"Insufficient rest period ({fmt_hours(rest)}h < {fmt_hours(required)}h required)",
            )

    @staticmethod
    def _recommend(
        rules: RuleConfig, shift_hours: Decimal, projected: Decimal, result: ShiftValidationResult
    ) -> None:
        standard = rules.hours.standard_hours_per_week
        if projected > standard:
            result.recommendations.append(
                f"This shift will result in {fmt_hours(projected - standard)} overtime hours"
            )
        if shift_hours > rules.breaks.max_work_without_break:
            result.recommendations.append(
                f"Break of at least {rules.breaks.min_break_minutes} minutes recommended "
                "for this shift duration"
            )
        if rules.breaks.lunch_required and shift_hours >= LUNCH_AFTER_HOURS:
            result.recommendations.append(
                f"Lunch break of {rules.breaks.lunch_minutes} minutes recommended"
            )
