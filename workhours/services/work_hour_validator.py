"""
Work-Hour Validator: checks one completed interval against its rule set.

Checks daily and weekly limits, break and lunch mandates and the rest period
since the previous interval. The hour breakdown is always computed, whether or
not the interval complies. Read-only.
"""
import logging
import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from workhours.models.worked_interval import COUNTED_STATUSES
from workhours.schemas.rule_set import RuleConfig
from workhours.schemas.validation import (
    BreakRequirements, Severity, ValidationResult, Violation, ViolationType,
)
from workhours.services.hour_classifier import classify
from workhours.stores.base import HistoryStore, HolidayCalendar, RuleSetStore, call_store, require_rule_set
from workhours.utils.holidays import get_calendar
from workhours.utils.timeutils import (
    fmt_hours, hours, is_weekend, net_hours, overlaps_night, to_local, to_utc, week_bounds,
)

if TYPE_CHECKING:
    from workhours.models.rule_set import RuleSet

logger = logging.getLogger(__name__)

# Shift length from which the lunch mandate applies
LUNCH_AFTER_HOURS = Decimal("6")


class WorkHourValidator:

    def __init__(
        self,
        rule_sets: RuleSetStore,
        history: HistoryStore,
        calendar: HolidayCalendar | None = None,
    ):
        self.rule_sets = rule_sets
        self.history = history
        self.calendar = calendar or get_calendar()

    async def validate_worked_interval(
        self,
        worker_id: uuid.UUID,
        clock_in: datetime,
        clock_out: datetime,
        break_minutes: int = 0,
        rule_set: "RuleSet | None" = None,
    ) -> ValidationResult:
        clock_in, clock_out = to_utc(clock_in), to_utc(clock_out)
        shift_hours = net_hours(clock_in, clock_out, break_minutes)
        day = to_local(clock_in).date()

        if rule_set is None:
            rule_set = await require_rule_set(self.rule_sets, worker_id, day)
        rules = rule_set.config

        result = ValidationResult(
            rule_set_id=rule_set.id,
            hours_worked=shift_hours,
            break_requirements=BreakRequirements(actual_break_minutes=break_minutes),
        )

        # 1. Daily limit
        self._check_daily_limit(rules, shift_hours, result)

        # 2. Break and lunch mandates
        self._check_breaks(rules, shift_hours, break_minutes, result)

        # 3. Weekly limit
        prior_weekly, weekly_total = await self._weekly_hours(worker_id, clock_in, clock_out, shift_hours)
        if weekly_total > rules.hours.max_hours_per_week:
            result.violations.append(Violation(
                type=ViolationType.WEEKLY_LIMIT,
                severity=Severity.ERROR,
                message=(
                    f"Weekly hours ({fmt_hours(weekly_total)}h) would exceed maximum "
                    f"({fmt_hours(rules.hours.max_hours_per_week)}h)"
                ),
                measured=weekly_total,
                allowed=rules.hours.max_hours_per_week,
            ))

        # 4. Rest period since the previous interval
        await self._check_rest_period(rules, worker_id, clock_in, result)

        # 5. Advisory notes
        self._add_advisories(rules, clock_in, clock_out, result)

        result.hours = classify(
            rules,
            shift_hours,
            prior_weekly,
            is_weekend(day),
            self.calendar.is_holiday(day),
        )
        logger.debug(
            "Validated %s–%s for worker %s: %d violation(s)",
            clock_in.isoformat(), clock_out.isoformat(), worker_id, len(result.violations),
        )
        return result

    def _check_daily_limit(self, rules: RuleConfig, shift_hours: Decimal, result: ValidationResult) -> None:
        limit = rules.hours.max_hours_per_day
        if shift_hours > limit:
            result.violations.append(Violation(
                type=ViolationType.DAILY_LIMIT,
                severity=Severity.ERROR,
                message=(
                    f"Shift duration ({fmt_hours(shift_hours)}h) exceeds maximum daily hours "
                    f"({fmt_hours(limit)}h)"
                ),
                measured=shift_hours,
                allowed=limit,
            ))

    def _check_breaks(
        self, rules: RuleConfig, shift_hours: Decimal, break_minutes: int, result: ValidationResult
    ) -> None:
        breaks = rules.breaks
        requirements = result.break_requirements

        if shift_hours > breaks.max_work_without_break:
            requirements.break_required = True
            requirements.minimum_break_minutes = breaks.min_break_minutes
            if break_minutes < breaks.min_break_minutes:
                result.violations.append(Violation(
                    type=ViolationType.BREAK_REQUIRED,
                    severity=Severity.ERROR,
                    message=(
                        f"Break of at least {breaks.min_break_minutes} minutes required for shifts "
                        f"longer than {fmt_hours(breaks.max_work_without_break)} hours"
                    ),
                    measured=Decimal(break_minutes),
                    allowed=Decimal(breaks.min_break_minutes),
                ))

        if breaks.lunch_required and shift_hours >= LUNCH_AFTER_HOURS:
            requirements.lunch_required = True
            requirements.minimum_break_minutes = max(
                requirements.minimum_break_minutes, breaks.lunch_minutes
            )
            if break_minutes < breaks.lunch_minutes:
                result.violations.append(Violation(
                    type=ViolationType.LUNCH_REQUIRED,
                    severity=Severity.WARNING,
                    message=f"Lunch break of {breaks.lunch_minutes} minutes required for shifts of 6+ hours",
                    measured=Decimal(break_minutes),
                    allowed=Decimal(breaks.lunch_minutes),
                ))

    async def _weekly_hours(
        self, worker_id: uuid.UUID, clock_in: datetime, clock_out: datetime, shift_hours: Decimal
    ) -> tuple[Decimal, Decimal]:
        """
        (hours worked this week before clock_in, week total including this interval).
        A stored copy of the interval being checked is not counted twice.
        """
        start, end = week_bounds(clock_in)
        others = await call_store(
            "History store",
            self.history.intervals_in_range(worker_id, start, end, COUNTED_STATUSES),
        )
        prior = Decimal("0")
        total = shift_hours
        for interval in others:
            if interval.clock_in == clock_in and interval.clock_out == clock_out:
                continue
            total += interval.duration_hours
            if interval.clock_in < clock_in:
                prior += interval.duration_hours
        return prior, total

    async def _check_rest_period(
        self, rules: RuleConfig, worker_id: uuid.UUID, clock_in: datetime, result: ValidationResult
    ) -> None:
        previous = await call_store(
            "History store", self.history.last_interval_before(worker_id, clock_in)
        )
        if previous is None or previous.clock_out is None:
            return

        rest = hours(clock_in - previous.clock_out)
        required = rules.breaks.rest_between_shifts
        if rest < required:
            result.violations.append(Violation(
                type=ViolationType.REST_PERIOD,
                severity=Severity.CRITICAL,
                message=(
                    f"Insufficient rest between shifts ({fmt_hours(rest)}h). "
                    f"Minimum {fmt_hours(required)}h required"
                ),
                measured=rest,
                allowed=required,
            ))

    def _add_advisories(
        self, rules: RuleConfig, clock_in: datetime, clock_out: datetime, result: ValidationResult
    ) -> None:
        day = to_local(clock_in).date()
        scheduling = rules.scheduling

        holiday_name = self.calendar.holiday_name(day)
        if holiday_name:
            result.warnings.append(f"Worked on public holiday: {holiday_name}")
        if is_weekend(day) and not scheduling.weekend_work_allowed:
            result.warnings.append("Weekend work is not permitted for this category")
        if not scheduling.night_shift_allowed and overlaps_night(clock_in, clock_out):
            result.warnings.append("Night work is not permitted for this category")
