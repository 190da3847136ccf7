"""
Payroll Calculator: aggregates classified hours of a pay period into gross pay.

Only approved and paid intervals are paid. Each interval is classified with the
rule set version it references, so a later revision never changes past pay.
Compliance breaches found on the way are reported, not enforced.
"""
import logging
import uuid
from collections import defaultdict
from datetime import date, datetime, timedelta
from decimal import Decimal

from workhours.core.exceptions import ConfigurationError
from workhours.models.worked_interval import COUNTED_STATUSES, PAYABLE_STATUSES
from workhours.schemas.payroll import IntervalViolation, PayrollSummary
from workhours.services.hour_classifier import classify, multipliers
from workhours.services.work_hour_validator import WorkHourValidator
from workhours.stores.base import (
    HistoryStore, HolidayCalendar, RuleSetStore, WorkerDirectory, call_store, require_rule_set,
)
from workhours.utils.holidays import get_calendar
from workhours.utils.timeutils import (
    MONEY_QUANTUM, fmt_hours, is_weekend, local_day_start, to_local, week_bounds, week_start,
)

logger = logging.getLogger(__name__)

BUCKETS = ("regular", "overtime", "premium_overtime", "weekend", "holiday")


class PayrollCalculator:

    def __init__(
        self,
        rule_sets: RuleSetStore,
        history: HistoryStore,
        workers: WorkerDirectory,
        calendar: HolidayCalendar | None = None,
        validator: WorkHourValidator | None = None,
    ):
        self.rule_sets = rule_sets
        self.history = history
        self.workers = workers
        self.calendar = calendar or get_calendar()
        self.validator = validator or WorkHourValidator(rule_sets, history, self.calendar)

    async def compute_payroll(
        self, worker_id: uuid.UUID, period_start: date, period_end: date
    ) -> PayrollSummary:
        """Gross pay for the inclusive local date range [period_start, period_end]."""
        hourly_rate = await call_store(
            "Worker directory", self.workers.hourly_rate_for(worker_id, period_start)
        )
        if hourly_rate is None:
            raise ConfigurationError(
                f"No hourly rate for worker {worker_id} on {period_start.isoformat()}"
            )

        range_start = local_day_start(period_start)
        range_end = local_day_start(period_end + timedelta(days=1))

        # Counted work of every week the period touches, for prior weekly hours
        first_week, _ = week_bounds(range_start)
        _, last_week = week_bounds(range_end - timedelta(seconds=1))
        counted = await call_store(
            "History store",
            self.history.intervals_in_range(worker_id, first_week, last_week, COUNTED_STATUSES),
        )
        payable = [
            i for i in counted
            if i.status in PAYABLE_STATUSES and range_start <= i.clock_in < range_end
        ]

        summary = PayrollSummary(
            worker_id=worker_id,
            period_start=period_start,
            period_end=period_end,
            hourly_rate=hourly_rate,
            interval_count=len(payable),
        )
        bucket_hours: dict[str, Decimal] = defaultdict(Decimal)
        bucket_pay: dict[str, Decimal] = defaultdict(Decimal)
        week_rules = {}
        rule_set_cache = {}

        for interval in payable:
            rule_set = await self._rule_set_for(interval, worker_id, rule_set_cache)
            rules = rule_set.config
            if rule_set.id not in summary.rule_set_ids:
                summary.rule_set_ids.append(rule_set.id)

            day = to_local(interval.clock_in).date()
            week_rules[week_start(day)] = rules
            prior = self._prior_weekly_hours(counted, interval.clock_in)

            breakdown = classify(
                rules,
                interval.duration_hours,
                prior,
                is_weekend(day),
                self.calendar.is_holiday(day),
            )
            rates = multipliers(rules)
            for bucket in BUCKETS:
                h = getattr(breakdown, bucket)
                bucket_hours[bucket] += h
                bucket_pay[bucket] += h * hourly_rate * rates[bucket]

            checked = await self.validator.validate_worked_interval(
                worker_id,
                interval.clock_in,
                interval.clock_out,
                interval.break_minutes or 0,
                rule_set=rule_set,
            )
            summary.violations.extend(
                IntervalViolation(interval_id=interval.id, violation=v) for v in checked.violations
            )

        for bucket in BUCKETS:
            setattr(summary, f"{bucket}_hours", bucket_hours[bucket])
            setattr(summary, f"{bucket}_pay", bucket_pay[bucket].quantize(MONEY_QUANTUM))
        summary.total_hours = sum((bucket_hours[b] for b in BUCKETS), Decimal("0"))
        summary.total_gross_pay = sum(
            (getattr(summary, f"{b}_pay") for b in BUCKETS), Decimal("0")
        )
        summary.warnings.extend(self._min_hours_warnings(counted, week_rules))

        logger.info(
            "Payroll %s..%s for worker %s: %d interval(s), %sh, gross %s",
            period_start, period_end, worker_id, summary.interval_count,
            fmt_hours(summary.total_hours), summary.total_gross_pay,
        )
        return summary

    async def _rule_set_for(self, interval, worker_id: uuid.UUID, cache: dict):
        """Referenced version, else the one effective on the interval's date."""
        key = interval.rule_set_id
        if key is not None and key in cache:
            return cache[key]

        rule_set = None
        if key is not None:
            rule_set = await call_store("RuleSet store", self.rule_sets.get(key))
            if rule_set is None:
                logger.warning("Interval %s references missing rule set %s", interval.id, key)
        if rule_set is None:
            rule_set = await require_rule_set(
                self.rule_sets, worker_id, to_local(interval.clock_in).date()
            )
        if key is not None:
            cache[key] = rule_set
        return rule_set

    @staticmethod
    def _prior_weekly_hours(counted: list, clock_in: datetime) -> Decimal:
        start, _ = week_bounds(clock_in)
        return sum(
            (i.duration_hours for i in counted if start <= i.clock_in < clock_in),
            Decimal("0"),
        )

    @staticmethod
    def _min_hours_warnings(counted: list, week_rules: dict) -> list[str]:
        totals: dict[date, Decimal] = defaultdict(Decimal)
        for interval in counted:
            totals[week_start(to_local(interval.clock_in).date())] += interval.duration_hours

        warnings = []
        for first_day in sorted(week_rules):
            minimum = week_rules[first_day].hours.min_hours_per_week
            worked = totals[first_day]
            if minimum is not None and worked < minimum:
                warnings.append(
                    f"Week of {first_day.isoformat()}: {fmt_hours(worked)}h worked, "
                    f"below minimum of {fmt_hours(minimum)}h"
                )
        return warnings
