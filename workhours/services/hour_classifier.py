"""
Hour classification: splits one interval's hours into pay-rate buckets.

Precedence (order matters for intervals that qualify more than once):
holiday > weekend > daily overtime > weekly overtime override > premium carve-out.
"""
from decimal import Decimal

from workhours.core.exceptions import InvalidInterval
from workhours.schemas.rule_set import RuleConfig
from workhours.schemas.validation import HourBreakdown

ZERO = Decimal("0")
# Overtime hours paid at the standard overtime rate before premium applies
PREMIUM_AFTER_HOURS = Decimal("4")


def classify(
    rules: RuleConfig,
    interval_hours: Decimal,
    prior_weekly_hours: Decimal,
    is_weekend: bool,
    is_holiday: bool,
) -> HourBreakdown:
    if interval_hours < 0:
        raise InvalidInterval(f"negative interval length: {interval_hours}h")

    work = rules.hours
    rates = work.rates

    if is_holiday and rates.holiday_rate is not None:
        return HourBreakdown(holiday=interval_hours)
    if is_weekend and rates.weekend_rate is not None:
        return HourBreakdown(weekend=interval_hours)

    daily_threshold = work.daily_threshold
    regular = min(interval_hours, daily_threshold)
    overtime = max(ZERO, interval_hours - daily_threshold)

    weekly_total = prior_weekly_hours + interval_hours
    if weekly_total > work.weekly_threshold:
        weekly_overtime = min(interval_hours, weekly_total - work.weekly_threshold)
        overtime = max(overtime, weekly_overtime)
        regular = interval_hours - overtime

    premium = ZERO
    if rates.premium_overtime is not None and overtime > PREMIUM_AFTER_HOURS:
        premium = overtime - PREMIUM_AFTER_HOURS
        overtime = PREMIUM_AFTER_HOURS

    return HourBreakdown(regular=regular, overtime=overtime, premium_overtime=premium)


def multipliers(rules: RuleConfig) -> dict[str, Decimal]:
    """Pay multiplier per bucket, relative to the hourly rate."""
    rates = rules.hours.rates
    return {
        "regular": Decimal("1"),
        "overtime": rates.standard_overtime,
        "premium_overtime": rates.premium_overtime or rates.standard_overtime,
        "weekend": rates.weekend_rate or Decimal("1"),
        "holiday": rates.holiday_rate or Decimal("1"),
    }
