"""
Tests for WorkHourValidator – daily/weekly limits, breaks, rest period, classification.
Week of 2025-09-07 (Sunday) to 2025-09-13; TIMEZONE is UTC.
"""
from datetime import date, timedelta
from decimal import Decimal

import pytest

from workhours.core.exceptions import ConfigurationError, InvalidInterval
from workhours.schemas.validation import Severity, ViolationType
from workhours.services.work_hour_validator import WorkHourValidator
from workhours.stores.history import SqlHistoryStore
from workhours.stores.rule_sets import SqlRuleSetStore
from workhours.utils.holidays import FixedHolidays, NoHolidays
from tests.conftest import MONDAY, WEEK_START, add_full_days, add_interval, at, make_rule_set, rules_with

D = Decimal


def make_validator(db, calendar=None) -> WorkHourValidator:
    return WorkHourValidator(SqlRuleSetStore(db), SqlHistoryStore(db), calendar or NoHolidays())


def types(result) -> set:
    return {v.type for v in result.violations}


@pytest.mark.asyncio
async def test_clean_shift_is_valid(db, worker, rule_set):
    result = await make_validator(db).validate_worked_interval(
        worker.id, at(MONDAY, 8), at(MONDAY, 16, 30), break_minutes=30
    )
    assert result.is_valid
    assert result.violations == []
    assert result.hours_worked == D("8")
    assert result.hours.regular == D("8")
    assert result.rule_set_id == rule_set.id


@pytest.mark.asyncio
async def test_daily_limit_is_an_error(db, worker, rule_set):
    result = await make_validator(db).validate_worked_interval(
        worker.id, at(MONDAY, 7), at(MONDAY, 18, 30), break_minutes=30
    )
    assert not result.is_valid
    daily = next(v for v in result.violations if v.type == ViolationType.DAILY_LIMIT)
    assert daily.severity == Severity.ERROR
    assert daily.measured == D("11")
    assert daily.allowed == D("10")
    assert "(11h)" in daily.message


@pytest.mark.asyncio
async def test_missing_break_is_an_error(db, worker, rule_set):
    result = await make_validator(db).validate_worked_interval(
        worker.id, at(MONDAY, 8), at(MONDAY, 15), break_minutes=0
    )
    assert types(result) == {ViolationType.BREAK_REQUIRED}
    assert not result.is_valid
    assert result.break_requirements.break_required
    assert result.break_requirements.minimum_break_minutes == 30
    assert result.break_requirements.actual_break_minutes == 0


@pytest.mark.asyncio
async def test_short_shift_needs_no_break(db, worker, rule_set):
    result = await make_validator(db).validate_worked_interval(
        worker.id, at(MONDAY, 8), at(MONDAY, 14)
    )
    assert result.is_valid
    assert not result.break_requirements.break_required


@pytest.mark.asyncio
async def test_missing_lunch_is_only_a_warning(db, worker):
    await make_rule_set(db, rules_with(breaks={"lunch_required": True, "lunch_minutes": 60}))
    result = await make_validator(db).validate_worked_interval(
        worker.id, at(MONDAY, 8), at(MONDAY, 15), break_minutes=30
    )
    assert types(result) == {ViolationType.LUNCH_REQUIRED}
    assert result.violations[0].severity == Severity.WARNING
    assert result.is_valid
    assert result.break_requirements.lunch_required
    assert result.break_requirements.minimum_break_minutes == 60


@pytest.mark.asyncio
async def test_weekly_limit(db, worker, rule_set):
    # Sunday..Thursday, 9h each = 45h
    await add_full_days(db, worker, WEEK_START, 5, hours=9)
    friday = WEEK_START + timedelta(days=5)

    result = await make_validator(db).validate_worked_interval(
        worker.id, at(friday, 8), at(friday, 13)
    )
    weekly = next(v for v in result.violations if v.type == ViolationType.WEEKLY_LIMIT)
    assert weekly.severity == Severity.ERROR
    assert weekly.measured == D("50")
    # All 5h are beyond the weekly threshold: 4 overtime, 1 premium
    assert result.hours.regular == 0
    assert result.hours.overtime == D("4")
    assert result.hours.premium_overtime == D("1")


@pytest.mark.asyncio
async def test_weekly_overtime_split(db, worker, rule_set):
    """38h already worked this week, 5h more → 2h regular, 3h overtime."""
    for offset in range(3):
        day = WEEK_START + timedelta(days=offset)
        await add_interval(db, worker, at(day, 8), at(day, 18))
    await add_interval(db, worker, at(WEEK_START + timedelta(days=3), 8), at(WEEK_START + timedelta(days=3), 16))
    thursday = WEEK_START + timedelta(days=4)

    result = await make_validator(db).validate_worked_interval(
        worker.id, at(thursday, 8), at(thursday, 13)
    )
    assert result.hours.regular == D("2")
    assert result.hours.overtime == D("3")
    assert ViolationType.WEEKLY_LIMIT not in types(result)


@pytest.mark.asyncio
async def test_previous_week_does_not_count(db, worker, rule_set):
    await add_full_days(db, worker, WEEK_START - timedelta(days=6), 6, hours=8)
    result = await make_validator(db).validate_worked_interval(
        worker.id, at(MONDAY, 8), at(MONDAY, 14)
    )
    assert result.hours.regular == D("6")
    assert ViolationType.WEEKLY_LIMIT not in types(result)


@pytest.mark.asyncio
async def test_stored_copy_not_counted_twice(db, worker, rule_set):
    # 4 × 10h = 40h, plus the stored 8h interval itself = 48h (at the limit)
    await add_full_days(db, worker, WEEK_START, 4, hours=10)
    thursday = WEEK_START + timedelta(days=4)
    stored = await add_interval(db, worker, at(thursday, 8), at(thursday, 16))

    result = await make_validator(db).validate_worked_interval(
        worker.id, stored.clock_in, stored.clock_out, stored.break_minutes
    )
    assert ViolationType.WEEKLY_LIMIT not in types(result)
    # 40h before it: all 8h are weekly overtime, 4 of them premium
    assert result.hours.regular == 0
    assert result.hours.overtime == D("4")
    assert result.hours.premium_overtime == D("4")


@pytest.mark.asyncio
async def test_short_rest_is_critical(db, worker, rule_set):
    await add_interval(db, worker, at(MONDAY, 14), at(MONDAY, 22))
    tuesday = MONDAY + timedelta(days=1)

    result = await make_validator(db).validate_worked_interval(
        worker.id, at(tuesday, 7), at(tuesday, 12)
    )
    rest = next(v for v in result.violations if v.type == ViolationType.REST_PERIOD)
    assert rest.severity == Severity.CRITICAL
    assert rest.measured == D("9")
    assert rest.allowed == D("11")
    assert not result.is_valid


@pytest.mark.asyncio
async def test_fractional_rest_is_not_rounded_up(db, worker, rule_set):
    await add_interval(db, worker, at(MONDAY, 14), at(MONDAY, 22, 30))
    tuesday = MONDAY + timedelta(days=1)
    result = await make_validator(db).validate_worked_interval(
        worker.id, at(tuesday, 9), at(tuesday, 12)
    )
    rest = next(v for v in result.violations if v.type == ViolationType.REST_PERIOD)
    assert rest.measured == D("10.5")


@pytest.mark.asyncio
async def test_exact_rest_is_enough(db, worker, rule_set):
    await add_interval(db, worker, at(MONDAY, 12), at(MONDAY, 20))
    tuesday = MONDAY + timedelta(days=1)
    result = await make_validator(db).validate_worked_interval(
        worker.id, at(tuesday, 7), at(tuesday, 12)
    )
    assert ViolationType.REST_PERIOD not in types(result)


@pytest.mark.asyncio
async def test_rejected_and_active_intervals_are_ignored(db, worker, rule_set):
    await add_interval(db, worker, at(MONDAY, 14), at(MONDAY, 22), status="rejected")
    await add_interval(db, worker, at(MONDAY, 23), None, status="active")
    tuesday = MONDAY + timedelta(days=1)
    result = await make_validator(db).validate_worked_interval(
        worker.id, at(tuesday, 7), at(tuesday, 12)
    )
    assert result.violations == []


@pytest.mark.asyncio
async def test_no_rule_set_is_configuration_error(db, worker):
    with pytest.raises(ConfigurationError):
        await make_validator(db).validate_worked_interval(worker.id, at(MONDAY, 8), at(MONDAY, 12))


@pytest.mark.asyncio
@pytest.mark.parametrize("start,end,brk", [
    ((8, 0), (8, 0), 0),
    ((12, 0), (8, 0), 0),
    ((8, 0), (9, 0), 60),
    ((8, 0), (9, 0), -5),
])
async def test_malformed_interval_rejected(db, worker, rule_set, start, end, brk):
    with pytest.raises(InvalidInterval):
        await make_validator(db).validate_worked_interval(
            worker.id, at(MONDAY, *start), at(MONDAY, *end), break_minutes=brk
        )


@pytest.mark.asyncio
async def test_holiday_worked_gets_note_and_holiday_bucket(db, worker):
    await make_rule_set(db, rules_with(hours={"rates": {"standard_overtime": 1.5, "holiday_rate": 2}}))
    calendar = FixedHolidays({MONDAY: "Company Day"})
    result = await make_validator(db, calendar).validate_worked_interval(
        worker.id, at(MONDAY, 8), at(MONDAY, 14)
    )
    assert "Worked on public holiday: Company Day" in result.warnings
    assert result.hours.holiday == D("6")
    assert result.hours.total == D("6")


@pytest.mark.asyncio
async def test_night_work_note_when_not_allowed(db, worker):
    await make_rule_set(db, rules_with(scheduling={"night_shift_allowed": False}))
    result = await make_validator(db).validate_worked_interval(
        worker.id, at(MONDAY, 18), at(MONDAY, 23, 30)
    )
    assert any("Night work" in w for w in result.warnings)
    assert result.is_valid


@pytest.mark.asyncio
async def test_explicit_rule_set_overrides_resolution(db, worker, rule_set):
    strict = await make_rule_set(
        db, rules_with(hours={"max_hours_per_day": 6}), version=2, is_default=False,
        effective_from=date(2025, 1, 1),
    )
    result = await make_validator(db).validate_worked_interval(
        worker.id, at(MONDAY, 8), at(MONDAY, 15), break_minutes=30, rule_set=strict
    )
    assert result.rule_set_id == strict.id
    assert ViolationType.DAILY_LIMIT in types(result)
