"""
Tests for RuleConfig construction: ranges, defaults and cross-field invariants.
"""
from datetime import time
from decimal import Decimal

import pytest
from pydantic import ValidationError

from workhours.core.exceptions import InvariantViolation
from workhours.schemas.rule_set import RuleConfig, RuleSetCreate
from tests.conftest import BASE_RULES, rules_with


def test_defaults_are_filled_in():
    cfg = RuleConfig.parse({"hours": {
        "standard_hours_per_week": 40, "max_hours_per_day": 10, "max_hours_per_week": 48,
    }})
    assert cfg.hours.rates.standard_overtime == Decimal("1.5")
    assert cfg.hours.daily_threshold == Decimal("8")
    assert cfg.hours.weekly_threshold == Decimal("40")
    assert cfg.breaks.min_break_minutes == 15
    assert cfg.breaks.rest_between_shifts == Decimal("11")
    assert cfg.breaks.lunch_required is True
    assert cfg.scheduling.max_consecutive_days == 6
    assert cfg.scheduling.holiday_work_allowed is False


def test_weekly_max_below_standard_rejected():
    with pytest.raises(InvariantViolation, match="max_hours_per_week"):
        RuleConfig.parse(rules_with(hours={"standard_hours_per_week": 40, "max_hours_per_week": 35}))


def test_daily_threshold_above_daily_max_rejected():
    with pytest.raises(InvariantViolation, match="daily_overtime_threshold"):
        RuleConfig.parse(rules_with(hours={"max_hours_per_day": 8, "daily_overtime_threshold": 9}))


def test_min_hours_above_standard_rejected():
    with pytest.raises(InvariantViolation, match="min_hours_per_week"):
        RuleConfig.parse(rules_with(hours={"min_hours_per_week": 45}))


def test_scheduling_window_must_be_ordered():
    with pytest.raises(InvariantViolation, match="earliest_start"):
        RuleConfig.parse(rules_with(scheduling={"earliest_start": "18:00", "latest_end": "08:00"}))


@pytest.mark.parametrize("section,field,value", [
    ("hours", "max_hours_per_day", 25),
    ("hours", "standard_hours_per_week", 0),
    ("breaks", "min_break_minutes", 4),
    ("breaks", "rest_between_shifts", 7),
    ("scheduling", "max_consecutive_days", 15),
    ("scheduling", "advance_notice_hours", 169),
])
def test_out_of_range_values_rejected(section, field, value):
    with pytest.raises(InvariantViolation, match=field):
        RuleConfig.parse(rules_with(**{section: {field: value}}))


def test_out_of_range_rate_rejected():
    with pytest.raises(InvariantViolation, match="standard_overtime"):
        RuleConfig.parse(rules_with(hours={"rates": {"standard_overtime": 6}}))


def test_missing_hours_section_rejected():
    with pytest.raises(InvariantViolation, match="hours"):
        RuleConfig.parse({"breaks": {}})


def test_config_is_immutable():
    cfg = RuleConfig.parse(BASE_RULES)
    with pytest.raises(ValidationError):
        cfg.hours.max_hours_per_day = Decimal("12")


def test_time_window_parsed():
    cfg = RuleConfig.parse(rules_with(scheduling={"earliest_start": "07:00", "latest_end": "19:30"}))
    assert cfg.scheduling.earliest_start == time(7, 0)
    assert cfg.scheduling.latest_end == time(19, 30)


def test_create_payload_rejects_invalid_rules():
    with pytest.raises(ValidationError):
        RuleSetCreate(
            category="full_time",
            name="broken",
            effective_from="2025-01-01",
            rules=rules_with(hours={"max_hours_per_week": 10}),
        )
