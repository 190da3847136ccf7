"""
Rule configuration for a worker category.

RuleConfig is built once per RuleSet version and never mutated afterwards;
structural invariants are checked at construction time.
"""
import uuid
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from workhours.core.exceptions import InvariantViolation

DEFAULT_DAILY_OVERTIME_THRESHOLD = Decimal("8")
DEFAULT_WEEKLY_OVERTIME_THRESHOLD = Decimal("40")


class OvertimeRates(BaseModel):
    model_config = ConfigDict(frozen=True)

    standard_overtime: Decimal = Field(default=Decimal("1.5"), ge=1, le=5)
    premium_overtime: Optional[Decimal] = Field(default=None, ge=1, le=5)
    weekend_rate: Optional[Decimal] = Field(default=None, ge=1, le=5)
    holiday_rate: Optional[Decimal] = Field(default=None, ge=1, le=5)


class WorkHourRules(BaseModel):
    model_config = ConfigDict(frozen=True)

    standard_hours_per_week: Decimal = Field(ge=1, le=80)
    max_hours_per_day: Decimal = Field(ge=1, le=24)
    max_hours_per_week: Decimal = Field(ge=1, le=168)
    min_hours_per_week: Optional[Decimal] = Field(default=None, ge=0, le=80)
    daily_overtime_threshold: Optional[Decimal] = Field(default=None, ge=1, le=24)
    weekly_overtime_threshold: Optional[Decimal] = Field(default=None, ge=1, le=168)
    rates: OvertimeRates = OvertimeRates()

    @model_validator(mode="after")
    def _check_limits(self) -> "WorkHourRules":
        if self.max_hours_per_week < self.standard_hours_per_week:
            raise InvariantViolation(
                "max_hours_per_week cannot be less than standard_hours_per_week"
            )
        if (
            self.daily_overtime_threshold is not None
            and self.daily_overtime_threshold > self.max_hours_per_day
        ):
            raise InvariantViolation(
                "daily_overtime_threshold cannot exceed max_hours_per_day"
            )
        if (
            self.min_hours_per_week is not None
            and self.min_hours_per_week > self.standard_hours_per_week
        ):
            raise InvariantViolation(
                "min_hours_per_week cannot exceed standard_hours_per_week"
            )
        return self

    @property
    def daily_threshold(self) -> Decimal:
        if self.daily_overtime_threshold is None:
            return DEFAULT_DAILY_OVERTIME_THRESHOLD
        return self.daily_overtime_threshold

    @property
    def weekly_threshold(self) -> Decimal:
        if self.weekly_overtime_threshold is None:
            return DEFAULT_WEEKLY_OVERTIME_THRESHOLD
        return self.weekly_overtime_threshold


class BreakRules(BaseModel):
    model_config = ConfigDict(frozen=True)

    min_break_minutes: int = Field(default=15, ge=5, le=120)
    max_work_without_break: Decimal = Field(default=Decimal("6"), ge=2, le=12)  # hours
    lunch_required: bool = True
    lunch_minutes: int = Field(default=60, ge=15, le=120)
    rest_between_shifts: Decimal = Field(default=Decimal("11"), ge=8, le=24)  # hours


class SchedulingRules(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_consecutive_days: int = Field(default=6, ge=1, le=14)
    min_rest_days_per_week: int = Field(default=1, ge=0, le=7)
    advance_notice_hours: int = Field(default=24, ge=0, le=168)
    earliest_start: Optional[time] = None
    latest_end: Optional[time] = None
    night_shift_allowed: bool = True
    weekend_work_allowed: bool = True
    holiday_work_allowed: bool = False

    @model_validator(mode="after")
    def _check_window(self) -> "SchedulingRules":
        if (
            self.earliest_start is not None
            and self.latest_end is not None
            and self.earliest_start >= self.latest_end
        ):
            raise InvariantViolation("earliest_start must be before latest_end")
        return self


class RuleConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    hours: WorkHourRules
    breaks: BreakRules = BreakRules()
    scheduling: SchedulingRules = SchedulingRules()

    @classmethod
    def parse(cls, data: dict[str, Any]) -> "RuleConfig":
        """Build from loosely structured input; any breach raises InvariantViolation."""
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise InvariantViolation(_summarise(exc)) from exc


def _summarise(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "rules"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


# ── API schemas ──────────────────────────────────────────────────────────────

class RuleSetCreate(BaseModel):
    category: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=255)
    effective_from: date
    expires_on: Optional[date] = None
    rules: RuleConfig

    @model_validator(mode="after")
    def _check_dates(self) -> "RuleSetCreate":
        if self.expires_on is not None and self.expires_on <= self.effective_from:
            raise ValueError("expires_on must be after effective_from")
        return self


class RuleSetRevise(BaseModel):
    rules: RuleConfig
    effective_from: date
    name: Optional[str] = None


class RuleSetOut(BaseModel):
    id: uuid.UUID
    category: str
    version: int
    name: str
    status: str
    is_default: bool
    effective_from: date
    expires_on: Optional[date]
    rules: dict[str, Any]
    created_at: datetime

    model_config = {"from_attributes": True}
