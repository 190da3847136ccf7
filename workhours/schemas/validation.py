"""
Result types of the rule engine, also used as API response bodies.
"""
import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, Field, PlainSerializer, computed_field, model_validator

# Decimal internally, plain JSON numbers on the wire
Hours = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class Severity(str, Enum):
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ViolationType(str, Enum):
    DAILY_LIMIT = "DAILY_LIMIT"
    WEEKLY_LIMIT = "WEEKLY_LIMIT"
    BREAK_REQUIRED = "BREAK_REQUIRED"
    LUNCH_REQUIRED = "LUNCH_REQUIRED"
    REST_PERIOD = "REST_PERIOD"


class ConflictType(str, Enum):
    TIME_RESTRICTION = "TIME_RESTRICTION"
    WEEKEND_RESTRICTION = "WEEKEND_RESTRICTION"
    HOLIDAY_RESTRICTION = "HOLIDAY_RESTRICTION"
    NIGHT_SHIFT_RESTRICTION = "NIGHT_SHIFT_RESTRICTION"
    MAX_CONSECUTIVE = "MAX_CONSECUTIVE"
    WEEKLY_LIMIT = "WEEKLY_LIMIT"
    DAILY_LIMIT = "DAILY_LIMIT"
    REST_PERIOD = "REST_PERIOD"
    ADVANCE_NOTICE = "ADVANCE_NOTICE"
    MIN_REST_DAYS = "MIN_REST_DAYS"


class HourBreakdown(BaseModel):
    regular: Hours = Decimal("0")
    overtime: Hours = Decimal("0")
    premium_overtime: Hours = Decimal("0")
    weekend: Hours = Decimal("0")
    holiday: Hours = Decimal("0")

    @property
    def total(self) -> Decimal:
        return self.regular + self.overtime + self.premium_overtime + self.weekend + self.holiday


class Violation(BaseModel):
    type: ViolationType
    severity: Severity
    message: str
    measured: Hours
    allowed: Hours

    @property
    def blocking(self) -> bool:
        return self.severity in (Severity.ERROR, Severity.CRITICAL)


class BreakRequirements(BaseModel):
    break_required: bool = False
    lunch_required: bool = False
    minimum_break_minutes: int = 0
    actual_break_minutes: int = 0


class ValidationResult(BaseModel):
    rule_set_id: uuid.UUID
    hours_worked: Hours
    violations: list[Violation] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    hours: HourBreakdown = Field(default_factory=HourBreakdown)
    break_requirements: BreakRequirements = Field(default_factory=BreakRequirements)

    @computed_field
    @property
    def is_valid(self) -> bool:
        return not any(v.blocking for v in self.violations)


class ShiftConflict(BaseModel):
    type: ConflictType
    message: str


class ShiftValidationResult(BaseModel):
    conflicts: list[ShiftConflict] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)

    @computed_field
    @property
    def can_schedule(self) -> bool:
        return len(self.conflicts) == 0


# ── Requests ─────────────────────────────────────────────────────────────────

class WorkedIntervalCheck(BaseModel):
    worker_id: uuid.UUID
    clock_in: datetime
    clock_out: datetime
    break_minutes: int = Field(default=0, ge=0, le=480)

    @model_validator(mode="after")
    def _check_order(self) -> "WorkedIntervalCheck":
        if self.clock_out <= self.clock_in:
            raise ValueError("clock_out must be after clock_in")
        return self


class ProposedShiftCheck(BaseModel):
    worker_id: uuid.UUID
    start: datetime
    end: datetime
    break_minutes: int = Field(default=0, ge=0, le=480)

    @model_validator(mode="after")
    def _check_order(self) -> "ProposedShiftCheck":
        if self.end <= self.start:
            raise ValueError("end must be after start")
        return self
