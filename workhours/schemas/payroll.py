import uuid
from datetime import date
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, Field, PlainSerializer, model_validator

from workhours.schemas.validation import Hours, Violation

# Currency amounts, quantized to cents by the calculator
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class IntervalViolation(BaseModel):
    """A breach found while re-checking one interval of the period."""
    interval_id: uuid.UUID
    violation: Violation


class PayrollSummary(BaseModel):
    worker_id: uuid.UUID
    period_start: date
    period_end: date
    hourly_rate: Money
    interval_count: int = 0

    total_hours: Hours = Decimal("0")
    regular_hours: Hours = Decimal("0")
    overtime_hours: Hours = Decimal("0")
    premium_overtime_hours: Hours = Decimal("0")
    weekend_hours: Hours = Decimal("0")
    holiday_hours: Hours = Decimal("0")

    regular_pay: Money = Decimal("0")
    overtime_pay: Money = Decimal("0")
    premium_overtime_pay: Money = Decimal("0")
    weekend_pay: Money = Decimal("0")
    holiday_pay: Money = Decimal("0")
    total_gross_pay: Money = Decimal("0")

    rule_set_ids: list[uuid.UUID] = Field(default_factory=list)
    violations: list[IntervalViolation] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class PayrollComputeRequest(BaseModel):
    worker_id: uuid.UUID
    period_start: date
    period_end: date

    @model_validator(mode="after")
    def _check_dates(self) -> "PayrollComputeRequest":
        if self.period_end < self.period_start:
            raise ValueError("period_end must be >= period_start")
        return self
