from workhours.schemas.rule_set import RuleConfig, RuleSetCreate, RuleSetOut, RuleSetRevise
from workhours.schemas.validation import (
    HourBreakdown, Severity, ShiftConflict, ShiftValidationResult,
    ValidationResult, Violation, ViolationType, ConflictType,
)
from workhours.schemas.payroll import PayrollSummary, PayrollComputeRequest
from workhours.schemas.interval import WorkedIntervalOut, IntervalStatusUpdate, IntervalClockIn

__all__ = [
    "RuleConfig", "RuleSetCreate", "RuleSetOut", "RuleSetRevise",
    "HourBreakdown", "Severity", "ShiftConflict", "ShiftValidationResult",
    "ValidationResult", "Violation", "ViolationType", "ConflictType",
    "PayrollSummary", "PayrollComputeRequest",
    "WorkedIntervalOut", "IntervalStatusUpdate", "IntervalClockIn",
]
