"""
Compliance API – checks worked intervals and proposed shifts against the worker's rules.
"""
from fastapi import APIRouter

from workhours.api.deps import Scheduler, Validator
from workhours.schemas.validation import (
    ProposedShiftCheck, ShiftValidationResult, ValidationResult, WorkedIntervalCheck,
)

router = APIRouter(prefix="/compliance", tags=["compliance"])


@router.post("/validate-interval", response_model=ValidationResult)
async def validate_interval(payload: WorkedIntervalCheck, validator: Validator):
    """Breaches come back as violations in a 200 response, never as an error status."""
    return await validator.validate_worked_interval(
        payload.worker_id, payload.clock_in, payload.clock_out, payload.break_minutes
    )


@router.post("/validate-shift", response_model=ShiftValidationResult)
async def validate_shift(payload: ProposedShiftCheck, scheduler: Scheduler):
    return await scheduler.validate_proposed_shift(
        payload.worker_id, payload.start, payload.end, payload.break_minutes
    )
