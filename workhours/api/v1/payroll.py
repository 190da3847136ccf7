"""
Payroll API – gross pay for one worker and pay period.
"""
from fastapi import APIRouter, status

from workhours.api.deps import Payroll
from workhours.schemas.payroll import PayrollComputeRequest, PayrollSummary

router = APIRouter(prefix="/payroll", tags=["payroll"])


@router.post("/compute", response_model=PayrollSummary, status_code=status.HTTP_200_OK)
async def compute_payroll(payload: PayrollComputeRequest, calculator: Payroll):
    """
    Compute the summary for approved and paid intervals in the period.
    Read-only: calling it twice returns the same summary.
    """
    return await calculator.compute_payroll(
        payload.worker_id, payload.period_start, payload.period_end
    )
