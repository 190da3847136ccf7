import uuid

from fastapi import APIRouter, status

from workhours.api.deps import Intervals
from workhours.schemas.interval import IntervalClockIn, IntervalStatusUpdate, WorkedIntervalOut

router = APIRouter(prefix="/intervals", tags=["intervals"])


@router.post("", response_model=WorkedIntervalOut, status_code=status.HTTP_201_CREATED)
async def clock_in(payload: IntervalClockIn, intervals: Intervals):
    return await intervals.clock_in(payload.worker_id, payload.clock_in, payload.note)


@router.put("/{interval_id}/status", response_model=WorkedIntervalOut)
async def update_status(interval_id: uuid.UUID, payload: IntervalStatusUpdate, intervals: Intervals):
    """Moves the interval along its lifecycle; completing requires a clock-out."""
    return await intervals.transition(
        interval_id,
        payload.status,
        clock_out=payload.clock_out,
        break_minutes=payload.break_minutes,
        note=payload.note,
    )
