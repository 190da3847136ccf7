import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel


class WorkedIntervalOut(BaseModel):
    id: uuid.UUID
    worker_id: uuid.UUID
    rule_set_id: Optional[uuid.UUID]
    clock_in: datetime
    clock_out: Optional[datetime]
    break_minutes: int
    status: str
    note: Optional[str]
    approved_at: Optional[datetime]

    model_config = {"from_attributes": True}


class IntervalStatusUpdate(BaseModel):
    status: Literal["completed", "approved", "rejected", "paid"]
    clock_out: Optional[datetime] = None   # required when completing an active interval
    break_minutes: Optional[int] = None
    note: Optional[str] = None


class IntervalClockIn(BaseModel):
    worker_id: uuid.UUID
    clock_in: datetime
    note: Optional[str] = None
