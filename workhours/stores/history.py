import uuid
from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from workhours.models.worked_interval import COUNTED_STATUSES, ScheduledShift, WorkedInterval


class SqlHistoryStore:
    """Worked intervals and committed shifts of one worker, read-only."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def intervals_in_range(
        self,
        worker_id: uuid.UUID,
        start: datetime,
        end: datetime,
        statuses: Sequence[str] = COUNTED_STATUSES,
    ) -> list[WorkedInterval]:
        """Intervals whose clock-in lies in [start, end), oldest first."""
        result = await self.db.execute(
            select(WorkedInterval)
            .where(
                WorkedInterval.worker_id == worker_id,
                WorkedInterval.clock_in >= start,
                WorkedInterval.clock_in < end,
                WorkedInterval.status.in_(list(statuses)),
            )
            .order_by(WorkedInterval.clock_in, WorkedInterval.id)
        )
        return list(result.scalars().all())

    async def last_interval_before(
        self, worker_id: uuid.UUID, timestamp: datetime
    ) -> WorkedInterval | None:
        """The counted interval started before timestamp that ended last."""
        result = await self.db.execute(
            select(WorkedInterval)
            .where(
                WorkedInterval.worker_id == worker_id,
                WorkedInterval.clock_in < timestamp,
                WorkedInterval.clock_out.is_not(None),
                WorkedInterval.status.in_(COUNTED_STATUSES),
            )
            .order_by(WorkedInterval.clock_out.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def scheduled_in_range(
        self, worker_id: uuid.UUID, start: datetime, end: datetime
    ) -> list[ScheduledShift]:
        result = await self.db.execute(
            select(ScheduledShift)
            .where(
                ScheduledShift.worker_id == worker_id,
                ScheduledShift.starts_at >= start,
                ScheduledShift.starts_at < end,
                ScheduledShift.status == "planned",
            )
            .order_by(ScheduledShift.starts_at)
        )
        return list(result.scalars().all())

    async def last_scheduled_before(
        self, worker_id: uuid.UUID, timestamp: datetime
    ) -> ScheduledShift | None:
        result = await self.db.execute(
            select(ScheduledShift)
            .where(
                ScheduledShift.worker_id == worker_id,
                ScheduledShift.starts_at < timestamp,
                ScheduledShift.status == "planned",
            )
            .order_by(ScheduledShift.ends_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()
