import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from workhours.models.worker import Worker, WorkerRate


class SqlWorkerDirectory:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def hourly_rate_for(self, worker_id: uuid.UUID, as_of: date) -> Decimal | None:
        """Rate valid on as_of from the rate history (fallback: current worker rate)."""
        result = await self.db.execute(
            select(WorkerRate.hourly_rate)
            .where(
                WorkerRate.worker_id == worker_id,
                WorkerRate.valid_from <= as_of,
                or_(WorkerRate.valid_to.is_(None), WorkerRate.valid_to > as_of),
            )
            .order_by(WorkerRate.valid_from.desc())
            .limit(1)
        )
        rate = result.scalar_one_or_none()
        if rate is not None:
            return Decimal(rate)
        current = await self.db.scalar(select(Worker.hourly_rate).where(Worker.id == worker_id))
        return Decimal(current) if current is not None else None

    async def active_worker_ids(self) -> list[uuid.UUID]:
        result = await self.db.execute(
            select(Worker.id).where(Worker.is_active == True).order_by(Worker.last_name)  # noqa: E712
        )
        return list(result.scalars().all())
