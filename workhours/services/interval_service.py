"""
Worked interval lifecycle.

    active → completed → approved → paid
                       ↘ rejected

Completing an interval stamps the rule set version in force on its clock-in
date, which payroll later uses even after the rules were revised.
"""
import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from workhours.core.exceptions import InvalidInterval, InvalidStateTransition, NotFound
from workhours.models.worked_interval import WorkedInterval
from workhours.stores.base import RuleSetStore, require_rule_set
from workhours.utils.timeutils import net_hours, to_local, to_utc

logger = logging.getLogger(__name__)

TRANSITIONS: dict[str, tuple[str, ...]] = {
    "active":    ("completed",),
    "completed": ("approved", "rejected"),
    "approved":  ("paid",),
    "rejected":  (),
    "paid":      (),
}


class IntervalService:

    def __init__(self, db: AsyncSession, rule_sets: RuleSetStore):
        self.db = db
        self.rule_sets = rule_sets

    async def clock_in(
        self, worker_id: uuid.UUID, at: datetime, note: str | None = None
    ) -> WorkedInterval:
        interval = WorkedInterval(worker_id=worker_id, clock_in=to_utc(at), status="active", note=note)
        self.db.add(interval)
        await self.db.commit()
        await self.db.refresh(interval)
        return interval

    async def transition(
        self,
        interval_id: uuid.UUID,
        new_status: str,
        clock_out: datetime | None = None,
        break_minutes: int | None = None,
        note: str | None = None,
    ) -> WorkedInterval:
        interval = await self.db.get(WorkedInterval, interval_id)
        if interval is None:
            raise NotFound(f"Interval {interval_id} not found")

        if new_status not in TRANSITIONS.get(interval.status, ()):
            raise InvalidStateTransition("interval", interval.status, new_status)

        if new_status == "completed":
            await self._complete(interval, clock_out, break_minutes)
        elif clock_out is not None or break_minutes is not None:
            raise InvalidInterval("clock-out and break can only be set when completing an interval")

        if new_status == "approved":
            interval.approved_at = datetime.now(timezone.utc)
        if note is not None:
            interval.note = note

        previous = interval.status
        interval.status = new_status
        await self.db.commit()
        await self.db.refresh(interval)
        logger.info("Interval %s: %s → %s", interval.id, previous, new_status)
        return interval

    async def _complete(
        self, interval: WorkedInterval, clock_out: datetime | None, break_minutes: int | None
    ) -> None:
        if clock_out is None and interval.clock_out is None:
            raise InvalidInterval("clock-out is required to complete an interval")
        if clock_out is not None:
            interval.clock_out = to_utc(clock_out)
        if break_minutes is not None:
            interval.break_minutes = break_minutes

        # Raises InvalidInterval for impossible times
        net_hours(interval.clock_in, interval.clock_out, interval.break_minutes or 0)

        rule_set = await require_rule_set(
            self.rule_sets, interval.worker_id, to_local(interval.clock_in).date()
        )
        interval.rule_set_id = rule_set.id
