"""
Read interfaces the rule engine depends on, plus the guard every engine read goes through.
"""
import asyncio
import logging
import uuid
from collections.abc import Awaitable, Sequence
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Protocol, TypeVar

from sqlalchemy.exc import SQLAlchemyError

from workhours.core.config import settings
from workhours.core.exceptions import ConfigurationError, DependencyUnavailable

if TYPE_CHECKING:
    from workhours.models.rule_set import RuleSet
    from workhours.models.worked_interval import ScheduledShift, WorkedInterval

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RuleSetStore(Protocol):
    async def effective_for(self, worker_id: uuid.UUID, as_of: date) -> "RuleSet | None": ...

    async def get(self, rule_set_id: uuid.UUID) -> "RuleSet | None": ...


class HistoryStore(Protocol):
    async def intervals_in_range(
        self,
        worker_id: uuid.UUID,
        start: datetime,
        end: datetime,
        statuses: Sequence[str],
    ) -> "list[WorkedInterval]": ...

    async def last_interval_before(
        self, worker_id: uuid.UUID, timestamp: datetime
    ) -> "WorkedInterval | None": ...

    async def scheduled_in_range(
        self, worker_id: uuid.UUID, start: datetime, end: datetime
    ) -> "list[ScheduledShift]": ...

    async def last_scheduled_before(
        self, worker_id: uuid.UUID, timestamp: datetime
    ) -> "ScheduledShift | None": ...


class WorkerDirectory(Protocol):
    async def hourly_rate_for(self, worker_id: uuid.UUID, as_of: date) -> Decimal | None: ...


class HolidayCalendar(Protocol):
    def is_holiday(self, d: date) -> bool: ...

    def holiday_name(self, d: date) -> str | None: ...


async def call_store(dependency: str, call: Awaitable[T]) -> T:
    """
    Await a store read under the configured timeout.

    Driver errors and timeouts become DependencyUnavailable so no caller can
    mistake a dead store for an empty history.
    """
    try:
        return await asyncio.wait_for(call, timeout=settings.STORE_TIMEOUT_SECONDS)
    except asyncio.TimeoutError as exc:
        logger.warning("%s timed out after %ss", dependency, settings.STORE_TIMEOUT_SECONDS)
        raise DependencyUnavailable(dependency, "timed out") from exc
    except (SQLAlchemyError, OSError) as exc:
        logger.warning("%s failed: %s", dependency, exc)
        raise DependencyUnavailable(dependency, str(exc)) from exc


async def require_rule_set(store: RuleSetStore, worker_id: uuid.UUID, as_of: date) -> "RuleSet":
    """Effective rule set for the worker, or ConfigurationError. Never a silent default."""
    rule_set = await call_store("RuleSet store", store.effective_for(worker_id, as_of))
    if rule_set is None:
        raise ConfigurationError(
            f"No effective rule set for worker {worker_id} on {as_of.isoformat()}"
        )
    return rule_set
