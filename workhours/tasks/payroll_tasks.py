"""
Celery tasks for the monthly payroll sweep.
"""
import asyncio
import logging
from datetime import date

from dateutil.relativedelta import relativedelta

from workhours.core.exceptions import ConfigurationError, DependencyUnavailable, InvalidInterval
from workhours.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


def previous_month(today: date) -> tuple[date, date]:
    """First and last day of the month before today."""
    first = today.replace(day=1) - relativedelta(months=1)
    return first, first + relativedelta(months=1, days=-1)


@celery_app.task(
    name="workhours.tasks.payroll_tasks.compute_monthly_payrolls",
    autoretry_for=(DependencyUnavailable,),
    retry_backoff=True,
    max_retries=3,
)
def compute_monthly_payrolls(period_start: str | None = None, period_end: str | None = None):
    """Computes payroll summaries for all active workers (default: previous month)."""
    from workhours.core.database import AsyncSessionLocal

    if period_start and period_end:
        start, end = date.fromisoformat(period_start), date.fromisoformat(period_end)
    else:
        start, end = previous_month(date.today())
    summaries = asyncio.run(compute_payrolls(AsyncSessionLocal, start, end))
    return [s.model_dump(mode="json") for s in summaries]


async def compute_payrolls(session_factory, period_start: date, period_end: date):
    """
    Payroll summary per active worker. A worker whose setup is broken is
    logged and skipped so the rest of the sweep still completes.
    """
    from workhours.services.payroll_calculator import PayrollCalculator
    from workhours.stores.history import SqlHistoryStore
    from workhours.stores.rule_sets import SqlRuleSetStore
    from workhours.stores.workers import SqlWorkerDirectory

    summaries = []
    async with session_factory() as db:
        workers = SqlWorkerDirectory(db)
        calculator = PayrollCalculator(SqlRuleSetStore(db), SqlHistoryStore(db), workers)

        for worker_id in await workers.active_worker_ids():
            try:
                summaries.append(
                    await calculator.compute_payroll(worker_id, period_start, period_end)
                )
            except (ConfigurationError, InvalidInterval) as e:
                logger.error("Payroll error for worker %s: %s", worker_id, e)

    logger.info(
        "Payroll sweep %s..%s: %d summaries", period_start, period_end, len(summaries)
    )
    return summaries
