from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from workhours.core.database import get_db
from workhours.services.interval_service import IntervalService
from workhours.services.payroll_calculator import PayrollCalculator
from workhours.services.shift_scheduler import ShiftSchedulerValidator
from workhours.services.work_hour_validator import WorkHourValidator
from workhours.stores.history import SqlHistoryStore
from workhours.stores.rule_sets import SqlRuleSetStore
from workhours.stores.workers import SqlWorkerDirectory
from workhours.utils.holidays import get_calendar

DB = Annotated[AsyncSession, Depends(get_db)]


def get_rule_set_store(db: DB) -> SqlRuleSetStore:
    return SqlRuleSetStore(db)


RuleSets = Annotated[SqlRuleSetStore, Depends(get_rule_set_store)]


def get_validator(db: DB, rule_sets: RuleSets) -> WorkHourValidator:
    return WorkHourValidator(rule_sets, SqlHistoryStore(db), get_calendar())


def get_scheduler(db: DB, rule_sets: RuleSets) -> ShiftSchedulerValidator:
    return ShiftSchedulerValidator(rule_sets, SqlHistoryStore(db), get_calendar())


def get_payroll_calculator(db: DB, rule_sets: RuleSets) -> PayrollCalculator:
    history = SqlHistoryStore(db)
    calendar = get_calendar()
    return PayrollCalculator(
        rule_sets,
        history,
        SqlWorkerDirectory(db),
        calendar,
        WorkHourValidator(rule_sets, history, calendar),
    )


def get_interval_service(db: DB, rule_sets: RuleSets) -> IntervalService:
    return IntervalService(db, rule_sets)


Validator = Annotated[WorkHourValidator, Depends(get_validator)]
Scheduler = Annotated[ShiftSchedulerValidator, Depends(get_scheduler)]
Payroll = Annotated[PayrollCalculator, Depends(get_payroll_calculator)]
Intervals = Annotated[IntervalService, Depends(get_interval_service)]
