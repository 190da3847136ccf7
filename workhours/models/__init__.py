from workhours.models.worker import Worker, WorkerRate
from workhours.models.rule_set import RuleSet
from workhours.models.worked_interval import WorkedInterval, ScheduledShift

__all__ = [
    "Worker",
    "WorkerRate",
    "RuleSet",
    "WorkedInterval",
    "ScheduledShift",
]
