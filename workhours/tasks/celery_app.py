from celery import Celery
from celery.schedules import crontab

from workhours.core.config import settings

celery_app = Celery(
    "workhours",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=["workhours.tasks.payroll_tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=settings.TIMEZONE,
    enable_utc=True,
    beat_schedule={
        # Monthly on the 1st at 07:00: payroll summaries for the previous month
        "monthly-payroll": {
            "task": "workhours.tasks.payroll_tasks.compute_monthly_payrolls",
            "schedule": crontab(hour=7, minute=0, day_of_month=1),
        },
    },
)
