"""
Public-holiday calendars for the rule engine.

The engine only sees the HolidayCalendar protocol. By default no holidays are
known (holiday pay is never triggered); a real calendar comes from the
workalendar registry when settings.HOLIDAY_CALENDAR names a region.
"""
import logging
from datetime import date
from functools import lru_cache

from workalendar.registry import registry

from workhours.core.config import settings
from workhours.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class NoHolidays:
    """Calendar without any public holidays."""

    def is_holiday(self, d: date) -> bool:
        return False

    def holiday_name(self, d: date) -> str | None:
        return None


class WorkalendarCalendar:
    """Adapter around a workalendar calendar class, cached per year."""

    def __init__(self, region: str):
        calendar_class = registry.get(region)
        if calendar_class is None:
            raise ConfigurationError(f"Unknown holiday calendar region: {region!r}")
        self.region = region
        self._calendar = calendar_class()
        self._years: dict[int, dict[date, str]] = {}

    def holidays(self, year: int) -> dict[date, str]:
        if year not in self._years:
            self._years[year] = {d: name for d, name in self._calendar.holidays(year)}
        return self._years[year]

    def is_holiday(self, d: date) -> bool:
        return d in self.holidays(d.year)

    def holiday_name(self, d: date) -> str | None:
        return self.holidays(d.year).get(d)


class FixedHolidays:
    """Explicit date → name mapping (company closing days, tests)."""

    def __init__(self, days: dict[date, str]):
        self.days = dict(days)

    def is_holiday(self, d: date) -> bool:
        return d in self.days

    def holiday_name(self, d: date) -> str | None:
        return self.days.get(d)


@lru_cache
def _calendar_for(region: str):
    if not region:
        return NoHolidays()
    logger.info("Using workalendar holiday calendar %s", region)
    return WorkalendarCalendar(region)


def get_calendar():
    """The calendar configured in settings; shared between calls."""
    return _calendar_for(settings.HOLIDAY_CALENDAR)
