"""
Time helpers shared by the validators and the payroll calculator.
All persisted timestamps are UTC; calendar questions are answered in settings.TIMEZONE.
"""
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

from workhours.core.config import settings
from workhours.core.exceptions import InvalidInterval

HOURS_QUANTUM = Decimal("0.0001")
MONEY_QUANTUM = Decimal("0.01")

# Night window (23:00–06:00), same boundaries as the night surcharge
NIGHT_START = time(23, 0)
NIGHT_END = time(6, 0)


def local_zone() -> ZoneInfo:
    return ZoneInfo(settings.TIMEZONE)


def to_utc(dt: datetime) -> datetime:
    """Naive datetimes are read as local wall-clock time."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=local_zone())
    return dt.astimezone(timezone.utc)


def to_local(dt: datetime) -> datetime:
    return to_utc(dt).astimezone(local_zone())


def local_day_start(d: date) -> datetime:
    """UTC instant at which the local calendar day d begins."""
    return datetime.combine(d, time.min, tzinfo=local_zone()).astimezone(timezone.utc)


def week_start(d: date) -> date:
    offset = (d.weekday() - settings.WEEK_STARTS_ON) % 7
    return d - timedelta(days=offset)


def week_bounds(dt: datetime) -> tuple[datetime, datetime]:
    """[start, end) of the local week containing dt, as UTC instants."""
    first = week_start(to_local(dt).date())
    return local_day_start(first), local_day_start(first + timedelta(days=7))


def is_weekend(d: date) -> bool:
    return d.weekday() >= 5


def hours(delta: timedelta) -> Decimal:
    seconds = Decimal(int(delta.total_seconds()))
    return (seconds / 3600).quantize(HOURS_QUANTUM)


def net_hours(clock_in: datetime, clock_out: datetime, break_minutes: int = 0) -> Decimal:
    if clock_out <= clock_in:
        raise InvalidInterval(f"clock-out {clock_out.isoformat()} is not after clock-in {clock_in.isoformat()}")
    if break_minutes < 0:
        raise InvalidInterval(f"negative break ({break_minutes} min)")
    gross = hours(clock_out - clock_in)
    result = gross - (Decimal(break_minutes) / 60).quantize(HOURS_QUANTUM)
    if result <= 0:
        raise InvalidInterval(f"break of {break_minutes} min consumes the whole interval")
    return result


def overlaps_night(start: datetime, end: datetime) -> bool:
    """True if [start, end) touches the local 23:00–06:00 window on any day."""
    current = to_local(start)
    stop = to_local(end)
    while current < stop:
        t = current.time()
        if t >= NIGHT_START or t < NIGHT_END:
            return True
        # jump to the next night window start, or stop
        next_night = datetime.combine(current.date(), NIGHT_START, tzinfo=current.tzinfo)
        if next_night <= current:
            next_night += timedelta(days=1)
        current = next_night
    return False


def fmt_hours(value: Decimal) -> str:
    """9.5000 → '9.5', 11.0000 → '11'."""
    return format(value.normalize(), "f")
