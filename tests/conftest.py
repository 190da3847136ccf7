"""
Shared pytest fixtures for the work-hours backend tests.

Uses SQLite in-memory with StaticPool so all sessions share one connection,
meaning data written in one session is visible to others (important for HTTP client tests).
Timestamps are UTC and settings.TIMEZONE is UTC, so local dates equal UTC dates.
"""
import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

import workhours.models  # noqa – registers all SQLAlchemy models with Base.metadata
from workhours.core.database import Base, get_db
from workhours.main import app
from workhours.models.rule_set import RuleSet
from workhours.models.worked_interval import ScheduledShift, WorkedInterval
from workhours.models.worker import Worker

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Sunday 2025-09-07 starts the test week (weeks start on Sunday)
WEEK_START = date(2025, 9, 7)
MONDAY = date(2025, 9, 8)

BASE_RULES = {
    "hours": {
        "standard_hours_per_week": 40,
        "max_hours_per_day": 10,
        "max_hours_per_week": 48,
        "rates": {"standard_overtime": 1.5, "premium_overtime": 2.0},
    },
    "breaks": {
        "min_break_minutes": 30,
        "max_work_without_break": 6,
        "lunch_required": False,
        "rest_between_shifts": 11,
    },
    "scheduling": {
        "max_consecutive_days": 6,
        "min_rest_days_per_week": 1,
        "advance_notice_hours": 24,
    },
}


def at(day: date, hour: int, minute: int = 0) -> datetime:
    """UTC timestamp on day at hour:minute."""
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=timezone.utc)


def rules_with(**sections) -> dict:
    """BASE_RULES with the given sections' keys overridden."""
    merged = {k: dict(v) for k, v in BASE_RULES.items()}
    for section, values in sections.items():
        merged[section].update(values)
    return merged


# ── Shared engine (function-scoped: fresh DB per test) ───────────────────────

@pytest_asyncio.fixture
async def engine():
    """Creates a fresh in-memory SQLite engine per test with a shared connection pool."""
    eng = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,          # single shared connection → all sessions see same data
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine) -> AsyncSession:
    """Async DB session for direct data inspection inside tests."""
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


# ── HTTP client fixture ───────────────────────────────────────────────────────

@pytest_asyncio.fixture
async def client(engine) -> AsyncClient:
    """
    FastAPI test client with get_db overridden to use the test engine.
    Each request gets its own session (proper handling) but shares the same
    underlying connection via StaticPool.
    """
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()


# ── Worker + rule set fixtures ────────────────────────────────────────────────

async def make_worker(db, category: str = "full_time", hourly_rate: str = "20.00", **kwargs) -> Worker:
    w = Worker(
        id=uuid.uuid4(),
        first_name=kwargs.pop("first_name", "Anna"),
        last_name=kwargs.pop("last_name", "Muster"),
        category=category,
        hourly_rate=Decimal(hourly_rate),
        is_active=kwargs.pop("is_active", True),
        **kwargs,
    )
    db.add(w)
    await db.commit()
    await db.refresh(w)
    return w


async def make_rule_set(
    db,
    rules: dict | None = None,
    category: str = "full_time",
    version: int = 1,
    effective_from: date = date(2025, 1, 1),
    expires_on: date | None = None,
    status: str = "effective",
    is_default: bool = True,
) -> RuleSet:
    rs = RuleSet(
        id=uuid.uuid4(),
        category=category,
        version=version,
        name=f"{category} v{version}",
        status=status,
        is_default=is_default,
        effective_from=effective_from,
        expires_on=expires_on,
        rules=rules or BASE_RULES,
    )
    db.add(rs)
    await db.commit()
    await db.refresh(rs)
    return rs


async def add_interval(
    db,
    worker: Worker,
    clock_in: datetime,
    clock_out: datetime | None,
    break_minutes: int = 0,
    status: str = "completed",
    rule_set: RuleSet | None = None,
) -> WorkedInterval:
    interval = WorkedInterval(
        id=uuid.uuid4(),
        worker_id=worker.id,
        rule_set_id=rule_set.id if rule_set else None,
        clock_in=clock_in,
        clock_out=clock_out,
        break_minutes=break_minutes,
        status=status,
    )
    db.add(interval)
    await db.commit()
    await db.refresh(interval)
    return interval


async def add_scheduled(
    db, worker: Worker, starts_at: datetime, ends_at: datetime, status: str = "planned"
) -> ScheduledShift:
    shift = ScheduledShift(
        id=uuid.uuid4(),
        worker_id=worker.id,
        starts_at=starts_at,
        ends_at=ends_at,
        break_minutes=0,
        status=status,
    )
    db.add(shift)
    await db.commit()
    await db.refresh(shift)
    return shift


async def add_full_days(db, worker: Worker, first: date, count: int, hours: int = 8, status: str = "completed"):
    """One 08:00 shift of `hours` length on each of `count` days from first."""
    for offset in range(count):
        day = first + timedelta(days=offset)
        await add_interval(db, worker, at(day, 8), at(day, 8 + hours), status=status)


@pytest_asyncio.fixture
async def worker(db) -> Worker:
    return await make_worker(db)


@pytest_asyncio.fixture
async def rule_set(db) -> RuleSet:
    return await make_rule_set(db)


@pytest.fixture
def no_holidays():
    from workhours.utils.holidays import NoHolidays
    return NoHolidays()
