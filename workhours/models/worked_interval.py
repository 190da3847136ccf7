import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from workhours.core.database import Base, UTCDateTime
from workhours.utils.timeutils import net_hours

# Statuses that count as work already done (weekly totals, rest, consecutive days)
COUNTED_STATUSES = ("completed", "approved", "paid")
# Statuses that are settled for payroll
PAYABLE_STATUSES = ("approved", "paid")


class WorkedInterval(Base):
    __tablename__ = "worked_intervals"
    __table_args__ = (
        Index("ix_worked_intervals_worker_clock_in", "worker_id", "clock_in"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    worker_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("workers.id"), nullable=False)
    # Rule set version in force when the interval was completed
    rule_set_id: Mapped[uuid.UUID | None] = mapped_column(ForeignKey("rule_sets.id"), nullable=True)

    clock_in: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    clock_out: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    break_minutes: Mapped[int] = mapped_column(Integer, default=0)

    status: Mapped[str] = mapped_column(
        String(20), default="active"
    )  # active | completed | approved | rejected | paid
    note: Mapped[str | None] = mapped_column(Text, nullable=True)

    approved_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    worker: Mapped["Worker"] = relationship(back_populates="intervals")  # type: ignore[name-defined]

    @property
    def duration_hours(self) -> Decimal:
        if self.clock_out is None:
            return Decimal("0")
        return net_hours(self.clock_in, self.clock_out, self.break_minutes or 0)


class ScheduledShift(Base):
    """A shift that passed the scheduling gate and was committed by the caller."""

    __tablename__ = "scheduled_shifts"
    __table_args__ = (
        Index("ix_scheduled_shifts_worker_starts_at", "worker_id", "starts_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    worker_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("workers.id"), nullable=False)

    starts_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    ends_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    break_minutes: Mapped[int] = mapped_column(Integer, default=0)

    status: Mapped[str] = mapped_column(String(20), default="planned")  # planned | completed | cancelled

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    @property
    def duration_hours(self) -> Decimal:
        return net_hours(self.starts_at, self.ends_at, self.break_minutes or 0)
