import uuid
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from workhours.core.database import Base


class Worker(Base):
    __tablename__ = "workers"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)

    # Resolves the rule set: the effective version of this category applies
    category: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    hourly_rate: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    rate_history: Mapped[list["WorkerRate"]] = relationship(
        back_populates="worker", cascade="all, delete-orphan", order_by="WorkerRate.valid_from"
    )
    intervals: Mapped[list["WorkedInterval"]] = relationship(back_populates="worker")  # type: ignore[name-defined]


class WorkerRate(Base):
    """Hourly-rate snapshot; payroll uses the one valid at the period start."""

    __tablename__ = "worker_rates"
    __table_args__ = (
        Index("ix_worker_rates_worker_id", "worker_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    worker_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("workers.id", ondelete="CASCADE"), nullable=False
    )

    valid_from: Mapped[date] = mapped_column(Date, nullable=False)
    valid_to: Mapped[date | None] = mapped_column(Date, nullable=True)  # NULL = still valid
    hourly_rate: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    worker: Mapped["Worker"] = relationship(back_populates="rate_history")
