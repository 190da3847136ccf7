import uuid
from datetime import date, datetime, timezone

from sqlalchemy import JSON, Boolean, Date, DateTime, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from workhours.core.database import Base
from workhours.schemas.rule_set import RuleConfig


class RuleSet(Base):
    """
    One immutable version of a category's rules.

    Versions are date ranged: [effective_from, expires_on). Rules of a
    version that left the draft state are never edited; a revision is a new row.
    """

    __tablename__ = "rule_sets"
    __table_args__ = (
        UniqueConstraint("category", "version", name="uq_rule_sets_category_version"),
        Index("ix_rule_sets_category_status", "category", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    status: Mapped[str] = mapped_column(String(20), default="draft")  # draft | effective | expired
    is_default: Mapped[bool] = mapped_column(Boolean, default=False)

    effective_from: Mapped[date] = mapped_column(Date, nullable=False)
    expires_on: Mapped[date | None] = mapped_column(Date, nullable=True)  # exclusive

    rules: Mapped[dict] = mapped_column(JSON, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    @property
    def config(self) -> RuleConfig:
        return RuleConfig.parse(self.rules)
