"""
SQL-backed RuleSet store.

Besides the engine's read side (effective_for, get) this store owns rule-set
authoring, so versioning and the one-default-per-category rule are enforced
in one place and in one transaction each.
"""
import logging
import uuid
from datetime import date

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from workhours.core.exceptions import InvalidStateTransition, InvariantViolation, NotFound
from workhours.models.rule_set import RuleSet
from workhours.models.worker import Worker
from workhours.schemas.rule_set import RuleConfig

logger = logging.getLogger(__name__)

# Published versions keep resolving for the dates they covered
PUBLISHED_STATUSES = ("effective", "expired")


class SqlRuleSetStore:

    def __init__(self, db: AsyncSession):
        self.db = db

    # ── Engine read side ─────────────────────────────────────────────────────

    async def effective_for(self, worker_id: uuid.UUID, as_of: date) -> RuleSet | None:
        category = await self.db.scalar(select(Worker.category).where(Worker.id == worker_id))
        if category is None:
            return None
        result = await self.db.execute(
            select(RuleSet)
            .where(
                RuleSet.category == category,
                RuleSet.status.in_(PUBLISHED_STATUSES),
                RuleSet.effective_from <= as_of,
                or_(RuleSet.expires_on.is_(None), RuleSet.expires_on > as_of),
            )
            .order_by(RuleSet.is_default.desc(), RuleSet.effective_from.desc(), RuleSet.version.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get(self, rule_set_id: uuid.UUID) -> RuleSet | None:
        return await self.db.get(RuleSet, rule_set_id)

    # ── Authoring ────────────────────────────────────────────────────────────

    async def list_for_category(self, category: str) -> list[RuleSet]:
        result = await self.db.execute(
            select(RuleSet).where(RuleSet.category == category).order_by(RuleSet.version)
        )
        return list(result.scalars().all())

    async def create_version(
        self,
        category: str,
        name: str,
        rules: RuleConfig,
        effective_from: date,
        expires_on: date | None = None,
    ) -> RuleSet:
        """Adds a new draft version of the category's rules."""
        rule_set = RuleSet(
            category=category,
            version=await self._next_version(category),
            name=name,
            status="draft",
            is_default=False,
            effective_from=effective_from,
            expires_on=expires_on,
            rules=rules.model_dump(mode="json"),
        )
        self.db.add(rule_set)
        await self.db.commit()
        await self.db.refresh(rule_set)
        logger.info("Created rule set %s v%s (%s)", category, rule_set.version, rule_set.id)
        return rule_set

    async def publish(self, rule_set_id: uuid.UUID) -> RuleSet:
        rule_set = await self._require(rule_set_id)
        if rule_set.status != "draft":
            raise InvalidStateTransition("rule set", rule_set.status, "effective")
        rule_set.status = "effective"
        await self.db.commit()
        await self.db.refresh(rule_set)
        return rule_set

    async def revise(
        self,
        rule_set_id: uuid.UUID,
        rules: RuleConfig,
        effective_from: date,
        name: str | None = None,
    ) -> RuleSet:
        """
        Drafts are edited in place. A published version is never touched:
        a successor version takes over from effective_from and the old one
        expires that day (and hands over the default flag).
        """
        current = await self._require(rule_set_id)

        if current.status == "draft":
            current.rules = rules.model_dump(mode="json")
            current.effective_from = effective_from
            if name:
                current.name = name
            await self.db.commit()
            await self.db.refresh(current)
            return current

        if current.status != "effective":
            raise InvalidStateTransition("rule set", current.status, "revised")
        if effective_from <= current.effective_from:
            raise InvariantViolation(
                "a revision must take effect after the version it replaces"
            )
        if current.expires_on is not None and effective_from >= current.expires_on:
            raise InvariantViolation(
                "a revision must take effect before the version it replaces expires"
            )

        successor = RuleSet(
            category=current.category,
            version=await self._next_version(current.category),
            name=name or current.name,
            status="effective",
            is_default=current.is_default,
            effective_from=effective_from,
            expires_on=current.expires_on,
            rules=rules.model_dump(mode="json"),
        )
        current.expires_on = effective_from
        current.status = "expired"
        current.is_default = False
        self.db.add(successor)
        await self.db.commit()
        await self.db.refresh(successor)
        logger.info(
            "Rule set %s v%s superseded by v%s from %s",
            current.category, current.version, successor.version, effective_from,
        )
        return successor

    async def expire(self, rule_set_id: uuid.UUID, on: date) -> RuleSet:
        rule_set = await self._require(rule_set_id)
        if rule_set.status != "effective":
            raise InvalidStateTransition("rule set", rule_set.status, "expired")
        if on <= rule_set.effective_from:
            raise InvariantViolation("expiry must fall after effective_from")
        if rule_set.expires_on is not None and on > rule_set.expires_on:
            raise InvariantViolation("a published expiry can only move earlier")
        rule_set.expires_on = on
        rule_set.status = "expired"
        rule_set.is_default = False
        await self.db.commit()
        await self.db.refresh(rule_set)
        return rule_set

    async def set_default(self, rule_set_id: uuid.UUID) -> RuleSet:
        """Makes this version its category's only default, in a single transaction."""
        rule_set = await self._require(rule_set_id)
        if rule_set.status != "effective":
            raise InvalidStateTransition("rule set", rule_set.status, "default")
        try:
            await self.db.execute(
                update(RuleSet)
                .where(RuleSet.category == rule_set.category, RuleSet.id != rule_set.id)
                .values(is_default=False)
            )
            await self.db.execute(
                update(RuleSet).where(RuleSet.id == rule_set.id).values(is_default=True)
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        await self.db.refresh(rule_set)
        return rule_set

    # ── Helpers ──────────────────────────────────────────────────────────────

    async def _require(self, rule_set_id: uuid.UUID) -> RuleSet:
        rule_set = await self.get(rule_set_id)
        if rule_set is None:
            raise NotFound(f"Rule set {rule_set_id} not found")
        return rule_set

    async def _next_version(self, category: str) -> int:
        current = await self.db.scalar(
            select(func.max(RuleSet.version)).where(RuleSet.category == category)
        )
        return (current or 0) + 1
