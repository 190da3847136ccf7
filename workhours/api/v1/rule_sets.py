"""
Rule set authoring API – versions of a worker category's rules.
"""
import uuid
from datetime import date

from fastapi import APIRouter, Query, status

from workhours.api.deps import RuleSets
from workhours.core.exceptions import NotFound
from workhours.schemas.rule_set import RuleSetCreate, RuleSetOut, RuleSetRevise

router = APIRouter(prefix="/rule-sets", tags=["rule-sets"])


@router.get("", response_model=list[RuleSetOut])
async def list_rule_sets(store: RuleSets, category: str = Query(..., min_length=1)):
    return await store.list_for_category(category)


@router.post("", response_model=RuleSetOut, status_code=status.HTTP_201_CREATED)
async def create_rule_set(payload: RuleSetCreate, store: RuleSets):
    return await store.create_version(
        payload.category,
        payload.name,
        payload.rules,
        payload.effective_from,
        payload.expires_on,
    )


@router.get("/{rule_set_id}", response_model=RuleSetOut)
async def get_rule_set(rule_set_id: uuid.UUID, store: RuleSets):
    rule_set = await store.get(rule_set_id)
    if rule_set is None:
        raise NotFound(f"Rule set {rule_set_id} not found")
    return rule_set


@router.post("/{rule_set_id}/publish", response_model=RuleSetOut)
async def publish_rule_set(rule_set_id: uuid.UUID, store: RuleSets):
    return await store.publish(rule_set_id)


@router.post("/{rule_set_id}/revise", response_model=RuleSetOut)
async def revise_rule_set(rule_set_id: uuid.UUID, payload: RuleSetRevise, store: RuleSets):
    """Drafts change in place; a published version gets a successor and expires."""
    return await store.revise(rule_set_id, payload.rules, payload.effective_from, payload.name)


@router.post("/{rule_set_id}/expire", response_model=RuleSetOut)
async def expire_rule_set(rule_set_id: uuid.UUID, store: RuleSets, on: date = Query(...)):
    return await store.expire(rule_set_id, on)


@router.post("/{rule_set_id}/default", response_model=RuleSetOut)
async def make_default(rule_set_id: uuid.UUID, store: RuleSets):
    return await store.set_default(rule_set_id)
