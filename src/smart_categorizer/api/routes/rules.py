import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from smart_categorizer.api.dependencies import get_engine, get_store
from smart_categorizer.api.schemas import CustomRuleInput, RulesUpdateRequest
from smart_categorizer.errors import RuleNotFoundError, RuleValidationError, SystemRuleError
from smart_categorizer.logger import get_logger
from smart_categorizer.manager import CategorizationEngine
from smart_categorizer.models import CategorizationRule
from smart_categorizer.services.persistence import EngineStore

logger = get_logger(__name__)

router = APIRouter()


def _rule_error(exc: Exception) -> HTTPException:
    if isinstance(exc, SystemRuleError):
        return HTTPException(status_code=403, detail=str(exc))
    if isinstance(exc, RuleNotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    return HTTPException(status_code=422, detail=str(exc))


@router.get("/rules", response_model=list[CategorizationRule])
async def get_rules(
    engine: Annotated[CategorizationEngine, Depends(get_engine)],
) -> list[CategorizationRule]:
    return engine.rules()


@router.get("/rules/custom", response_model=list[CategorizationRule])
async def get_custom_rules(
    engine: Annotated[CategorizationEngine, Depends(get_engine)],
) -> list[CategorizationRule]:
    return engine.custom_rules()


@router.put("/rules")
async def update_rules(
    req: RulesUpdateRequest,
    engine: Annotated[CategorizationEngine, Depends(get_engine)],
    store: Annotated[EngineStore, Depends(get_store)],
) -> dict[str, int]:
    try:
        count = engine.update_rules(req.rules)
    except RuleValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    store.save_rules(engine)
    return {"rules": count}


@router.post("/rules", response_model=CategorizationRule, status_code=201)
async def create_rule(
    req: CustomRuleInput,
    engine: Annotated[CategorizationEngine, Depends(get_engine)],
    store: Annotated[EngineStore, Depends(get_store)],
) -> CategorizationRule:
    try:
        rule = engine.add_rule(req.to_rule(f"custom_{uuid.uuid4().hex}"))
    except RuleValidationError as exc:
        raise _rule_error(exc) from exc
    store.save_rules(engine)
    logger.info("[RULES] Created rule '%s' (%s)", rule.name, rule.id)
    return rule


@router.put("/rules/{rule_id}", response_model=CategorizationRule)
async def update_rule(
    rule_id: str,
    req: CustomRuleInput,
    engine: Annotated[CategorizationEngine, Depends(get_engine)],
    store: Annotated[EngineStore, Depends(get_store)],
) -> CategorizationRule:
    try:
        rule = engine.replace_rule(rule_id, req.to_rule(rule_id))
    except (SystemRuleError, RuleNotFoundError) as exc:
        raise _rule_error(exc) from exc
    store.save_rules(engine)
    logger.info("[RULES] Updated rule '%s' (%s)", rule.name, rule.id)
    return rule


@router.delete("/rules/{rule_id}")
async def delete_rule(
    rule_id: str,
    engine: Annotated[CategorizationEngine, Depends(get_engine)],
    store: Annotated[EngineStore, Depends(get_store)],
) -> dict[str, str]:
    try:
        engine.remove_rule(rule_id)
    except (SystemRuleError, RuleNotFoundError) as exc:
        raise _rule_error(exc) from exc
    store.save_rules(engine)
    logger.info("[RULES] Deleted rule %s", rule_id)
    return {"deleted": rule_id}
