from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from smart_categorizer.api.dependencies import get_engine, get_store
from smart_categorizer.api.schemas import (
    ForgetBulkRequest,
    ForgetRequest,
    LearnedUpdateRequest,
    LearnRequest,
)
from smart_categorizer.logger import get_logger
from smart_categorizer.manager import CategorizationEngine
from smart_categorizer.models import LearnedMapping, Match, ManualSource
from smart_categorizer.services.persistence import EngineStore

logger = get_logger(__name__)

router = APIRouter()


@router.post("/learn", response_model=Match)
async def learn(
    req: LearnRequest,
    engine: Annotated[CategorizationEngine, Depends(get_engine)],
    store: Annotated[EngineStore, Depends(get_store)],
) -> Match:
    if not (req.payee or req.iban):
        raise HTTPException(status_code=400, detail="payee or iban is required")

    engine.learn_from_user(req.payee, req.iban, req.category_id)
    store.save_learned(engine)
    logger.info("[LEARN] payee=%r iban=%r -> %s", req.payee, req.iban, req.category_id)
    return Match(category_id=req.category_id, source=ManualSource())


@router.post("/forget")
async def forget(
    req: ForgetRequest,
    engine: Annotated[CategorizationEngine, Depends(get_engine)],
    store: Annotated[EngineStore, Depends(get_store)],
) -> dict[str, bool]:
    removed = engine.forget_payee(req.payee, req.iban)
    if removed:
        store.save_learned(engine)
        logger.info("[LEARN] Forgot payee=%r iban=%r", req.payee, req.iban)
    return {"removed": removed}


@router.post("/forget/bulk")
async def forget_bulk(
    req: ForgetBulkRequest,
    engine: Annotated[CategorizationEngine, Depends(get_engine)],
    store: Annotated[EngineStore, Depends(get_store)],
) -> dict[str, int]:
    removed = engine.forget_many((entry.payee, entry.iban) for entry in req.entries)
    if removed:
        store.save_learned(engine)
    return {"removed": removed}


@router.get("/learned", response_model=list[LearnedMapping])
async def list_learned(
    engine: Annotated[CategorizationEngine, Depends(get_engine)],
) -> list[LearnedMapping]:
    return engine.learned_mappings()


@router.put("/learned", response_model=Match)
async def update_learned(
    req: LearnedUpdateRequest,
    engine: Annotated[CategorizationEngine, Depends(get_engine)],
    store: Annotated[EngineStore, Depends(get_store)],
) -> Match:
    if not engine.update_learned_category(req.payee, req.iban, req.category_id):
        raise HTTPException(status_code=404, detail="No learned mapping for this payee/IBAN")
    store.save_learned(engine)
    logger.info("[LEARN] Updated payee=%r iban=%r -> %s", req.payee, req.iban, req.category_id)
    return Match(category_id=req.category_id, source=ManualSource())


@router.get("/learned/export")
async def export_learned(
    engine: Annotated[CategorizationEngine, Depends(get_engine)],
) -> dict[str, str]:
    return engine.export_learned_payees()


@router.post("/learned/import")
async def import_learned(
    payees: dict[str, str],
    engine: Annotated[CategorizationEngine, Depends(get_engine)],
    store: Annotated[EngineStore, Depends(get_store)],
) -> dict[str, int]:
    count = engine.import_learned_payees(payees)
    store.save_learned(engine)
    return {"imported": count}
