import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from smart_categorizer.api.dependencies import get_engine, get_training_service
from smart_categorizer.api.schemas import OwnIbansRequest, ThresholdRequest, TrainRequest
from smart_categorizer.errors import TrainingError
from smart_categorizer.logger import get_logger
from smart_categorizer.manager import CategorizationEngine
from smart_categorizer.models import EngineStats
from smart_categorizer.services.training import TrainingService

logger = get_logger(__name__)

router = APIRouter()


@router.post("/train")
async def train_model(
    req: TrainRequest,
    training: Annotated[TrainingService, Depends(get_training_service)],
) -> dict:
    try:
        return await asyncio.to_thread(
            training.retrain,
            req.samples,
            include_synthetic=req.include_synthetic,
        )
    except TrainingError as exc:
        logger.warning("[TRAIN] Rejected: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.get("/stats", response_model=EngineStats)
async def get_stats(
    engine: Annotated[CategorizationEngine, Depends(get_engine)],
) -> EngineStats:
    return engine.stats()


@router.put("/settings/threshold")
async def set_threshold(
    req: ThresholdRequest,
    engine: Annotated[CategorizationEngine, Depends(get_engine)],
) -> dict[str, float]:
    engine.set_ml_threshold(req.threshold)
    return {"threshold": engine.ml_min_confidence}


@router.put("/own-ibans")
async def set_own_ibans(
    req: OwnIbansRequest,
    engine: Annotated[CategorizationEngine, Depends(get_engine)],
) -> dict[str, int]:
    engine.set_own_ibans(req.ibans)
    return {"own_ibans": len(engine.own_ibans())}
