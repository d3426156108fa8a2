from fastapi import HTTPException, Request

from smart_categorizer.manager import CategorizationEngine
from smart_categorizer.services.persistence import EngineStore
from smart_categorizer.services.training import TrainingService


def get_engine(request: Request) -> CategorizationEngine:
    engine = getattr(request.app.state, "engine", None)
    if not engine:
        raise HTTPException(status_code=500, detail="Engine not initialized")
    return engine


def get_store(request: Request) -> EngineStore:
    store = getattr(request.app.state, "store", None)
    if not store:
        raise HTTPException(status_code=500, detail="Store not initialized")
    return store


def get_training_service(request: Request) -> TrainingService:
    training = getattr(request.app.state, "training", None)
    if not training:
        raise HTTPException(status_code=500, detail="Service not initialized")
    return training
