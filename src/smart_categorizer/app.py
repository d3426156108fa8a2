from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from smart_categorizer.api.routes import categorize, learned, rules, training
from smart_categorizer.core import settings
from smart_categorizer.logger import get_logger, setup_logging
from smart_categorizer.manager import CategorizationEngine
from smart_categorizer.services.persistence import EngineStore
from smart_categorizer.services.training import TrainingService, synthetic_samples

logger = get_logger(__name__)


def create_app(data_dir: str | None = None) -> FastAPI:
    setup_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Initializing engine...")
        settings.log_environment()

        engine = CategorizationEngine.with_defaults(settings.ML_MIN_CONFIDENCE)
        store = EngineStore(data_dir=data_dir or settings.DATA_DIR)
        store.restore(engine)

        own_ibans = settings.get_env_list("OWN_IBANS")
        if own_ibans:
            engine.set_own_ibans(own_ibans)

        training_service = TrainingService(engine=engine, store=store)
        if not engine.has_ml_model() and settings.get_env_bool("TRAIN_ON_STARTUP"):
            logger.info("[TRAIN] No persisted model, training on the built-in corpus.")
            training_service.initialize_from_transactions(synthetic_samples())

        app.state.engine = engine
        app.state.store = store
        app.state.training = training_service

        stats = engine.stats()
        logger.info(
            "Engine initialized: %s active rules, %s learned payees, %s ML classes.",
            stats.active_rules,
            stats.learned_payees,
            stats.ml_classes,
        )
        yield
        logger.info("Service shutting down.")

    app = FastAPI(title="Smart Categorizer", lifespan=lifespan)

    app.include_router(categorize.router)
    app.include_router(learned.router)
    app.include_router(rules.router)
    app.include_router(training.router)

    return app


app = create_app()
