from collections.abc import Iterable, Sequence
from time import perf_counter
from typing import Any

from smart_categorizer.catalog.training_data import generate_training_data
from smart_categorizer.errors import TrainingError
from smart_categorizer.logger import get_logger
from smart_categorizer.manager import CategorizationEngine
from smart_categorizer.models import TrainingSample, TransactionInput
from smart_categorizer.services.persistence import EngineStore

logger = get_logger(__name__)


def samples_from_history(
    records: Iterable[tuple[TransactionInput, str | None]],
) -> list[TrainingSample]:
    """Turn already-categorized transactions into training samples.

    Uncategorized records and records without any text are skipped.
    """
    samples: list[TrainingSample] = []
    for transaction, category_id in records:
        if not category_id:
            continue
        text = transaction.combined_text().strip()
        if not text:
            continue
        samples.append(TrainingSample(text=text, category_id=category_id))
    return samples


def synthetic_samples() -> list[TrainingSample]:
    return [
        TrainingSample(text=text, category_id=category_id)
        for text, category_id in generate_training_data()
    ]


class TrainingService:
    def __init__(self, engine: CategorizationEngine, store: EngineStore | None = None) -> None:
        self.engine = engine
        self.store = store

    def retrain(
        self,
        samples: Sequence[TrainingSample],
        *,
        include_synthetic: bool = True,
    ) -> dict[str, Any]:
        """Retrain the model and persist it. TrainingError propagates."""
        corpus = list(samples)
        if include_synthetic:
            corpus.extend(synthetic_samples())

        logger.info(
            "[TRAIN] Retraining on %s samples (%s user, synthetic=%s)",
            len(corpus),
            len(samples),
            include_synthetic,
        )
        start = perf_counter()
        self.engine.retrain_ml(corpus)
        duration = perf_counter() - start

        saved = self.store.save_model(self.engine) if self.store else False
        stats = self.engine.stats()
        logger.info(
            "[TRAIN] Complete in %.2fs. Classes: %s, vocabulary: %s, saved: %s",
            duration,
            stats.ml_classes,
            stats.ml_vocabulary_size,
            saved,
        )
        return {
            "status": "success",
            "samples": len(corpus),
            "user_samples": len(samples),
            "classes": stats.ml_classes,
            "vocabulary_size": stats.ml_vocabulary_size,
            "duration_seconds": round(duration, 3),
            "saved": saved,
        }

    def initialize_from_transactions(self, samples: Sequence[TrainingSample]) -> dict[str, Any]:
        """Startup training from user history; failures are reported, not raised."""
        if not samples:
            logger.info("[TRAIN] No training samples provided, keeping current model")
            return {"status": "skipped", "samples": 0}
        try:
            return self.retrain(samples, include_synthetic=False)
        except TrainingError as exc:
            logger.warning("[TRAIN] Could not initialize ML model: %s", exc)
            return {"status": "failed", "samples": len(samples), "message": str(exc)}
