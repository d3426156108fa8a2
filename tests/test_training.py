from pathlib import Path
from unittest.mock import MagicMock

import pytest

from smart_categorizer.errors import InsufficientDataError
from smart_categorizer.manager import CategorizationEngine
from smart_categorizer.models import TrainingSample, TransactionInput
from smart_categorizer.services.persistence import EngineStore
from smart_categorizer.services.training import (
    TrainingService,
    samples_from_history,
    synthetic_samples,
)


def test_samples_from_history_skips_uncategorized_and_empty() -> None:
    records = [
        (TransactionInput(id="1", description="Albert", counterparty="Albert CZ"), "cat_groceries"),
        (TransactionInput(id="2", description="Wolt"), None),
        (TransactionInput(id="3"), "cat_dining"),
    ]

    samples = samples_from_history(records)

    assert samples == [TrainingSample(text="Albert Albert CZ", category_id="cat_groceries")]


def test_synthetic_samples_are_training_samples() -> None:
    samples = synthetic_samples()
    assert samples
    assert all(isinstance(sample, TrainingSample) for sample in samples)


def test_retrain_with_synthetic_persists_model(tmp_path: Path) -> None:
    engine = CategorizationEngine()
    store = EngineStore(data_dir=str(tmp_path))
    service = TrainingService(engine=engine, store=store)

    summary = service.retrain([TrainingSample(text="moje kavarna", category_id="cat_dining")])

    assert summary["status"] == "success"
    assert summary["user_samples"] == 1
    assert summary["samples"] == len(synthetic_samples()) + 1
    assert summary["saved"] is True
    assert Path(store.model_path).exists()
    assert engine.has_ml_model()


def test_retrain_without_store_does_not_save() -> None:
    service = TrainingService(engine=CategorizationEngine())
    summary = service.retrain([])
    assert summary["saved"] is False
    assert summary["classes"] == 13


def test_retrain_propagates_training_errors() -> None:
    engine = MagicMock()
    engine.retrain_ml.side_effect = InsufficientDataError(1, 10)
    service = TrainingService(engine=engine)

    with pytest.raises(InsufficientDataError):
        service.retrain([TrainingSample(text="x", category_id="y")], include_synthetic=False)


def test_initialize_from_transactions_is_non_fatal() -> None:
    engine = CategorizationEngine()
    service = TrainingService(engine=engine)

    skipped = service.initialize_from_transactions([])
    failed = service.initialize_from_transactions([TrainingSample(text="albert", category_id="cat_a")])

    assert skipped["status"] == "skipped"
    assert failed["status"] == "failed"
    assert "at least 10" in failed["message"]
    assert not engine.has_ml_model()
