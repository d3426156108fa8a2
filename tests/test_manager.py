import threading
from unittest.mock import patch

import pytest

from smart_categorizer.classifiers.ml import MLClassifier
from smart_categorizer.errors import (
    InsufficientDataError,
    RuleNotFoundError,
    RuleValidationError,
    SystemRuleError,
)
from smart_categorizer.manager import (
    INTERNAL_TRANSFER_CATEGORY,
    OWN_ACCOUNT_RULE_ID,
    CategorizationEngine,
)
from smart_categorizer.models import (
    CategorizationRule,
    ExactMatchSource,
    Match,
    NoMatch,
    RuleSource,
    RuleType,
    Suggestion,
    TrainingSample,
    TransactionInput,
)

OWN_IBAN = "CZ65 0800 0000 1920 0014 5399"

ALBERT_RULE = CategorizationRule(
    id="albert",
    name="Albert",
    rule_type=RuleType.CONTAINS,
    pattern="albert",
    category_id="cat_groceries",
    priority=50,
)

TRAINING = (
    [TrainingSample(text="albert hypermarket nakup", category_id="cat_groceries")] * 10
    + [TrainingSample(text="lidl supermarket potraviny", category_id="cat_groceries")] * 10
    + [TrainingSample(text="uber eats jidlo", category_id="cat_dining")] * 10
    + [TrainingSample(text="wolt dorucka", category_id="cat_dining")] * 10
)


@pytest.fixture
def engine() -> CategorizationEngine:
    return CategorizationEngine([ALBERT_RULE], ml_min_confidence=0.5)


def test_rule_then_learned_payee(engine: CategorizationEngine) -> None:
    tx = TransactionInput.from_text("1", "Albert Hypermarket Praha 5", amount=-320)

    result = engine.categorize(tx)
    assert result == Match(category_id="cat_groceries", source=RuleSource(rule_id="albert", rule_name="Albert"))

    engine.learn_from_user("Albert", None, "cat_dining")
    learned = engine.categorize(TransactionInput.from_text("2", "Albert Hypermarket Praha 5", counterparty="Albert"))

    assert learned == Match(category_id="cat_dining", source=ExactMatchSource(payee="Albert"))


def test_learned_mapping_beats_own_iban(engine: CategorizationEngine) -> None:
    engine.set_own_ibans([OWN_IBAN])
    tx = TransactionInput(id="1", description="prevod", counterparty_iban=OWN_IBAN)

    first = engine.categorize(tx)
    assert first.category_id == INTERNAL_TRANSFER_CATEGORY
    assert first.source.rule_id == OWN_ACCOUNT_RULE_ID

    engine.learn_from_user(None, OWN_IBAN, "cat_savings")
    assert engine.categorize(tx).category_id == "cat_savings"


def test_own_iban_matches_regardless_of_spacing(engine: CategorizationEngine) -> None:
    engine.set_own_ibans(["cz6508000000192000145399", "", "  "])

    assert engine.own_ibans() == frozenset({"CZ6508000000192000145399"})
    result = engine.categorize(TransactionInput(id="1", description="albert", counterparty_iban=OWN_IBAN))
    assert result.category_id == INTERNAL_TRANSFER_CATEGORY


def test_rule_beats_ml(engine: CategorizationEngine) -> None:
    engine.retrain_ml(TRAINING)
    result = engine.categorize(TransactionInput.from_text("1", "albert uber eats"))
    assert isinstance(result, Match)
    assert result.category_id == "cat_groceries"


def test_ml_suggestion_when_nothing_else_matches(engine: CategorizationEngine) -> None:
    engine.retrain_ml(TRAINING)

    result = engine.categorize(TransactionInput.from_text("1", "Wolt dorucka Praha"))

    assert isinstance(result, Suggestion)
    assert result.category_id == "cat_dining"


def test_no_match(engine: CategorizationEngine) -> None:
    result = engine.categorize(TransactionInput(id="empty"))
    assert result == NoMatch()
    assert not result.has_category


def test_threshold_is_clamped(engine: CategorizationEngine) -> None:
    engine.set_ml_threshold(1.7)
    assert engine.ml_min_confidence == 1.0
    engine.set_ml_threshold(-0.2)
    assert engine.ml_min_confidence == 0.0


def test_high_threshold_suppresses_ml(engine: CategorizationEngine) -> None:
    engine.retrain_ml(TRAINING)
    engine.set_ml_threshold(1.0)
    assert engine.categorize(TransactionInput.from_text("1", "wolt uber")) == NoMatch()


def test_failed_retrain_keeps_model(engine: CategorizationEngine) -> None:
    engine.retrain_ml(TRAINING)
    tx = TransactionInput.from_text("1", "lidl potraviny")
    before = engine.categorize(tx)

    with pytest.raises(InsufficientDataError):
        engine.retrain_ml([("lidl", "cat_groceries")])

    assert engine.categorize(tx) == before


def test_update_rules_is_atomic(engine: CategorizationEngine) -> None:
    new_rule = {
        "id": "lidl",
        "name": "Lidl",
        "rule_type": "contains",
        "pattern": "lidl",
        "category_id": "cat_groceries",
    }
    assert engine.update_rules([new_rule]) == 1
    assert [rule.id for rule in engine.rules()] == ["lidl"]

    with pytest.raises(RuleValidationError):
        engine.update_rules([new_rule, {"id": "broken", "rule_type": "fuzzy"}])

    assert [rule.id for rule in engine.rules()] == ["lidl"]


def test_forget_restores_rule_result(engine: CategorizationEngine) -> None:
    tx = TransactionInput.from_text("1", "nakup", counterparty="Albert")
    engine.learn_from_user("Albert", None, "cat_dining")
    assert engine.categorize(tx).category_id == "cat_dining"

    assert engine.forget_payee("Albert", None) is True
    assert engine.categorize(tx).category_id == "cat_groceries"


def test_export_import_round_trip(engine: CategorizationEngine) -> None:
    engine.learn_from_user("Albert", None, "cat_dining")
    engine.learn_from_user("Lidl", OWN_IBAN, "cat_groceries")
    exported = engine.export_learned_payees()

    other = CategorizationEngine([ALBERT_RULE])
    assert other.import_learned_payees(exported) == 3
    assert other.export_learned_payees() == exported
    assert len(other.learned_mappings()) == 3


def test_load_falls_back_on_bad_model_blob() -> None:
    with patch("smart_categorizer.manager.logger") as mock_logger:
        engine = CategorizationEngine.load(
            [ALBERT_RULE],
            payee_map={"payee_default:albert": "cat_dining"},
            model_blob=b"garbage",
        )

    mock_logger.warning.assert_called_once()
    assert not engine.has_ml_model()
    assert engine.stats().learned_payees == 1


def test_model_blob_round_trip(engine: CategorizationEngine) -> None:
    assert engine.save_ml_model() is None
    engine.retrain_ml(TRAINING)

    restored = CategorizationEngine.load([], model_blob=engine.save_ml_model(), ml_min_confidence=0.5)

    tx = TransactionInput.from_text("1", "uber eats")
    assert restored.categorize(tx) == engine.categorize(tx)


def test_stats(engine: CategorizationEngine) -> None:
    engine.retrain_ml(TRAINING)
    engine.learn_from_user("Albert", None, "cat_dining")

    stats = engine.stats()

    assert stats.active_rules == 1
    assert stats.learned_payees == 1
    assert stats.ml_classes == 2
    assert stats.ml_vocabulary_size > 0


def test_with_defaults_uses_catalog() -> None:
    engine = CategorizationEngine.with_defaults()
    assert engine.stats().active_rules == len(engine.rules()) > 0


def test_categorize_batch(engine: CategorizationEngine) -> None:
    results = engine.categorize_batch([
        TransactionInput.from_text("1", "albert"),
        TransactionInput(id="2"),
    ])
    assert [result.category_id for result in results] == ["cat_groceries", None]


def test_waterfall_precedence_learned_rule_ml(engine: CategorizationEngine) -> None:
    engine.retrain_ml(TRAINING)
    tx = TransactionInput.from_text("1", "Albert hypermarket nakup", counterparty="Albert")
    assert engine._ml_classifier.predict(tx, 0.0).category_id == "cat_groceries"

    engine.learn_from_user("Albert", None, "cat_savings")
    assert engine.categorize(tx) == Match(category_id="cat_savings", source=ExactMatchSource(payee="Albert"))

    engine.forget_payee("Albert", None)
    assert engine.categorize(tx).source == RuleSource(rule_id="albert", rule_name="Albert")

    engine.remove_rule("albert")
    result = engine.categorize(tx)
    assert isinstance(result, Suggestion)
    assert result.category_id == "cat_groceries"


def test_retrain_does_not_block_other_operations(engine: CategorizationEngine) -> None:
    started = threading.Event()
    release = threading.Event()

    def slow_train(samples):
        started.set()
        assert release.wait(timeout=10)

    with patch.object(MLClassifier, "train", side_effect=slow_train):
        worker = threading.Thread(target=engine.retrain_ml, args=(TRAINING,))
        worker.start()
        try:
            assert started.wait(timeout=5)

            assert engine.categorize(TransactionInput.from_text("1", "albert")).category_id == "cat_groceries"
            engine.learn_from_user("Wolt", None, "cat_dining")
            assert engine.update_rules([ALBERT_RULE]) == 1
            assert engine.stats().learned_payees == 1
            assert worker.is_alive()
        finally:
            release.set()
            worker.join(timeout=10)

    assert not worker.is_alive()


def test_update_learned_category_requires_existing_mapping(engine: CategorizationEngine) -> None:
    assert engine.update_learned_category("Albert", None, "cat_dining") is False
    assert engine.stats().learned_payees == 0

    engine.learn_from_user("Albert", None, "cat_groceries")
    assert engine.update_learned_category("ALBERT", None, "cat_dining") is True
    assert engine.export_learned_payees() == {"payee_default:albert": "cat_dining"}


def test_forget_many_counts_removed(engine: CategorizationEngine) -> None:
    engine.learn_from_user("Albert", None, "cat_a")
    engine.learn_from_user(None, OWN_IBAN, "cat_b")

    removed = engine.forget_many([("Albert", None), (None, OWN_IBAN), ("Unknown", None)])

    assert removed == 2
    assert engine.export_learned_payees() == {}


def test_single_rule_crud(engine: CategorizationEngine) -> None:
    coffee = CategorizationRule(
        id="custom_coffee",
        name="Coffee",
        rule_type=RuleType.CONTAINS,
        pattern="kavarna",
        category_id="cat_dining",
        priority=80,
    )

    engine.add_rule(coffee)
    assert [rule.id for rule in engine.custom_rules()] == ["custom_coffee", "albert"]
    assert engine.categorize(TransactionInput.from_text("1", "Kavarna Albert")).category_id == "cat_dining"

    with pytest.raises(RuleValidationError):
        engine.add_rule(coffee)

    updated = engine.replace_rule("custom_coffee", coffee.model_copy(update={"id": "ignored", "priority": 10}))
    assert updated.id == "custom_coffee"
    assert engine.categorize(TransactionInput.from_text("1", "Kavarna Albert")).category_id == "cat_groceries"

    engine.remove_rule("custom_coffee")
    assert [rule.id for rule in engine.rules()] == ["albert"]

    with pytest.raises(RuleNotFoundError):
        engine.remove_rule("custom_coffee")
    with pytest.raises(RuleNotFoundError):
        engine.replace_rule("missing", coffee)


def test_system_rules_cannot_be_edited() -> None:
    engine = CategorizationEngine.with_defaults()
    default_rule = engine.rules()[0]
    count = len(engine.rules())

    with pytest.raises(SystemRuleError):
        engine.remove_rule(default_rule.id)
    with pytest.raises(SystemRuleError):
        engine.replace_rule(default_rule.id, default_rule)
    with pytest.raises(RuleValidationError):
        engine.add_rule(default_rule.model_copy(update={"id": OWN_ACCOUNT_RULE_ID}))

    assert len(engine.rules()) == count
    assert engine.custom_rules() == []
    assert engine.is_system_rule(default_rule.id)
