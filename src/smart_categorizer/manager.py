import threading
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from pydantic import TypeAdapter, ValidationError

from smart_categorizer.catalog.default_rules import SYSTEM_RULE_PREFIX, get_default_rules
from smart_categorizer.classifiers.exact_match import ExactMatchEngine
from smart_categorizer.classifiers.ml import DEFAULT_MIN_CONFIDENCE, MLClassifier
from smart_categorizer.classifiers.rules import RuleEngine
from smart_categorizer.domain.iban import normalize_iban
from smart_categorizer.errors import (
    ModelLoadError,
    RuleNotFoundError,
    RuleValidationError,
    SystemRuleError,
)
from smart_categorizer.logger import get_logger
from smart_categorizer.models import (
    CategorizationResult,
    CategorizationRule,
    EngineStats,
    LearnedMapping,
    Match,
    NoMatch,
    RuleSource,
    TrainingSample,
    TransactionInput,
)

logger = get_logger(__name__)

INTERNAL_TRANSFER_CATEGORY = "cat_internal_transfers"
OWN_ACCOUNT_RULE_ID = "system_own_account"
OWN_ACCOUNT_RULE_NAME = "Own account transfer"

_RULES_ADAPTER = TypeAdapter(list[CategorizationRule])


def _clamp_threshold(value: float) -> float:
    return min(max(float(value), 0.0), 1.0)


class CategorizationEngine:
    """Waterfall categorizer: learned mappings, own accounts, rules, then ML.

    Each sub-engine has its own lock, so retraining the model never blocks
    rule updates or learning and the other way round. Rule and model state
    are immutable snapshots replaced by reference, which lets categorize()
    read them without waiting on a writer. The rules lock only serializes
    writers, so two concurrent single-rule edits cannot drop each other.
    """

    def __init__(
        self,
        rules: Sequence[CategorizationRule] | None = None,
        ml_min_confidence: float = DEFAULT_MIN_CONFIDENCE,
    ) -> None:
        self._rule_engine = RuleEngine(list(rules or []))
        self._exact_match = ExactMatchEngine()
        self._ml_classifier = MLClassifier()
        self._own_ibans: frozenset[str] = frozenset()
        self.ml_min_confidence = _clamp_threshold(ml_min_confidence)

        self._rules_lock = threading.Lock()
        self._exact_lock = threading.Lock()
        self._ml_lock = threading.Lock()
        self._own_ibans_lock = threading.Lock()

    @classmethod
    def with_defaults(cls, ml_min_confidence: float = DEFAULT_MIN_CONFIDENCE) -> "CategorizationEngine":
        return cls(get_default_rules(), ml_min_confidence=ml_min_confidence)

    @classmethod
    def load(
        cls,
        rules: Sequence[CategorizationRule],
        payee_map: Mapping[str, str] | None = None,
        model_blob: bytes | None = None,
        ml_min_confidence: float = DEFAULT_MIN_CONFIDENCE,
    ) -> "CategorizationEngine":
        """Build an engine from persisted state.

        A malformed model blob is logged and the engine starts untrained.
        """
        engine = cls(rules, ml_min_confidence=ml_min_confidence)
        if payee_map:
            engine.import_learned_payees(payee_map)
        if model_blob:
            try:
                engine.load_ml_model(model_blob)
            except ModelLoadError as exc:
                logger.warning("Failed to load ML model: %s, using empty classifier", exc)
        return engine

    def set_ml_threshold(self, threshold: float) -> None:
        self.ml_min_confidence = _clamp_threshold(threshold)

    def set_own_ibans(self, ibans: Iterable[str]) -> None:
        normalized = frozenset(key for key in (normalize_iban(iban) for iban in ibans) if key)
        with self._own_ibans_lock:
            self._own_ibans = normalized
        logger.info("Loaded %s own IBANs for internal transfer detection", len(normalized))

    def own_ibans(self) -> frozenset[str]:
        return self._own_ibans

    def categorize(self, transaction: TransactionInput) -> CategorizationResult:
        # 1. Learned mappings: user corrections beat every generic rule.
        with self._exact_lock:
            exact = self._exact_match.apply(transaction)
        if exact is not None:
            logger.debug("[%s] exact match -> %s", transaction.id, exact.category_id)
            return exact

        # 2. Transfers between the user's own accounts.
        own_ibans = self._own_ibans
        iban = normalize_iban(transaction.counterparty_iban)
        if iban and iban in own_ibans:
            logger.debug("[%s] own account IBAN -> %s", transaction.id, INTERNAL_TRANSFER_CATEGORY)
            return Match(
                category_id=INTERNAL_TRANSFER_CATEGORY,
                source=RuleSource(rule_id=OWN_ACCOUNT_RULE_ID, rule_name=OWN_ACCOUNT_RULE_NAME),
            )

        # 3. Rules. stop_processing needs no handling: any rule match ends the waterfall.
        applied = self._rule_engine.apply(transaction)
        if applied is not None:
            result, _stop_processing = applied
            logger.debug("[%s] rule match -> %s", transaction.id, result.category_id)
            return result

        # 4. ML suggestion.
        suggestion = self._ml_classifier.predict(transaction, self.ml_min_confidence)
        if suggestion is not None:
            logger.debug(
                "[%s] ML suggestion -> %s (confidence: %.2f)",
                transaction.id,
                suggestion.category_id,
                suggestion.confidence,
            )
            return suggestion

        logger.debug("[%s] no categorization", transaction.id)
        return NoMatch()

    def categorize_batch(self, transactions: Iterable[TransactionInput]) -> list[CategorizationResult]:
        return [self.categorize(transaction) for transaction in transactions]

    def learn_from_user(self, payee: str | None, iban: str | None, category_id: str) -> None:
        with self._exact_lock:
            self._exact_match.learn(payee, iban, category_id)

    def update_learned_category(self, payee: str | None, iban: str | None, category_id: str) -> bool:
        """Recategorize an existing learned mapping. Returns False if none exists."""
        with self._exact_lock:
            if not self._exact_match.has_mapping(payee, iban):
                return False
            self._exact_match.learn(payee, iban, category_id)
        return True

    def forget_payee(self, payee: str | None, iban: str | None) -> bool:
        with self._exact_lock:
            return self._exact_match.forget(payee, iban)

    def forget_many(self, entries: Iterable[tuple[str | None, str | None]]) -> int:
        with self._exact_lock:
            removed = sum(1 for payee, iban in entries if self._exact_match.forget(payee, iban))
        logger.info("Forgot %s learned mappings", removed)
        return removed

    def learned_mappings(self) -> list[LearnedMapping]:
        with self._exact_lock:
            return self._exact_match.entries()

    def export_learned_payees(self) -> dict[str, str]:
        with self._exact_lock:
            return self._exact_match.export()

    def import_learned_payees(self, payees: Mapping[str, str]) -> int:
        with self._exact_lock:
            self._exact_match.import_map(payees)
            count = len(self._exact_match)
        logger.info("Imported %s learned payee mappings", count)
        return count

    def update_rules(self, rules: Sequence[CategorizationRule | Mapping[str, Any]]) -> int:
        """Replace the whole rule set. Invalid input leaves the old rules active."""
        try:
            validated = _RULES_ADAPTER.validate_python(list(rules))
        except ValidationError as exc:
            raise RuleValidationError(f"Rule update rejected: {exc}") from exc

        with self._rules_lock:
            return self._swap_rules(validated)

    def rules(self) -> list[CategorizationRule]:
        return self._rule_engine.rules()

    @staticmethod
    def is_system_rule(rule_id: str) -> bool:
        return rule_id.startswith(SYSTEM_RULE_PREFIX) or rule_id == OWN_ACCOUNT_RULE_ID

    def custom_rules(self) -> list[CategorizationRule]:
        return [rule for rule in self._rule_engine.rules() if not self.is_system_rule(rule.id)]

    def add_rule(self, rule: CategorizationRule) -> CategorizationRule:
        if self.is_system_rule(rule.id):
            raise RuleValidationError(f"Rule id '{rule.id}' is reserved for system rules")
        with self._rules_lock:
            current = self._rule_engine.rules()
            if any(existing.id == rule.id for existing in current):
                raise RuleValidationError(f"Rule id '{rule.id}' already exists")
            self._swap_rules([*current, rule])
        return rule

    def replace_rule(self, rule_id: str, rule: CategorizationRule) -> CategorizationRule:
        """Replace one custom rule, keeping its id."""
        if self.is_system_rule(rule_id):
            raise SystemRuleError(rule_id)
        rule = rule.model_copy(update={"id": rule_id})
        with self._rules_lock:
            current = self._rule_engine.rules()
            if not any(existing.id == rule_id for existing in current):
                raise RuleNotFoundError(rule_id)
            self._swap_rules([rule if existing.id == rule_id else existing for existing in current])
        return rule

    def remove_rule(self, rule_id: str) -> None:
        if self.is_system_rule(rule_id):
            raise SystemRuleError(rule_id)
        with self._rules_lock:
            current = self._rule_engine.rules()
            remaining = [existing for existing in current if existing.id != rule_id]
            if len(remaining) == len(current):
                raise RuleNotFoundError(rule_id)
            self._swap_rules(remaining)

    def _swap_rules(self, rules: list[CategorizationRule]) -> int:
        # Caller holds _rules_lock.
        new_engine = RuleEngine(rules)
        self._rule_engine = new_engine
        logger.info("Rules updated: %s rules, %s active", len(new_engine), new_engine.active_rule_count())
        return len(new_engine)

    def retrain_ml(self, samples: Sequence[TrainingSample | tuple[str, str]]) -> None:
        """Train a fresh model. TrainingError propagates; the old model stays."""
        pairs = [
            (sample.text, sample.category_id) if isinstance(sample, TrainingSample) else sample
            for sample in samples
        ]
        with self._ml_lock:
            self._ml_classifier.train(pairs)

    def load_ml_model(self, blob: bytes) -> None:
        classifier = MLClassifier.from_bytes(blob)
        with self._ml_lock:
            self._ml_classifier = classifier
        logger.info(
            "ML model loaded: %s classes, %s terms",
            classifier.num_classes(),
            classifier.vocabulary_size(),
        )

    def save_ml_model(self) -> bytes | None:
        return self._ml_classifier.to_bytes()

    def has_ml_model(self) -> bool:
        return self._ml_classifier.has_model()

    def stats(self) -> EngineStats:
        with self._exact_lock:
            learned = len(self._exact_match)
        classifier = self._ml_classifier
        return EngineStats(
            active_rules=self._rule_engine.active_rule_count(),
            learned_payees=learned,
            ml_classes=classifier.num_classes(),
            ml_vocabulary_size=classifier.vocabulary_size(),
        )
