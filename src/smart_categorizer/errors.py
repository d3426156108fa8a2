class CategorizationError(Exception):
    """Base class for errors raised by the categorization engine."""


class TrainingError(CategorizationError):
    """Training failed; the previously loaded model is still in place."""


class InsufficientDataError(TrainingError):
    def __init__(self, got: int, required: int) -> None:
        super().__init__(f"Need at least {required} samples to train, got {got}")
        self.got = got
        self.required = required


class VocabularyTooSmallError(TrainingError):
    def __init__(self, size: int, required: int) -> None:
        super().__init__(
            f"Vocabulary too small after filtering: {size} terms (need {required})"
        )
        self.size = size
        self.required = required


class ModelLoadError(CategorizationError):
    """A persisted model blob could not be deserialized."""


class RuleValidationError(CategorizationError):
    """A rule update was rejected; the previous rule set is unchanged."""


class RuleNotFoundError(CategorizationError):
    def __init__(self, rule_id: str) -> None:
        super().__init__(f"Rule not found: {rule_id}")
        self.rule_id = rule_id


class SystemRuleError(CategorizationError):
    """Built-in rules come from the catalog and cannot be edited or deleted."""

    def __init__(self, rule_id: str) -> None:
        super().__init__(f"Cannot modify system rule: {rule_id}")
        self.rule_id = rule_id
