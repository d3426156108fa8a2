from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class TransactionInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    description: str | None = None
    counterparty: str | None = None
    counterparty_iban: str | None = None
    variable_symbol: str | None = None
    constant_symbol: str | None = None
    specific_symbol: str | None = None
    amount: float = 0.0
    is_credit: bool = False
    bank_account_id: str | None = None

    @classmethod
    def from_text(
        cls,
        id: str,
        description: str | None,
        counterparty: str | None = None,
        amount: float = 0.0,
    ) -> "TransactionInput":
        return cls(
            id=id,
            description=description,
            counterparty=counterparty,
            amount=amount,
            is_credit=amount >= 0.0,
        )

    def combined_text(self) -> str:
        """Description, counterparty and IBAN joined for text matching."""
        parts = [
            part
            for part in (self.description, self.counterparty, self.counterparty_iban)
            if part is not None
        ]
        return " ".join(parts)


class RuleType(str, Enum):
    REGEX = "regex"
    CONTAINS = "contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    VARIABLE_SYMBOL = "variable_symbol"
    CONSTANT_SYMBOL = "constant_symbol"
    SPECIFIC_SYMBOL = "specific_symbol"
    IS_CREDIT = "is_credit"
    IS_DEBIT = "is_debit"

    @classmethod
    def parse(cls, value: str) -> "RuleType":
        key = value.strip().lower()
        resolved = _RULE_TYPE_ALIASES.get(key, key)
        try:
            return cls(resolved)
        except ValueError:
            raise ValueError(f"Unknown rule type: {value}") from None


_RULE_TYPE_ALIASES = {
    "startswith": "starts_with",
    "endswith": "ends_with",
    "vs": "variable_symbol",
    "ks": "constant_symbol",
    "ss": "specific_symbol",
    "credit": "is_credit",
    "debit": "is_debit",
}


class CategorizationRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    rule_type: RuleType
    pattern: str
    category_id: str
    priority: int = 50
    is_active: bool = True
    stop_processing: bool = False
    # When set, the rule matches on counterparty IBAN only and ignores rule_type/pattern.
    iban_pattern: str | None = None
    variable_symbol: str | None = None


class RuleSource(BaseModel):
    type: Literal["rule"] = "rule"
    rule_id: str
    rule_name: str


class ExactMatchSource(BaseModel):
    type: Literal["exact_match"] = "exact_match"
    payee: str


class MachineLearningSource(BaseModel):
    type: Literal["machine_learning"] = "machine_learning"
    confidence: float


class ManualSource(BaseModel):
    type: Literal["manual"] = "manual"


CategorizationSource = Annotated[
    RuleSource | ExactMatchSource | MachineLearningSource | ManualSource,
    Field(discriminator="type"),
]


class Match(BaseModel):
    """Definitive category from a learned mapping or a rule."""
    type: Literal["match"] = "match"
    category_id: str
    source: CategorizationSource

    @property
    def has_category(self) -> bool:
        return True


class Suggestion(BaseModel):
    """Category proposal the user is expected to confirm."""
    type: Literal["suggestion"] = "suggestion"
    category_id: str
    confidence: float # 0.0 to 1.0

    @property
    def has_category(self) -> bool:
        return True


class NoMatch(BaseModel):
    type: Literal["none"] = "none"
    category_id: None = None

    @property
    def has_category(self) -> bool:
        return False


CategorizationResult = Annotated[
    Match | Suggestion | NoMatch,
    Field(discriminator="type"),
]


class LearnedMappingKind(str, Enum):
    PAYEE_DEFAULT = "payee_default"
    IBAN_ONLY_DEFAULT = "iban_only_default"
    IBAN_PARTIAL = "iban_partial"


class LearnedMapping(BaseModel):
    kind: LearnedMappingKind
    key: str
    category_id: str


class TrainingSample(BaseModel):
    text: str
    category_id: str


class EngineStats(BaseModel):
    active_rules: int
    learned_payees: int
    ml_classes: int
    ml_vocabulary_size: int
