from pydantic import BaseModel, Field, field_validator

from smart_categorizer.models import (
    CategorizationResult,
    CategorizationRule,
    RuleType,
    TrainingSample,
    TransactionInput,
)


class CategorizeRequest(BaseModel):
    transaction: TransactionInput


class CategorizeBatchRequest(BaseModel):
    transactions: list[TransactionInput]


class CategorizeResponse(BaseModel):
    transaction_id: str
    result: CategorizationResult


class LearnRequest(BaseModel):
    category_id: str
    payee: str | None = None
    iban: str | None = None


class ForgetRequest(BaseModel):
    payee: str | None = None
    iban: str | None = None


class LearnedUpdateRequest(BaseModel):
    category_id: str
    payee: str | None = None
    iban: str | None = None


class ForgetBulkRequest(BaseModel):
    entries: list[ForgetRequest]


class RulesUpdateRequest(BaseModel):
    rules: list[CategorizationRule]


class CustomRuleInput(BaseModel):
    """User-editable rule fields; the id is assigned by the server."""

    name: str
    rule_type: RuleType
    pattern: str
    category_id: str
    priority: int = 50
    is_active: bool = True
    stop_processing: bool = False
    iban_pattern: str | None = None
    variable_symbol: str | None = None

    @field_validator("rule_type", mode="before")
    @classmethod
    def parse_rule_type(cls, value):
        if isinstance(value, str):
            return RuleType.parse(value)
        return value

    def to_rule(self, rule_id: str) -> CategorizationRule:
        return CategorizationRule(id=rule_id, **self.model_dump())


class TrainRequest(BaseModel):
    samples: list[TrainingSample] = Field(default_factory=list)
    include_synthetic: bool = True


class ThresholdRequest(BaseModel):
    threshold: float = Field(ge=0.0, le=1.0)


class OwnIbansRequest(BaseModel):
    ibans: list[str]
