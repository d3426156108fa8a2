import re
from dataclasses import dataclass

from smart_categorizer.domain.iban import iban_matches
from smart_categorizer.logger import get_logger
from smart_categorizer.models import (
    CategorizationRule,
    Match,
    RuleSource,
    RuleType,
    TransactionInput,
)

from .base import Classifier

logger = get_logger(__name__)


@dataclass(frozen=True)
class CompiledRule:
    rule: CategorizationRule
    regex: re.Pattern[str] | None
    lowercase_pattern: str

    @property
    def iban_exclusive(self) -> bool:
        return bool(self.rule.iban_pattern and self.rule.iban_pattern.strip())


def compile_rule(rule: CategorizationRule) -> CompiledRule:
    regex = None
    if rule.rule_type is RuleType.REGEX:
        try:
            regex = re.compile(rule.pattern)
        except re.error as exc:
            logger.warning(
                "[RULES] Rule '%s' (%s) has an invalid regex %r and will never match: %s",
                rule.name,
                rule.id,
                rule.pattern,
                exc,
            )
    return CompiledRule(rule=rule, regex=regex, lowercase_pattern=rule.pattern.lower())


class RuleEngine(Classifier):
    """Priority-ordered pattern matcher.

    The rule list is an immutable snapshot: edits build a new engine.
    """

    def __init__(self, rules: list[CategorizationRule] | None = None) -> None:
        # sorted() is stable, so equal priorities keep their input order.
        ordered = sorted(rules or [], key=lambda rule: rule.priority, reverse=True)
        self._rules: tuple[CompiledRule, ...] = tuple(compile_rule(rule) for rule in ordered)

    def apply(self, transaction: TransactionInput) -> tuple[Match, bool] | None:
        """Return the first matching rule's result and its stop_processing flag."""
        search_text = transaction.combined_text().lower()

        for compiled in self._rules:
            rule = compiled.rule
            if not rule.is_active:
                continue
            if not self._matches(compiled, transaction, search_text):
                continue
            if rule.variable_symbol and transaction.variable_symbol != rule.variable_symbol:
                continue

            result = Match(
                category_id=rule.category_id,
                source=RuleSource(rule_id=rule.id, rule_name=rule.name),
            )
            return result, rule.stop_processing

        return None

    def classify(self, transaction: TransactionInput) -> Match | None:
        applied = self.apply(transaction)
        return applied[0] if applied else None

    @staticmethod
    def _matches(
        compiled: CompiledRule, transaction: TransactionInput, search_text: str
    ) -> bool:
        rule = compiled.rule

        if compiled.iban_exclusive:
            if not transaction.counterparty_iban:
                return False
            return iban_matches(rule.iban_pattern or "", transaction.counterparty_iban)

        rule_type = rule.rule_type
        if rule_type is RuleType.REGEX:
            return compiled.regex is not None and compiled.regex.search(search_text) is not None
        if rule_type is RuleType.CONTAINS:
            return compiled.lowercase_pattern in search_text
        if rule_type is RuleType.STARTS_WITH:
            return search_text.startswith(compiled.lowercase_pattern)
        if rule_type is RuleType.ENDS_WITH:
            return search_text.endswith(compiled.lowercase_pattern)
        if rule_type is RuleType.VARIABLE_SYMBOL:
            return transaction.variable_symbol == rule.pattern
        if rule_type is RuleType.CONSTANT_SYMBOL:
            return transaction.constant_symbol == rule.pattern
        if rule_type is RuleType.SPECIFIC_SYMBOL:
            return transaction.specific_symbol == rule.pattern
        if rule_type is RuleType.IS_CREDIT:
            return transaction.is_credit
        if rule_type is RuleType.IS_DEBIT:
            return not transaction.is_credit
        raise AssertionError(f"Unhandled rule type: {rule_type}")

    def active_rule_count(self) -> int:
        return sum(1 for compiled in self._rules if compiled.rule.is_active)

    def rules(self) -> list[CategorizationRule]:
        return [compiled.rule for compiled in self._rules]

    def __len__(self) -> int:
        return len(self._rules)
