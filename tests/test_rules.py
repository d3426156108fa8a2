import logging

import pytest

from smart_categorizer.classifiers.rules import RuleEngine
from smart_categorizer.models import CategorizationRule, RuleSource, RuleType, TransactionInput


def make_rule(rule_id: str, rule_type: RuleType, pattern: str, category_id: str, **kwargs) -> CategorizationRule:
    return CategorizationRule(
        id=rule_id,
        name=f"Rule {rule_id}",
        rule_type=rule_type,
        pattern=pattern,
        category_id=category_id,
        **kwargs,
    )


def test_contains_rule_matches_combined_text() -> None:
    engine = RuleEngine([make_rule("r1", RuleType.CONTAINS, "Albert", "cat_groceries")])
    tx = TransactionInput(id="1", description="Platba kartou", counterparty="ALBERT Praha")

    applied = engine.apply(tx)

    assert applied is not None
    result, stop = applied
    assert result.category_id == "cat_groceries"
    assert result.source == RuleSource(rule_id="r1", rule_name="Rule r1")
    assert stop is False


def test_higher_priority_wins() -> None:
    low = make_rule("low", RuleType.CONTAINS, "uber", "cat_transport", priority=10)
    high = make_rule("high", RuleType.CONTAINS, "uber eats", "cat_dining", priority=90)
    engine = RuleEngine([low, high])

    result = engine.classify(TransactionInput.from_text("1", "UBER EATS objednavka", amount=-250))

    assert result is not None
    assert result.category_id == "cat_dining"


def test_equal_priority_keeps_input_order() -> None:
    first = make_rule("first", RuleType.CONTAINS, "shop", "cat_a")
    second = make_rule("second", RuleType.CONTAINS, "shop", "cat_b")

    result = RuleEngine([first, second]).classify(TransactionInput.from_text("1", "shop"))

    assert result is not None
    assert result.category_id == "cat_a"


def test_inactive_rules_are_skipped() -> None:
    engine = RuleEngine([make_rule("r1", RuleType.CONTAINS, "lidl", "cat_groceries", is_active=False)])
    assert engine.apply(TransactionInput.from_text("1", "LIDL")) is None
    assert engine.active_rule_count() == 0
    assert len(engine) == 1


@pytest.mark.parametrize(
    ("rule_type", "pattern", "description", "expected"),
    [
        (RuleType.STARTS_WITH, "netflix", "NETFLIX.COM", True),
        (RuleType.STARTS_WITH, "netflix", "platba NETFLIX", False),
        (RuleType.ENDS_WITH, "praha", "Billa Praha", True),
        (RuleType.ENDS_WITH, "praha", "Praha Billa", False),
        (RuleType.REGEX, r"^cez\s+prodej", "CEZ Prodej zaloha", True),
        (RuleType.REGEX, r"^cez\s+prodej", "Zaloha CEZ", False),
    ],
)
def test_text_rule_types(rule_type: RuleType, pattern: str, description: str, expected: bool) -> None:
    engine = RuleEngine([make_rule("r1", rule_type, pattern, "cat_x")])
    assert (engine.classify(TransactionInput.from_text("1", description)) is not None) is expected


def test_symbol_rules_require_exact_equality() -> None:
    engine = RuleEngine([
        make_rule("vs", RuleType.VARIABLE_SYMBOL, "1234", "cat_rent"),
        make_rule("ks", RuleType.CONSTANT_SYMBOL, "0308", "cat_services"),
        make_rule("ss", RuleType.SPECIFIC_SYMBOL, "77", "cat_other"),
    ])

    assert engine.classify(TransactionInput(id="1", variable_symbol="1234")).category_id == "cat_rent"
    assert engine.classify(TransactionInput(id="2", constant_symbol="0308")).category_id == "cat_services"
    assert engine.classify(TransactionInput(id="3", specific_symbol="77")).category_id == "cat_other"
    assert engine.classify(TransactionInput(id="4", variable_symbol="12345")) is None


def test_credit_and_debit_rules() -> None:
    engine = RuleEngine([
        make_rule("credit", RuleType.IS_CREDIT, "", "cat_income", priority=20),
        make_rule("debit", RuleType.IS_DEBIT, "", "cat_spending", priority=10),
    ])

    assert engine.classify(TransactionInput.from_text("1", "x", amount=100)).category_id == "cat_income"
    assert engine.classify(TransactionInput.from_text("2", "x", amount=-100)).category_id == "cat_spending"


def test_required_variable_symbol() -> None:
    rule = make_rule("r1", RuleType.CONTAINS, "najem", "cat_housing", variable_symbol="2024")
    engine = RuleEngine([rule])

    assert engine.classify(TransactionInput(id="1", description="najem", variable_symbol="2024")) is not None
    assert engine.classify(TransactionInput(id="2", description="najem", variable_symbol="2025")) is None
    assert engine.classify(TransactionInput(id="3", description="najem")) is None


def test_iban_pattern_ignores_rule_type() -> None:
    rule = make_rule(
        "r1",
        RuleType.CONTAINS,
        "text that never appears",
        "cat_rent",
        iban_pattern="19-2000145399/0800",
    )
    engine = RuleEngine([rule])

    matching = TransactionInput(id="1", description="anything", counterparty_iban="CZ65 0800 0000 1920 0014 5399")
    no_iban = TransactionInput(id="2", description="text that never appears")

    assert engine.classify(matching).category_id == "cat_rent"
    assert engine.classify(no_iban) is None


def test_stop_processing_flag_is_returned() -> None:
    engine = RuleEngine([make_rule("r1", RuleType.CONTAINS, "atm", "cat_cash", stop_processing=True)])
    _, stop = engine.apply(TransactionInput.from_text("1", "ATM vyber"))
    assert stop is True


def test_invalid_regex_never_matches(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        engine = RuleEngine([
            make_rule("bad", RuleType.REGEX, "([unclosed", "cat_bad", priority=90),
            make_rule("good", RuleType.CONTAINS, "unclosed", "cat_good"),
        ])

    assert "invalid regex" in caplog.text
    result = engine.classify(TransactionInput.from_text("1", "([unclosed"))
    assert result is not None
    assert result.category_id == "cat_good"


def test_empty_transaction_matches_nothing() -> None:
    engine = RuleEngine([make_rule("r1", RuleType.CONTAINS, "x", "cat_x")])
    assert engine.apply(TransactionInput(id="1")) is None


def test_rule_type_parse_aliases() -> None:
    assert RuleType.parse("StartsWith") is RuleType.STARTS_WITH
    assert RuleType.parse("vs") is RuleType.VARIABLE_SYMBOL
    assert RuleType.parse(" debit ") is RuleType.IS_DEBIT
    with pytest.raises(ValueError, match="Unknown rule type"):
        RuleType.parse("fuzzy")
