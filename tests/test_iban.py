import pytest

from smart_categorizer.domain.iban import iban_matches, learned_iban_key, normalize_iban

IBAN = "CZ65 0800 0000 1920 0014 5399"


def test_normalize_iban() -> None:
    assert normalize_iban(" cz65 0800 0000 1920 0014 5399 ") == "CZ6508000000192000145399"
    assert normalize_iban(None) == ""
    assert normalize_iban("") == ""


def test_learned_iban_key_only_trims() -> None:
    assert learned_iban_key("  cz65 0800  ") == "CZ65 0800"
    assert learned_iban_key(None) == ""


@pytest.mark.parametrize(
    "pattern",
    [
        "CZ6508000000192000145399",
        "cz65 0800 0000",
        "192000145399",
        "19-2000145399/0800",
        "192000145399/0800",
    ],
)
def test_iban_matches(pattern: str) -> None:
    assert iban_matches(pattern, IBAN)


@pytest.mark.parametrize(
    "pattern",
    [
        "",
        "   ",
        "CZ9999",
        "19-2000145399/0300",
        "123456/0800",
        "/0800",
    ],
)
def test_iban_does_not_match(pattern: str) -> None:
    assert not iban_matches(pattern, IBAN)


def test_iban_matches_empty_iban() -> None:
    assert not iban_matches("0800", "")
