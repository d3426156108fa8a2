import re

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_iban(iban: str | None) -> str:
    """Canonical form used for own-account lookups: no whitespace, uppercase."""
    if not iban:
        return ""
    return _WHITESPACE_RE.sub("", iban).upper()


def learned_iban_key(iban: str | None) -> str:
    """Key form for learned IBAN mappings: trimmed and uppercased."""
    if not iban:
        return ""
    return iban.strip().upper()


def _compact_lower(value: str) -> str:
    return _WHITESPACE_RE.sub("", value).lower()


def iban_matches(pattern: str, iban: str) -> bool:
    """Check a rule IBAN pattern against a counterparty IBAN.

    The pattern is either a fragment of the IBAN or a domestic account number
    in ``[prefix-]number/bank_code`` notation. For the domestic form the IBAN
    must contain the bank code and either end with the account digits or
    contain prefix, number and bank code separately.
    """
    pattern_norm = _compact_lower(pattern)
    iban_norm = _compact_lower(iban)
    if not pattern_norm or not iban_norm:
        return False

    if pattern_norm in iban_norm:
        return True

    if "/" not in pattern_norm:
        return False

    account, bank_code = pattern_norm.split("/", 1)
    if not account or not bank_code or bank_code not in iban_norm:
        return False

    if "-" in account:
        prefix, number = account.split("-", 1)
    else:
        prefix, number = "", account

    account_digits = account.replace("-", "")
    if iban_norm.endswith(account_digits):
        return True

    # TODO: anchor prefix/number/bank code to their fixed IBAN offsets; loose
    # substring checks can match a short bank code elsewhere in the IBAN.
    parts = [part for part in (prefix, number, bank_code) if part]
    return bool(number) and all(part in iban_norm for part in parts)
