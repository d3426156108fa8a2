"""Text normalization for Czech bank transaction records.

Every function here is pure and total: any string in, a string out, no
exceptions for odd input.
"""
import re
import string
import unicodedata
from dataclasses import dataclass

NUM_TOKEN = "<NUM>"
NGRAM_SEPARATOR = "_"

# Words that carry no signal about the category of a payment.
STOPWORDS = frozenset({
    # payment terms
    "platba", "kartou", "prevod", "prevodu", "transakce", "operace",
    # currency
    "czk", "eur", "usd", "kc", "korun",
    # symbol keys
    "vs", "ss", "ks",
    # message boilerplate
    "zprava", "prijemce", "prichozi", "odchozi",
    # prepositions
    "z", "na", "pro", "od", "do", "a", "v", "ve", "s", "se", "k", "ke", "za", "pri",
    # account terms
    "ucet", "uctu", "bankovni",
    # fillers
    "je", "jsou", "byl", "byla", "bylo", "bude", "cislo",
    # payment types
    "inkaso", "trvaly", "prikaz",
})

# Legal-entity suffixes as they look after simple_normalize ("s.r.o." -> "sro").
COMPANY_SUFFIXES = (
    "s r o", "sro", "a s", "as", "spol", "k s", "ks", "v o s", "vos", "o p s", "ops",
    "se", "z s", "zs", "inc", "ltd", "gmbh", "sp z o o", "sp zoo",
)

PAYMENT_PREFIXES = (
    "bezhotovostni platba",
    "prichozi platba",
    "odchozi platba",
    "platba kartou",
    "trvaly prikaz",
    "platba",
    "prevod",
    "inkaso",
)

_VS_RE = re.compile(r"vs[:\s]*(\d+)", re.IGNORECASE)
_SS_RE = re.compile(r"ss[:\s]*(\d+)", re.IGNORECASE)
_KS_RE = re.compile(r"ks[:\s]*(\d+)", re.IGNORECASE)
_NUM_RE = re.compile(r"\b\d{4,}\b")
_WHITESPACE_RE = re.compile(r"\s+")
_ASCII_WHITESPACE = frozenset(string.whitespace)


@dataclass(frozen=True)
class ExtractedSymbols:
    variable_symbol: str | None = None
    specific_symbol: str | None = None
    constant_symbol: str | None = None

    def has_any(self) -> bool:
        return (
            self.variable_symbol is not None
            or self.specific_symbol is not None
            or self.constant_symbol is not None
        )


def _first_group(pattern: re.Pattern[str], text: str) -> str | None:
    found = pattern.search(text)
    return found.group(1) if found else None


def extract_symbols(text: str) -> ExtractedSymbols:
    return ExtractedSymbols(
        variable_symbol=_first_group(_VS_RE, text),
        specific_symbol=_first_group(_SS_RE, text),
        constant_symbol=_first_group(_KS_RE, text),
    )


def strip_diacritics(text: str) -> str:
    """Decompose to NFD and keep only ASCII letters, digits and whitespace."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(
        char for char in decomposed
        if char.isascii() and (char.isalnum() or char in _ASCII_WHITESPACE)
    )


def normalize(text: str) -> tuple[str, ExtractedSymbols]:
    """Normalize text for ML features and pull out VS/SS/KS symbols.

    Lowercases, extracts payment symbols, strips diacritics and punctuation,
    replaces numbers of four or more digits with ``<NUM>`` and drops
    single-character tokens and stopwords.
    """
    lowered = text.lower()
    symbols = extract_symbols(lowered)

    cleaned = strip_diacritics(lowered)
    cleaned = _NUM_RE.sub(NUM_TOKEN, cleaned)
    cleaned = _WHITESPACE_RE.sub(" ", cleaned)

    tokens = [
        token for token in cleaned.split()
        if len(token) > 1 and token not in STOPWORDS
    ]
    return " ".join(tokens), symbols


def extract_ngrams(text: str) -> list[str]:
    """Unigrams followed by adjacent bigrams joined with ``_``."""
    words = text.split()
    ngrams = list(words)
    ngrams.extend(
        f"{first}{NGRAM_SEPARATOR}{second}" for first, second in zip(words, words[1:])
    )
    return ngrams


def simple_normalize(text: str) -> str:
    """Lowercase, strip diacritics and collapse whitespace. Keeps stopwords."""
    cleaned = strip_diacritics(text.lower())
    return _WHITESPACE_RE.sub(" ", cleaned).strip()


def _strip_leading_phrase(text: str, phrase: str) -> str | None:
    if text == phrase or not text.startswith(phrase + " "):
        return None
    return text[len(phrase):].lstrip()


def _strip_trailing_phrase(text: str, phrase: str) -> str | None:
    if text == phrase or not text.endswith(" " + phrase):
        return None
    return text[:-len(phrase)].rstrip()


def normalize_payee(text: str) -> str:
    """simple_normalize plus removal of bank prefixes and one company suffix.

    >>> normalize_payee("ABC Company s.r.o.")
    'abc company'
    >>> normalize_payee("prevod Albert")
    'albert'
    """
    normalized = simple_normalize(text)

    for prefix in PAYMENT_PREFIXES:
        stripped = _strip_leading_phrase(normalized, prefix)
        if stripped is not None:
            normalized = stripped
            break

    for suffix in COMPANY_SUFFIXES:
        stripped = _strip_trailing_phrase(normalized, suffix)
        if stripped is not None:
            normalized = stripped
            break

    return normalized.strip()
