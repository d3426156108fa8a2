from collections.abc import Mapping

from smart_categorizer.domain.iban import learned_iban_key
from smart_categorizer.domain.tokenizer import normalize_payee, simple_normalize
from smart_categorizer.logger import get_logger
from smart_categorizer.models import (
    ExactMatchSource,
    LearnedMapping,
    LearnedMappingKind,
    Match,
    Suggestion,
    TransactionInput,
)

from .base import Classifier

logger = get_logger(__name__)

PAYEE_DEFAULT_PREFIX = "payee_default:"
IBAN_ONLY_DEFAULT_PREFIX = "iban_only_default:"
IBAN_PARTIAL_PREFIX = "iban_partial:"

IBAN_PARTIAL_CONFIDENCE = 0.70
MIN_PAYEE_LENGTH = 3


def payee_key(payee: str | None) -> str | None:
    if not payee:
        return None
    normalized = simple_normalize(payee)
    if len(normalized) < MIN_PAYEE_LENGTH:
        return None
    return normalized


def iban_key(iban: str | None) -> str | None:
    return learned_iban_key(iban) or None


class ExactMatchEngine(Classifier):
    """Learned payee/IBAN -> category lookups.

    Three tables, highest precedence first:

    * iban-only default: any payment to/from this IBAN
    * payee default: any payment with this counterparty name
    * iban partial: remembered first category for an IBAN, offered only as a
      suggestion
    """

    def __init__(self) -> None:
        self.payee_defaults: dict[str, str] = {}
        self.iban_defaults: dict[str, str] = {}
        self.iban_partials: dict[str, str] = {}

    @classmethod
    def from_map(cls, mapping: Mapping[str, str]) -> "ExactMatchEngine":
        engine = cls()
        engine.import_map(mapping)
        return engine

    def learn(self, payee: str | None, iban: str | None, category_id: str) -> None:
        p_key = payee_key(payee)
        i_key = iban_key(iban)
        matched_payee = self._matched_payee_key(payee)

        if i_key is not None and i_key in self.iban_defaults:
            self.iban_defaults[i_key] = category_id
        elif matched_payee is not None:
            if i_key is not None:
                # The payee is now known by its account; the IBAN rule replaces it.
                del self.payee_defaults[matched_payee]
                self.iban_defaults[i_key] = category_id
                logger.debug("[EXACT] Promoted payee '%s' to IBAN %s -> %s", matched_payee, i_key, category_id)
            else:
                self.payee_defaults[matched_payee] = category_id
        elif i_key is not None:
            self.iban_defaults[i_key] = category_id
        elif p_key is not None:
            self.payee_defaults[p_key] = category_id
        else:
            return

        if i_key is not None:
            self.iban_partials.setdefault(i_key, category_id)

        logger.debug("[EXACT] Learned payee=%r iban=%r -> %s", p_key, i_key, category_id)

    def has_mapping(self, payee: str | None, iban: str | None) -> bool:
        """True when learn() with these arguments would recategorize an existing entry."""
        i_key = iban_key(iban)
        if i_key is not None and i_key in self.iban_defaults:
            return True
        return self._matched_payee_key(payee) is not None

    def forget(self, payee: str | None, iban: str | None) -> bool:
        i_key = iban_key(iban)
        if i_key is not None and i_key in self.iban_defaults:
            del self.iban_defaults[i_key]
            # Drop the paired partial too, or it would keep suggesting the old category.
            self.iban_partials.pop(i_key, None)
            return True

        matched_payee = self._matched_payee_key(payee)
        if matched_payee is not None:
            del self.payee_defaults[matched_payee]
            return True

        return False

    def apply(self, transaction: TransactionInput) -> Match | Suggestion | None:
        i_key = iban_key(transaction.counterparty_iban)
        if i_key is not None and i_key in self.iban_defaults:
            return Match(
                category_id=self.iban_defaults[i_key],
                source=ExactMatchSource(payee=transaction.counterparty or i_key),
            )

        matched_payee = self._matched_payee_key(transaction.counterparty)
        if matched_payee is not None:
            return Match(
                category_id=self.payee_defaults[matched_payee],
                source=ExactMatchSource(payee=transaction.counterparty or ""),
            )

        if i_key is not None and i_key in self.iban_partials:
            return Suggestion(
                category_id=self.iban_partials[i_key],
                confidence=IBAN_PARTIAL_CONFIDENCE,
            )

        return None

    def classify(self, transaction: TransactionInput) -> Match | Suggestion | None:
        return self.apply(transaction)

    def _matched_payee_key(self, payee: str | None) -> str | None:
        """The payee-default key that a counterparty name resolves to, if any."""
        if not payee:
            return None
        simple = simple_normalize(payee)
        if simple in self.payee_defaults:
            return simple
        # "Albert CZ s.r.o." finds a mapping learned as "Albert CZ".
        stripped = normalize_payee(payee)
        return stripped if stripped in self.payee_defaults else None

    def knows_payee(self, payee: str) -> bool:
        return simple_normalize(payee) in self.payee_defaults

    def get_category(self, payee: str) -> str | None:
        return self.payee_defaults.get(simple_normalize(payee))

    def entries(self) -> list[LearnedMapping]:
        tables = (
            (LearnedMappingKind.IBAN_ONLY_DEFAULT, self.iban_defaults),
            (LearnedMappingKind.PAYEE_DEFAULT, self.payee_defaults),
            (LearnedMappingKind.IBAN_PARTIAL, self.iban_partials),
        )
        return [
            LearnedMapping(kind=kind, key=key, category_id=category_id)
            for kind, table in tables
            for key, category_id in sorted(table.items())
        ]

    def export(self) -> dict[str, str]:
        exported: dict[str, str] = {}
        for key, category_id in self.payee_defaults.items():
            exported[PAYEE_DEFAULT_PREFIX + key] = category_id
        for key, category_id in self.iban_defaults.items():
            exported[IBAN_ONLY_DEFAULT_PREFIX + key] = category_id
        for key, category_id in self.iban_partials.items():
            exported[IBAN_PARTIAL_PREFIX + key] = category_id
        return exported

    def import_map(self, mapping: Mapping[str, str]) -> None:
        """Replace all learned state with an exported map."""
        payee_defaults: dict[str, str] = {}
        iban_defaults: dict[str, str] = {}
        iban_partials: dict[str, str] = {}

        for raw_key, category_id in mapping.items():
            if raw_key.startswith(IBAN_ONLY_DEFAULT_PREFIX):
                key = iban_key(raw_key[len(IBAN_ONLY_DEFAULT_PREFIX):])
                target = iban_defaults
            elif raw_key.startswith(IBAN_PARTIAL_PREFIX):
                key = iban_key(raw_key[len(IBAN_PARTIAL_PREFIX):])
                target = iban_partials
            elif raw_key.startswith(PAYEE_DEFAULT_PREFIX):
                key = payee_key(raw_key[len(PAYEE_DEFAULT_PREFIX):])
                target = payee_defaults
            else:
                # Unprefixed keys come from older exports that only knew payees.
                key = payee_key(raw_key)
                target = payee_defaults

            if key is None:
                logger.warning("[EXACT] Skipping unusable learned mapping key %r", raw_key)
                continue
            target[key] = category_id

        self.payee_defaults = payee_defaults
        self.iban_defaults = iban_defaults
        self.iban_partials = iban_partials

    def merge(self, other: "ExactMatchEngine") -> None:
        """Add the other engine's mappings; existing keys win."""
        for mine, theirs in self._table_pairs(other):
            for key, category_id in theirs.items():
                mine.setdefault(key, category_id)

    def merge_overwrite(self, other: "ExactMatchEngine") -> None:
        """Add the other engine's mappings; the other side wins on conflicts."""
        for mine, theirs in self._table_pairs(other):
            mine.update(theirs)

    def _table_pairs(
        self, other: "ExactMatchEngine"
    ) -> tuple[tuple[dict[str, str], dict[str, str]], ...]:
        return (
            (self.payee_defaults, other.payee_defaults),
            (self.iban_defaults, other.iban_defaults),
            (self.iban_partials, other.iban_partials),
        )

    def clear(self) -> None:
        self.payee_defaults = {}
        self.iban_defaults = {}
        self.iban_partials = {}

    def __len__(self) -> int:
        return len(self.payee_defaults) + len(self.iban_defaults) + len(self.iban_partials)
