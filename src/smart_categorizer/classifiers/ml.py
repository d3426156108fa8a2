import pickle
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np
from sklearn.naive_bayes import MultinomialNB

from smart_categorizer.domain.tokenizer import extract_ngrams, normalize
from smart_categorizer.errors import (
    InsufficientDataError,
    ModelLoadError,
    VocabularyTooSmallError,
)
from smart_categorizer.logger import get_logger
from smart_categorizer.models import Suggestion, TransactionInput

from .base import Classifier

logger = get_logger(__name__)

MIN_TRAINING_SAMPLES = 10
MIN_VOCABULARY_SIZE = 10
MAX_FEATURES = 5000
MIN_DOCUMENT_FREQUENCY = 2
DEFAULT_MIN_CONFIDENCE = 0.60


@dataclass
class Vocabulary:
    word_to_idx: dict[str, int] = field(default_factory=dict)
    idx_to_word: list[str] = field(default_factory=list)
    document_freq: list[int] = field(default_factory=list)
    idf_weights: np.ndarray = field(default_factory=lambda: np.zeros(0))
    num_documents: int = 0

    def fit(self, documents: Sequence[str], max_features: int, min_df: int) -> "Vocabulary":
        """Build the vocabulary from normalized documents.

        Keeps n-grams seen in at least ``min_df`` documents, at most
        ``max_features`` of them ordered by document frequency. IDF is
        smoothed as ln(1 + N / df), so every weight is positive.
        """
        doc_freq: Counter[str] = Counter()
        for doc in documents:
            doc_freq.update(set(extract_ngrams(doc)))

        terms = [(term, df) for term, df in doc_freq.items() if df >= min_df]
        terms.sort(key=lambda item: (-item[1], item[0]))
        terms = terms[:max_features]

        n_docs = len(documents)
        self.idx_to_word = [term for term, _ in terms]
        self.word_to_idx = {term: idx for idx, term in enumerate(self.idx_to_word)}
        self.document_freq = [df for _, df in terms]
        self.idf_weights = np.array(
            [np.log(1.0 + n_docs / df) for df in self.document_freq], dtype=np.float64
        )
        self.num_documents = n_docs
        return self

    def transform(self, text: str) -> np.ndarray:
        """Raw in-text n-gram counts over the vocabulary."""
        counts = np.zeros(len(self.idx_to_word), dtype=np.float64)
        for ngram in extract_ngrams(text):
            idx = self.word_to_idx.get(ngram)
            if idx is not None:
                counts[idx] += 1.0
        return counts

    def transform_tfidf(self, text: str) -> np.ndarray:
        return self.transform(text) * self.idf_weights

    def get_term(self, idx: int) -> str | None:
        if 0 <= idx < len(self.idx_to_word):
            return self.idx_to_word[idx]
        return None

    def __len__(self) -> int:
        return len(self.idx_to_word)


@dataclass
class ClassifierModel:
    vocabulary: Vocabulary
    label_to_idx: dict[str, int]
    idx_to_label: list[str]
    class_log_prior: np.ndarray
    feature_log_prob: np.ndarray


class MLClassifier(Classifier):
    """TF-IDF weighted multinomial Naive Bayes over word uni/bigrams."""

    def __init__(
        self,
        model: ClassifierModel | None = None,
        min_confidence: float = DEFAULT_MIN_CONFIDENCE,
    ) -> None:
        self.model = model
        self.min_confidence = min_confidence

    @classmethod
    def from_bytes(cls, blob: bytes) -> "MLClassifier":
        try:
            model = pickle.loads(blob)
        except Exception as exc:
            # Corrupt frame headers surface as OverflowError or MemoryError, not UnpicklingError.
            raise ModelLoadError(f"Could not deserialize model: {exc}") from exc
        if not isinstance(model, ClassifierModel):
            raise ModelLoadError(f"Unexpected model payload type: {type(model).__name__}")
        return cls(model=model)

    def to_bytes(self) -> bytes | None:
        if self.model is None:
            return None
        return pickle.dumps(self.model)

    def has_model(self) -> bool:
        return self.model is not None

    def train(self, samples: Sequence[tuple[str, str]]) -> None:
        """Fit a new model from (text, category_id) pairs and swap it in.

        Raises InsufficientDataError or VocabularyTooSmallError; in both cases
        the current model is left untouched.
        """
        if len(samples) < MIN_TRAINING_SAMPLES:
            raise InsufficientDataError(len(samples), MIN_TRAINING_SAMPLES)

        normalized = [normalize(text)[0] for text, _ in samples]

        vocabulary = Vocabulary().fit(normalized, MAX_FEATURES, MIN_DOCUMENT_FREQUENCY)
        if len(vocabulary) < MIN_VOCABULARY_SIZE:
            raise VocabularyTooSmallError(len(vocabulary), MIN_VOCABULARY_SIZE)

        label_to_idx: dict[str, int] = {}
        idx_to_label: list[str] = []
        for _, label in samples:
            if label not in label_to_idx:
                label_to_idx[label] = len(idx_to_label)
                idx_to_label.append(label)

        features = np.vstack([vocabulary.transform_tfidf(text) for text in normalized])
        targets = np.array([label_to_idx[label] for _, label in samples])

        # Laplace smoothing on summed TF-IDF mass:
        # log((sum[c][f] + 1) / (total[c] + n_features)), prior log(count[c] / N).
        nb = MultinomialNB(alpha=1.0, fit_prior=True)
        nb.fit(features, targets)

        self.model = ClassifierModel(
            vocabulary=vocabulary,
            label_to_idx=label_to_idx,
            idx_to_label=idx_to_label,
            class_log_prior=np.asarray(nb.class_log_prior_, dtype=np.float64),
            feature_log_prob=np.asarray(nb.feature_log_prob_, dtype=np.float64),
        )
        logger.info(
            "[ML] Trained on %s samples: %s classes, %s terms",
            len(samples),
            len(idx_to_label),
            len(vocabulary),
        )

    def predict(self, transaction: TransactionInput, min_confidence: float) -> Suggestion | None:
        model = self.model
        if model is None:
            return None

        normalized, _ = normalize(transaction.combined_text())
        if not normalized:
            return None

        features = model.vocabulary.transform_tfidf(normalized)
        if not np.any(features > 0.0):
            return None

        log_scores = model.class_log_prior + model.feature_log_prob @ features
        shifted = np.exp(log_scores - log_scores.max())
        probabilities = shifted / shifted.sum()

        best_idx = int(np.argmax(probabilities))
        confidence = float(probabilities[best_idx])
        if confidence < min_confidence:
            return None

        return Suggestion(category_id=model.idx_to_label[best_idx], confidence=confidence)

    def classify(self, transaction: TransactionInput) -> Suggestion | None:
        return self.predict(transaction, self.min_confidence)

    def num_classes(self) -> int:
        return len(self.model.idx_to_label) if self.model else 0

    def vocabulary_size(self) -> int:
        return len(self.model.vocabulary) if self.model else 0

    def categories(self) -> list[str]:
        return list(self.model.idx_to_label) if self.model else []
