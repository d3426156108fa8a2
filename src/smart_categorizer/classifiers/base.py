from abc import ABC, abstractmethod

from smart_categorizer.models import Match, Suggestion, TransactionInput


class Classifier(ABC):
    @abstractmethod
    def classify(self, transaction: TransactionInput) -> Match | Suggestion | None:
        """Attempt to categorize the transaction."""
        pass
