import logging
from typing import Optional

from config import TypeKeywords
from schema import TransactionType

logger = logging.getLogger(__name__)


class TypeDetector:
    """Classifies a transaction as income or expense."""

    def __init__(self, keywords: Optional[TypeKeywords] = None):
        self.keywords = keywords or TypeKeywords()

    def detect_type(self, description: str, amount: int, type_hint: str = "") -> TransactionType:
        """
        Decide income or expense for a row.

        Keywords in the description take priority over the amount sign, so a
        "Salary correction" booked as a negative amount is still income. A
        value from the statement's own type column is consulted only when
        the description is silent.
        """
        text = (description or "").lower()

        if any(keyword in text for keyword in self.keywords.income):
            return TransactionType.INCOME
        if any(keyword in text for keyword in self.keywords.expense):
            return TransactionType.EXPENSE

        hint = (type_hint or "").strip().lower()
        if hint:
            if any(word in hint for word in self.keywords.income_hints):
                return TransactionType.INCOME
            if any(word in hint for word in self.keywords.expense_hints):
                return TransactionType.EXPENSE
            logger.debug(f"Unrecognised type hint {type_hint!r}, using amount sign")

        return TransactionType.INCOME if amount >= 0 else TransactionType.EXPENSE

    def is_income(self, description: str, amount: int) -> bool:
        return self.detect_type(description, amount) == TransactionType.INCOME

    def is_expense(self, description: str, amount: int) -> bool:
        return self.detect_type(description, amount) == TransactionType.EXPENSE
