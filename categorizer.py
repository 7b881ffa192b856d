import logging
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field
from rapidfuzz import fuzz
from rapidfuzz.distance import Levenshtein

from schema import TransactionType

logger = logging.getLogger(__name__)


class CategorySuggestion(BaseModel):
    """A guessed spending category. Mapping the name to a user's category id happens elsewhere."""
    category: Optional[str] = None
    category_id: int = 0
    confidence: int = Field(0, ge=0, le=100)
    reason: str = "No category match found"


# (category, confidence, keywords) in the order they are tried
DEFAULT_CATEGORY_KEYWORDS: List[Tuple[str, int, Tuple[str, ...]]] = [
    ('food', 80, (
        'restaurant', 'cafe', 'coffee', 'food', 'dining', 'lunch', 'dinner',
        'breakfast', 'pizza', 'burger', 'delivery', 'grab food', 'shopeefood',
        'nhà hàng', 'quán ăn', 'cà phê', 'đồ ăn',
    )),
    ('transportation', 75, (
        'uber', 'grab', 'taxi', 'bus', 'train', 'parking', 'fuel', 'gas',
        'toll', 'vehicle', 'car', 'bike', 'motorcycle', 'xe', 'xăng', 'bãi đỗ',
    )),
    ('shopping', 70, (
        'shop', 'store', 'mall', 'market', 'purchase', 'buy', 'amazon',
        'lazada', 'shopee', 'tiki', 'mua sắm', 'chợ', 'siêu thị',
    )),
    ('entertainment', 75, (
        'movie', 'cinema', 'game', 'netflix', 'spotify', 'youtube',
        'entertainment', 'fun', 'hobby', 'giải trí', 'phim',
    )),
    ('utilities', 85, (
        'electric', 'water', 'internet', 'phone', 'utility', 'bill',
        'electricity', 'gas', 'wifi', 'tiền điện', 'tiền nước', 'cước',
    )),
    ('healthcare', 80, (
        'hospital', 'doctor', 'pharmacy', 'medicine', 'clinic', 'health',
        'medical', 'dental', 'bệnh viện', 'thuốc', 'khám bệnh',
    )),
    ('education', 75, (
        'school', 'university', 'course', 'tuition', 'book', 'education',
        'training', 'học', 'trường', 'khóa học',
    )),
]

INCOME_KEYWORDS = ('salary', 'wage', 'income', 'bonus', 'commission', 'refund',
                   'lương', 'thu nhập', 'thưởng')

FUZZY_THRESHOLD = 80


class CategorySuggester:
    """Suggests a category for a cleaned description using keyword rules."""

    def __init__(self, category_keywords: Optional[List[Tuple[str, int, Tuple[str, ...]]]] = None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.category_keywords = category_keywords or DEFAULT_CATEGORY_KEYWORDS

    def suggest(self, description: str, transaction_type: TransactionType) -> CategorySuggestion:
        """
        Suggest a category.

        Args:
            description: Cleaned transaction description
            transaction_type: Income or expense

        Returns:
            CategorySuggestion with a 0-100 confidence
        """
        desc_lower = (description or '').lower()

        if transaction_type == TransactionType.INCOME:
            if any(keyword in desc_lower for keyword in INCOME_KEYWORDS):
                return CategorySuggestion(category='income', confidence=70,
                                          reason='Income keywords detected in description')
            return CategorySuggestion(category='income', confidence=30, reason='Generic income transaction')

        for category, confidence, keywords in self.category_keywords:
            if any(keyword in desc_lower for keyword in keywords):
                return CategorySuggestion(category=category, confidence=confidence,
                                          reason=f'{category.capitalize()} keywords detected')

        # Misspelt merchant names, e.g. "Restaurent"
        best: Tuple[int, Optional[str]] = (0, None)
        for category, confidence, keywords in self.category_keywords:
            for keyword in keywords:
                if len(keyword) < 5:
                    continue
                score = fuzz.partial_ratio(keyword, desc_lower)
                if score > FUZZY_THRESHOLD and score > best[0]:
                    best = (int(score), category)
        if best[1]:
            self.logger.debug(f"Fuzzy category match {best[1]} ({best[0]}) for {description!r}")
            return CategorySuggestion(category=best[1], confidence=min(best[0], 60),
                                      reason=f'Close match to {best[1]} keywords')

        return CategorySuggestion()

    def suggest_many(self, rows) -> Dict[int, CategorySuggestion]:
        """Suggestions for ParsedRows keyed by row number."""
        return {row.row_number: self.suggest(row.description, row.type) for row in rows}


def levenshtein_distance(s1: str, s2: str) -> int:
    return Levenshtein.distance(s1, s2)
