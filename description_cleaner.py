"""
Normalization of raw statement descriptions into readable merchant names.
"""
import logging
import re
from typing import Optional

from config import DescriptionRules
from schema import DEFAULT_DESCRIPTION

logger = logging.getLogger(__name__)

_LONG_NUMBER_RE = re.compile(r"\b\d{10,}\b")
_MASKED_CARD_RE = re.compile(r"\*+\s*\*+\s*\*+\s*\d{4}")
_WHITESPACE_RE = re.compile(r"\s+")


class DescriptionCleaner:
    """Strips bank boilerplate from descriptions and extracts the merchant."""

    def __init__(self, rules: Optional[DescriptionRules] = None,
                 remove_transaction_codes: bool = True,
                 extract_merchant_name: bool = True,
                 normalize_whitespace: bool = True,
                 proper_capitalization: bool = True):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.rules = rules or DescriptionRules()
        self.remove_transaction_codes = remove_transaction_codes
        self.extract_merchant_name = extract_merchant_name
        self.normalize_whitespace = normalize_whitespace
        self.proper_capitalization = proper_capitalization

        self._code_patterns = [re.compile(p, re.IGNORECASE) for p in self.rules.code_patterns]
        locations = "|".join(re.escape(token) for token in self.rules.location_tokens)
        self._merchant_patterns = [
            # Name followed by a city or country
            re.compile(rf"^([A-Z0-9\s&'-]+?)\s+(?:{locations})\b"),
            # Name followed by a postal code or terminal number
            re.compile(r"^([A-Z0-9\s&'-]+?)\s+\d{5,}"),
            re.compile(r"^([A-Z0-9\s&'-]{3,30})"),
        ]
        self._minor_words = set(self.rules.minor_words)

    def clean(self, description: str) -> str:
        """
        Clean a raw description.

        Args:
            description: Text from the statement's description column

        Returns:
            A title-cased merchant name or tidied description, never empty
        """
        if not description:
            return DEFAULT_DESCRIPTION

        text = self.remove_bank_prefix(description)
        if self.remove_transaction_codes:
            text = self.remove_codes(text)
        text = self.strip_long_numbers(text)
        if self.extract_merchant_name:
            text = self.extract_merchant(text)
        if self.normalize_whitespace:
            text = _WHITESPACE_RE.sub(" ", text)
        if self.proper_capitalization:
            text = self.apply_capitalization(text)

        text = text.strip()
        if not text:
            self.logger.debug(f"Description {description!r} cleaned to nothing, using default")
            return DEFAULT_DESCRIPTION
        return text

    def remove_bank_prefix(self, text: str) -> str:
        upper = text.upper()
        for prefix in self.rules.bank_prefixes:
            if upper.startswith(prefix):
                text = text[len(prefix):]
                break
        return text.strip()

    def remove_codes(self, text: str) -> str:
        for pattern in self._code_patterns:
            text = pattern.sub("", text)
        return text.strip()

    @staticmethod
    def strip_long_numbers(text: str) -> str:
        text = _LONG_NUMBER_RE.sub("", text)
        text = _MASKED_CARD_RE.sub("", text)
        return text.strip()

    def extract_merchant(self, text: str) -> str:
        for pattern in self._merchant_patterns:
            match = pattern.search(text)
            if match:
                merchant = match.group(1).strip()
                if len(merchant) >= 3:
                    return merchant
        return text

    def apply_capitalization(self, text: str) -> str:
        letters = [c for c in text if c.isalpha()]
        if not letters:
            return text
        if all(c.isupper() for c in letters) or all(c.islower() for c in letters):
            return self.to_title_case(text)
        # Mixed case is assumed to be intentional
        return text

    def to_title_case(self, text: str) -> str:
        words = []
        for i, word in enumerate(text.split()):
            lower = word.lower()
            if i > 0 and lower in self._minor_words:
                words.append(lower)
            else:
                words.append(lower[:1].upper() + lower[1:])
        return " ".join(words)


def clean_description(description: str) -> str:
    return DescriptionCleaner().clean(description)
