"""
Monetary amount parsing with locale auto-detection.

Amounts are returned as integers scaled by 10000 so that four decimal places
survive without floating point error.
"""
import logging
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Tuple

from errors import AmountParseError
from schema import AMOUNT_SCALE, AmountFormat

logger = logging.getLogger(__name__)

CURRENCY_SYMBOLS = (
    "₫", "đ", "VND", "VNĐ",
    "$", "USD",
    "€", "EUR",
    "£", "GBP",
    "¥", "JPY", "CNY",
    "₹", "INR",
    "฿", "THB",
    "₩", "KRW",
    "₽", "RUB",
    "R$", "BRL",
    "CHF", "CAD", "AUD", "NZD", "SGD", "HKD",
)
# Longest first so "R$" goes before "$"
_SYMBOLS_BY_LENGTH = sorted(CURRENCY_SYMBOLS, key=len, reverse=True)

_NUMBER_RE = re.compile(r"^-?\d+\.?\d*$")

DEFAULT_FORMAT = AmountFormat(decimal_separator=".", thousands_separator=",")
EUROPEAN_FORMAT = AmountFormat(decimal_separator=",", thousands_separator=".")


class AmountParser:
    """Parses amount strings such as "₫100,000", "(1.234,56)" or "1 234,56-"."""

    def __init__(self, amount_format: Optional[AmountFormat] = None):
        # None means detect the separators from each input
        self.amount_format = amount_format

    def parse(self, amount_str: str) -> int:
        """
        Parse an amount string into a signed integer scaled by 10000.

        Args:
            amount_str: Raw amount text, possibly with currency and sign notation

        Returns:
            Signed scaled integer

        Raises:
            AmountParseError: when the text is empty or not a number
        """
        text = (amount_str or "").strip()
        if not text:
            raise AmountParseError("empty amount")

        text, negative = self.detect_negative(text)
        text = remove_currency_symbols(text).strip()

        amount_format = self.amount_format or detect_format(text)
        value = self._parse_with_format(text, amount_format)

        scaled = int((value * AMOUNT_SCALE).quantize(Decimal(1), rounding=ROUND_HALF_UP))
        return -scaled if negative else scaled

    @staticmethod
    def detect_negative(text: str) -> Tuple[str, bool]:
        """Strip a negative marker. The first notation found wins."""
        if text.startswith("("):
            # Accept a missing closing parenthesis, seen in truncated exports
            text = text[1:]
            if text.endswith(")"):
                text = text[:-1]
            return text.strip(), True

        if text.endswith("-"):
            return text[:-1].strip(), True

        if text.startswith("-"):
            return text[1:].strip(), True

        if text.startswith("+"):
            text = text[1:].strip()

        return text, False

    def _parse_with_format(self, text: str, amount_format: AmountFormat) -> Decimal:
        if amount_format.thousands_separator:
            text = text.replace(amount_format.thousands_separator, "")
        if amount_format.decimal_separator and amount_format.decimal_separator != ".":
            text = text.replace(amount_format.decimal_separator, ".")
        text = text.replace(" ", "")

        if not _NUMBER_RE.match(text):
            raise AmountParseError(f"invalid number format after parsing: {text!r}")

        try:
            return Decimal(text)
        except InvalidOperation as e:
            raise AmountParseError(f"failed to parse number: {text!r}") from e


def remove_currency_symbols(text: str) -> str:
    for symbol in _SYMBOLS_BY_LENGTH:
        text = text.replace(symbol, "")
    return text


def detect_format(text: str) -> AmountFormat:
    """
    Guess decimal and thousands separators from the shape of a number.

    When both '.' and ',' appear the later one is the decimal mark. A single
    separator followed by exactly three digits is read as grouping. Any space
    is taken as the grouping mark.
    """
    dots = text.count(".")
    commas = text.count(",")

    if not dots and not commas:
        detected = DEFAULT_FORMAT
    elif dots and not commas:
        if dots > 1 or len(text) - text.rfind(".") - 1 == 3:
            detected = EUROPEAN_FORMAT
        else:
            detected = DEFAULT_FORMAT
    elif commas and not dots:
        if commas > 1 or len(text) - text.rfind(",") - 1 == 3:
            detected = DEFAULT_FORMAT
        else:
            detected = EUROPEAN_FORMAT
    elif text.rfind(".") > text.rfind(","):
        detected = DEFAULT_FORMAT
    else:
        detected = EUROPEAN_FORMAT

    if " " in text:
        detected = detected.model_copy(update={"thousands_separator": " "})

    logger.debug(f"Detected format for {text!r}: decimal={detected.decimal_separator!r} "
                 f"thousands={detected.thousands_separator!r}")
    return detected


def format_amount(value: int, amount_format: Optional[AmountFormat] = None) -> str:
    """Render a scaled amount back into text using the given separators."""
    amount_format = amount_format or DEFAULT_FORMAT
    negative = value < 0
    quotient, remainder = divmod(abs(value), AMOUNT_SCALE)

    digits = str(quotient)
    if amount_format.thousands_separator:
        groups = []
        while len(digits) > 3:
            groups.insert(0, digits[-3:])
            digits = digits[:-3]
        groups.insert(0, digits)
        digits = amount_format.thousands_separator.join(groups)

    if remainder:
        fraction = f"{remainder:04d}".rstrip("0")
        digits = f"{digits}{amount_format.decimal_separator or '.'}{fraction}"

    if amount_format.currency_symbol:
        digits = f"{amount_format.currency_symbol}{digits}"

    if not negative:
        return digits
    if amount_format.negative_pattern == "parentheses":
        return f"({digits})"
    if amount_format.negative_pattern == "suffix":
        return f"{digits}-"
    return f"-{digits}"


def parse_with_auto_detect(amount_str: str) -> int:
    return AmountParser().parse(amount_str)


def parse_with_format(amount_str: str, decimal_separator: str, thousands_separator: str) -> int:
    amount_format = AmountFormat(decimal_separator=decimal_separator,
                                 thousands_separator=thousands_separator)
    return AmountParser(amount_format).parse(amount_str)
