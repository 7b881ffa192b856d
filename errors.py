"""
Exception types raised while turning statement files into transactions.
"""
from typing import Optional


class StatementParseError(Exception):
    """Base error for a statement that cannot be parsed as a whole."""

    def __init__(self, message: str, suggestion: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion

    def __str__(self):
        if self.suggestion:
            return f"{self.message} ({self.suggestion})"
        return self.message


class DocumentReadError(StatementParseError):
    """The document could not be opened, was empty, or had no usable text."""


class TableDetectionError(StatementParseError):
    """No transaction table could be reconstructed from the document."""


class ColumnMappingError(StatementParseError):
    """Required columns (date, amount, description) could not be located."""


class DateParseError(ValueError):
    pass


class AmountParseError(ValueError):
    pass
