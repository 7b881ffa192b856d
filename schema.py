"""
Pydantic schemas for positioned text, column mappings and parsed transactions.
"""
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator

# Amounts are stored as integers scaled by this factor
AMOUNT_SCALE = 10000
DEFAULT_DESCRIPTION = "Imported Transaction"
DEFAULT_CURRENCY = "VND"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class TextElement(BaseModel):
    """A run of text at a position on a PDF page. y grows downward."""
    model_config = ConfigDict(frozen=True)

    x: float = Field(..., description="Left edge of the text run")
    y: float = Field(..., description="Top edge, cumulative across pages")
    text: str
    font_size: float = Field(0.0, ge=0)


class TableRow(BaseModel):
    """A logical row reconstructed from positioned text."""
    model_config = ConfigDict(frozen=True)

    y: float
    cells: List[str] = Field(default_factory=list)
    cell_bounds: List[float] = Field(default_factory=list)


class AmountFormat(BaseModel):
    model_config = ConfigDict(frozen=True)

    decimal_separator: str = Field(".", description="Decimal mark, e.g. '.' or ','")
    thousands_separator: str = Field(",", description="Grouping mark: ',', '.', ' ' or ''")
    currency_symbol: str = ""
    negative_pattern: str = Field("prefix", description="prefix, suffix or parentheses")


class ColumnMapping(BaseModel):
    """Assignment of row cell indexes to transaction fields. -1 means absent."""
    model_config = ConfigDict(frozen=True)

    date_column: int
    amount_column: int = -1
    description_column: int
    type_column: int = -1
    category_column: int = -1
    reference_column: int = -1
    debit_column: int = -1
    credit_column: int = -1
    preferred_date_format: str = ""
    amount_format: Optional[AmountFormat] = None
    currency: str = "VND"

    @model_validator(mode="after")
    def check_required_columns(self):
        if self.date_column < 0:
            raise ValueError("date_column is required")
        if self.description_column < 0:
            raise ValueError("description_column is required")
        if self.amount_column < 0 and not self.has_debit_credit:
            raise ValueError("amount_column or both debit_column and credit_column are required")
        return self

    @property
    def has_debit_credit(self) -> bool:
        return self.debit_column >= 0 and self.credit_column >= 0


class ValidationError(BaseModel):
    """A diagnostic attached to a parsed row."""
    model_config = ConfigDict(frozen=True)

    field: str
    message: str
    severity: Severity = Severity.ERROR


class ParsedRow(BaseModel):
    """Canonical transaction record produced by every ingestor."""
    model_config = ConfigDict(frozen=True)

    row_number: int = Field(..., description="1-based position in the source")
    date: Optional[datetime] = None
    amount: int = Field(0, description="Signed amount scaled by 10000")
    description: str = ""
    original_description: str = ""
    type: Optional[TransactionType] = None
    category_id: Optional[int] = None
    reference_num: str = ""
    validation_errors: List[ValidationError] = Field(default_factory=list)

    @computed_field
    @property
    def is_valid(self) -> bool:
        return not any(e.severity == Severity.ERROR for e in self.validation_errors)

    @property
    def errors(self) -> List[ValidationError]:
        return [e for e in self.validation_errors if e.severity == Severity.ERROR]

    @property
    def warnings(self) -> List[ValidationError]:
        return [e for e in self.validation_errors if e.severity == Severity.WARNING]


class ParseResult(BaseModel):
    """Outcome of one strategy in a fallback cascade."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    value: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Any) -> "ParseResult":
        return cls(value=value)

    @classmethod
    def failure(cls, reason: str) -> "ParseResult":
        return cls(error=reason)


class StatementResult(BaseModel):
    """Rows parsed from one statement plus processing information."""
    transactions: List[ParsedRow]
    total_count: int = Field(..., description="Total number of parsed rows")
    processing_metadata: Optional[dict] = Field(None, description="Processing information")

    @field_validator('total_count')
    @classmethod
    def validate_count(cls, v, info):
        """Ensure count matches actual transaction list length."""
        transactions = info.data.get('transactions')
        if transactions is not None and v != len(transactions):
            return len(transactions)
        return v

    @computed_field
    @property
    def valid_count(self) -> int:
        return sum(1 for row in self.transactions if row.is_valid)
