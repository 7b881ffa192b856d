"""
Shared row handling for the CSV, spreadsheet and PDF ingestors.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, Dict, List, NamedTuple, Optional, Sequence

from amount_parser import AmountParser
from config import DescriptionRules, HeaderKeywords, SummaryKeywords, TypeKeywords
from date_parser import DateParser
from description_cleaner import DescriptionCleaner
from errors import AmountParseError, DateParseError
from schema import DEFAULT_DESCRIPTION, ColumnMapping, ParsedRow, Severity, ValidationError
from type_detector import TypeDetector
from validator import Validator, validate_transaction

logger = logging.getLogger(__name__)


class RowInput(NamedTuple):
    row_number: int
    cells: List[str]
    # Set by the spreadsheet reader when the cell already holds a date
    date_value: Optional[datetime] = None
    # Red font on the amount cell
    negate_amount: bool = False
    # Numeric cells already scaled by 10000, keyed by column index
    amounts: Optional[Dict[int, int]] = None


class RowBuilder:
    """Collects field values and diagnostics before freezing a ParsedRow."""

    def __init__(self, row_number: int):
        self.fields: Dict[str, Any] = {"row_number": row_number}
        self.issues: List[ValidationError] = []

    def add(self, field: str, message: str, severity: Severity = Severity.ERROR):
        self.issues.append(ValidationError(field=field, message=message, severity=severity))

    @property
    def has_errors(self) -> bool:
        return any(issue.severity == Severity.ERROR for issue in self.issues)

    def build(self) -> ParsedRow:
        return ParsedRow(validation_errors=self.issues, **self.fields)


class StatementIngestor:
    """Base class turning raw statement rows into ParsedRows."""

    def __init__(self, mapping: Optional[ColumnMapping] = None,
                 validator: Optional[Validator] = None,
                 type_keywords: Optional[TypeKeywords] = None,
                 description_rules: Optional[DescriptionRules] = None,
                 header_keywords: Optional[HeaderKeywords] = None,
                 summary_keywords: Optional[SummaryKeywords] = None,
                 max_workers: int = 1):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.mapping = mapping
        self.validator = validator or validate_transaction
        self.type_detector = TypeDetector(type_keywords)
        self.cleaner = DescriptionCleaner(description_rules)
        self.header_keywords = header_keywords or HeaderKeywords()
        self.summary_keywords = summary_keywords or SummaryKeywords()
        self.max_workers = max_workers

    # Row filters

    @staticmethod
    def is_empty_row(cells: Sequence[str]) -> bool:
        return all(not str(cell).strip() for cell in cells)

    def is_summary_row(self, cells: Sequence[str], include_footers: bool = False) -> bool:
        text = " ".join(str(cell) for cell in cells).lower()
        keywords = self.summary_keywords.keywords
        if include_footers:
            keywords = keywords + self.summary_keywords.footer_phrases
        return any(keyword in text for keyword in keywords)

    def looks_like_header(self, cells: Sequence[str]) -> bool:
        text = " ".join(str(cell) for cell in cells).lower()
        return any(keyword in text for keyword in self.header_keywords.header_markers)

    # Column detection

    def detect_columns(self, header_cells: Sequence[str], currency: str = "VND") -> Optional[ColumnMapping]:
        """
        Infer a ColumnMapping from header cell text.

        Args:
            header_cells: Cells of the header row
            currency: Currency to attach to the mapping

        Returns:
            The mapping, or None when date, description or amount are missing
        """
        keywords = self.header_keywords
        columns = {"date": -1, "description": -1, "amount": -1, "debit": -1,
                   "credit": -1, "reference": -1, "type": -1, "category": -1}

        def claim(name: str, index: int, text: str, candidates) -> None:
            if columns[name] == -1 and any(k in text for k in candidates):
                columns[name] = index

        for index, cell in enumerate(header_cells):
            text = str(cell).replace("\n", " ").lower().strip()
            if not text:
                continue
            claim("date", index, text, keywords.date)
            claim("description", index, text, keywords.description)
            # Debit and credit take precedence over a generic amount column
            claim("debit", index, text, keywords.debit)
            claim("credit", index, text, keywords.credit)
            if columns["debit"] == -1 and columns["credit"] == -1:
                claim("amount", index, text, keywords.amount)
            claim("reference", index, text, keywords.reference)
            claim("type", index, text, keywords.type)
            claim("category", index, text, keywords.category)

        # A single "Debit/Credit" column is a signed amount column
        if columns["debit"] >= 0 and columns["debit"] == columns["credit"]:
            if columns["amount"] == -1:
                columns["amount"] = columns["debit"]
            columns["debit"] = columns["credit"] = -1

        has_amount = columns["amount"] >= 0
        has_debit_credit = columns["debit"] >= 0 and columns["credit"] >= 0
        if columns["date"] < 0 or columns["description"] < 0 or not (has_amount or has_debit_credit):
            self.logger.debug(f"Header {list(header_cells)} did not resolve to a mapping: {columns}")
            return None

        return ColumnMapping(
            date_column=columns["date"],
            description_column=columns["description"],
            amount_column=columns["amount"] if not has_debit_credit else -1,
            debit_column=columns["debit"] if has_debit_credit else -1,
            credit_column=columns["credit"] if has_debit_credit else -1,
            reference_column=columns["reference"],
            type_column=columns["type"],
            category_column=columns["category"],
            currency=currency,
        )

    # Row parsing

    def parse_rows(self, rows: Sequence[RowInput], mapping: ColumnMapping) -> List[ParsedRow]:
        """Parse rows in source order, optionally on a thread pool."""
        if self.max_workers <= 1 or len(rows) < 2:
            return [self.parse_row(row, mapping) for row in rows]
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            return list(executor.map(lambda row: self.parse_row(row, mapping), rows))

    def parse_row(self, row: RowInput, mapping: ColumnMapping) -> ParsedRow:
        builder = RowBuilder(row.row_number)
        cells = [str(cell).strip() for cell in row.cells]

        self._parse_date(builder, cells, row, mapping)
        self._parse_amount(builder, cells, row, mapping)
        self._parse_description(builder, cells, mapping)

        type_hint = _cell(cells, mapping.type_column)
        builder.fields["type"] = self.type_detector.detect_type(
            builder.fields["description"], builder.fields.get("amount", 0), type_hint)

        if 0 <= mapping.reference_column < len(cells):
            builder.fields["reference_num"] = cells[mapping.reference_column]

        # Category names are resolved to ids outside this package
        if _cell(cells, mapping.category_column):
            builder.fields["category_id"] = 0

        if not builder.has_errors:
            for issue in self.validator(builder.fields.get("amount", 0), mapping.currency,
                                        builder.fields["description"], builder.fields.get("date")):
                builder.issues.append(issue)

        parsed = builder.build()
        if not parsed.is_valid:
            self.logger.debug(f"Row {row.row_number} invalid: {[e.message for e in parsed.errors]}")
        return parsed

    def _parse_date(self, builder: RowBuilder, cells: List[str], row: RowInput, mapping: ColumnMapping):
        if row.date_value is not None:
            builder.fields["date"] = row.date_value
            return
        if mapping.date_column >= len(cells):
            builder.add("date", "Date column index out of range")
            return
        text = cells[mapping.date_column]
        if not text:
            builder.add("date", "Date is required")
            return
        try:
            builder.fields["date"] = DateParser(mapping.preferred_date_format).parse(text)
        except DateParseError as e:
            builder.add("date", f"Invalid date format: {e}")

    def _parse_amount(self, builder: RowBuilder, cells: List[str], row: RowInput, mapping: ColumnMapping):
        parser = AmountParser(mapping.amount_format)
        known = row.amounts or {}

        def amount_at(index: int) -> int:
            if index in known:
                return known[index]
            return parser.parse(cells[index])

        if mapping.has_debit_credit:
            debit = _cell(cells, mapping.debit_column)
            credit = _cell(cells, mapping.credit_column)
            try:
                debit_amount = amount_at(mapping.debit_column) if debit else 0
            except AmountParseError as e:
                builder.add("amount", f"Invalid debit amount format: {e}")
                return
            # Some banks print 0 in the unused column
            if debit_amount:
                builder.fields["amount"] = -abs(debit_amount)
                return
            if not credit:
                if debit:
                    builder.fields["amount"] = 0
                else:
                    builder.add("amount", "Amount is required")
                return
            try:
                builder.fields["amount"] = amount_at(mapping.credit_column)
            except AmountParseError as e:
                builder.add("amount", f"Invalid credit amount format: {e}")
            return

        if mapping.amount_column >= len(cells):
            builder.add("amount", "Amount column index out of range")
            return
        if not cells[mapping.amount_column]:
            builder.add("amount", "Amount is required")
            return
        try:
            amount = amount_at(mapping.amount_column)
        except AmountParseError as e:
            builder.add("amount", f"Invalid amount format: {e}")
            return
        if row.negate_amount and amount > 0:
            amount = -amount
        builder.fields["amount"] = amount

    def _parse_description(self, builder: RowBuilder, cells: List[str], mapping: ColumnMapping):
        if mapping.description_column >= len(cells):
            builder.fields["description"] = DEFAULT_DESCRIPTION
            builder.add("description", "Description column not found", Severity.INFO)
            return
        text = cells[mapping.description_column]
        builder.fields["original_description"] = text
        if not text:
            builder.fields["description"] = DEFAULT_DESCRIPTION
            builder.add("description", "Description is empty, using default", Severity.INFO)
            return
        builder.fields["description"] = self.cleaner.clean(text)


def _cell(cells: Sequence[str], index: int) -> str:
    if 0 <= index < len(cells):
        return cells[index]
    return ""
