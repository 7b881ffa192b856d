"""
PDF statement parsing.

The horizontal path rebuilds a row/column table from positioned text. When
that fails, or yields nothing usable, the vertical path treats every text
column as one transaction.
"""
import logging
import re
from typing import List, Optional, Sequence

from amount_parser import AmountParser
from config import TableDetectorConfig, VerticalLayoutConfig
from date_parser import DateParser
from errors import AmountParseError, DateParseError, TableDetectionError
from extractor import RowBuilder, RowInput, StatementIngestor
from pdf_text import TextExtractor, extract_text_elements
from schema import DEFAULT_DESCRIPTION, ParsedRow, Severity, TableRow, TextElement
from table_detector import TableDetector, detect_vertical_table

logger = logging.getLogger(__name__)

FALLBACK_SUGGESTION = "This PDF format may not be supported. Please export as CSV or Excel for better compatibility"

_GROUPED_NUMBER_RE = re.compile(r"\d[.,]\d{3}(?!\d)")
_NUMERIC_CHARS = set("0123456789,. ")


def _is_numeric(text: str) -> bool:
    return all(c in _NUMERIC_CHARS for c in text)


class PdfIngestor(StatementIngestor):
    """Parses text-based PDF statements."""

    def __init__(self, *args, text_extractor: Optional[TextExtractor] = None,
                 detector_config: Optional[TableDetectorConfig] = None,
                 vertical_config: Optional[VerticalLayoutConfig] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.text_extractor = text_extractor or extract_text_elements
        self.detector = TableDetector(detector_config)
        self.vertical_config = vertical_config or VerticalLayoutConfig()
        self.layouts = [
            ("horizontal", self.parse_horizontal),
            ("vertical", self.parse_vertical),
        ]

    def parse(self, data: bytes) -> List[ParsedRow]:
        """
        Parse PDF bytes into transactions.

        Args:
            data: Raw PDF content

        Returns:
            ParsedRows from the horizontal table, or from the vertical layout
            when the horizontal table cannot be used

        Raises:
            DocumentReadError: when the PDF cannot be opened or has no text
            TableDetectionError: when neither layout yields transactions
        """
        elements = self.text_extractor(data)
        return self.parse_elements(elements)

    def parse_elements(self, elements: Sequence[TextElement]) -> List[ParsedRow]:
        """Try each layout in order; the first one with a valid row wins."""
        reasons = []
        fallback_rows: List[ParsedRow] = []
        for name, layout in self.layouts:
            try:
                rows = layout(elements)
            except TableDetectionError as e:
                reasons.append(f"{name}: {e}")
                self.logger.info(f"{name.capitalize()} layout not usable ({e})")
                continue
            if any(row.is_valid for row in rows):
                return rows
            reasons.append(f"{name}: no valid rows")
            self.logger.info(f"{name.capitalize()} layout produced no valid rows")
            fallback_rows = fallback_rows or rows

        if fallback_rows:
            self.logger.warning(f"No layout produced valid rows, keeping {len(fallback_rows)} invalid rows")
            return fallback_rows
        raise TableDetectionError(
            "failed to detect table structure (tried both horizontal and vertical layouts): "
            + "; ".join(reasons),
            suggestion=FALLBACK_SUGGESTION)

    def parse_horizontal(self, elements: Sequence[TextElement]) -> List[ParsedRow]:
        table = self.detector.detect_table(elements)
        header_index = self.detector.find_header_row(table)

        mapping = self.mapping
        if mapping is None and header_index >= 0:
            mapping = self.detect_columns(table[header_index].cells)
        if mapping is None:
            raise TableDetectionError("could not map table columns from the header row")

        rows = []
        for index in range(header_index + 1, len(table)):
            cells = table[index].cells
            if self.is_empty_row(cells) or self.is_summary_row(cells):
                continue
            rows.append(RowInput(row_number=index + 1, cells=cells))
        return self.parse_rows(rows, mapping)

    def parse_vertical(self, elements: Sequence[TextElement]) -> List[ParsedRow]:
        columns = detect_vertical_table(elements, self.vertical_config)
        debit_index, credit_index = self._find_direction_headers(columns)
        currency = self.mapping.currency if self.mapping else self.vertical_config.currency

        date_parser = DateParser()
        amount_parser = AmountParser()
        parsed = []

        for index, column in enumerate(columns):
            if len(column.cells) < 3:
                continue

            date = None
            amount = None
            amount_index = -1
            parts: List[str] = []

            for cell_index, cell in enumerate(column.cells):
                text = cell.strip()
                if not text:
                    continue
                if date is None:
                    try:
                        date = date_parser.parse(text)
                        continue
                    except DateParseError:
                        pass
                # First grouped amount is the transaction; later ones are balances
                if amount is None and ("," in text or _GROUPED_NUMBER_RE.search(text)):
                    try:
                        value = amount_parser.parse(text)
                    except AmountParseError:
                        value = 0
                    if value > 0:
                        amount, amount_index = value, cell_index
                        continue
                if len(text) > 5 and not _is_numeric(text):
                    if not parts or len(" ".join(parts)) < self.vertical_config.max_description_length:
                        parts.append(text)

            if date is None or amount is None:
                continue

            builder = RowBuilder(index + 1)
            is_debit = self._resolve_direction(column.cells, amount_index, debit_index, credit_index)
            if is_debit is None:
                builder.add("type", "Could not tell debit from credit; amount kept positive (low confidence)",
                            Severity.WARNING)
            elif is_debit:
                amount = -amount

            original = " ".join(parts)
            description = self.cleaner.clean(original) if original else DEFAULT_DESCRIPTION
            builder.fields.update(
                date=date,
                amount=amount,
                description=description,
                original_description=original,
                type=self.type_detector.detect_type(description, amount),
            )
            builder.issues.extend(self.validator(amount, currency, description, date))
            parsed.append(builder.build())

        if not parsed:
            raise TableDetectionError("no valid transactions found in vertical format",
                                      suggestion=FALLBACK_SUGGESTION)
        self.logger.info(f"Parsed {len(parsed)} transactions from vertical layout")
        return parsed

    @staticmethod
    def _find_direction_headers(columns: Sequence[TableRow]):
        debit_index = credit_index = -1
        for column in columns:
            for i, cell in enumerate(column.cells):
                text = cell.strip().lower()
                if ("nợ" in text and "tktt" in text) or text == "debit":
                    debit_index = i
                if ("có" in text and "tktt" in text) or ("credit" in text and "debit" not in text):
                    credit_index = i
        return debit_index, credit_index

    def _resolve_direction(self, cells: Sequence[str], amount_index: int,
                           debit_index: int, credit_index: int) -> Optional[bool]:
        """True for a debit, False for a credit, None when nothing decides."""
        if debit_index >= 0 and credit_index >= 0:
            return abs(amount_index - debit_index) < abs(amount_index - credit_index)
        text = " ".join(cells).lower()
        if any(keyword in text for keyword in self.vertical_config.debit_keywords):
            return True
        return None
