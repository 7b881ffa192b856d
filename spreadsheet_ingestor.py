"""
Excel statement parsing with openpyxl.

Only the first visible worksheet is read. Cell values are taken as computed
by the workbook (formulas are not re-evaluated), hidden rows are ignored and
amounts printed in red are treated as negative.
"""
import logging
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from io import BytesIO
from typing import Any, Dict, List, Optional

import openpyxl

from date_parser import DEFAULT_TIMEZONE, load_timezone
from errors import ColumnMappingError, DocumentReadError
from extractor import RowInput, StatementIngestor
from schema import AMOUNT_SCALE, ColumnMapping, ParsedRow

logger = logging.getLogger(__name__)

EXCEL_EPOCH = datetime(1899, 12, 30)
MAX_HEADER_SEARCH = 50
RED_COLORS = ("FF0000", "DC143C", "C00000")


def excel_serial_to_datetime(serial: float) -> Optional[datetime]:
    """Convert an Excel date serial, or None when the number is not plausibly a date."""
    if not 1 < serial < 100000:
        return None
    return EXCEL_EPOCH + timedelta(days=serial)


def is_red_font(cell) -> bool:
    font = getattr(cell, "font", None)
    color = getattr(font, "color", None) if font is not None else None
    rgb = getattr(color, "rgb", None) if color is not None else None
    # Theme and indexed colours have no rgb string
    if not isinstance(rgb, str):
        return False
    # ARGB: the first two digits are alpha
    return rgb.upper()[-6:] in RED_COLORS


def cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (datetime, date)):
        return value.strftime("%d/%m/%Y")
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


class SpreadsheetIngestor(StatementIngestor):
    """Parses xlsx statements."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.timezone = load_timezone(DEFAULT_TIMEZONE)

    def parse(self, data: bytes) -> List[ParsedRow]:
        sheet = self._open_first_sheet(data)
        rows = list(sheet.iter_rows())
        texts = [[cell_text(cell.value) for cell in row] for row in rows]
        if all(self.is_empty_row(cells) for cells in texts):
            raise DocumentReadError("Excel file is empty")

        mapping, start = self._resolve_mapping(texts)

        inputs = []
        for index in range(start, len(rows)):
            row_number = index + 1
            if self._is_hidden(sheet, row_number):
                self.logger.debug(f"Skipping hidden row {row_number}")
                continue
            cells = texts[index]
            if self.is_empty_row(cells) or self.is_summary_row(cells, include_footers=True):
                continue
            inputs.append(self._row_input(row_number, rows[index], cells, mapping))

        parsed = self.parse_rows(inputs, mapping)
        self.logger.info(f"Parsed {len(parsed)} spreadsheet rows from sheet '{sheet.title}'")
        return parsed

    def _open_first_sheet(self, data: bytes):
        try:
            workbook = openpyxl.load_workbook(BytesIO(data), data_only=True)
        except Exception as e:
            raise DocumentReadError(f"Error reading Excel file: {e}",
                                    suggestion="Please export the statement as CSV") from e
        visible = [sheet for sheet in workbook.worksheets if sheet.sheet_state == "visible"]
        if not visible:
            raise DocumentReadError("Excel file has no visible sheets")
        return visible[0]

    def _resolve_mapping(self, texts: List[List[str]]):
        """Return the mapping to use and the index of the first data row."""
        search = texts[:MAX_HEADER_SEARCH]
        if self.mapping is not None:
            for i, cells in enumerate(search):
                if self.is_empty_row(cells):
                    continue
                return self.mapping, (i + 1 if self.looks_like_header(cells) else i)
            return self.mapping, 0

        for i, cells in enumerate(search):
            if not self.looks_like_header(cells):
                continue
            mapping = self.detect_columns(cells)
            if mapping is not None:
                self.logger.info(f"Found header at row {i + 1}")
                return mapping, i + 1

        raise ColumnMappingError("column mapping is required; no header row found in the first "
                                 f"{MAX_HEADER_SEARCH} rows", suggestion="Provide a column mapping")

    @staticmethod
    def _is_hidden(sheet, row_number: int) -> bool:
        dimension = sheet.row_dimensions.get(row_number)
        if dimension is None:
            return False
        return bool(dimension.hidden) or dimension.height == 0

    def _row_input(self, row_number: int, row, cells: List[str], mapping: ColumnMapping) -> RowInput:
        values = [cell.value for cell in row]

        date_value = None
        if 0 <= mapping.date_column < len(values):
            raw = values[mapping.date_column]
            if isinstance(raw, datetime):
                date_value = raw
            elif isinstance(raw, date):
                date_value = datetime(raw.year, raw.month, raw.day)
            elif isinstance(raw, (int, float)) and not isinstance(raw, bool):
                date_value = excel_serial_to_datetime(float(raw))
            elif isinstance(raw, str) and raw.strip().replace(".", "", 1).isdigit():
                date_value = excel_serial_to_datetime(float(raw.strip()))
            if date_value is not None and date_value.tzinfo is None:
                date_value = date_value.replace(tzinfo=self.timezone)

        amounts: Dict[int, int] = {}
        for index in (mapping.amount_column, mapping.debit_column, mapping.credit_column):
            if 0 <= index < len(values):
                raw = values[index]
                if isinstance(raw, (int, float, Decimal)) and not isinstance(raw, bool):
                    scaled = (Decimal(str(raw)) * AMOUNT_SCALE).quantize(Decimal(1), rounding=ROUND_HALF_UP)
                    amounts[index] = int(scaled)

        negate = (0 <= mapping.amount_column < len(row)
                  and not mapping.has_debit_credit
                  and is_red_font(row[mapping.amount_column]))

        return RowInput(row_number=row_number, cells=cells, date_value=date_value,
                        negate_amount=negate, amounts=amounts or None)
