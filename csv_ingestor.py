import logging
from io import StringIO
from typing import List

import pandas as pd

from errors import ColumnMappingError, DocumentReadError
from extractor import RowInput, StatementIngestor
from schema import ParsedRow

logger = logging.getLogger(__name__)

ENCODINGS = ['utf-8', 'utf-8-sig', 'latin1', 'cp1252']


class CsvIngestor(StatementIngestor):
    """Parses CSV statements."""

    def parse(self, data: bytes) -> List[ParsedRow]:
        """
        Parse CSV bytes into transactions.

        Args:
            data: Raw file content

        Returns:
            ParsedRows in file order, header and summary rows excluded
        """
        records = self.read_records(data)
        if not records:
            raise DocumentReadError("CSV file is empty")

        mapping = self.mapping
        start = 0
        if mapping is None:
            if not self.looks_like_header(records[0]):
                raise ColumnMappingError("CSV has no header row to detect columns from",
                                         suggestion="Provide a column mapping")
            mapping = self.detect_columns(records[0])
            if mapping is None:
                raise ColumnMappingError(f"could not find date, amount and description columns in header {records[0]}",
                                         suggestion="Provide a column mapping")
            start = 1
        elif self.looks_like_header(records[0]):
            start = 1

        rows = []
        for index in range(start, len(records)):
            cells = records[index]
            if self.is_empty_row(cells) or self.is_summary_row(cells):
                continue
            rows.append(RowInput(row_number=index + 1, cells=cells))

        parsed = self.parse_rows(rows, mapping)
        self.logger.info(f"Parsed {len(parsed)} CSV rows ({sum(r.is_valid for r in parsed)} valid)")
        return parsed

    def read_records(self, data: bytes) -> List[List[str]]:
        text = self._decode(data)
        if not text.strip():
            return []

        # Rows may have different lengths; size the frame for the widest line
        width = max(line.count(',') + 1 for line in text.splitlines())
        try:
            df = pd.read_csv(StringIO(text), header=None, names=range(width), dtype=str,
                             keep_default_na=False, skip_blank_lines=False,
                             skipinitialspace=True, engine='python')
        except Exception as e:
            raise DocumentReadError(f"failed to read CSV: {e}") from e

        records = []
        for values in df.fillna("").itertuples(index=False, name=None):
            cells = list(values)
            while cells and not cells[-1]:
                cells.pop()
            records.append(cells)
        return records

    def _decode(self, data: bytes) -> str:
        for encoding in ENCODINGS:
            try:
                text = data.decode(encoding).lstrip("\ufeff")
                self.logger.debug(f"Decoded CSV with {encoding} encoding")
                return text
            except UnicodeDecodeError:
                continue
        raise DocumentReadError(f"Could not decode CSV file with any of the tried encodings: {ENCODINGS}")
