"""
Main entry point for bank statement normalization.
"""
import argparse
import json
import logging
import sys
from datetime import datetime
from typing import Optional

from categorizer import CategorySuggester
from csv_ingestor import CsvIngestor
from errors import StatementParseError
from extractor import StatementIngestor
from file_loader import DEFAULT_TIMEOUT, FileLoader
from pdf_ingestor import PdfIngestor
from pdf_text import PdfTextExtractor
from schema import ColumnMapping, StatementResult
from spreadsheet_ingestor import SpreadsheetIngestor

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class StatementProcessor:
    """Loads a statement and runs the ingestor for its format."""

    def __init__(self, mapping: Optional[ColumnMapping] = None, timeout: float = DEFAULT_TIMEOUT,
                 pdf_password: Optional[str] = None, max_workers: int = 1):
        self.file_loader = FileLoader(timeout=timeout)
        self.mapping = mapping
        self.pdf_password = pdf_password
        self.max_workers = max_workers

    def ingestor_for(self, file_ext: str) -> StatementIngestor:
        if file_ext == '.csv':
            return CsvIngestor(self.mapping, max_workers=self.max_workers)
        if file_ext in ('.xlsx', '.xlsm'):
            return SpreadsheetIngestor(self.mapping, max_workers=self.max_workers)
        if file_ext == '.pdf':
            return PdfIngestor(self.mapping, max_workers=self.max_workers,
                               text_extractor=PdfTextExtractor(password=self.pdf_password))
        raise ValueError(f"Unsupported file type: {file_ext}")

    def process_bytes(self, data: bytes, file_ext: str, source: str = '<bytes>') -> StatementResult:
        ingestor = self.ingestor_for(file_ext)
        rows = ingestor.parse(data)

        metadata = {
            'source_file': source,
            'file_type': file_ext.lstrip('.'),
            'rows_found': len(rows),
            'invalid_rows': sum(1 for row in rows if not row.is_valid),
            'processing_date': datetime.now().isoformat(timespec='seconds'),
        }
        return StatementResult(transactions=rows, total_count=len(rows), processing_metadata=metadata)

    def process_file(self, source: str) -> StatementResult:
        """
        Process a bank statement end-to-end.

        Args:
            source: Path or http(s) URL of the statement

        Returns:
            StatementResult with every parsed row, valid or not
        """
        logger.info(f"Starting processing of: {source}")
        try:
            file_ext, data = self.file_loader.load_bytes(source)
            result = self.process_bytes(data, file_ext, source)
        except Exception as e:
            logger.error(f"Error processing file {source}: {str(e)}")
            raise

        logger.info(f"Processed {result.total_count} rows ({result.valid_count} valid)")
        return result


def build_mapping(args) -> Optional[ColumnMapping]:
    if args.date_column is None:
        return None
    return ColumnMapping(
        date_column=args.date_column,
        amount_column=args.amount_column if args.amount_column is not None else -1,
        description_column=args.description_column,
        debit_column=args.debit_column if args.debit_column is not None else -1,
        credit_column=args.credit_column if args.credit_column is not None else -1,
        preferred_date_format=args.date_format or '',
        currency=args.currency,
    )


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(description='Normalize bank statement transactions')
    parser.add_argument('source', help='Path or URL of the bank statement (CSV, XLSX or PDF)')
    parser.add_argument('-o', '--output', help='Output JSON file path')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    parser.add_argument('--log-file', help='Also write logs to this file')
    parser.add_argument('--timeout', type=float, default=DEFAULT_TIMEOUT, help='Download timeout in seconds')
    parser.add_argument('--password', help='Password for encrypted PDFs')
    parser.add_argument('--workers', type=int, default=1, help='Threads used to parse rows')
    parser.add_argument('--suggest-categories', action='store_true', help='Add category suggestions')

    mapping_group = parser.add_argument_group('column mapping (auto-detected when omitted)')
    mapping_group.add_argument('--date-column', type=int)
    mapping_group.add_argument('--amount-column', type=int)
    mapping_group.add_argument('--description-column', type=int)
    mapping_group.add_argument('--debit-column', type=int)
    mapping_group.add_argument('--credit-column', type=int)
    mapping_group.add_argument('--date-format', help='Preferred date format, e.g. DD/MM/YYYY')
    mapping_group.add_argument('--currency', default='VND')

    args = parser.parse_args(argv)

    handlers = [logging.StreamHandler()]
    if args.log_file:
        handlers.append(logging.FileHandler(args.log_file))
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format=LOG_FORMAT, handlers=handlers)

    try:
        mapping = build_mapping(args)
        processor = StatementProcessor(mapping=mapping, timeout=args.timeout,
                                       pdf_password=args.password, max_workers=args.workers)
        result = processor.process_file(args.source)
    except (StatementParseError, FileNotFoundError, ValueError) as e:
        logger.error(f"Processing failed: {str(e)}")
        print(f"Error: {str(e)}")
        return 1

    output_data = result.model_dump(mode='json')
    if args.suggest_categories:
        suggestions = CategorySuggester().suggest_many(result.transactions)
        output_data['category_suggestions'] = {
            str(row_number): suggestion.model_dump() for row_number, suggestion in suggestions.items()
        }

    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            json.dump(output_data, f, indent=2, ensure_ascii=False)
        print(f"Results written to: {args.output}")
    else:
        print(json.dumps(output_data, indent=2, ensure_ascii=False))

    print(f"\nSummary:")
    print(f"- Rows parsed: {result.total_count}")
    print(f"- Valid rows: {result.valid_count}")
    print(f"- File type: {result.processing_metadata['file_type']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
