import argparse
import json

import pytest

from extract import StatementProcessor, build_mapping, main

SAMPLE_CSV = (
    'Date,Amount,Description,Type\n'
    '01/01/2026,"₫100,000",Coffee,Expense\n'
    '02/01/2026,"(₫50,000)",Refund,Income\n'
)


@pytest.fixture
def statement_path(tmp_path):
    path = tmp_path / "statement.csv"
    path.write_text(SAMPLE_CSV, encoding="utf-8")
    return path


def test_process_file(statement_path):
    result = StatementProcessor().process_file(str(statement_path))
    assert result.total_count == 2
    assert result.valid_count == 2
    assert result.processing_metadata["file_type"] == "csv"
    assert result.processing_metadata["invalid_rows"] == 0


def test_ingestor_for_unknown_type():
    with pytest.raises(ValueError):
        StatementProcessor().ingestor_for(".docx")


def test_cli_writes_json(statement_path, tmp_path):
    out = tmp_path / "out.json"
    assert main([str(statement_path), "-o", str(out), "--suggest-categories"]) == 0

    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["total_count"] == 2
    assert data["valid_count"] == 2
    assert [t["amount"] for t in data["transactions"]] == [1_000_000_000, -500_000_000]
    assert data["transactions"][0]["type"] == "expense"
    assert data["category_suggestions"]["2"]["category"] == "food"


def test_cli_with_explicit_mapping(statement_path, capsys):
    argv = [str(statement_path), "--date-column", "0", "--amount-column", "1",
            "--description-column", "2", "--date-format", "DD/MM/YYYY"]
    assert main(argv) == 0
    assert "- Valid rows: 2" in capsys.readouterr().out


def test_cli_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "missing.csv")]) == 1
    assert "Error:" in capsys.readouterr().out


def test_build_mapping():
    args = argparse.Namespace(date_column=0, amount_column=None, description_column=1,
                              debit_column=2, credit_column=3, date_format=None, currency="USD")
    mapping = build_mapping(args)
    assert mapping.has_debit_credit
    assert mapping.amount_column == -1
    assert mapping.currency == "USD"

    args.date_column = None
    assert build_mapping(args) is None
