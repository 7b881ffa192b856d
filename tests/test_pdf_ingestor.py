import pytest

from conftest import make_grid
from errors import TableDetectionError
from pdf_ingestor import PdfIngestor
from schema import Severity, TextElement, TransactionType


def _ingestor(elements, **kwargs):
    return PdfIngestor(text_extractor=lambda data: elements, **kwargs)


def _columns(columns):
    """One list of cell texts per x position, laid out top to bottom."""
    elements = []
    for x, cells in columns:
        for i, text in enumerate(cells):
            elements.append(TextElement(x=x, y=10.0 + i * 10, text=text, font_size=9))
    return elements


def test_horizontal_table(days_ago):
    day = days_ago(4).strftime("%d/%m/%Y")
    elements = make_grid([
        ["Date", "Description", "Amount"],
        [day, "PURCHASE AT STARBUCKS HANOI", "-55,000"],
        [day, "GRAB", "-120,000"],
        [day, "SALARY", "15,000,000"],
        [day, "CIRCLE K", "-30,000"],
        [day, "HIGHLANDS", "-45,000"],
    ], [50.0, 150.0, 350.0])

    rows = _ingestor(elements).parse(b"%PDF")

    assert len(rows) == 5
    assert all(row.is_valid for row in rows)
    assert rows[0].description == "Starbucks"
    assert rows[0].amount == -550_000_000
    assert rows[2].amount == 150_000_000_000
    assert rows[2].type == TransactionType.INCOME
    assert [row.row_number for row in rows] == [2, 3, 4, 5, 6]


def test_vertical_layout_by_keywords(days_ago):
    elements = _columns([
        (100.0, [days_ago(3).strftime("%d/%m/%Y"), "THANH TOAN HOA DON DIEN", "1,500,000", "25,000,000"]),
        (200.0, [days_ago(2).strftime("%d/%m/%Y"), "NHAN TIEN LUONG THANG 9", "20,000,000", "45,000,000"]),
        (300.0, [days_ago(1).strftime("%d/%m/%Y"), "RUT TIEN ATM VCB", "2,000,000", "43,000,000"]),
    ])

    rows = _ingestor(elements).parse(b"%PDF")

    assert [row.amount for row in rows] == [-15_000_000_000, 200_000_000_000, -20_000_000_000]
    assert rows[0].original_description == "THANH TOAN HOA DON DIEN"
    assert rows[1].type == TransactionType.INCOME
    assert all(row.is_valid for row in rows)


def test_vertical_layout_flags_unknown_direction(days_ago):
    elements = _columns([
        (100.0, [days_ago(3).strftime("%d/%m/%Y"), "THANH TOAN HOA DON DIEN", "1,500,000"]),
        (200.0, [days_ago(2).strftime("%d/%m/%Y"), "NHAN TIEN LUONG THANG 9", "20,000,000"]),
        (300.0, [days_ago(1).strftime("%d/%m/%Y"), "RUT TIEN ATM VCB", "2,000,000"]),
    ])

    salary = _ingestor(elements).parse(b"%PDF")[1]

    assert salary.amount > 0
    assert [(w.field, w.severity) for w in salary.warnings] == [("type", Severity.WARNING)]
    assert salary.is_valid


def test_vertical_layout_uses_debit_credit_headers(days_ago):
    elements = _columns([
        (20.0, ["Ngày", "Diễn giải", "Nợ TKTT", "Có TKTT"]),
        (100.0, [days_ago(3).strftime("%d/%m/%Y"), "CHUYEN KHOAN DEN ABC", "-", "500,000"]),
        (200.0, [days_ago(2).strftime("%d/%m/%Y"), "THANH TOAN HOA DON", "300,000", "-"]),
    ])

    rows = _ingestor(elements).parse(b"%PDF")

    assert [row.amount for row in rows] == [5_000_000_000, -3_000_000_000]
    assert not any(row.warnings for row in rows)


def test_both_layouts_fail():
    elements = [TextElement(x=x, y=y, text="text", font_size=9) for x in (10, 100) for y in (10, 20)]
    with pytest.raises(TableDetectionError, match="tried both horizontal and vertical"):
        _ingestor(elements).parse(b"%PDF")


def test_default_extractor_is_pdfplumber():
    from pdf_text import extract_text_elements
    assert PdfIngestor().text_extractor is extract_text_elements


def test_invalid_horizontal_rows_are_kept_when_vertical_fails(days_ago):
    day = days_ago(4).strftime("%d/%m/%Y")
    elements = make_grid(
        [["Date", "Description", "Amount"]] + [[day, "GRAB", "n/a"]] * 5,
        [50.0, 150.0, 350.0])

    rows = _ingestor(elements).parse(b"%PDF")

    assert len(rows) == 5
    assert not any(row.is_valid for row in rows)
    assert rows[0].errors[0].field == "amount"


def test_horizontal_rows_win_when_some_are_valid(days_ago):
    day = days_ago(4).strftime("%d/%m/%Y")
    elements = make_grid([
        ["Date", "Description", "Amount"],
        [day, "GRAB", "-120,000"],
        [day, "CIRCLE K", "n/a"],
        [day, "SALARY", "15,000,000"],
        [day, "HIGHLANDS", "-45,000"],
        [day, "PHARMACITY", "-95,000"],
    ], [50.0, 150.0, 350.0])

    rows = _ingestor(elements).parse(b"%PDF")

    assert [row.row_number for row in rows] == [2, 3, 4, 5, 6]
    assert [row.is_valid for row in rows] == [True, False, True, True, True]
