"""
Keyword tables and tunables for the statement parsers.

Every table lives in a frozen model so a caller can pass a customised copy
(``TypeKeywords(income=(...))``) to a parser without touching module state.
"""
from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class TypeKeywords(_Frozen):
    income: Tuple[str, ...] = (
        # English
        "salary", "payroll", "wage", "income", "dividend", "interest",
        "refund", "reimbursement", "cashback", "cash back", "rebate",
        "bonus", "commission", "gift", "deposit", "credit", "receive",
        "received", "transfer in", "incoming", "inflow",
        # Vietnamese
        "lương", "luong", "tiền lương", "tien luong", "thu nhập", "thu nhap",
        "hoàn tiền", "hoan tien", "hoàn trả", "hoan tra", "tiền thưởng",
        "tien thuong", "thưởng", "thuong", "cổ tức", "co tuc", "lãi", "lai",
        "lãi suất", "lai suat", "nhận tiền", "nhan tien", "chuyển đến",
        "chuyen den", "tiền về", "tien ve",
    )
    expense: Tuple[str, ...] = (
        "purchase", "payment", "withdrawal", "debit", "spend", "spending",
        "buy", "bought", "paid", "fee", "charge", "bill", "subscription",
        "transfer out", "outgoing", "outflow", "pos", "atm",
        "mua hàng", "mua hang", "mua", "thanh toán", "thanh toan",
        "chi tiêu", "chi tieu", "chi", "rút tiền", "rut tien", "rút", "rut",
        "phí", "phi", "lệ phí", "le phi", "hóa đơn", "hoa don", "chuyển đi",
        "chuyen di", "tiền ra", "tien ra", "giao dịch", "giao dich",
    )
    # Values seen in a statement's own type column
    income_hints: Tuple[str, ...] = ("income", "credit", "deposit", "receive", "inflow")
    expense_hints: Tuple[str, ...] = ("expense", "debit", "withdrawal", "payment", "outflow", "spend")


class DescriptionRules(_Frozen):
    bank_prefixes: Tuple[str, ...] = (
        "PURCHASE AT ", "PURCHASE FROM ", "PAYMENT TO ", "PAYMENT FROM ",
        "TRANSFER TO ", "TRANSFER FROM ", "WITHDRAWAL AT ", "WITHDRAWAL FROM ",
        "DEPOSIT AT ", "DEPOSIT FROM ", "POS PURCHASE ", "POS WITHDRAWAL ",
        "POS ", "ATM WITHDRAWAL ", "ATM DEPOSIT ", "ATM ",
        "DEBIT CARD PURCHASE ", "CREDIT CARD PAYMENT ", "ONLINE PAYMENT ",
        "ONLINE PURCHASE ", "RECURRING PAYMENT ", "AUTOPAY ", "DIRECT DEBIT ",
        "STANDING ORDER ", "BANK TRANSFER ", "WIRE TRANSFER ", "ACH PAYMENT ",
        "ACH CREDIT ", "ACH DEBIT ", "CHECK ", "CHEQUE ",
        "MUA HÀNG TẠI ", "MUA HANG TAI ", "THANH TOÁN TẠI ", "THANH TOAN TAI ",
        "CHUYỂN KHOẢN ĐẾN ", "CHUYEN KHOAN DEN ", "RÚT TIỀN TẠI ",
        "RUT TIEN TAI ", "NẠP TIỀN TẠI ", "NAP TIEN TAI ", "GIAO DỊCH TẠI ",
        "GIAO DICH TAI ",
    )
    code_patterns: Tuple[str, ...] = (
        r"REF:\s*\S+",
        r"TRACE#:\s*\S+",
        r"AUTH:\s*\S+",
        r"TXN:\s*\S+",
        r"TRANS:\s*\S+",
        r"APPROVAL:\s*\S+",
        r"REFERENCE:\s*\S+",
        r"CONF:\s*\S+",
        r"CONFIRMATION:\s*\S+",
        r"ID:\s*\S+",
        r"\bREF\s+\S+",
        r"\bTRACE\s+\S+",
        r"\bAUTH\s+\S+",
        r"\bTXN\s+\S+",
    )
    location_tokens: Tuple[str, ...] = (
        "HANOI", "HO CHI MINH", "SAIGON", "DA NANG", "HAI PHONG", "CAN THO",
        "BIEN HOA", "VUNG TAU", "NHA TRANG", "HUE", "DA LAT", "VN", "VIETNAM",
    )
    minor_words: Tuple[str, ...] = (
        "a", "an", "and", "at", "but", "by", "for", "in", "of", "on", "or",
        "the", "to", "via", "with",
    )


class SummaryKeywords(_Frozen):
    """Rows whose text contains one of these are totals, not transactions."""
    keywords: Tuple[str, ...] = (
        "total", "balance", "summary", "subtotal", "grand total",
        "ending balance", "closing balance", "opening balance",
        "beginning balance", "tổng", "tổng cộng", "số dư", "cộng dồn",
        "số dư đầu kỳ", "số dư cuối kỳ",
    )
    # Footer and explanation lines that spreadsheets carry below the table
    footer_phrases: Tuple[str, ...] = (
        "phiếu này được in", "this statement", "description:", "diễn giải:",
        "ngày giao dịch:", "transaction date:", "ghi chú", "note:",
        "được in từ", "printed from",
    )


class HeaderKeywords(_Frozen):
    date: Tuple[str, ...] = ("date", "ngày", "ngay", "posting date", "transaction date")
    description: Tuple[str, ...] = (
        "description", "diễn giải", "dien giai", "mô tả", "mo ta",
        "particulars", "details", "memo",
    )
    amount: Tuple[str, ...] = ("amount", "số tiền", "so tien", "withdrawals", "deposits")
    debit: Tuple[str, ...] = ("debit", "nợ tktt", "nợ", "withdraw", "rút")
    credit: Tuple[str, ...] = ("credit", "có tktt", "có", "deposit", "nạp")
    reference: Tuple[str, ...] = (
        "reference", "số ct", "so ct", "ref", "transaction id", "ref no",
        "số bút toán", "transaction no",
    )
    type: Tuple[str, ...] = ("type", "loại", "loai", "transaction type")
    category: Tuple[str, ...] = ("category", "danh mục", "danh muc")
    # Words that make a first row look like a header rather than data
    header_markers: Tuple[str, ...] = (
        "date", "amount", "description", "balance", "transaction", "debit",
        "credit", "type", "category", "reference", "memo", "ngày", "số tiền",
        "diễn giải", "mô tả", "số dư",
    )


class TableDetectorConfig(_Frozen):
    y_tolerance: float = Field(2.0, gt=0)
    min_columns: int = Field(3, ge=1)
    min_rows: int = Field(5, ge=1)
    max_cell_distance: float = 50.0
    header_keywords: Tuple[str, ...] = (
        "date", "ngày", "ngay", "posting date", "transaction date",
        "description", "diễn giải", "dien giai", "mô tả", "mo ta",
        "particulars", "amount", "số tiền", "so tien", "debit", "credit",
        "withdrawals", "deposits", "balance", "số dư", "so du", "reference",
        "số ct", "so ct", "ref", "transaction id",
    )


class VerticalLayoutConfig(_Frozen):
    x_tolerance: float = 5.0
    min_columns: int = 3
    max_description_length: int = 200
    debit_keywords: Tuple[str, ...] = (
        "rut tien", "rút tiền", "rut", "withdraw", "atm", "pos",
        "thanh toan", "payment", "chuyen di", "chuyển đi", "transfer to",
        "phi", "phí", "fee", "charge", "mua", "purchase", "buy",
    )
    currency: str = "VND"


class ValidationConfig(_Frozen):
    zero_amount_policy: str = Field("error", pattern="^(error|warning|ignore)$")
    # 1 billion VND at the x10000 scale
    large_amount_threshold: int = 10_000_000_000_000
    old_date_threshold_days: int = 365
    min_description_length: int = 2
    max_description_length: int = 500
    supported_currencies: Tuple[str, ...] = (
        "VND", "USD", "EUR", "GBP", "JPY", "CNY", "KRW", "THB", "SGD", "MYR",
        "IDR", "PHP", "INR", "AUD", "CAD", "CHF", "SEK", "NOK", "DKK", "NZD",
        "HKD", "TWD", "ZAR", "BRL", "MXN", "RUB", "TRY", "AED", "SAR", "PLN",
        "CZK", "HUF", "ILS", "CLP", "ARS", "COP", "PEN", "EGP", "PKR", "BDT",
        "VEF", "NGN", "KES",
    )
