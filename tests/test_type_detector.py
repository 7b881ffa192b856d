import pytest

from config import TypeKeywords
from schema import TransactionType
from type_detector import TypeDetector


@pytest.fixture
def detector():
    return TypeDetector()


def test_keywords_beat_amount_sign(detector):
    assert detector.detect_type("Salary correction", -1_000_000) == TransactionType.INCOME
    assert detector.detect_type("Coffee", 1_000_000_000) == TransactionType.EXPENSE
    assert detector.detect_type("Refund", -500_000_000) == TransactionType.INCOME


def test_vietnamese_keywords(detector):
    assert detector.detect_type("Nhận tiền lương tháng 9", -1) == TransactionType.INCOME
    assert detector.detect_type("Thanh toán hóa đơn", 1) == TransactionType.EXPENSE


def test_amount_sign_decides_when_description_is_neutral(detector):
    assert detector.detect_type("Misc item", 100) == TransactionType.INCOME
    assert detector.detect_type("Misc item", 0) == TransactionType.INCOME
    assert detector.detect_type("Misc item", -100) == TransactionType.EXPENSE


def test_type_hint_used_before_sign(detector):
    assert detector.detect_type("Misc item", 100, "Expense") == TransactionType.EXPENSE
    assert detector.detect_type("Misc item", -100, "Deposit") == TransactionType.INCOME
    assert detector.detect_type("Misc item", -100, "unknown") == TransactionType.EXPENSE


def test_description_beats_type_hint(detector):
    assert detector.detect_type("Coffee", 100, "Income") == TransactionType.EXPENSE


def test_custom_keywords():
    detector = TypeDetector(TypeKeywords(income=("jackpot",), expense=()))
    assert detector.detect_type("JACKPOT win", -5) == TransactionType.INCOME
    assert detector.detect_type("Coffee", 5) == TransactionType.INCOME


def test_helpers(detector):
    assert detector.is_income("Bonus", -1)
    assert detector.is_expense("ATM withdrawal", 1)
