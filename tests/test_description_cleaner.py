import pytest

from config import DescriptionRules
from description_cleaner import DescriptionCleaner, clean_description
from schema import DEFAULT_DESCRIPTION


@pytest.fixture
def cleaner():
    return DescriptionCleaner()


@pytest.mark.parametrize("raw,expected", [
    ("PURCHASE AT STARBUCKS HANOI REF:123456", "Starbucks"),
    ("THANH TOAN TAI HIGHLANDS COFFEE HANOI", "Highlands Coffee"),
    ("POS KFC 123456 HCM", "Kfc"),
    ("MUA HANG TAI CIRCLE K HA NOI 0123456789", "Circle K Ha Noi"),
    ("coffee at the corner", "Coffee at the Corner"),
])
def test_clean(cleaner, raw, expected):
    assert cleaner.clean(raw) == expected


def test_mixed_case_is_preserved(cleaner):
    assert cleaner.clean("Card **** **** **** 1234 Grab") == "Card Grab"


@pytest.mark.parametrize("raw", ["", None, "REF:123", "   "])
def test_empty_result_uses_default(cleaner, raw):
    assert cleaner.clean(raw) == DEFAULT_DESCRIPTION


def test_merchant_extraction_can_be_disabled():
    cleaner = DescriptionCleaner(extract_merchant_name=False)
    assert cleaner.clean("PURCHASE AT STARBUCKS HANOI") == "Starbucks Hanoi"


def test_custom_prefixes():
    cleaner = DescriptionCleaner(DescriptionRules(bank_prefixes=("XYZ ",)))
    assert cleaner.clean("XYZ Shop Name") == "Shop Name"


def test_strip_long_numbers():
    assert DescriptionCleaner.strip_long_numbers("PAY 1234567890 NOW") == "PAY  NOW"


def test_to_title_case_keeps_first_minor_word_capitalised(cleaner):
    assert cleaner.to_title_case("the bank of saigon") == "The Bank of Saigon"


def test_module_helper():
    assert clean_description("PURCHASE AT STARBUCKS HANOI REF:123456") == "Starbucks"
