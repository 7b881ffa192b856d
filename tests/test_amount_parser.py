import pytest

from amount_parser import AmountParser, detect_format, format_amount, parse_with_auto_detect, parse_with_format
from errors import AmountParseError
from schema import AmountFormat

US = AmountFormat(decimal_separator=".", thousands_separator=",")
EU = AmountFormat(decimal_separator=",", thousands_separator=".")
SPACED = AmountFormat(decimal_separator=",", thousands_separator=" ")


@pytest.mark.parametrize("text", ["(1,234.56", "(1,234.56)", "-1,234.56", "1,234.56-"])
def test_negative_notations(text):
    assert AmountParser().parse(text) == -12345600


def test_european_and_us_notation_agree():
    assert parse_with_auto_detect("1.234,56") == 12345600
    assert parse_with_auto_detect("1,234.56") == 12345600


@pytest.mark.parametrize("text,expected", [
    ("₫100,000", 1_000_000_000),
    ("(₫50,000)", -500_000_000),
    ("100.000 đ", 1_000_000_000),
    ("1.000.000", 10_000_000_000),
    ("1,000,000 VND", 10_000_000_000),
    ("1,5", 15_000),
    ("12.5", 125_000),
    ("1 234,56", 12_345_600),
    ("R$ 10", 100_000),
    ("$1,234.56", 12_345_600),
    ("+50", 500_000),
    ("42", 420_000),
    ("0.00005", 1),
    ("0.00004", 0),
])
def test_auto_detect(text, expected):
    assert AmountParser().parse(text) == expected


def test_explicit_format_overrides_detection():
    # Auto-detection would read "1.234" as one thousand two hundred thirty four
    assert AmountParser(US).parse("1.234") == 12_340
    assert AmountParser(EU).parse("1.234") == 12_340_000


@pytest.mark.parametrize("text", ["", "   ", "₫", "abc", "12a", "1.2.3,4,5x"])
def test_invalid_amounts(text):
    with pytest.raises(AmountParseError):
        AmountParser().parse(text)


def test_amount_parse_error_is_value_error():
    with pytest.raises(ValueError):
        parse_with_format("n/a", ".", ",")


def test_detect_format():
    assert detect_format("1.234,56").decimal_separator == ","
    assert detect_format("1,234.56").decimal_separator == "."
    assert detect_format("1,50").decimal_separator == ","
    assert detect_format("1 234 567").thousands_separator == " "
    assert detect_format("1234") == detect_format("99")


def test_format_amount():
    assert format_amount(12345600) == "1,234.56"
    assert format_amount(-12345600, EU) == "-1.234,56"
    assert format_amount(10_000_000_000, SPACED) == "1 000 000"
    assert format_amount(-500_000_000, AmountFormat(negative_pattern="parentheses")) == "(50,000)"
    assert format_amount(-5000, AmountFormat(negative_pattern="suffix")) == "0.5-"


@pytest.mark.parametrize("amount_format", [
    US,
    EU,
    SPACED,
    AmountFormat(decimal_separator=",", thousands_separator=".", currency_symbol="₫",
                 negative_pattern="parentheses"),
    AmountFormat(decimal_separator=".", thousands_separator="", negative_pattern="suffix"),
])
@pytest.mark.parametrize("text", ["1234.56", "-987654321.1234", "0.5", "1000000"])
def test_parse_format_parse_is_stable(amount_format, text):
    parser = AmountParser(amount_format)
    value = AmountParser(US).parse(text)
    assert parser.parse(format_amount(value, amount_format)) == value
