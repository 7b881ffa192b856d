import pytest

from categorizer import CategorySuggester, levenshtein_distance
from schema import ParsedRow, TransactionType


@pytest.fixture
def suggester():
    return CategorySuggester()


@pytest.mark.parametrize("description,category,confidence", [
    ("Coffee", "food", 80),
    ("Grab Taxi", "transportation", 75),
    ("Tiền điện tháng 9", "utilities", 85),
    ("Netflix", "entertainment", 75),
])
def test_expense_keywords(suggester, description, category, confidence):
    suggestion = suggester.suggest(description, TransactionType.EXPENSE)
    assert (suggestion.category, suggestion.confidence) == (category, confidence)


def test_income(suggester):
    assert suggester.suggest("Salary October", TransactionType.INCOME).confidence == 70
    assert suggester.suggest("Abc", TransactionType.INCOME).confidence == 30


def test_misspelt_keyword_gets_fuzzy_match(suggester):
    suggestion = suggester.suggest("Restaurent Hanoi", TransactionType.EXPENSE)
    assert suggestion.category == "food"
    assert suggestion.confidence == 60


def test_no_match(suggester):
    suggestion = suggester.suggest("Xyzzy", TransactionType.EXPENSE)
    assert suggestion.category is None
    assert suggestion.confidence == 0


def test_suggest_many(suggester):
    rows = [
        ParsedRow(row_number=2, description="Coffee", type=TransactionType.EXPENSE),
        ParsedRow(row_number=3, description="Refund", type=TransactionType.INCOME),
    ]
    suggestions = suggester.suggest_many(rows)
    assert suggestions[2].category == "food"
    assert suggestions[3].category == "income"


def test_levenshtein_distance():
    assert levenshtein_distance("kitten", "sitting") == 3
    assert levenshtein_distance("", "abc") == 3
