"""
Business-rule checks applied to a row once its fields have been parsed.

A validator is any callable ``(amount, currency, description, date) ->
list[ValidationError]``. The ingestors default to ``validate_transaction``.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from config import ValidationConfig
from schema import Severity, ValidationError

logger = logging.getLogger(__name__)

Validator = Callable[[int, str, str, Optional[datetime]], List[ValidationError]]


def _now_like(date: datetime) -> datetime:
    if date.tzinfo is None:
        return datetime.now()
    return datetime.now(timezone.utc)


def validate_amount(amount: int, currency: str, config: ValidationConfig) -> List[ValidationError]:
    errors = []
    if amount == 0 and config.zero_amount_policy != "ignore":
        if config.zero_amount_policy == "warning":
            errors.append(ValidationError(field="amount", message="Amount is zero. Please verify.",
                                          severity=Severity.WARNING))
        else:
            errors.append(ValidationError(field="amount", message="Amount cannot be zero"))

    # Only VND amounts are large enough to need a sanity threshold
    if currency == "VND" and abs(amount) > config.large_amount_threshold:
        errors.append(ValidationError(field="amount",
                                      message="Amount is very large (>1 billion VND). Please verify.",
                                      severity=Severity.WARNING))
    return errors


def validate_currency(currency: str, config: ValidationConfig) -> List[ValidationError]:
    if not currency:
        return [ValidationError(field="currency", message="Invalid currency code. Currency is required.")]
    if currency not in config.supported_currencies:
        return [ValidationError(field="currency",
                                message="Invalid currency code. Must be a valid ISO 4217 code (e.g., VND, USD, EUR).")]
    return []


def validate_description(description: str, config: ValidationConfig) -> List[ValidationError]:
    errors = []
    length = len(description or "")
    if length < config.min_description_length:
        errors.append(ValidationError(
            field="description",
            message=f"Description must be at least {config.min_description_length} characters"))
    if length > config.max_description_length:
        errors.append(ValidationError(
            field="description",
            message=f"Description must be at most {config.max_description_length} characters"))
    return errors


def validate_date(date: Optional[datetime], config: ValidationConfig) -> List[ValidationError]:
    if date is None:
        return [ValidationError(field="date", message="Date is required")]

    now = _now_like(date)
    if date > now:
        return [ValidationError(field="date", message="Date cannot be in the future")]

    if date < now - timedelta(days=config.old_date_threshold_days):
        return [ValidationError(field="date", message="Date is older than 1 year. Please verify.",
                                severity=Severity.WARNING)]
    return []


class TransactionValidator:
    """Runs every business rule with one configuration."""

    def __init__(self, config: Optional[ValidationConfig] = None):
        self.config = config or ValidationConfig()

    def __call__(self, amount: int, currency: str, description: str,
                 date: Optional[datetime]) -> List[ValidationError]:
        errors = []
        errors.extend(validate_amount(amount, currency, self.config))
        errors.extend(validate_currency(currency, self.config))
        errors.extend(validate_description(description, self.config))
        errors.extend(validate_date(date, self.config))
        if errors:
            logger.debug(f"Business rules flagged {len(errors)} issue(s) for {description!r}")
        return errors


def validate_transaction(amount: int, currency: str, description: str,
                         date: Optional[datetime]) -> List[ValidationError]:
    return TransactionValidator()(amount, currency, description, date)
