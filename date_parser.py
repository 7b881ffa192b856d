"""
Date parsing for bank statements.

Dates are resolved by a cascade of strategies tried in order: the caller's
preferred format, a list of common templates, regex extraction, and finally
a Unix timestamp. Each candidate must fall inside a plausible window before
it is accepted.
"""
import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil.relativedelta import relativedelta

from errors import DateParseError
from schema import ParseResult

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "Asia/Ho_Chi_Minh"
MAX_AGE_YEARS = 50
FUTURE_GRACE = timedelta(days=1)

STANDARD_FORMATS = [
    "%d/%m/%Y",
    "%m/%d/%Y",
    "%Y-%m-%d",
    "%d-%m-%Y",
    "%d %b %Y",
    "%d %B %Y",
    "%d/%m/%y",
    "%m/%d/%y",
    "%Y/%m/%d",
    "%d-%b-%Y",
    "%Y-%m-%d %H:%M:%S",
    "%d/%m/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M:%S",
]
DAY_FIRST_FORMATS = {"%d/%m/%Y", "%d-%m-%Y", "%d/%m/%y"}
MONTH_FIRST_FORMATS = {"%m/%d/%Y", "%m-%d-%Y", "%m/%d/%y"}

_FORMAT_TOKENS = {
    "YYYY": "%Y",
    "YY": "%y",
    "MMMM": "%B",
    "MMM": "%b",
    "MM": "%m",
    "DD": "%d",
    "HH": "%H",
    "mm": "%M",
    "ss": "%S",
}
_TOKEN_RE = re.compile(r"YYYY|MMMM|MMM|YY|MM|DD|HH|mm|ss")
_MONTH_FIRST_RE = re.compile(r"^M{2,4}\W?DD")

_MONTH_ABBR = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
               "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
_VIETNAMESE_MONTH_RE = re.compile(r"tháng\s*0?(1[0-2]|[1-9])\b", re.IGNORECASE)

# (pattern, day/month order is ambiguous)
_REGEX_PATTERNS = [
    (re.compile(r"(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{4})"), True),
    (re.compile(r"(\d{4})[/\-.](\d{1,2})[/\-.](\d{1,2})"), False),
    (re.compile(r"(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{2})"), True),
]


def load_timezone(name: str):
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Timezone {name} not available, falling back to UTC")
        return timezone.utc


def convert_format(preferred_format: str) -> str:
    """Turn a pattern such as "DD/MM/YYYY" into a strptime template."""
    return _TOKEN_RE.sub(lambda m: _FORMAT_TOKENS[m.group(0)], preferred_format)


def normalize_vietnamese_month(date_str: str) -> str:
    """Replace "Tháng 3" style month names with English abbreviations."""
    return _VIETNAMESE_MONTH_RE.sub(lambda m: _MONTH_ABBR[int(m.group(1)) - 1], date_str)


class DateParser:
    """Parses statement dates, resolving day/month ambiguity by preference."""

    def __init__(self, preferred_format: str = "", tz_name: str = DEFAULT_TIMEZONE):
        self.preferred_format = preferred_format or ""
        self.timezone = load_timezone(tz_name)
        # Month token leads the day token, whatever the separator
        self.prefers_month_first = bool(_MONTH_FIRST_RE.search(self.preferred_format))
        self.formats = self._order_formats()
        self.strategies: List[Tuple[str, Callable[[str], ParseResult]]] = [
            ("preferred format", self._try_preferred_format),
            ("standard formats", self._try_standard_formats),
            ("regex extraction", self._try_regex_extraction),
            ("unix timestamp", self._try_unix_timestamp),
        ]

    def parse(self, date_str: str) -> datetime:
        """
        Parse a date string into a timezone-aware datetime.

        Args:
            date_str: Raw date text from a statement cell

        Returns:
            The parsed datetime in the parser's timezone

        Raises:
            DateParseError: when no strategy yields a date inside the valid window
        """
        text = (date_str or "").strip()
        if not text:
            raise DateParseError("empty date string")

        rejection: Optional[str] = None
        for name, strategy in self.strategies:
            result = strategy(text)
            if not result.ok:
                continue
            reason = self.validate(result.value)
            if reason is None:
                return result.value
            logger.debug(f"{name} produced {result.value:%Y-%m-%d} for {text!r} but {reason}")
            rejection = rejection or reason

        if rejection:
            raise DateParseError(f"unable to parse date: {text}: out of range ({rejection})")
        raise DateParseError(f"unable to parse date: {text}")

    def validate(self, date: datetime) -> Optional[str]:
        """Return the reason a date is implausible, or None when it is fine."""
        now = datetime.now(self.timezone)
        if date > now + FUTURE_GRACE:
            return f"date is in the future: {date:%Y-%m-%d}"
        if date < now - relativedelta(years=MAX_AGE_YEARS):
            return f"date is more than {MAX_AGE_YEARS} years old: {date:%Y-%m-%d}"
        return None

    def _order_formats(self) -> List[str]:
        if not self.preferred_format:
            return list(STANDARD_FORMATS)
        preferred = MONTH_FIRST_FORMATS if self.prefers_month_first else DAY_FIRST_FORMATS
        first = [f for f in STANDARD_FORMATS if f in preferred]
        rest = [f for f in STANDARD_FORMATS if f not in preferred]
        return first + rest

    def _localize(self, date: datetime) -> datetime:
        return date.replace(tzinfo=self.timezone)

    def _try_preferred_format(self, text: str) -> ParseResult:
        if not self.preferred_format:
            return ParseResult.failure("no preferred format")
        try:
            parsed = datetime.strptime(text, convert_format(self.preferred_format))
        except ValueError as e:
            return ParseResult.failure(str(e))
        return ParseResult.success(self._localize(parsed))

    def _try_standard_formats(self, text: str) -> ParseResult:
        text = normalize_vietnamese_month(text)
        for fmt in self.formats:
            try:
                return ParseResult.success(self._localize(datetime.strptime(text, fmt)))
            except ValueError:
                continue
        return ParseResult.failure("no standard format matched")

    def _try_regex_extraction(self, text: str) -> ParseResult:
        text = normalize_vietnamese_month(text)
        for pattern, ambiguous in _REGEX_PATTERNS:
            match = pattern.search(text)
            if not match:
                continue
            first, second, third = (int(g) for g in match.groups())

            if ambiguous:
                year = third
                if year < 100:
                    year += 2000 if year <= 50 else 1900
                if self.prefers_month_first:
                    month, day = first, second
                else:
                    day, month = first, second
                if not (1 <= month <= 12 and 1 <= day <= 31):
                    day, month = month, day
            else:
                year, month, day = first, second, third

            if not (1 <= month <= 12 and 1 <= day <= 31 and 1900 <= year <= 2100):
                continue
            try:
                return ParseResult.success(datetime(year, month, day, tzinfo=self.timezone))
            except ValueError:
                # e.g. 31/02
                continue
        return ParseResult.failure("regex extraction failed")

    def _try_unix_timestamp(self, text: str) -> ParseResult:
        digits = re.sub(r"\D", "", text)
        if not digits:
            return ParseResult.failure("no digits")
        timestamp = int(digits)
        if timestamp > 10_000_000_000:
            timestamp //= 1000
        try:
            return ParseResult.success(datetime.fromtimestamp(timestamp, self.timezone))
        except (OverflowError, OSError, ValueError) as e:
            return ParseResult.failure(str(e))
