import calendar
import re
from datetime import date

from .errors import DomainError

_SHORTHAND_THOUSAND = re.compile("k", re.IGNORECASE)
_NON_DIGITS = re.compile(r"\D")


def parse_ymd(value: str | date) -> date:
    if isinstance(value, date):
        return value
    text = (value or "").strip()
    if not text:
        raise DomainError("Date value is empty")
    if not re.fullmatch(r"\d{4}-\d{2}-\d{2}", text):
        raise DomainError("Invalid date format")
    year, month, day = map(int, text.split("-"))
    if not (1 <= month <= 12):
        raise DomainError("Invalid month")
    last_day = calendar.monthrange(year, month)[1]
    if not (1 <= day <= last_day):
        raise DomainError("Invalid day")
    return date(year, month, day)


def normalize_amount_input(raw: str | None) -> str:
    """Digits-only form of a typed amount; the first "k" stands for three zeros."""
    text = str(raw or "")
    text = _SHORTHAND_THOUSAND.sub("000", text, count=1)
    return _NON_DIGITS.sub("", text)


def parse_amount_input(raw) -> float:
    """Parse user-entered money. Anything unparseable becomes 0."""
    if isinstance(raw, bool):
        return 0.0
    if isinstance(raw, (int, float)):
        return float(raw)
    digits = normalize_amount_input(raw)
    if not digits:
        return 0.0
    return float(digits)
