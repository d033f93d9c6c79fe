"""Free-text transaction search.

A query is read left to right as: an optional time phrase, an optional wallet
phrase, an optional income intent word, and whatever is left over. Recognised
time and wallet phrases become hard constraints and are removed from the
query; income words only constrain when they are the whole remaining query and
stay in it, so "luong" still finds notes such as "Tiền lương". The leftover is
matched as a substring of the note, the category or the amount.
"""

import unicodedata
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta
from enum import Enum

from utils.formatting import format_amount_text

from .periods import Period, end_of_day, month_bounds, start_of_day
from .transactions import Transaction, TransactionType, WalletType


class TypeFilter(str, Enum):
    ALL = "all"
    EXPENSE = "expense"
    INCOME = "income"


def _day(now: datetime) -> Period:
    return Period(start_of_day(now), end_of_day(now))


def _last_month(now: datetime) -> Period:
    return month_bounds(datetime(now.year, now.month, 1) - timedelta(days=1))


# Month phrases are checked before day phrases; at most one applies.
TIME_PHRASES: list[tuple[str, Callable[[datetime], Period]]] = [
    ("thang truoc", _last_month),
    ("thang nay", month_bounds),
    ("hom nay", _day),
    ("hom qua", lambda now: _day(now - timedelta(days=1))),
]

SOURCE_PHRASES: list[tuple[str, WalletType]] = [
    ("tien mat", WalletType.CASH),
    ("ngan hang", WalletType.BANK),
    ("vi", WalletType.EWALLET),
]

INCOME_WORDS = ("thu", "luong")
THOUSAND_SUFFIX = "k"


def normalize_text(value: str | None) -> str:
    """Lowercase and strip Vietnamese diacritics ("Hóa đơn" -> "hoa don")."""
    decomposed = unicodedata.normalize("NFD", value or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.replace("đ", "d").replace("Đ", "D").lower()


def _strip_phrase(term: str, phrase: str) -> str:
    return term.replace(phrase, "", 1).strip()


def _expand_thousands(term: str) -> str:
    if term.endswith(THOUSAND_SUFFIX):
        return term[: -len(THOUSAND_SUFFIX)] + "000"
    return term


def matches_query(transaction: Transaction, query: str, now: datetime | None = None) -> bool:
    term = normalize_text(query.strip() if query else "")
    if not term:
        return True
    now = now or datetime.now()

    for phrase, period_for in TIME_PHRASES:
        if phrase in term:
            if not period_for(now).contains(transaction.date):
                return False
            term = _strip_phrase(term, phrase)
            break

    for phrase, source in SOURCE_PHRASES:
        if phrase in term:
            if transaction.source is not source:
                return False
            term = _strip_phrase(term, phrase)
            break

    if any(word in term for word in INCOME_WORDS):
        if term in INCOME_WORDS and transaction.type is not TransactionType.INCOME:
            return False

    if not term:
        return True

    note = normalize_text(transaction.note)
    category = normalize_text(transaction.category)
    amount_text = format_amount_text(transaction.amount)
    return term in note or term in category or _expand_thousands(term) in amount_text


def filter_by_type(
    transactions: Iterable[Transaction], type_filter: TypeFilter | str = TypeFilter.ALL
) -> list[Transaction]:
    type_filter = TypeFilter(type_filter)
    if type_filter is TypeFilter.ALL:
        return list(transactions)
    return [t for t in transactions if t.type.value == type_filter.value]


def history_view(
    transactions: Iterable[Transaction],
    *,
    query: str = "",
    type_filter: TypeFilter | str = TypeFilter.ALL,
    selected_day: datetime | None = None,
    now: datetime | None = None,
) -> list[Transaction]:
    """Transactions for the history list, newest first.

    With a non-blank query the search ignores the selected day; without one
    only the selected day (default: today) is shown.
    """
    now = now or datetime.now()
    items = filter_by_type(transactions, type_filter)
    if query and query.strip():
        items = [t for t in items if matches_query(t, query, now)]
    else:
        day = _day(selected_day or now)
        items = [t for t in items if day.contains(t.date)]
    return sorted(items, key=lambda t: t.date, reverse=True)
