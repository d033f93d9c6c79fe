from dataclasses import dataclass, field, fields
from datetime import date as dt_date
from datetime import datetime
from enum import Enum
from uuid import uuid4

from .errors import DomainError
from .validation import parse_ymd


class WalletType(str, Enum):
    CASH = "cash"
    BANK = "bank"
    EWALLET = "ewallet"

    @classmethod
    def parse(cls, value: "WalletType | str") -> "WalletType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError as exc:
            raise DomainError(f"Unknown wallet type: {value!r}") from exc


class TransactionType(str, Enum):
    EXPENSE = "expense"
    INCOME = "income"

    @classmethod
    def parse(cls, value: "TransactionType | str") -> "TransactionType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError as exc:
            raise DomainError(f"Unknown transaction type: {value!r}") from exc


def new_transaction_id() -> str:
    return uuid4().hex


def _coerce_datetime(value: datetime | dt_date | str) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, dt_date):
        return datetime(value.year, value.month, value.day)
    text = (value or "").strip()
    if not text:
        raise DomainError("Transaction date is empty")
    if len(text) == 10:
        day = parse_ymd(text)
        return datetime(day.year, day.month, day.day)
    try:
        return datetime.fromisoformat(text)
    except ValueError as exc:
        raise DomainError(f"Invalid transaction date: {value!r}") from exc


@dataclass(frozen=True)
class TransactionDraft:
    """Transaction fields as entered, before the ledger assigns an id."""

    amount: float
    category: str
    source: WalletType
    date: datetime
    note: str = ""
    type: TransactionType = TransactionType.EXPENSE

    def __post_init__(self) -> None:
        try:
            amount = float(self.amount)
        except (TypeError, ValueError) as exc:
            raise DomainError("amount must be a number") from exc
        object.__setattr__(self, "amount", amount)
        object.__setattr__(self, "category", str(self.category or ""))
        object.__setattr__(self, "source", WalletType.parse(self.source))
        object.__setattr__(self, "date", _coerce_datetime(self.date))
        object.__setattr__(self, "note", str(self.note or ""))
        object.__setattr__(self, "type", TransactionType.parse(self.type))

    @property
    def is_expense(self) -> bool:
        return self.type is TransactionType.EXPENSE

    @property
    def is_income(self) -> bool:
        return self.type is TransactionType.INCOME

    def signed_amount(self) -> float:
        """Effect on the source wallet: income adds, expense subtracts."""
        if self.is_income:
            return self.amount
        return -self.amount


@dataclass(frozen=True)
class Transaction(TransactionDraft):
    id: str = field(default_factory=new_transaction_id)

    @classmethod
    def from_draft(cls, draft: TransactionDraft, transaction_id: str | None = None) -> "Transaction":
        values = {f.name: getattr(draft, f.name) for f in fields(TransactionDraft)}
        if transaction_id is None:
            return cls(**values)
        return cls(**values, id=transaction_id)

    def to_draft(self) -> TransactionDraft:
        return TransactionDraft(**{f.name: getattr(self, f.name) for f in fields(TransactionDraft)})
