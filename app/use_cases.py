import logging
from datetime import datetime

from domain.analytics import PeriodInsights
from domain.budget import BudgetConfig, ViewMode
from domain.categories import categories_for
from domain.overview import DaySummary, MonthOverview
from domain.search import TypeFilter
from domain.transactions import Transaction, TransactionDraft, TransactionType, WalletType
from domain.validation import parse_amount_input, parse_ymd
from domain.wallets import Wallet

from .session import LedgerSession

logger = logging.getLogger(__name__)


def compose_transaction_date(day: str | None, now: datetime | None = None) -> datetime:
    """Selected calendar day combined with the current time of day (minutes)."""
    now = now or datetime.now()
    if not (day or "").strip():
        return now.replace(second=0, microsecond=0)
    selected = parse_ymd(day)
    return datetime(selected.year, selected.month, selected.day, now.hour, now.minute)


def _build_draft(
    *,
    amount: float,
    category: str | None,
    source: WalletType | str,
    note: str,
    transaction_type: TransactionType | str,
    date: datetime,
) -> TransactionDraft:
    transaction_type = TransactionType.parse(transaction_type)
    return TransactionDraft(
        amount=amount,
        category=category or categories_for(transaction_type)[0],
        source=source,
        date=date,
        note=note.strip(),
        type=transaction_type,
    )


class AddTransaction:
    def __init__(self, session: LedgerSession):
        self._session = session

    def execute(
        self,
        *,
        amount,
        category: str | None = None,
        source: WalletType | str = WalletType.CASH,
        note: str = "",
        transaction_type: TransactionType | str = TransactionType.EXPENSE,
        day: str | None = None,
        now: datetime | None = None,
    ) -> Transaction | None:
        """Create a transaction from form input. Zero or unparseable amounts are refused."""
        value = parse_amount_input(amount)
        if not value:
            logger.info("Add refused, amount is zero or unparseable: %r", amount)
            return None
        draft = _build_draft(
            amount=value,
            category=category,
            source=source,
            note=note,
            transaction_type=transaction_type,
            date=compose_transaction_date(day, now),
        )
        return self._session.add_transaction(draft)


class EditTransaction:
    def __init__(self, session: LedgerSession):
        self._session = session

    def execute(
        self,
        transaction_id: str,
        *,
        amount=None,
        category: str | None = None,
        source: WalletType | str | None = None,
        note: str | None = None,
        transaction_type: TransactionType | str | None = None,
        day: str | None = None,
        now: datetime | None = None,
    ) -> Transaction | None:
        """Replace a transaction. Fields left as None keep the stored value.

        Without ``day`` the stored date and time are kept as they are.
        """
        current = self._session.ledger.get(transaction_id)
        if current is None:
            logger.debug("Edit ignored, unknown transaction id=%s", transaction_id)
            return None
        value = current.amount if amount is None else parse_amount_input(amount)
        if not value:
            logger.info("Edit refused, amount is zero or unparseable: %r", amount)
            return None
        new_type = current.type if transaction_type is None else TransactionType.parse(transaction_type)
        if category is None and current.category in categories_for(new_type):
            category = current.category
        draft = _build_draft(
            amount=value,
            category=category,
            source=current.source if source is None else source,
            note=current.note if note is None else note,
            transaction_type=new_type,
            date=current.date if day is None else compose_transaction_date(day, now),
        )
        return self._session.edit_transaction(transaction_id, draft)


class DeleteTransaction:
    def __init__(self, session: LedgerSession):
        self._session = session

    def execute(self, transaction_id: str) -> bool:
        """Returns True if a transaction was removed."""
        return self._session.delete_transaction(transaction_id) is not None


class SetWalletBalances:
    def __init__(self, session: LedgerSession):
        self._session = session

    def execute(self, balances: dict) -> list[Wallet]:
        """Manual reconciliation; malformed entries become 0."""
        parsed = {
            WalletType.parse(wallet_id): parse_amount_input(raw)
            for wallet_id, raw in balances.items()
        }
        return self._session.set_wallet_balances(parsed)


class SetBudgetLimit:
    def __init__(self, session: LedgerSession):
        self._session = session

    def execute(self, limit) -> BudgetConfig:
        return self._session.set_budget_limit(parse_amount_input(limit))


class BuildInsights:
    def __init__(self, session: LedgerSession):
        self._session = session

    def execute(self, mode: ViewMode | str = ViewMode.WEEK, now: datetime | None = None) -> PeriodInsights:
        return self._session.insights(mode, now)


class BuildOverview:
    def __init__(self, session: LedgerSession):
        self._session = session

    def execute(self, now: datetime | None = None) -> MonthOverview:
        return self._session.overview(now)


class SummarizeDay:
    def __init__(self, session: LedgerSession):
        self._session = session

    def execute(self, day: datetime | None = None) -> DaySummary:
        return self._session.day_summary(day or datetime.now())


class SearchHistory:
    def __init__(self, session: LedgerSession):
        self._session = session

    def execute(
        self,
        *,
        query: str = "",
        type_filter: TypeFilter | str = TypeFilter.ALL,
        selected_day: datetime | None = None,
        now: datetime | None = None,
    ) -> list[Transaction]:
        return self._session.history(
            query=query, type_filter=type_filter, selected_day=selected_day, now=now
        )
