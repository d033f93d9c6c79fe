import logging
import threading
from collections.abc import Mapping
from datetime import date as dt_date
from datetime import datetime

from domain.analytics import PeriodInsights, build_insights
from domain.budget import BudgetConfig, ViewMode
from domain.ledger import Ledger
from domain.overview import DayMarker, DaySummary, MonthOverview, day_markers, day_summary, month_overview
from domain.search import TypeFilter, history_view
from domain.transactions import Transaction, TransactionDraft, WalletType
from domain.wallets import Wallet
from infrastructure.codec import document_to_snapshot, ledger_to_document
from infrastructure.document_store import DocumentStore, Unsubscribe
from infrastructure.sync import DebouncedWriter

logger = logging.getLogger(__name__)

DEFAULT_USER_ID = "user_default"


class LedgerSession:
    """Owns the ledger and mirrors it to a document store.

    The session subscribes to the user's document on ``start()``; every
    snapshot replaces the in-memory ledger. Local mutations schedule a
    debounced full-document write, but only after the first snapshot has
    arrived, so defaults never overwrite real remote data.
    """

    def __init__(
        self,
        store: DocumentStore,
        user_id: str = DEFAULT_USER_ID,
        *,
        debounce_seconds: float = 1.5,
        ledger: Ledger | None = None,
        dark_mode: bool = False,
    ) -> None:
        self._store = store
        self._user_id = user_id
        self._ledger = ledger or Ledger()
        self._dark_mode = bool(dark_mode)
        self._loaded = False
        self._lock = threading.RLock()
        self._writer = DebouncedWriter(self._write_document, delay=debounce_seconds)
        self._unsubscribe: Unsubscribe | None = None

    def __enter__(self) -> "LedgerSession":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def dark_mode(self) -> bool:
        return self._dark_mode

    @property
    def write_pending(self) -> bool:
        return self._writer.pending

    def start(self) -> None:
        if self._unsubscribe is not None:
            return
        self._unsubscribe = self._store.subscribe(self._user_id, self._on_snapshot)

    def close(self) -> None:
        self._writer.flush()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def flush(self) -> None:
        self._writer.flush()

    def _on_snapshot(self, document: dict | None) -> None:
        with self._lock:
            if document is not None:
                snapshot = document_to_snapshot(document)
                self._ledger.replace_state(
                    transactions=snapshot.transactions,
                    wallets=snapshot.wallets,
                    budget=snapshot.budget,
                )
                if snapshot.dark_mode is not None:
                    self._dark_mode = snapshot.dark_mode
                logger.debug(
                    "Snapshot applied user=%s transactions=%s",
                    self._user_id,
                    len(snapshot.transactions),
                )
            if not self._loaded:
                logger.info("Ledger loaded user=%s from_store=%s", self._user_id, document is not None)
            self._loaded = True

    def _write_document(self) -> None:
        with self._lock:
            document = ledger_to_document(self._ledger, self._dark_mode)
            self._store.save(self._user_id, document, merge=True)
        logger.info(
            "Ledger synced user=%s transactions=%s",
            self._user_id,
            len(document["transactions"]),
        )

    def _changed(self) -> None:
        if not self._loaded:
            logger.debug("Change not synced, ledger not loaded yet")
            return
        self._writer.schedule()

    def add_transaction(self, draft: TransactionDraft) -> Transaction:
        with self._lock:
            transaction = self._ledger.add(draft)
        self._changed()
        return transaction

    def edit_transaction(self, transaction_id: str, draft: TransactionDraft) -> Transaction | None:
        with self._lock:
            updated = self._ledger.edit(transaction_id, draft)
        if updated is not None:
            self._changed()
        return updated

    def delete_transaction(self, transaction_id: str) -> Transaction | None:
        with self._lock:
            removed = self._ledger.delete(transaction_id)
        if removed is not None:
            self._changed()
        return removed

    def set_wallet_balances(self, balances: Mapping[WalletType | str, float]) -> list[Wallet]:
        with self._lock:
            self._ledger.set_wallet_balances(balances)
            wallets = self._ledger.wallets
        self._changed()
        return wallets

    def set_budget_limit(self, limit: float) -> BudgetConfig:
        with self._lock:
            budget = self._ledger.set_budget_limit(limit)
        self._changed()
        return budget

    def set_dark_mode(self, enabled: bool) -> None:
        with self._lock:
            self._dark_mode = bool(enabled)
        self._changed()

    def insights(self, mode: ViewMode | str, now: datetime | None = None) -> PeriodInsights:
        with self._lock:
            transactions = self._ledger.transactions
            budget = self._ledger.budget
        return build_insights(transactions, budget, now or datetime.now(), mode)

    def overview(self, now: datetime | None = None) -> MonthOverview:
        with self._lock:
            return month_overview(self._ledger.transactions, self._ledger.budget, now or datetime.now())

    def day_summary(self, day: datetime) -> DaySummary:
        with self._lock:
            return day_summary(self._ledger.transactions, self._ledger.budget, day)

    def day_markers(self) -> dict[dt_date, DayMarker]:
        with self._lock:
            return day_markers(self._ledger.transactions)

    def history(
        self,
        *,
        query: str = "",
        type_filter: TypeFilter | str = TypeFilter.ALL,
        selected_day: datetime | None = None,
        now: datetime | None = None,
    ) -> list[Transaction]:
        with self._lock:
            transactions = self._ledger.transactions
        return history_view(
            transactions,
            query=query,
            type_filter=type_filter,
            selected_day=selected_day,
            now=now,
        )
