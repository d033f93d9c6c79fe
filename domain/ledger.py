import logging
from collections.abc import Iterable, Mapping
from dataclasses import replace

from .budget import BudgetConfig
from .transactions import Transaction, TransactionDraft, WalletType
from .wallets import WALLET_ORDER, Wallet, default_wallets

logger = logging.getLogger(__name__)

DEFAULT_BUDGET_LIMIT = 5_000_000.0


def _apply_effect(
    wallets: dict[WalletType, Wallet], transaction: TransactionDraft, sign: float
) -> None:
    wallet = wallets.get(transaction.source)
    if wallet is None:
        logger.warning("No wallet for source=%s, balance left untouched", transaction.source)
        return
    wallets[transaction.source] = wallet.adjusted(sign * transaction.signed_amount())


class Ledger:
    """In-memory transactions, wallets and budget; the single source of truth.

    Every mutation that touches a transaction also adjusts the affected wallet,
    so a wallet balance always equals its last manual override plus the signed
    effect of the transactions applied since.
    """

    def __init__(
        self,
        transactions: Iterable[Transaction] = (),
        wallets: Iterable[Wallet] | None = None,
        budget: BudgetConfig | None = None,
    ) -> None:
        self._transactions: list[Transaction] = list(transactions)
        self._wallets = self._index_wallets(default_wallets() if wallets is None else wallets)
        self._budget = budget or BudgetConfig(DEFAULT_BUDGET_LIMIT)

    @staticmethod
    def _index_wallets(wallets: Iterable[Wallet]) -> dict[WalletType, Wallet]:
        indexed = {wallet.id: wallet for wallet in default_wallets()}
        for wallet in wallets:
            indexed[wallet.id] = wallet
        return indexed

    @property
    def transactions(self) -> list[Transaction]:
        """Stored order (new transactions are prepended)."""
        return list(self._transactions)

    def newest_first(self) -> list[Transaction]:
        return sorted(self._transactions, key=lambda t: t.date, reverse=True)

    @property
    def wallets(self) -> list[Wallet]:
        return [self._wallets[wallet_id] for wallet_id in WALLET_ORDER]

    @property
    def budget(self) -> BudgetConfig:
        return self._budget

    def wallet(self, wallet_id: WalletType | str) -> Wallet:
        return self._wallets[WalletType.parse(wallet_id)]

    def total_balance(self) -> float:
        return sum(wallet.balance for wallet in self._wallets.values())

    def get(self, transaction_id: str) -> Transaction | None:
        return next((t for t in self._transactions if t.id == transaction_id), None)

    def add(self, draft: TransactionDraft) -> Transaction:
        transaction = Transaction.from_draft(draft)
        self._transactions.insert(0, transaction)
        _apply_effect(self._wallets, transaction, 1.0)
        logger.info(
            "Transaction added id=%s type=%s source=%s amount=%s category=%s",
            transaction.id,
            transaction.type.value,
            transaction.source.value,
            transaction.amount,
            transaction.category,
        )
        return transaction

    def delete(self, transaction_id: str) -> Transaction | None:
        transaction = self.get(transaction_id)
        if transaction is None:
            logger.debug("Delete ignored, unknown transaction id=%s", transaction_id)
            return None
        self._transactions = [t for t in self._transactions if t.id != transaction_id]
        _apply_effect(self._wallets, transaction, -1.0)
        logger.info("Transaction deleted id=%s", transaction_id)
        return transaction

    def edit(self, transaction_id: str, draft: TransactionDraft) -> Transaction | None:
        old = self.get(transaction_id)
        if old is None:
            logger.debug("Edit ignored, unknown transaction id=%s", transaction_id)
            return None
        # Revert and re-apply on one snapshot so old source == new source nets out once.
        wallets = dict(self._wallets)
        _apply_effect(wallets, old, -1.0)
        _apply_effect(wallets, draft, 1.0)
        updated = Transaction.from_draft(draft, transaction_id=old.id)
        self._wallets = wallets
        self._transactions = [updated if t.id == old.id else t for t in self._transactions]
        logger.info(
            "Transaction edited id=%s source=%s->%s amount=%s->%s",
            old.id,
            old.source.value,
            updated.source.value,
            old.amount,
            updated.amount,
        )
        return updated

    def set_wallet_balance(self, wallet_id: WalletType | str, balance: float) -> Wallet:
        wallet = self.wallet(wallet_id).with_balance(balance)
        self._wallets[wallet.id] = wallet
        logger.info("Wallet balance overridden id=%s balance=%s", wallet.id.value, wallet.balance)
        return wallet

    def set_wallet_balances(self, balances: Mapping[WalletType | str, float]) -> None:
        for wallet_id, balance in balances.items():
            self.set_wallet_balance(wallet_id, balance)

    def set_budget_limit(self, limit: float) -> BudgetConfig:
        self._budget = replace(self._budget, limit=float(limit))
        logger.info("Budget limit set limit=%s", self._budget.limit)
        return self._budget

    def replace_state(
        self,
        *,
        transactions: Iterable[Transaction],
        wallets: Iterable[Wallet],
        budget: BudgetConfig,
    ) -> None:
        """Rehydrate from a stored snapshot; no balance side effects."""
        self._transactions = list(transactions)
        self._wallets = self._index_wallets(wallets)
        self._budget = budget
