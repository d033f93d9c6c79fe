"""Conversion between the in-memory ledger and the stored user document.

Document shape::

    {
        "transactions": [{"id", "amount", "category", "source", "date", "note", "type"}],
        "wallets": [{"id", "name", "balance", "icon", "color"}],
        "budgetConfig": {"limit": float},
        "darkMode": bool,
    }
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone

from domain.budget import BudgetConfig
from domain.ledger import DEFAULT_BUDGET_LIMIT, Ledger
from domain.transactions import Transaction, new_transaction_id
from domain.wallets import Wallet, default_wallets

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentSnapshot:
    transactions: list[Transaction]
    wallets: list[Wallet]
    budget: BudgetConfig
    dark_mode: bool | None = None


def _as_float(value, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def parse_timestamp(value) -> datetime:
    """Accept ISO strings, datetimes, epoch milliseconds or {seconds, nanoseconds}."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, Mapping) and "seconds" in value:
        seconds = _as_float(value.get("seconds")) + _as_float(value.get("nanoseconds")) / 1e9
        return datetime.fromtimestamp(seconds, tz=timezone.utc).astimezone().replace(tzinfo=None)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc).astimezone().replace(
            tzinfo=None
        )
    text = str(value or "").strip()
    if not text:
        raise ValueError("Timestamp is empty")
    parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def transaction_to_dict(transaction: Transaction) -> dict:
    return {
        "id": transaction.id,
        "amount": transaction.amount,
        "category": transaction.category,
        "source": transaction.source.value,
        "date": transaction.date.isoformat(),
        "note": transaction.note,
        "type": transaction.type.value,
    }


def transaction_from_dict(item: Mapping) -> Transaction:
    transaction_id = str(item.get("id", "") or "")
    if not transaction_id:
        transaction_id = new_transaction_id()
        logger.warning("Stored transaction without id, assigned id=%s", transaction_id)
    return Transaction(
        id=transaction_id,
        amount=_as_float(item.get("amount"), 0.0),
        category=str(item.get("category", "") or ""),
        source=item.get("source", ""),
        date=parse_timestamp(item.get("date")),
        note=str(item.get("note", "") or ""),
        type=item.get("type", ""),
    )


def wallet_to_dict(wallet: Wallet) -> dict:
    return {
        "id": wallet.id.value,
        "name": wallet.name,
        "balance": wallet.balance,
        "icon": wallet.icon,
        "color": wallet.color,
    }


def wallet_from_dict(item: Mapping) -> Wallet:
    return Wallet(
        id=item.get("id", ""),
        name=str(item.get("name", "") or ""),
        balance=_as_float(item.get("balance"), 0.0),
        icon=str(item.get("icon", "") or ""),
        color=str(item.get("color", "") or ""),
    )


def ledger_to_document(ledger: Ledger, dark_mode: bool) -> dict:
    return {
        "transactions": [transaction_to_dict(t) for t in ledger.transactions],
        "wallets": [wallet_to_dict(w) for w in ledger.wallets],
        "budgetConfig": {"limit": ledger.budget.limit},
        "darkMode": bool(dark_mode),
    }


def document_to_snapshot(document: Mapping) -> DocumentSnapshot:
    transactions: list[Transaction] = []
    for index, item in enumerate(document.get("transactions") or []):
        if not isinstance(item, Mapping):
            logger.warning("Skipping non-dict transaction at index %s", index)
            continue
        try:
            transactions.append(transaction_from_dict(item))
        except ValueError:
            logger.exception("Skipping invalid transaction at index %s", index)

    wallets: list[Wallet] = []
    for index, item in enumerate(document.get("wallets") or []):
        if not isinstance(item, Mapping):
            logger.warning("Skipping non-dict wallet at index %s", index)
            continue
        try:
            wallets.append(wallet_from_dict(item))
        except ValueError:
            logger.exception("Skipping invalid wallet at index %s", index)
    if not wallets:
        wallets = default_wallets()

    budget_raw = document.get("budgetConfig")
    if isinstance(budget_raw, Mapping):
        budget = BudgetConfig(_as_float(budget_raw.get("limit"), 0.0))
    else:
        budget = BudgetConfig(DEFAULT_BUDGET_LIMIT)

    dark_mode = document.get("darkMode")
    return DocumentSnapshot(
        transactions=transactions,
        wallets=wallets,
        budget=budget,
        dark_mode=bool(dark_mode) if dark_mode is not None else None,
    )
