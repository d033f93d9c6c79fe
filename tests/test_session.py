import copy
from datetime import datetime

import pytest

from app.session import LedgerSession
from domain.budget import ViewMode
from domain.transactions import TransactionDraft, WalletType
from infrastructure.document_store import DocumentStore, JsonFileDocumentStore

NOW = datetime(2024, 5, 15, 12, 0)


class FakeStore(DocumentStore):
    """Holds documents in memory; snapshots are pushed manually with ``deliver``."""

    def __init__(self):
        self.documents = {}
        self.saves = []
        self.callbacks = {}

    def load(self, key):
        return copy.deepcopy(self.documents.get(key))

    def save(self, key, document, *, merge=True):
        self.saves.append(copy.deepcopy(document))
        self.documents[key] = {**self.documents.get(key, {}), **document} if merge else dict(document)

    def subscribe(self, key, callback):
        self.callbacks[key] = callback
        return lambda: self.callbacks.pop(key, None)

    def deliver(self, key, document):
        self.callbacks[key](copy.deepcopy(document))


def food(amount=55_000, source=WalletType.CASH):
    return TransactionDraft(amount=amount, category="Ăn uống", source=source, date=NOW)


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def session(store):
    session = LedgerSession(store, "u", debounce_seconds=60)
    session.start()
    yield session
    session.close()


class TestLoadedGate:
    def test_no_write_before_first_snapshot(self, store, session):
        session.add_transaction(food())

        assert not session.is_loaded
        assert not session.write_pending
        session.flush()
        assert store.saves == []

    def test_writes_after_empty_snapshot(self, store, session):
        store.deliver("u", None)
        assert session.is_loaded

        session.add_transaction(food())
        assert session.write_pending
        session.flush()

        assert len(store.saves) == 1
        assert store.saves[0]["wallets"][0]["balance"] == 1_445_000


class TestSnapshots:
    def test_snapshot_replaces_state_without_scheduling_write(self, store, session):
        store.deliver(
            "u",
            {
                "transactions": [
                    {"id": "r1", "amount": 20_000, "category": "Cafe", "source": "cash",
                     "date": "2024-05-15T08:00:00", "note": "", "type": "expense"}
                ],
                "wallets": [{"id": "cash", "name": "Tiền mặt", "balance": 99}],
                "budgetConfig": {"limit": 4_000_000},
                "darkMode": True,
            },
        )

        assert [t.id for t in session.ledger.transactions] == ["r1"]
        assert session.ledger.wallet("cash").balance == 99
        assert session.ledger.budget.weekly_limit == 1_000_000
        assert session.dark_mode is True
        assert not session.write_pending

    def test_snapshot_without_dark_mode_keeps_local_flag(self, store):
        session = LedgerSession(store, "u", debounce_seconds=60, dark_mode=True)
        session.start()
        store.deliver("u", {"transactions": []})
        assert session.dark_mode is True
        session.close()


class TestDebouncedSync:
    def test_burst_of_mutations_writes_final_state_once(self, store, session):
        store.deliver("u", None)
        first = session.add_transaction(food(10_000))
        session.add_transaction(food(20_000))
        session.delete_transaction(first.id)
        session.set_budget_limit(4_000_000)

        session.flush()

        assert len(store.saves) == 1
        document = store.saves[0]
        assert [t["amount"] for t in document["transactions"]] == [20_000]
        assert document["budgetConfig"] == {"limit": 4_000_000}

    def test_unknown_id_does_not_schedule_write(self, store, session):
        store.deliver("u", None)
        assert session.delete_transaction("missing") is None
        assert session.edit_transaction("missing", food()) is None
        assert not session.write_pending

    def test_close_flushes_and_unsubscribes(self, store):
        session = LedgerSession(store, "u", debounce_seconds=60)
        session.start()
        store.deliver("u", None)
        session.set_dark_mode(True)

        session.close()

        assert store.saves[-1]["darkMode"] is True
        assert "u" not in store.callbacks


class TestViews:
    def test_views_follow_ledger(self, store, session):
        store.deliver("u", None)
        session.add_transaction(food(100_000))

        assert session.insights(ViewMode.WEEK, NOW).total_expense == 100_000
        assert session.overview(NOW).expense == 100_000
        assert session.day_summary(NOW).expense == 100_000
        assert NOW.date() in session.day_markers()
        assert len(session.history(query="an uong", now=NOW)) == 1

    def test_balance_override_keeps_aggregates(self, store, session):
        store.deliver("u", None)
        session.add_transaction(food(100_000))
        before = session.insights(ViewMode.MONTH, NOW)

        session.set_wallet_balances({"cash": 5})

        after = session.insights(ViewMode.MONTH, NOW)
        assert after.total_expense == before.total_expense
        assert session.ledger.wallet("cash").balance == 5


def test_end_to_end_with_json_store(tmp_path):
    path = str(tmp_path / "smartfin.json")

    with LedgerSession(JsonFileDocumentStore(path), "user_default", debounce_seconds=60) as session:
        created = session.add_transaction(food())

    with LedgerSession(JsonFileDocumentStore(path), "user_default", debounce_seconds=60) as session:
        assert session.is_loaded
        assert [t.id for t in session.ledger.transactions] == [created.id]
        assert session.ledger.wallet("cash").balance == 1_445_000
        session.delete_transaction(created.id)

    with LedgerSession(JsonFileDocumentStore(path), "user_default", debounce_seconds=60) as session:
        assert session.ledger.transactions == []
        assert session.ledger.wallet("cash").balance == 1_500_000
