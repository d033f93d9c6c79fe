from unittest.mock import patch

from app.services import ClassificationResult, TransactionGuess
from domain.transactions import TransactionType, WalletType
from infrastructure.document_store import JsonFileDocumentStore
from main import main


def run(tmp_path, *argv):
    return main(["--document", str(tmp_path / "smartfin.json"), *argv])


def test_add_list_and_delete(tmp_path, capsys):
    assert run(tmp_path, "add", "55k", "--category", "Ăn uống", "--note", "Bún bò") == 0
    out = capsys.readouterr().out
    assert "-55.000 ₫" in out

    document = JsonFileDocumentStore(str(tmp_path / "smartfin.json")).load("user_default")
    transaction_id = document["transactions"][0]["id"]
    assert document["wallets"][0]["balance"] == 1_445_000

    assert run(tmp_path, "list", "--search", "bun bo") == 0
    assert "Bún bò" in capsys.readouterr().out

    assert run(tmp_path, "delete", transaction_id[:8]) == 0
    document = JsonFileDocumentStore(str(tmp_path / "smartfin.json")).load("user_default")
    assert document["transactions"] == []
    assert document["wallets"][0]["balance"] == 1_500_000


def test_add_rejects_zero_amount(tmp_path, capsys):
    assert run(tmp_path, "add", "abc") == 1
    assert "Số tiền không hợp lệ." in capsys.readouterr().out


def test_unknown_id(tmp_path, capsys):
    assert run(tmp_path, "delete", "nope") == 1


def test_settings_commands(tmp_path, capsys):
    assert run(tmp_path, "set-budget", "4000000") == 0
    assert "1.000.000 ₫" in capsys.readouterr().out

    assert run(tmp_path, "set-balance", "cash=2.000.000") == 0
    assert "2.000.000 ₫" in capsys.readouterr().out

    assert run(tmp_path, "dark-mode", "on") == 0
    document = JsonFileDocumentStore(str(tmp_path / "smartfin.json")).load("user_default")
    assert document["budgetConfig"] == {"limit": 4_000_000}
    assert document["darkMode"] is True


def test_reports_render(tmp_path, capsys):
    run(tmp_path, "add", "100000")
    capsys.readouterr()

    assert run(tmp_path, "insights", "--mode", "month") == 0
    out = capsys.readouterr().out
    assert "Tổng chi: 100.000 ₫" in out
    assert "Ngày chi cao nhất: 100.000 ₫" in out
    assert run(tmp_path, "overview") == 0
    assert "Chi: 100.000 ₫" in capsys.readouterr().out
    assert run(tmp_path, "wallets") == 0
    assert "Tiền mặt" in capsys.readouterr().out
    assert run(tmp_path, "day") == 0


def test_export(tmp_path, capsys):
    target = tmp_path / "export.xlsx"
    assert run(tmp_path, "export", str(target)) == 0
    assert target.exists()


def test_invalid_wallet_reports_error(tmp_path, capsys):
    assert run(tmp_path, "set-balance", "crypto=5") == 2
    assert "Lỗi" in capsys.readouterr().out


def test_classify_and_save(tmp_path, capsys):
    guess = TransactionGuess(30_000, TransactionType.EXPENSE, "Ăn uống", WalletType.EWALLET, "Cafe")
    with patch("main.TransactionClassifier") as classifier_cls:
        classifier_cls.return_value.classify.return_value = ClassificationResult(guess)
        assert run(tmp_path, "classify", "cafe 30k momo", "--save") == 0

    document = JsonFileDocumentStore(str(tmp_path / "smartfin.json")).load("user_default")
    assert document["transactions"][0]["source"] == "ewallet"
    assert document["wallets"][2]["balance"] == 420_000


def test_edit_keeps_stored_fields(tmp_path, capsys):
    assert run(
        tmp_path, "add", "1000000", "--type", "income", "--source", "bank",
        "--category", "Lương", "--note", "salary", "--day", "2024-05-05",
    ) == 0
    document = JsonFileDocumentStore(str(tmp_path / "smartfin.json")).load("user_default")
    stored = document["transactions"][0]
    capsys.readouterr()

    assert run(tmp_path, "edit", stored["id"][:8], "1200000") == 0
    assert "+1.200.000 ₫" in capsys.readouterr().out

    document = JsonFileDocumentStore(str(tmp_path / "smartfin.json")).load("user_default")
    edited = document["transactions"][0]
    assert (edited["type"], edited["source"], edited["category"], edited["note"]) == (
        "income", "bank", "Lương", "salary",
    )
    assert edited["date"] == stored["date"]
    assert document["wallets"][1]["balance"] == 13_700_000
    assert document["wallets"][0]["balance"] == 1_500_000


def test_edit_single_option(tmp_path, capsys):
    run(tmp_path, "add", "40000", "--note", "Phở")
    document = JsonFileDocumentStore(str(tmp_path / "smartfin.json")).load("user_default")
    transaction_id = document["transactions"][0]["id"]

    assert run(tmp_path, "edit", transaction_id[:8], "--source", "ewallet") == 0

    document = JsonFileDocumentStore(str(tmp_path / "smartfin.json")).load("user_default")
    assert document["transactions"][0]["amount"] == 40_000
    assert document["transactions"][0]["note"] == "Phở"
    assert document["wallets"][0]["balance"] == 1_500_000
    assert document["wallets"][2]["balance"] == 410_000


def test_invalid_day_reports_error(tmp_path, capsys):
    assert run(tmp_path, "add", "50000", "--day", "2024-02-30") == 2
    assert "Lỗi" in capsys.readouterr().out
    assert run(tmp_path, "list", "--day", "15/05/2024") == 2
    assert run(tmp_path, "day", "--day", "2024-13-01") == 2


def test_calendar_marks_days(tmp_path, capsys):
    run(tmp_path, "add", "50000", "--day", "2024-05-15")
    run(tmp_path, "add", "90000", "--type", "income", "--day", "2024-05-15")
    run(tmp_path, "add", "20000", "--day", "2024-05-03")
    capsys.readouterr()

    assert run(tmp_path, "calendar", "--day", "2024-05-15") == 0
    out = capsys.readouterr().out
    assert "Tháng 5/2024" in out
    assert "[15+-]" in out
    assert " 3- " in out

    assert run(tmp_path, "calendar", "--mode", "week", "--day", "2024-05-15", "--offset", "1") == 0
    out = capsys.readouterr().out
    assert "Tuần 4 - Tháng 5/2024" in out
    assert "[22]" in out
    assert "15+-" not in out


def test_categories_lists_note_suggestions(tmp_path, capsys):
    assert run(tmp_path, "categories") == 0
    out = capsys.readouterr().out
    assert "Hóa đơn" in out
    assert "Tiền điện" in out
