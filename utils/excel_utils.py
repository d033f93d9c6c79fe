import logging
import os
from collections.abc import Iterable

from openpyxl import Workbook

from domain.analytics import category_breakdown, total_amount
from domain.transactions import Transaction
from domain.wallets import Wallet

logger = logging.getLogger(__name__)

TRANSACTION_HEADERS = ["Ngày", "Loại", "Danh mục", "Nguồn tiền", "Ghi chú", "Số tiền (₫)"]
TYPE_LABELS = {"expense": "Chi", "income": "Thu"}


def export_ledger_to_xlsx(
    transactions: Iterable[Transaction],
    wallets: Iterable[Wallet],
    filepath: str,
) -> None:
    """Write transactions, expense breakdown and wallet balances to an XLSX workbook."""
    transactions = sorted(transactions, key=lambda t: t.date, reverse=True)
    wallets = list(wallets)
    wallet_names = {wallet.id: wallet.name for wallet in wallets}

    wb = Workbook()
    ws = wb.active
    ws.title = "Giao dịch"
    ws.append(TRANSACTION_HEADERS)
    for t in transactions:
        ws.append(
            [
                t.date.strftime("%Y-%m-%d %H:%M"),
                TYPE_LABELS[t.type.value],
                t.category,
                wallet_names.get(t.source, t.source.value),
                t.note,
                t.amount,
            ]
        )
    income = total_amount(t for t in transactions if t.is_income)
    expense = total_amount(t for t in transactions if t.is_expense)
    ws.append([])
    ws.append(["TỔNG THU", "", "", "", "", income])
    ws.append(["TỔNG CHI", "", "", "", "", expense])

    expenses = [t for t in transactions if t.is_expense]
    by_category = wb.create_sheet("Theo danh mục")
    by_category.append(["Danh mục", "Số tiền (₫)", "Tỷ lệ (%)"])
    for entry in category_breakdown(expenses):
        by_category.append([entry.name, entry.amount, entry.share_of(expense)])

    wallet_ws = wb.create_sheet("Ví")
    wallet_ws.append(["Ví", "Số dư (₫)"])
    for wallet in wallets:
        wallet_ws.append([wallet.name, wallet.balance])
    wallet_ws.append(["TỔNG", sum(w.balance for w in wallets)])

    directory = os.path.dirname(filepath)
    if directory:
        os.makedirs(directory, exist_ok=True)
    wb.save(filepath)
    wb.close()
    logger.info("Exported %s transactions to %s", len(transactions), filepath)
