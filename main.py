import argparse
import logging
import sys
from datetime import date as dt_date
from datetime import datetime

from prettytable import PrettyTable

from app.services import TransactionClassifier
from app.session import LedgerSession
from app.use_cases import (
    AddTransaction,
    BuildInsights,
    BuildOverview,
    DeleteTransaction,
    EditTransaction,
    SearchHistory,
    SetBudgetLimit,
    SetWalletBalances,
    SummarizeDay,
)
from bootstrap import bootstrap_session
from config import LOG_LEVEL
from domain.analytics import PeriodInsights
from domain.categories import categories_for, note_suggestions
from domain.errors import DomainError
from domain.overview import DayMarker, DaySummary, DaySummaryState, MonthOverview
from domain.transactions import Transaction
from domain.validation import parse_ymd
from domain.wallets import Wallet
from utils.calendar_grid import calendar_days, shift_selection, week_of_month
from utils.excel_utils import export_ledger_to_xlsx
from utils.formatting import format_compact_money, format_currency, round_half_up

logger = logging.getLogger(__name__)

TYPE_LABELS = {"expense": "Chi", "income": "Thu"}


def _signed(transaction: Transaction) -> str:
    sign = "+" if transaction.is_income else "-"
    return f"{sign}{format_currency(transaction.amount)}"


def transactions_table(transactions: list[Transaction]) -> str:
    table = PrettyTable()
    table.field_names = ["ID", "Ngày", "Loại", "Danh mục", "Nguồn", "Ghi chú", "Số tiền"]
    table.align["Số tiền"] = "r"
    for t in transactions:
        table.add_row(
            [
                t.id[:8],
                t.date.strftime("%Y-%m-%d %H:%M"),
                TYPE_LABELS[t.type.value],
                t.category,
                t.source.value,
                t.note,
                _signed(t),
            ]
        )
    return str(table)


def wallets_table(wallets: list[Wallet]) -> str:
    table = PrettyTable()
    table.field_names = ["Ví", "ID", "Số dư"]
    table.align["Số dư"] = "r"
    for wallet in wallets:
        table.add_row([wallet.name, wallet.id.value, format_currency(wallet.balance)])
    table.add_row(["TỔNG", "", format_currency(sum(w.balance for w in wallets))], divider=True)
    return str(table)


def insights_report(insights: PeriodInsights) -> str:
    comparison = insights.comparison
    arrow = "↑" if comparison.is_increase else "↓"
    lines = [
        f"Tổng chi: {format_currency(insights.total_expense)}",
        f"Ngày chi cao nhất: {format_currency(insights.peak_amount)}",
        f"So với kỳ trước: {arrow} {comparison.percent_change}% "
        f"({format_compact_money(comparison.diff_amount)}) - {comparison.reason}",
        f"Ngân sách: {insights.budget.status_text} của {format_currency(insights.budget.limit)}",
        f"{insights.advisory.title}: {insights.advisory.message}",
    ]

    breakdown = PrettyTable()
    breakdown.field_names = ["Danh mục", "Số tiền", "%"]
    breakdown.align["Số tiền"] = "r"
    for entry in insights.breakdown:
        breakdown.add_row(
            [entry.name, format_currency(entry.amount), entry.share_of(insights.total_expense)]
        )

    series = PrettyTable()
    series.field_names = [bucket.label for bucket in insights.daily_series]
    series.add_row([format_compact_money(bucket.amount) for bucket in insights.daily_series])
    return "\n".join(lines + [str(breakdown), str(series)])


def overview_report(overview: MonthOverview) -> str:
    table = PrettyTable()
    table.field_names = ["", "Đã chi", "Hạn mức", "%"]
    for label, bar in (("Tháng", overview.month), ("Tuần", overview.week)):
        table.add_row(
            [label, format_currency(bar.spent), format_currency(bar.limit), round_half_up(bar.percent)]
        )
    return "\n".join(
        [
            f"Thu: {format_currency(overview.income)}",
            f"Chi: {format_currency(overview.expense)}",
            f"Còn lại: {format_currency(overview.net)}",
            str(table),
        ]
    )


DAY_STATE_TEXT = {
    DaySummaryState.EMPTY: "Chưa có giao dịch nào trong ngày.",
    DaySummaryState.HIGH_SPEND: "Chi tiêu hôm nay khá cao so với hạn mức tuần.",
    DaySummaryState.MODERATE_SPEND: "Chi tiêu hôm nay ở mức hợp lý.",
    DaySummaryState.MIXED: "Hôm nay có cả thu và chi.",
}


def day_report(summary: DaySummary) -> str:
    return "\n".join(
        [
            f"Ngày {summary.day.isoformat()}",
            f"Thu: {format_currency(summary.income)}  Chi: {format_currency(summary.expense)}",
            f"Chênh lệch: {format_currency(summary.balance)}",
            DAY_STATE_TEXT[summary.state],
        ]
    )


WEEKDAY_LABELS = ["T2", "T3", "T4", "T5", "T6", "T7", "CN"]


def _day_cell(day: dt_date | None, selected: dt_date, markers: dict[dt_date, DayMarker]) -> str:
    if day is None:
        return ""
    marker = markers.get(day)
    flags = ""
    if marker is not None:
        flags = ("+" if marker.has_income else "") + ("-" if marker.has_expense else "")
    text = f"{day.day}{flags}"
    return f"[{text}]" if day == selected else text


def calendar_report(selected: dt_date, mode: str, markers: dict[dt_date, DayMarker]) -> str:
    """Monday-first calendar; "+" marks income days and "-" expense days."""
    cells = calendar_days(selected, mode)
    cells += [None] * (-len(cells) % 7)
    table = PrettyTable()
    table.field_names = WEEKDAY_LABELS
    for start in range(0, len(cells), 7):
        table.add_row([_day_cell(day, selected, markers) for day in cells[start:start + 7]])
    title = f"Tháng {selected.month}/{selected.year}"
    if mode == "week":
        title = f"Tuần {week_of_month(selected)} - {title}"
    return "\n".join([title, str(table)])


def categories_table(transaction_type: str) -> str:
    table = PrettyTable()
    table.field_names = ["Danh mục", "Gợi ý ghi chú"]
    table.align["Gợi ý ghi chú"] = "l"
    for category in categories_for(transaction_type):
        table.add_row([category, ", ".join(note_suggestions(category))])
    return str(table)


def _resolve_id(session: LedgerSession, prefix: str) -> str | None:
    """Full transaction id for an id or unique id prefix."""
    matches = [t.id for t in session.ledger.transactions if t.id.startswith(prefix)]
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        logger.warning("Ambiguous transaction id prefix: %s", prefix)
    return None


def _add_entry_arguments(parser: argparse.ArgumentParser, editing: bool = False) -> None:
    """Entry options; when editing every omitted option keeps the stored value."""
    if editing:
        parser.add_argument("amount", nargs="?", default=None, help="New amount, default unchanged")
    else:
        parser.add_argument("amount", help='Amount, e.g. "55000" or "55k"')
    parser.add_argument("--category", default=None)
    parser.add_argument(
        "--source", default=None if editing else "cash", choices=["cash", "bank", "ewallet"]
    )
    parser.add_argument("--note", default=None if editing else "")
    parser.add_argument(
        "--type",
        dest="transaction_type",
        default=None if editing else "expense",
        choices=["expense", "income"],
    )
    parser.add_argument("--day", default=None, help="YYYY-MM-DD, default today")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="smartfin", description="Personal expense tracker.")
    parser.add_argument("--document", default=None, help="Path to the JSON document store")
    parser.add_argument("--user", default=None, help="User document key")
    sub = parser.add_subparsers(dest="command", required=True)

    _add_entry_arguments(sub.add_parser("add", help="Add a transaction"))

    edit = sub.add_parser("edit", help="Change fields of a transaction")
    edit.add_argument("id")
    _add_entry_arguments(edit, editing=True)

    delete = sub.add_parser("delete", help="Delete a transaction")
    delete.add_argument("id")

    history = sub.add_parser("list", help="List transactions")
    history.add_argument("--search", default="")
    history.add_argument("--type", dest="type_filter", default="all", choices=["all", "expense", "income"])
    history.add_argument("--day", default=None)

    sub.add_parser("wallets", help="Show wallet balances")

    balance = sub.add_parser("set-balance", help="Override wallet balances")
    balance.add_argument("balances", nargs="+", help="wallet=amount, e.g. cash=2000000")

    budget = sub.add_parser("set-budget", help="Set the monthly budget")
    budget.add_argument("limit")

    insights = sub.add_parser("insights", help="Period analytics and advice")
    insights.add_argument("--mode", default="week", choices=["week", "month"])

    sub.add_parser("overview", help="Month overview")

    day = sub.add_parser("day", help="Daily summary")
    day.add_argument("--day", default=None)

    month = sub.add_parser("calendar", help="Calendar with income/expense markers")
    month.add_argument("--mode", default="month", choices=["week", "month"])
    month.add_argument("--day", default=None, help="YYYY-MM-DD, default today")
    month.add_argument("--offset", type=int, default=0, help="Pages to move back (-) or forward (+)")

    categories = sub.add_parser("categories", help="Categories and note suggestions")
    categories.add_argument("--type", dest="transaction_type", default="expense", choices=["expense", "income"])

    export = sub.add_parser("export", help="Export to XLSX")
    export.add_argument("path")

    dark = sub.add_parser("dark-mode", help="Toggle dark mode")
    dark.add_argument("state", choices=["on", "off"])

    classify = sub.add_parser("classify", help="Parse a phrase into a transaction")
    classify.add_argument("text")
    classify.add_argument("--save", action="store_true", help="Add the parsed transaction")
    return parser


def _entry_kwargs(args: argparse.Namespace) -> dict:
    return {
        "amount": args.amount,
        "category": args.category,
        "source": args.source,
        "note": args.note,
        "transaction_type": args.transaction_type,
        "day": args.day,
    }


def _selected_day(day: str | None) -> datetime | None:
    if not day:
        return None
    selected = parse_ymd(day)
    return datetime(selected.year, selected.month, selected.day)


def run_command(session: LedgerSession, args: argparse.Namespace) -> int:
    command = args.command
    if command == "add":
        created = AddTransaction(session).execute(**_entry_kwargs(args))
        if created is None:
            print("Số tiền không hợp lệ.")
            return 1
        print(transactions_table([created]))
    elif command == "edit":
        transaction_id = _resolve_id(session, args.id)
        updated = (
            EditTransaction(session).execute(transaction_id, **_entry_kwargs(args))
            if transaction_id
            else None
        )
        if updated is None:
            print("Không tìm thấy giao dịch hoặc số tiền không hợp lệ.")
            return 1
        print(transactions_table([updated]))
    elif command == "delete":
        transaction_id = _resolve_id(session, args.id)
        if not transaction_id or not DeleteTransaction(session).execute(transaction_id):
            print("Không tìm thấy giao dịch.")
            return 1
        print("Đã xóa giao dịch.")
    elif command == "list":
        rows = SearchHistory(session).execute(
            query=args.search,
            type_filter=args.type_filter,
            selected_day=_selected_day(args.day),
        )
        print(transactions_table(rows))
    elif command == "wallets":
        print(wallets_table(session.ledger.wallets))
    elif command == "set-balance":
        balances = {}
        for item in args.balances:
            wallet_id, _, raw = item.partition("=")
            balances[wallet_id] = raw
        print(wallets_table(SetWalletBalances(session).execute(balances)))
    elif command == "set-budget":
        budget = SetBudgetLimit(session).execute(args.limit)
        print(
            f"Hạn mức tháng: {format_currency(budget.monthly_limit)}, "
            f"tuần: {format_currency(budget.weekly_limit)}"
        )
    elif command == "insights":
        print(insights_report(BuildInsights(session).execute(args.mode)))
    elif command == "overview":
        print(overview_report(BuildOverview(session).execute()))
    elif command == "day":
        print(day_report(SummarizeDay(session).execute(_selected_day(args.day))))
    elif command == "calendar":
        selected = (_selected_day(args.day) or datetime.now()).date()
        if args.offset:
            selected = shift_selection(selected, args.mode, args.offset)
        print(calendar_report(selected, args.mode, session.day_markers()))
    elif command == "categories":
        print(categories_table(args.transaction_type))
    elif command == "export":
        export_ledger_to_xlsx(session.ledger.transactions, session.ledger.wallets, args.path)
        print(f"Đã xuất: {args.path}")
    elif command == "dark-mode":
        session.set_dark_mode(args.state == "on")
        print(f"Dark mode: {args.state}")
    elif command == "classify":
        result = TransactionClassifier().classify(args.text)
        if result.error_message:
            print(result.error_message)
        guess = result.guess
        print(
            f"{TYPE_LABELS[guess.type.value]} {format_currency(guess.amount)} | "
            f"{guess.category} | {guess.wallet_type.value} | {guess.note}"
        )
        if args.save:
            created = AddTransaction(session).execute(
                amount=guess.amount,
                category=guess.category,
                source=guess.wallet_type,
                note=guess.note,
                transaction_type=guess.type,
            )
            if created is None:
                print("Số tiền không hợp lệ.")
                return 1
            print(transactions_table([created]))
    return 0


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    args = build_parser().parse_args(argv)
    try:
        with bootstrap_session(args.document, args.user) as session:
            return run_command(session, args)
    except DomainError as e:
        print(f"Lỗi: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
