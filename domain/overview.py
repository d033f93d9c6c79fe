from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date as dt_date
from datetime import datetime
from enum import Enum

from .budget import BudgetConfig
from .categories import BILL_CATEGORY
from .periods import month_bounds, same_day, week_bounds
from .transactions import Transaction

HIGH_DAILY_SPEND_PERCENT = 15.0


@dataclass(frozen=True)
class BudgetBar:
    spent: float
    limit: float
    percent: float


@dataclass(frozen=True)
class MonthOverview:
    income: float
    expense: float
    month: BudgetBar
    week: BudgetBar

    @property
    def net(self) -> float:
        return self.income - self.expense


class DaySummaryState(str, Enum):
    EMPTY = "empty"
    HIGH_SPEND = "high_spend"
    MODERATE_SPEND = "moderate_spend"
    MIXED = "mixed"


@dataclass(frozen=True)
class DaySummary:
    day: dt_date
    income: float
    expense: float
    weekly_share_percent: float
    state: DaySummaryState

    @property
    def balance(self) -> float:
        return self.income - self.expense


@dataclass(frozen=True)
class DayMarker:
    has_income: bool
    has_expense: bool


def _capped_percent(spent: float, limit: float) -> float:
    if limit <= 0:
        return 0.0
    return min(spent / limit * 100, 100.0)


def month_overview(
    transactions: Iterable[Transaction], budget: BudgetConfig, now: datetime
) -> MonthOverview:
    transactions = list(transactions)
    month = month_bounds(now)
    in_month = [t for t in transactions if month.contains(t.date)]
    income = sum(t.amount for t in in_month if t.is_income)
    expense = sum(t.amount for t in in_month if t.is_expense)

    week_start = week_bounds(now).start
    week_spent = sum(
        t.amount
        for t in transactions
        if t.is_expense and t.date >= week_start and t.category != BILL_CATEGORY
    )
    return MonthOverview(
        income=income,
        expense=expense,
        month=BudgetBar(expense, budget.monthly_limit, _capped_percent(expense, budget.monthly_limit)),
        week=BudgetBar(
            week_spent, budget.weekly_limit, _capped_percent(week_spent, budget.weekly_limit)
        ),
    )


def day_summary(
    transactions: Iterable[Transaction], budget: BudgetConfig, day: datetime
) -> DaySummary:
    on_day = [t for t in transactions if same_day(t.date, day)]
    income = sum(t.amount for t in on_day if t.is_income)
    expense = sum(t.amount for t in on_day if t.is_expense)
    weekly_limit = budget.weekly_limit
    share = expense / weekly_limit * 100 if weekly_limit > 0 else 0.0

    if income == 0 and expense == 0:
        state = DaySummaryState.EMPTY
    elif income == 0:
        state = (
            DaySummaryState.HIGH_SPEND
            if share > HIGH_DAILY_SPEND_PERCENT
            else DaySummaryState.MODERATE_SPEND
        )
    else:
        state = DaySummaryState.MIXED
    return DaySummary(day.date(), income, expense, share, state)


def day_markers(transactions: Iterable[Transaction]) -> dict[dt_date, DayMarker]:
    flags: dict[dt_date, tuple[bool, bool]] = {}
    for transaction in transactions:
        has_income, has_expense = flags.get(transaction.date.date(), (False, False))
        flags[transaction.date.date()] = (
            has_income or transaction.is_income,
            has_expense or transaction.is_expense,
        )
    return {day: DayMarker(*values) for day, values in flags.items()}
