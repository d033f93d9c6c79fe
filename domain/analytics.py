import calendar
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from utils.formatting import round_half_up

from .budget import BudgetConfig, ViewMode
from .categories import BILL_CATEGORY
from .forecast import Advisory, BudgetUsage, budget_usage, select_advisory
from .periods import (
    Period,
    PeriodProgress,
    period_bounds,
    period_progress,
    previous_period_bounds,
)
from .transactions import Transaction

WEEKDAY_LABELS = ["T2", "T3", "T4", "T5", "T6", "T7", "CN"]
NO_DATA_REASON = "Chưa có dữ liệu"


@dataclass(frozen=True)
class CategoryTotal:
    name: str
    amount: float

    def share_of(self, total: float) -> int:
        if total <= 0:
            return 0
        return round_half_up(self.amount / total * 100)


@dataclass(frozen=True)
class DailyBucket:
    label: str
    amount: float


@dataclass(frozen=True)
class PeriodComparison:
    current_total: float
    previous_total: float
    diff_amount: float
    percent_change: int
    is_increase: bool
    top_category: str | None

    @property
    def reason(self) -> str:
        if self.top_category is None:
            return NO_DATA_REASON
        return f"Do {self.top_category}"


@dataclass(frozen=True)
class PeriodInsights:
    mode: ViewMode
    period: Period
    previous_period: Period
    progress: PeriodProgress
    transactions: list[Transaction]
    total_expense: float
    comparison: PeriodComparison
    breakdown: list[CategoryTotal]
    daily_series: list[DailyBucket]
    budget: BudgetUsage
    advisory: Advisory

    @property
    def peak_amount(self) -> float:
        return max((bucket.amount for bucket in self.daily_series), default=0.0)


def is_period_spend(transaction: Transaction, period: Period, mode: ViewMode | str) -> bool:
    """Expense inside the period; bills only count towards monthly figures."""
    if not transaction.is_expense or not period.contains(transaction.date):
        return False
    if ViewMode(mode) is ViewMode.WEEK and transaction.category == BILL_CATEGORY:
        return False
    return True


def period_spend(
    transactions: Iterable[Transaction], period: Period, mode: ViewMode | str
) -> list[Transaction]:
    return [t for t in transactions if is_period_spend(t, period, mode)]


def total_amount(transactions: Iterable[Transaction]) -> float:
    return sum(t.amount for t in transactions)


def percent_change(current_total: float, previous_total: float) -> int:
    if previous_total > 0:
        return round_half_up(abs(current_total - previous_total) / previous_total * 100)
    if current_total > 0:
        return 100
    return 0


def category_breakdown(transactions: Iterable[Transaction]) -> list[CategoryTotal]:
    totals: dict[str, float] = {}
    for transaction in transactions:
        totals[transaction.category] = totals.get(transaction.category, 0.0) + transaction.amount
    return sorted(
        (CategoryTotal(name, amount) for name, amount in totals.items()),
        key=lambda item: item.amount,
        reverse=True,
    )


def compare_periods(
    current: list[Transaction], previous: list[Transaction]
) -> PeriodComparison:
    current_total = total_amount(current)
    previous_total = total_amount(previous)
    diff = current_total - previous_total
    breakdown = category_breakdown(current)
    return PeriodComparison(
        current_total=current_total,
        previous_total=previous_total,
        diff_amount=abs(diff),
        percent_change=percent_change(current_total, previous_total),
        is_increase=diff > 0,
        top_category=breakdown[0].name if breakdown else None,
    )


def daily_series(
    transactions: Iterable[Transaction], now: datetime, mode: ViewMode | str
) -> list[DailyBucket]:
    if ViewMode(mode) is ViewMode.WEEK:
        amounts = [0.0] * 7
        for transaction in transactions:
            amounts[transaction.date.weekday()] += transaction.amount
        return [DailyBucket(label, amount) for label, amount in zip(WEEKDAY_LABELS, amounts)]

    days_in_month = calendar.monthrange(now.year, now.month)[1]
    amounts = [0.0] * days_in_month
    for transaction in transactions:
        if transaction.date.year == now.year and transaction.date.month == now.month:
            amounts[transaction.date.day - 1] += transaction.amount
    return [DailyBucket(str(day), amounts[day - 1]) for day in range(1, days_in_month + 1)]


def build_insights(
    transactions: Iterable[Transaction],
    budget: BudgetConfig,
    now: datetime,
    mode: ViewMode | str,
) -> PeriodInsights:
    """Recompute every analytics figure for ``mode`` from scratch."""
    mode = ViewMode(mode)
    transactions = list(transactions)
    period = period_bounds(now, mode)
    previous = previous_period_bounds(now, mode)
    progress = period_progress(now, mode)

    current_spend = period_spend(transactions, period, mode)
    previous_spend = period_spend(transactions, previous, mode)
    comparison = compare_periods(current_spend, previous_spend)
    usage = budget_usage(comparison.current_total, budget.limit_for(mode), progress)

    return PeriodInsights(
        mode=mode,
        period=period,
        previous_period=previous,
        progress=progress,
        transactions=current_spend,
        total_expense=comparison.current_total,
        comparison=comparison,
        breakdown=category_breakdown(current_spend),
        daily_series=daily_series(current_spend, now, mode),
        budget=usage,
        advisory=select_advisory(usage, progress, mode),
    )
