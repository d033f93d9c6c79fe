"""Budget usage and the forecast advisory shown under the analytics charts.

The advisory is chosen by an ordered decision list; the first matching rule
wins, so an over-budget period is always reported as such regardless of how
fast the money went.
"""

import math
from dataclasses import dataclass
from enum import Enum

from utils.formatting import format_compact_money, round_half_up

from .budget import ViewMode
from .periods import PeriodProgress

BURN_RATE_ALERT = 1.3
BURN_RATE_SAVING = 0.85
SAVING_USAGE_CEILING = 50.0
WEEKEND_USAGE_THRESHOLD = 70.0
WEEKEND_RESERVE_SHARE = 0.4
FRIDAY, SATURDAY = 5, 6


class AdvisoryKind(str, Enum):
    OVER_BUDGET = "over_budget"
    BURNING_FAST = "burning_fast"
    WEEKEND_CAUTION = "weekend_caution"
    ON_TRACK = "on_track"
    DAILY_CAP = "daily_cap"


class AdvisoryStatus(str, Enum):
    WARNING = "warning"
    GOOD = "good"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class Advisory:
    kind: AdvisoryKind
    status: AdvisoryStatus
    title: str
    message: str


@dataclass(frozen=True)
class BudgetUsage:
    spend: float
    limit: float
    usage_percent: float
    time_percent: float
    burn_rate_ratio: float
    remaining_budget: float

    @property
    def rounded_usage(self) -> int:
        return round_half_up(self.usage_percent)

    @property
    def status_text(self) -> str:
        if self.usage_percent > 100:
            return "Vượt mức"
        return f"{self.rounded_usage}%"


def budget_usage(spend: float, limit: float, progress: PeriodProgress) -> BudgetUsage:
    usage_percent = spend / limit * 100 if limit > 0 else 0.0
    time_percent = progress.time_percent
    burn_rate_ratio = usage_percent / time_percent if time_percent > 0 else 0.0
    return BudgetUsage(
        spend=spend,
        limit=limit,
        usage_percent=usage_percent,
        time_percent=time_percent,
        burn_rate_ratio=burn_rate_ratio,
        remaining_budget=limit - spend,
    )


def _runout_label(runout_day: int, mode: ViewMode) -> str:
    if mode is ViewMode.MONTH:
        return f"ngày {runout_day}"
    if runout_day >= 7:
        return "chủ nhật"
    return f"thứ {runout_day + 1}"


def select_advisory(
    usage: BudgetUsage, progress: PeriodProgress, mode: ViewMode | str
) -> Advisory:
    mode = ViewMode(mode)
    period_word = "tuần" if mode is ViewMode.WEEK else "tháng"

    if usage.usage_percent >= 100:
        return Advisory(
            AdvisoryKind.OVER_BUDGET,
            AdvisoryStatus.WARNING,
            "Vượt ngân sách!",
            f"Bạn đã lố {format_compact_money(abs(usage.remaining_budget))}. "
            "Hãy dừng mọi khoản chi không cần thiết ngay lập tức!",
        )

    if usage.burn_rate_ratio > BURN_RATE_ALERT and usage.remaining_budget > 0:
        runout_day = math.floor(100 / (usage.usage_percent / progress.days_passed))
        return Advisory(
            AdvisoryKind.BURNING_FAST,
            AdvisoryStatus.WARNING,
            "Cảnh báo tốc độ!",
            f"Bạn đang chi gấp {usage.burn_rate_ratio:.1f}x mức cho phép. "
            f'Nếu giữ đà này, bạn sẽ "cháy túi" vào {_runout_label(runout_day, mode)}.',
        )

    if (
        mode is ViewMode.WEEK
        and progress.weekday in (FRIDAY, SATURDAY)
        and usage.usage_percent > WEEKEND_USAGE_THRESHOLD
    ):
        reserve = usage.remaining_budget * WEEKEND_RESERVE_SHARE
        return Advisory(
            AdvisoryKind.WEEKEND_CAUTION,
            AdvisoryStatus.NEUTRAL,
            "Cẩn thận cuối tuần!",
            "Cuối tuần thường chi nhiều. Hãy giữ lại ít nhất "
            f"{format_compact_money(reserve)} cho việc ăn uống nhé.",
        )

    if usage.burn_rate_ratio < BURN_RATE_SAVING and usage.usage_percent < SAVING_USAGE_CEILING:
        daily_average = usage.spend / progress.days_passed
        projected_total = daily_average * progress.total_days
        surplus = usage.limit - projected_total
        return Advisory(
            AdvisoryKind.ON_TRACK,
            AdvisoryStatus.GOOD,
            "Kiểm soát rất tốt!",
            f"Bạn đang tiết kiệm. Cứ đà này cuối {period_word} sẽ dư ra khoảng "
            f"{format_compact_money(surplus)}.",
        )

    days_remaining = progress.days_remaining
    if days_remaining > 0:
        safe_daily = max(0.0, usage.remaining_budget / days_remaining)
    else:
        safe_daily = max(0.0, usage.remaining_budget)
    return Advisory(
        AdvisoryKind.DAILY_CAP,
        AdvisoryStatus.NEUTRAL,
        "Mục tiêu hàng ngày",
        f"Để an toàn, trong {days_remaining} ngày tới, mỗi ngày chỉ nên tiêu tối đa "
        f"{format_compact_money(safe_daily)}.",
    )
