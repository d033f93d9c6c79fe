from dataclasses import dataclass
from enum import Enum

WEEKS_PER_MONTH = 4


class ViewMode(str, Enum):
    WEEK = "week"
    MONTH = "month"


@dataclass(frozen=True)
class BudgetConfig:
    limit: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "limit", float(self.limit))

    @property
    def monthly_limit(self) -> float:
        return self.limit

    @property
    def weekly_limit(self) -> float:
        # Derived only; a weekly cap is never stored.
        return self.limit / WEEKS_PER_MONTH

    def limit_for(self, mode: ViewMode | str) -> float:
        if ViewMode(mode) is ViewMode.WEEK:
            return self.weekly_limit
        return self.monthly_limit
