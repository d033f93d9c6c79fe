import calendar
from dataclasses import dataclass
from datetime import datetime, time, timedelta

from .budget import ViewMode


@dataclass(frozen=True)
class Period:
    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


@dataclass(frozen=True)
class PeriodProgress:
    days_passed: int
    total_days: int
    weekday: int

    @property
    def days_remaining(self) -> int:
        return max(0, self.total_days - self.days_passed)

    @property
    def time_percent(self) -> float:
        if self.total_days <= 0:
            return 0.0
        return self.days_passed / self.total_days * 100


def start_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.min)


def end_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.max)


def week_bounds(now: datetime) -> Period:
    """Monday 00:00 through Sunday 23:59:59.999999 of the week containing ``now``."""
    monday = start_of_day(now) - timedelta(days=now.weekday())
    return Period(monday, end_of_day(monday + timedelta(days=6)))


def month_bounds(now: datetime) -> Period:
    last_day = calendar.monthrange(now.year, now.month)[1]
    start = datetime(now.year, now.month, 1)
    return Period(start, end_of_day(start.replace(day=last_day)))


def period_bounds(now: datetime, mode: ViewMode | str) -> Period:
    if ViewMode(mode) is ViewMode.WEEK:
        return week_bounds(now)
    return month_bounds(now)


def previous_period_bounds(now: datetime, mode: ViewMode | str) -> Period:
    if ViewMode(mode) is ViewMode.WEEK:
        return week_bounds(now - timedelta(days=7))
    first_of_month = datetime(now.year, now.month, 1)
    return month_bounds(first_of_month - timedelta(days=1))


def period_progress(now: datetime, mode: ViewMode | str) -> PeriodProgress:
    weekday = now.isoweekday()
    if ViewMode(mode) is ViewMode.WEEK:
        return PeriodProgress(days_passed=weekday, total_days=7, weekday=weekday)
    total_days = calendar.monthrange(now.year, now.month)[1]
    return PeriodProgress(days_passed=now.day, total_days=total_days, weekday=weekday)


def same_day(left: datetime, right: datetime) -> bool:
    return left.date() == right.date()
