from __future__ import annotations

from calendar import monthrange
from datetime import date, timedelta

from domain.budget import ViewMode


def _first_of_adjacent_month(day: date, step: int) -> date:
    month_index = day.year * 12 + (day.month - 1) + step
    return date(month_index // 12, month_index % 12 + 1, 1)


def month_grid(year: int, month: int) -> list[date | None]:
    """Monday-first calendar cells: leading blanks, then every day of the month."""
    first = date(year, month, 1)
    padding = first.weekday()
    days_in_month = monthrange(year, month)[1]
    cells: list[date | None] = [None] * padding
    cells.extend(date(year, month, day) for day in range(1, days_in_month + 1))
    return cells


def week_strip(selected: date) -> list[date]:
    monday = selected - timedelta(days=selected.weekday())
    return [monday + timedelta(days=offset) for offset in range(7)]


def calendar_days(selected: date, mode: ViewMode | str) -> list[date | None]:
    if ViewMode(mode) is ViewMode.WEEK:
        return list(week_strip(selected))
    return month_grid(selected.year, selected.month)


def shift_selection(selected: date, mode: ViewMode | str, step: int) -> date:
    """Move the calendar one page back (step=-1) or forward (step=1)."""
    if ViewMode(mode) is ViewMode.MONTH:
        return _first_of_adjacent_month(selected, step)
    return selected + timedelta(days=7 * step)


def week_of_month(selected: date) -> int:
    return (selected.day + 6) // 7
