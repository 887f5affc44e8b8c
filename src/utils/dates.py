"""Calendar month arithmetic shared by billing recurrence and sales reports."""

from __future__ import annotations

from datetime import date

from dateutil.relativedelta import relativedelta

MonthKey = tuple[int, int]


def add_months(d: date, months: int) -> date:
    """Advance ``d`` by whole calendar months.

    The day of month is kept where valid and clamped to the last day of the
    target month otherwise (2026-01-31 + 1 month -> 2026-02-28).
    """
    return d + relativedelta(months=months)


def shift_month(year: int, month: int, delta: int) -> MonthKey:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def month_span(start: MonthKey, end: MonthKey) -> list[MonthKey]:
    """Inclusive list of (year, month) keys from start to end; empty if start > end."""
    keys: list[MonthKey] = []
    year, month = start
    while (year, month) <= end:
        keys.append((year, month))
        year, month = shift_month(year, month, 1)
    return keys


def month_label(year: int, month: int) -> str:
    return f"{year}/{month:02d}"


def trailing_window(today: date, months: int = 12) -> tuple[MonthKey, MonthKey]:
    """(start, end) month keys of the ``months``-long window ending at today's month."""
    end = (today.year, today.month)
    return shift_month(today.year, today.month, -(months - 1)), end
