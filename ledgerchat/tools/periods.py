"""Resolve named reporting periods to concrete date ranges."""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ledgerchat.models import ExpenseSummary

logger = logging.getLogger(__name__)

Period = Literal["today", "this_week", "this_month", "last_month", "all_time"]
ReportPeriod = Literal["this_week", "this_month", "last_month", "all_time"]


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of calendar days."""

    start: date
    end: date

    def __contains__(self, day: date) -> bool:
        return self.start <= day <= self.end


def parse_day(value: str) -> date | None:
    """Parse ``YYYY-MM-DD`` (a trailing time part is ignored). None if invalid."""
    try:
        return date.fromisoformat(value[:10])
    except (TypeError, ValueError):
        return None


def days_in_month(day: date) -> int:
    return calendar.monthrange(day.year, day.month)[1]


def resolve_period(period: str, today: date) -> DateRange | None:
    """Date range for ``period`` relative to ``today``. None means unbounded.

    Weeks run Monday to Sunday.
    """
    if period == "today":
        return DateRange(today, today)
    if period == "this_week":
        start = today - timedelta(days=today.weekday())
        return DateRange(start, start + timedelta(days=6))
    if period == "this_month":
        return DateRange(today.replace(day=1), today.replace(day=days_in_month(today)))
    if period == "last_month":
        last = today.replace(day=1) - timedelta(days=1)
        return DateRange(last.replace(day=1), last)
    return None


def filter_by_range(
    expenses: Iterable[ExpenseSummary], date_range: DateRange | None
) -> list[ExpenseSummary]:
    """Expenses dated inside ``date_range``, in their original order.

    Expenses with an unparseable date never match a bounded range.
    """
    if date_range is None:
        return list(expenses)

    matched = []
    for expense in expenses:
        day = parse_day(expense.date)
        if day is None:
            logger.debug("Skipping expense %s with invalid date %r", expense.id, expense.date)
            continue
        if day in date_range:
            matched.append(expense)
    return matched
