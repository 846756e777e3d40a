"""Reporting periods.

A range name resolves to a naive ``(start, end)`` datetime pair covering
whole days in store time.
"""

from datetime import date, datetime, time, timedelta
from typing import NamedTuple

from django.utils import timezone

ALL_TIME_START = date(2000, 1, 1)


class Period(NamedTuple):
    start: datetime
    end: datetime

    def lookup(self, field: str = "date_added") -> dict:
        """Keyword arguments filtering ``field`` to this period."""
        return {f"{field}__range": (self.start, self.end)}

    def as_dict(self) -> dict:
        return {
            "start": self.start.strftime("%Y-%m-%d %H:%M:%S"),
            "end": self.end.strftime("%Y-%m-%d %H:%M:%S"),
        }


def day_bounds(first: date, last: date) -> Period:
    return Period(datetime.combine(first, time.min), datetime.combine(last, time.max))


def resolve_period(name: str, start_date: date | None = None, end_date: date | None = None) -> Period:
    """Resolve ``today``, ``week``, ``month``, ``year``, ``custom`` or ``all``.

    Weeks start on Monday. ``custom`` uses the given dates inclusively.
    """
    today = timezone.now().date()

    if name == "today":
        return day_bounds(today, today)
    if name == "week":
        monday = today - timedelta(days=today.weekday())
        return day_bounds(monday, monday + timedelta(days=6))
    if name == "month":
        first = today.replace(day=1)
        next_month = (first + timedelta(days=32)).replace(day=1)
        return day_bounds(first, next_month - timedelta(days=1))
    if name == "year":
        return day_bounds(today.replace(month=1, day=1), today.replace(month=12, day=31))
    if name == "custom":
        return day_bounds(start_date, end_date)
    return day_bounds(ALL_TIME_START, today)
