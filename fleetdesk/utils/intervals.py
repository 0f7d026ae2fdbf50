"""
Closed calendar-date intervals and the overlap predicate.

An interval [start, end] occupies every calendar day from start to end
inclusive. Two intervals overlap when they share at least one day, so a
rental ending on the 5th conflicts with one starting on the 5th unless the
same-day changeover policy is switched on.
"""
from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date

from ..exceptions import InvalidInterval
from .dates import as_date


@dataclass(frozen=True)
class Interval:
    start: date
    end: date

    def __post_init__(self):
        if self.start > self.end:
            raise InvalidInterval(
                f"Error: start date {self.start.isoformat()} is after end date {self.end.isoformat()}"
            )

    @classmethod
    def parse(cls, start, end) -> "Interval":
        """Build an interval from date-likes; bad or missing input is an InvalidInterval."""
        if not start or not end:
            raise InvalidInterval("Error: start date and end date are required")
        try:
            return cls(as_date(start), as_date(end))
        except ValueError:
            raise InvalidInterval("Error: invalid dates (YYYY-MM-DD)")

    @property
    def total_days(self) -> int:
        """Billable length in days; dates carry no time part so no rounding is needed."""
        return (self.end - self.start).days

    def require_span(self) -> "Interval":
        """Reject zero-length intervals (end must be strictly after start)."""
        if self.end <= self.start:
            raise InvalidInterval()
        return self

    def __str__(self) -> str:
        return f"[{self.start.isoformat()}, {self.end.isoformat()}]"


def overlaps(a: Interval, b: Interval, allow_same_day_changeover: bool = False) -> bool:
    """
    Return True iff the closed intervals share a calendar day:
        a.start <= b.end and b.start <= a.end
    With allow_same_day_changeover, an interval ending on the day another one
    starts is not a conflict (strict comparison).
    """
    for iv in (a, b):
        if iv.start > iv.end:
            raise InvalidInterval()
    if allow_same_day_changeover:
        return a.start < b.end and b.start < a.end
    return a.start <= b.end and b.start <= a.end


def month_window(month: int, year: int) -> Interval:
    """Closed interval covering the whole calendar month."""
    last = calendar.monthrange(year, month)[1]
    return Interval(date(year, month, 1), date(year, month, last))
