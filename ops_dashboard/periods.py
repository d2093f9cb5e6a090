"""
Calendar partitioning: month -> week buckets, month/year date ranges, and
the Sunday-start week containing a day.

Week buckets start on day 1 of the month and advance by exactly seven
days, regardless of weekday; the last bucket is clipped to month end.
"""

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any

from .utils import normalise_date


@dataclass(frozen=True)
class WeekBucket:
    index: int
    label: str
    start_day: int
    end_day: int
    dates: tuple[str, ...]


def _check_month(year: int, month: int) -> None:
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be 1-12, got {month}")
    if not 1 <= year <= 9999:
        raise ValueError(f"Year out of range: {year}")


def parse_year_month(value: str) -> tuple[int, int]:
    """Parse ``"YYYY-MM"`` into (year, month)."""
    try:
        year_text, month_text = str(value).strip().split("-")[:2]
        year, month = int(year_text), int(month_text)
    except ValueError as exc:
        raise ValueError(f"Expected YYYY-MM, got {value!r}") from exc
    _check_month(year, month)
    return year, month


def previous_month(year: int, month: int) -> tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def month_label(year: int, month: int) -> str:
    """``(2024, 3)`` -> ``"March 2024"``."""
    return f"{calendar.month_name[month]} {year}"


def _date_range(start: date, end: date) -> list[str]:
    days = (end - start).days
    return [(start + timedelta(days=offset)).isoformat() for offset in range(days + 1)]


def month_dates(year: int, month: int) -> list[str]:
    """Every ISO date of the month, in order."""
    _check_month(year, month)
    last_day = calendar.monthrange(year, month)[1]
    return _date_range(date(year, month, 1), date(year, month, last_day))


def year_dates(year: int) -> list[str]:
    """Every ISO date from Jan 1 to Dec 31."""
    _check_month(year, 1)
    return _date_range(date(year, 1, 1), date(year, 12, 31))


def weeks_of_month(year: int, month: int) -> list[WeekBucket]:
    """Split a month into 7-day buckets anchored on day 1.

    >>> [(w.start_day, w.end_day) for w in weeks_of_month(2024, 2)]
    [(1, 7), (8, 14), (15, 21), (22, 28), (29, 29)]
    """
    _check_month(year, month)
    last_day = calendar.monthrange(year, month)[1]

    buckets = []
    start_day = 1
    index = 1
    while start_day <= last_day:
        end_day = min(start_day + 6, last_day)
        buckets.append(
            WeekBucket(
                index=index,
                label=f"WK {index}",
                start_day=start_day,
                end_day=end_day,
                dates=tuple(_date_range(date(year, month, start_day), date(year, month, end_day))),
            )
        )
        start_day += 7
        index += 1
    return buckets


def week_containing(day: Any) -> list[str]:
    """The seven ISO dates, Sunday to Saturday, of the week holding ``day``."""
    iso = normalise_date(day)
    if iso is None:
        raise ValueError(f"Invalid date: {day!r}")
    current = date.fromisoformat(iso)
    # date.weekday(): Monday=0 .. Sunday=6
    sunday = current - timedelta(days=(current.weekday() + 1) % 7)
    return _date_range(sunday, sunday + timedelta(days=6))
