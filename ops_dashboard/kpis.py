"""
KPI computation functions — pure functions over an EntryStore snapshot.

Provides window averages, weekly/monthly/yearly rollups with
period-over-period trend, daily stats and landscape summary counts.
Entries absent from the store are skipped, never counted as zero.
"""

import copy
import logging
from collections.abc import Iterable, Sequence
from typing import Any, Callable

from .config import AMBER, GREEN, RED, TREND_DOWN, TREND_FLAT, TREND_UP
from .periods import (
    WeekBucket,
    month_dates,
    parse_year_month,
    previous_month,
    week_containing,
    year_dates,
)
from .scoring import round_half_up, status_from_percentage
from .store import EntryStore
from .utils import normalise_date

logger = logging.getLogger(__name__)


def average_over(
    store: EntryStore,
    landscape: str,
    skills: Iterable[str],
    dates: Iterable[str],
) -> dict:
    """Average percentage and status counts over dates x skills.

    Returns
    -------
    {"avg_percentage": int, "count": int,
     "green_count": int, "amber_count": int, "red_count": int}

    ``avg_percentage`` is 0 when no entry exists in the window.
    """
    skills = list(skills)
    total = 0
    count = 0
    by_status = {GREEN: 0, AMBER: 0, RED: 0}

    for day in dates:
        for skill in skills:
            entry = store.get(landscape, skill, day)
            if entry is None:
                continue
            count += 1
            total += entry.percentage
            by_status[entry.status] += 1

    return {
        "avg_percentage": round_half_up(total / count) if count else 0,
        "count": count,
        "green_count": by_status[GREEN],
        "amber_count": by_status[AMBER],
        "red_count": by_status[RED],
    }


def _share(part: int, total: int) -> int:
    return round_half_up(part / total * 100) if total else 0


def calc_trend(current_avg: int, previous_avg: int, previous_count: int) -> str:
    """'up', 'down' or 'flat' versus the previous period.

    A previous period without entries gives 'flat'.
    """
    if previous_count == 0 or current_avg == previous_avg:
        return TREND_FLAT
    return TREND_UP if current_avg > previous_avg else TREND_DOWN


def _period_kpi(
    store: EntryStore,
    landscape: str,
    skills: Sequence[str],
    period: str,
    dates: list[str],
    previous_period: str,
    previous_dates: list[str],
) -> dict:
    current = average_over(store, landscape, skills, dates)
    previous = average_over(store, landscape, skills, previous_dates)
    total = current["count"]

    if total == 0:
        logger.warning("No entries for %s in %s", landscape, period)

    return {
        "period": period,
        "overall_avg": current["avg_percentage"],
        "green_pct": _share(current["green_count"], total),
        "amber_pct": _share(current["amber_count"], total),
        "red_pct": _share(current["red_count"], total),
        "trend": calc_trend(current["avg_percentage"], previous["avg_percentage"], previous["count"]),
        "total_entries": total,
        "previous_period": previous_period,
        "previous_period_avg": previous["avg_percentage"],
    }


def monthly_kpi(
    store: EntryStore,
    landscape: str,
    skills: Sequence[str],
    year_month: str,
) -> dict:
    """Monthly KPI card for ``"YYYY-MM"`` versus the preceding month.

    Returns
    -------
    {"period", "overall_avg", "green_pct", "amber_pct", "red_pct",
     "trend", "total_entries", "previous_period", "previous_period_avg"}
    """
    year, month = parse_year_month(year_month)
    prev_year, prev_month = previous_month(year, month)
    return _period_kpi(
        store,
        landscape,
        skills,
        f"{year:04d}-{month:02d}",
        month_dates(year, month),
        f"{prev_year:04d}-{prev_month:02d}",
        month_dates(prev_year, prev_month),
    )


def yearly_kpi(
    store: EntryStore,
    landscape: str,
    skills: Sequence[str],
    year: int,
) -> dict:
    """Yearly KPI card (Jan 1 - Dec 31) versus the preceding year."""
    year = int(year)
    return _period_kpi(
        store,
        landscape,
        skills,
        f"{year:04d}",
        year_dates(year),
        f"{year - 1:04d}",
        year_dates(year - 1),
    )


def weekly_kpi(
    store: EntryStore,
    landscape: str,
    skills: Sequence[str],
    buckets: Iterable[WeekBucket],
) -> list[dict]:
    """One {label, avg_percentage, status, count} per week bucket, in order."""
    results = []
    for bucket in buckets:
        stats = average_over(store, landscape, skills, bucket.dates)
        results.append({
            "label": bucket.label,
            "avg_percentage": stats["avg_percentage"],
            "status": status_from_percentage(stats["avg_percentage"]),
            "count": stats["count"],
        })
    return results


def daily_stats(
    store: EntryStore,
    landscape: str,
    skills: Sequence[str],
    day: Any,
) -> dict:
    """Selected day versus its Sunday-start calendar week.

    Trend is 'up' when the day average is at least the week average.
    """
    week = week_containing(day)
    today = normalise_date(day)
    day_stats = average_over(store, landscape, skills, [today])
    week_stats = average_over(store, landscape, skills, week)
    return {
        "date": today,
        "day_avg": day_stats["avg_percentage"],
        "day_count": day_stats["count"],
        "week_avg": week_stats["avg_percentage"],
        "week_count": week_stats["count"],
        "trend": TREND_UP if day_stats["avg_percentage"] >= week_stats["avg_percentage"] else TREND_DOWN,
    }


def summary_counts(store: EntryStore, landscape: str) -> dict:
    """Status counts over every entry of a landscape, any date."""
    counts = {"total": 0, GREEN: 0, AMBER: 0, RED: 0}
    for entry in store:
        if entry.landscape != landscape:
            continue
        counts["total"] += 1
        counts[entry.status] += 1
    return counts


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------
class KPICache:
    """Memoises KPI results by (kind, landscape, window, skills).

    Holds no invalidation logic of its own; the owner must call
    ``invalidate`` on every store or skill-list mutation. Callers get a
    deep copy, so editing a returned result never changes the cache.
    """

    def __init__(self) -> None:
        self._results: dict[tuple, Any] = {}
        self.hits = 0
        self.misses = 0

    def get_or_compute(self, key: tuple, compute: Callable[[], Any]) -> Any:
        if key in self._results:
            self.hits += 1
            return copy.deepcopy(self._results[key])
        self.misses += 1
        result = compute()
        self._results[key] = result
        return copy.deepcopy(result)

    def invalidate(self) -> None:
        self._results.clear()

    def __len__(self) -> int:
        return len(self._results)
