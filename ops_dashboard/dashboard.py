"""
Dashboard-ready output functions.

These are the primary entry points for a Streamlit/Dash front end or a
spreadsheet export. Each function returns plain dicts and lists, with no
knowledge of the rendering format.
"""

import logging
from collections.abc import Sequence
from datetime import date
from typing import Any

from .config import (
    HISTORY_COLUMNS,
    NO_DATA,
    REPORT_LEGEND,
    REPORT_TITLE,
    WEEKDAY_ABBREVIATIONS,
)
from .kpis import average_over
from .periods import month_label, parse_year_month, week_containing, weeks_of_month
from .scoring import status_from_percentage
from .state import AppState
from .store import EntryKey, EntryStore, encode_key
from .utils import parse_timestamp

logger = logging.getLogger(__name__)


def _weekday(iso_date: str) -> str:
    # date.weekday(): Monday=0, so shift to a Sunday-first index
    return WEEKDAY_ABBREVIATIONS[(date.fromisoformat(iso_date).weekday() + 1) % 7]


def _day_indicator(store: EntryStore, landscape: str, skill: str, iso_date: str) -> dict:
    entry = store.get(landscape, skill, iso_date)
    return {
        "date": iso_date,
        "weekday": _weekday(iso_date),
        "percentage": entry.percentage if entry else None,
        "status": entry.status if entry else NO_DATA,
    }


def get_monthly_matrix(
    store: EntryStore,
    landscape: str,
    skills: Sequence[str],
    year_month: str,
) -> dict:
    """Skill x week-bucket matrix for one month.

    Returns
    -------
    {
        "landscape": "Europe",
        "period": "2024-03",
        "columns": [{"index": 1, "label": "WK 1", "start_day": 1, "end_day": 7}, ...],
        "rows": [
            {"skill": "Revenue",
             "cells": [{"percentage": 92, "status": "amber", "count": 1,
                        "days": [{"date", "weekday", "percentage", "status"}, ...]},
                       ...]},
            ...
        ],
    }

    Cells without entries have status 'none' and percentage 0.
    """
    year, month = parse_year_month(year_month)
    buckets = weeks_of_month(year, month)

    rows = []
    for skill in skills:
        cells = []
        for bucket in buckets:
            stats = average_over(store, landscape, [skill], bucket.dates)
            cells.append({
                "percentage": stats["avg_percentage"],
                "status": _cell_status(stats),
                "count": stats["count"],
                "days": [_day_indicator(store, landscape, skill, d) for d in bucket.dates],
            })
        rows.append({"skill": skill, "cells": cells})

    return {
        "landscape": landscape,
        "period": f"{year:04d}-{month:02d}",
        "columns": [
            {
                "index": bucket.index,
                "label": bucket.label,
                "start_day": bucket.start_day,
                "end_day": bucket.end_day,
            }
            for bucket in buckets
        ],
        "rows": rows,
    }


def _cell_status(stats: dict) -> str:
    if stats["count"] == 0:
        return NO_DATA
    return status_from_percentage(stats["avg_percentage"])


def get_daily_matrix(
    store: EntryStore,
    landscape: str,
    skills: Sequence[str],
    day: Any,
) -> dict:
    """Skill x day matrix for the Sunday-start week containing ``day``.

    Each cell carries the entry's percentage, status, downtime, notes and
    incident reference, or status 'none' when nothing was recorded.
    """
    week = week_containing(day)
    columns = []
    for iso in week:
        d = date.fromisoformat(iso)
        columns.append({"date": iso, "weekday": _weekday(iso), "label": f"{d.day}/{d.month}"})

    rows = []
    for skill in skills:
        cells = []
        for iso in week:
            entry = store.get(landscape, skill, iso)
            cells.append({
                "date": iso,
                "key": encode_key(EntryKey(landscape, skill, iso)),
                "percentage": entry.percentage if entry else 0,
                "status": entry.status if entry else NO_DATA,
                "count": 1 if entry else 0,
                "downtime_hours": entry.downtime_hours if entry else 0.0,
                "notes": entry.notes if entry else "",
                "incident_ref": entry.incident_ref if entry else "",
            })
        rows.append({"skill": skill, "cells": cells})

    return {"landscape": landscape, "week": week, "columns": columns, "rows": rows}


def get_history(store: EntryStore, landscape: str | None = None) -> list[dict]:
    """All entries (optionally one landscape), newest ``recorded_at`` first.

    Entries with equal timestamps keep store insertion order.
    """
    rows = []
    for key, entry in store.all():
        if landscape and entry.landscape != landscape:
            continue
        row = entry.to_dict()
        row["key"] = encode_key(key)
        rows.append(row)

    # sorted() is stable under reverse=True, so ties keep insertion order
    return sorted(rows, key=lambda r: parse_timestamp(r["recorded_at"]), reverse=True)


def get_kpi_overview(state: AppState, landscape: str, year_month: str) -> dict:
    """Summary-card payload: monthly, yearly, weekly KPIs and status counts."""
    year, _ = parse_year_month(year_month)
    return {
        "landscape": landscape,
        "period": year_month,
        "monthly": state.monthly_kpi(landscape, year_month),
        "yearly": state.yearly_kpi(landscape, year),
        "weekly": state.weekly_kpi(landscape, year_month),
        "counts": state.summary_counts(landscape),
    }


def get_monthly_report(
    state: AppState,
    landscape: str,
    year_month: str,
    generated_on: date | None = None,
) -> dict:
    """Export-ready monthly report: banner, KPI blocks, matrix, legend."""
    year, month = parse_year_month(year_month)
    label = month_label(year, month)
    generated_on = generated_on or date.today()
    overview = get_kpi_overview(state, landscape, year_month)

    logger.info("Built monthly report for %s, %s", landscape, label)
    return {
        "title": f"{REPORT_TITLE} - {label}",
        "subtitle": f"Landscape: {landscape} | Report Generated: {generated_on.isoformat()}",
        "landscape": landscape,
        "period": year_month,
        "period_label": label,
        "generated_on": generated_on.isoformat(),
        "monthly_kpi": overview["monthly"],
        "yearly_kpi": overview["yearly"],
        "weekly_kpi": overview["weekly"],
        "matrix": get_monthly_matrix(state.store, landscape, list(state.skills), year_month),
        "legend": REPORT_LEGEND,
        "filename": f"Operations_KPI_Report_{landscape}_{label.replace(' ', '_')}.xlsx",
    }


def get_history_report(
    state: AppState,
    landscape: str,
    year_month: str,
    history_landscape: str | None = None,
    generated_on: date | None = None,
) -> dict:
    """Export-ready history: banner with current averages plus flat rows.

    ``landscape``/``year_month`` select the averages in the banner;
    ``history_landscape`` filters the rows (None for all landscapes).
    """
    year, _ = parse_year_month(year_month)
    generated_on = generated_on or date.today()
    monthly = state.monthly_kpi(landscape, year_month)
    yearly = state.yearly_kpi(landscape, year)

    return {
        "title": f"Complete Operations History Report - {REPORT_TITLE}",
        "subtitle": f"Monthly Average: {monthly['overall_avg']}% | Yearly Average: {yearly['overall_avg']}%",
        "columns": list(HISTORY_COLUMNS),
        "rows": get_history(state.store, history_landscape),
        "generated_on": generated_on.isoformat(),
        "filename": f"Operations_History_{generated_on.isoformat()}.xlsx",
    }
