"""
Data transforms: flatten report-shaper output into pandas DataFrames for
table rendering and quick analysis.
"""

import logging

import pandas as pd

from .config import HISTORY_COLUMNS, NO_DATA

logger = logging.getLogger(__name__)


def _cell_text(cell: dict) -> str:
    if cell["status"] == NO_DATA:
        return ""
    return f"{cell['percentage']}%"


def build_monthly_frame(matrix: dict) -> pd.DataFrame:
    """Monthly matrix -> one row per skill, one column per week.

    Column labels are ``"WK 1 (1-7)"``; cells read ``"92%"`` or ``""``.
    """
    columns = [f"{c['label']} ({c['start_day']}-{c['end_day']})" for c in matrix["columns"]]
    records = []
    for row in matrix["rows"]:
        record = {"skill": row["skill"]}
        for label, cell in zip(columns, row["cells"]):
            record[label] = _cell_text(cell)
        records.append(record)
    return pd.DataFrame(records, columns=["skill", *columns])


def build_monthly_status_frame(matrix: dict) -> pd.DataFrame:
    """Same shape as build_monthly_frame but holding status strings."""
    columns = [f"{c['label']} ({c['start_day']}-{c['end_day']})" for c in matrix["columns"]]
    records = []
    for row in matrix["rows"]:
        record = {"skill": row["skill"]}
        for label, cell in zip(columns, row["cells"]):
            record[label] = cell["status"]
        records.append(record)
    return pd.DataFrame(records, columns=["skill", *columns])


def build_daily_frame(matrix: dict) -> pd.DataFrame:
    """Daily matrix -> one row per skill, one column per weekday.

    Cells read ``"92% / 2.0h"`` or ``""``.
    """
    columns = [f"{c['weekday']} {c['label']}" for c in matrix["columns"]]
    records = []
    for row in matrix["rows"]:
        record = {"skill": row["skill"]}
        for label, cell in zip(columns, row["cells"]):
            if cell["status"] == NO_DATA:
                record[label] = ""
            else:
                record[label] = f"{cell['percentage']}% / {cell['downtime_hours']:g}h"
        records.append(record)
    return pd.DataFrame(records, columns=["skill", *columns])


def build_weekly_kpi_frame(weekly: list[dict]) -> pd.DataFrame:
    """Weekly KPI list -> DataFrame with label, avg_percentage, status, count."""
    return pd.DataFrame(weekly, columns=["label", "avg_percentage", "status", "count"])


def build_history_frame(rows: list[dict]) -> pd.DataFrame:
    """History rows -> DataFrame with the export column headers."""
    if not rows:
        return pd.DataFrame(columns=HISTORY_COLUMNS)

    df = pd.DataFrame(rows)
    df = df.rename(columns={
        "date": "Date",
        "landscape": "Landscape",
        "skill": "Skill",
        "period": "Period",
        "status": "Status",
        "percentage": "Performance %",
        "downtime_hours": "Downtime (h)",
        "incident_ref": "Incident",
        "notes": "Notes",
    })
    logger.info("Built history frame with %d rows", len(df))
    return df[HISTORY_COLUMNS].reset_index(drop=True)


def build_entries_frame(rows: list[dict]) -> pd.DataFrame:
    """History rows -> typed DataFrame (parsed dates) for charting."""
    if not rows:
        return pd.DataFrame(
            columns=["date", "landscape", "skill", "percentage", "status", "downtime_hours"]
        )
    df = pd.DataFrame(rows)
    df["date"] = pd.to_datetime(df["date"])
    return df.sort_values(["date", "skill"]).reset_index(drop=True)
