"""
Spreadsheet renderer: writes report-shaper output to an .xlsx workbook.

Works on the plain dicts from dashboard.get_monthly_report() and
dashboard.get_history_report(); the target can be a path or a binary
buffer (e.g. io.BytesIO for a download button).
"""

import logging
from pathlib import Path
from typing import IO

import openpyxl
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from .config import (
    EXPORT_FILLS,
    EXPORT_HEADER_FILL,
    EXPORT_KPI_FILL,
    EXPORT_SUBHEADER_FILL,
    NO_DATA,
)

logger = logging.getLogger(__name__)

_CENTER = Alignment(horizontal="center", vertical="center", wrap_text=True)


def _fill(hex_colour: str) -> PatternFill:
    return PatternFill(start_color=hex_colour, end_color=hex_colour, fill_type="solid")


def _banner(ws, row: int, text: str, width: int, fill: str, white: bool = True) -> None:
    ws.merge_cells(start_row=row, start_column=1, end_row=row, end_column=width)
    cell = ws.cell(row=row, column=1, value=text)
    cell.fill = _fill(fill)
    cell.font = Font(bold=True, color="FFFFFF" if white else "000000")
    cell.alignment = _CENTER


def _status_cell(cell, status: str) -> None:
    background, font = EXPORT_FILLS.get(status, EXPORT_FILLS[NO_DATA])
    cell.fill = _fill(background)
    cell.font = Font(bold=True, color=font)
    cell.alignment = _CENTER


def write_monthly_report(report: dict, target: str | Path | IO[bytes]) -> None:
    """Render a monthly report to an .xlsx workbook.

    Layout
    ------
    - Rows 1-2: title and landscape/date banner.
    - Row 3: 'MONTHLY KPI SUMMARY' banner; row 4: the KPI values.
    - Row 5: weekly availability per bucket.
    - Row 6: matrix header; then one row per skill.
    - Last row: legend.
    """
    matrix = report["matrix"]
    columns = matrix["columns"]
    width = max(len(columns) + 1, 5)

    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Monthly Report"

    _banner(ws, 1, report["title"], width, EXPORT_HEADER_FILL)
    _banner(ws, 2, report["subtitle"], width, EXPORT_SUBHEADER_FILL, white=False)
    _banner(ws, 3, "MONTHLY KPI SUMMARY", width, EXPORT_KPI_FILL)

    monthly = report["monthly_kpi"]
    kpi_values = [
        f"Overall Availability: {monthly['overall_avg']}%",
        f"Green Performance: {monthly['green_pct']}%",
        f"Amber Performance: {monthly['amber_pct']}%",
        f"Red Performance: {monthly['red_pct']}%",
        f"Trend: {monthly['trend']}",
    ]
    for col in range(1, width + 1):
        value = kpi_values[col - 1] if col <= len(kpi_values) else "-"
        ws.cell(row=4, column=col, value=value).alignment = _CENTER

    ws.cell(row=5, column=1, value="Weekly Availability").font = Font(bold=True)
    for offset, week in enumerate(report["weekly_kpi"], start=2):
        cell = ws.cell(row=5, column=offset, value=f"{week['label']}: {week['avg_percentage']}%")
        _status_cell(cell, week["status"] if week["count"] else NO_DATA)

    header = ws.cell(row=6, column=1, value="Operational Description")
    header.font = Font(bold=True)
    for offset, column in enumerate(columns, start=2):
        cell = ws.cell(
            row=6,
            column=offset,
            value=f"{column['label']}\n{column['start_day']}-{column['end_day']}",
        )
        cell.fill = _fill(EXPORT_HEADER_FILL)
        cell.font = Font(bold=True, color="FFFFFF")
        cell.alignment = _CENTER

    row_idx = 7
    for row in matrix["rows"]:
        ws.cell(row=row_idx, column=1, value=row["skill"]).font = Font(bold=True)
        for offset, cell_data in enumerate(row["cells"], start=2):
            if cell_data["status"] == NO_DATA:
                value = "○"
            else:
                value = f"● {cell_data['percentage']}.0%"
            _status_cell(ws.cell(row=row_idx, column=offset, value=value), cell_data["status"])
        row_idx += 1

    _banner(ws, row_idx, report["legend"], width, EXPORT_SUBHEADER_FILL, white=False)

    ws.column_dimensions["A"].width = 32
    for col in range(2, width + 1):
        ws.column_dimensions[get_column_letter(col)].width = 16

    wb.save(target)
    logger.info("Wrote monthly report (%d skills x %d weeks)", len(matrix["rows"]), len(columns))


def write_history_report(report: dict, target: str | Path | IO[bytes]) -> None:
    """Render a history report: banner rows, header row, one row per entry."""
    columns = report["columns"]
    width = len(columns)

    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "History"

    _banner(ws, 1, report["title"], width, EXPORT_HEADER_FILL)
    _banner(ws, 2, report["subtitle"], width, EXPORT_KPI_FILL)

    for col, name in enumerate(columns, start=1):
        cell = ws.cell(row=3, column=col, value=name)
        cell.fill = _fill(EXPORT_HEADER_FILL)
        cell.font = Font(bold=True, color="FFFFFF")
        cell.alignment = _CENTER

    for row_idx, entry in enumerate(report["rows"], start=4):
        values = [
            entry["date"],
            entry["landscape"],
            entry["skill"],
            entry["period"],
            f"● {entry['status'].upper()}",
            entry["percentage"],
            entry["downtime_hours"],
            entry["incident_ref"],
            entry["notes"],
        ]
        for col, value in enumerate(values, start=1):
            ws.cell(row=row_idx, column=col, value=value).alignment = _CENTER
        _status_cell(ws.cell(row=row_idx, column=5), entry["status"])

    for col in range(1, width + 1):
        ws.column_dimensions[get_column_letter(col)].width = 18

    wb.save(target)
    logger.info("Wrote history report (%d rows)", len(report["rows"]))
