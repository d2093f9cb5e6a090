"""
Configuration: scoring bands, default skills and landscapes, storage keys,
file paths.
"""

import os
from pathlib import Path

# ---------------------------------------------------------------------------
# File paths (override with environment variables)
# ---------------------------------------------------------------------------
DATA_DIR = Path(
    os.getenv("OPS_DASHBOARD_DATA_DIR", Path(__file__).resolve().parent.parent / "data")
)
STORE_FILE = Path(os.getenv("OPS_DASHBOARD_STORE_FILE", DATA_DIR / "ops_dashboard.json"))
EXPORT_DIR = DATA_DIR / "exports"

# ---------------------------------------------------------------------------
# Scoring bands
# ---------------------------------------------------------------------------
# Downtime (hours/day) band edges. Green covers [0, 1.2], amber (1.2, 13.2],
# red everything above. Percentages are linear inside each band.
HOURS_PER_DAY = 24.0
GREEN_MAX_DOWNTIME = 1.2
AMBER_MAX_DOWNTIME = 13.2
GREEN_SLOPE = 4.17

# Status thresholds on the percentage scale; must match the band edges above.
GREEN_THRESHOLD = 95
AMBER_THRESHOLD = 45

GREEN = "green"
AMBER = "amber"
RED = "red"
NO_DATA = "none"
STATUSES = (GREEN, AMBER, RED)

# Trend labels for period-over-period comparison
TREND_UP = "up"
TREND_DOWN = "down"
TREND_FLAT = "flat"

# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------
ENTRIES_KEY = "operationalData"
SKILLS_KEY = "skillsList"
LANDSCAPES_KEY = "landscapesList"

# Composite key codec: fields joined by KEY_SEPARATOR, with KEY_ESCAPE
# prefixing any separator or escape character inside a field.
KEY_SEPARATOR = "_"
KEY_ESCAPE = "\\"

AUTOSAVE_INTERVAL_SECONDS = 30

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
DEFAULT_SKILLS = [
    "Business Clarity",
    "Revenue",
    "BPT Processing",
    "Stock Aging",
    "Inventory",
    "AMB for Manufacturing",
    "PMI for Manufacturing",
    "BPM Stock Reconciliation",
]

DEFAULT_LANDSCAPES = ["Europe", "NAM", "IA", "SEA", "Global"]

# ---------------------------------------------------------------------------
# Presentation
# ---------------------------------------------------------------------------
RAG_COLORS = {
    GREEN: "#28a745",
    AMBER: "#ffc107",
    RED: "#dc3545",
    NO_DATA: "#666666",
}

# Spreadsheet export fills: status -> (background, font colour)
EXPORT_FILLS = {
    GREEN: ("C6EFCE", "006100"),
    AMBER: ("FFEB9C", "9C5700"),
    RED: ("FFC7CE", "9C0006"),
    NO_DATA: ("FFFFFF", "767676"),
}
EXPORT_HEADER_FILL = "4472C4"
EXPORT_KPI_FILL = "70AD47"
EXPORT_SUBHEADER_FILL = "D9E1F2"

REPORT_TITLE = "Operations Dashboard with KPI Analytics"
REPORT_LEGEND = (
    "Legend: ● Green (95-100%) | ● Amber (45-95%) | "
    "● Red (0-45%) | ○ No Data"
)
HISTORY_COLUMNS = [
    "Date",
    "Landscape",
    "Skill",
    "Period",
    "Status",
    "Performance %",
    "Downtime (h)",
    "Incident",
    "Notes",
]

WEEKDAY_ABBREVIATIONS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
