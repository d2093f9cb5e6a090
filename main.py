"""
Operations Dashboard — End-to-end analytics pipeline.

Seeds a store with simulated entries, computes every KPI rollup, shapes
the monthly and history reports, writes them as spreadsheets, and prints
smoke-test summaries.

Usage:
    python main.py
"""

import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent))

from ops_dashboard.config import EXPORT_DIR
from ops_dashboard.dashboard import (
    get_daily_matrix,
    get_history,
    get_history_report,
    get_monthly_matrix,
    get_monthly_report,
)
from ops_dashboard.export import write_history_report, write_monthly_report
from ops_dashboard.periods import weeks_of_month
from ops_dashboard.scoring import score, status_from_percentage
from ops_dashboard.simulator import generate_payload
from ops_dashboard.state import AppState
from ops_dashboard.storage import MemoryStore
from ops_dashboard.transforms import (
    build_daily_frame,
    build_history_frame,
    build_monthly_frame,
    build_weekly_kpi_frame,
)

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)

LANDSCAPE = "Europe"
TARGET_MONTH = "2024-03"


def main() -> None:
    """Run the full analytics pipeline and print smoke-test outputs."""

    print("=" * 70)
    print("  OPERATIONS DASHBOARD — KPI Analytics")
    print("  Analytics Pipeline Smoke Test")
    print("=" * 70)
    print()

    # ------------------------------------------------------------------
    # 1. Seed state
    # ------------------------------------------------------------------
    print("[ 1 ] SEEDING STATE")
    print("-" * 40)

    state = AppState(MemoryStore())
    summary = state.import_payload(generate_payload(LANDSCAPE, 2024, 2, seed=7))
    print(f"\nFebruary import: {summary['entries']} entries")
    summary = state.import_payload(generate_payload(LANDSCAPE, 2024, 3, seed=42))
    print(f"March import: {summary['entries']} entries")

    entry = state.save_entry(LANDSCAPE, "Revenue", "2024-03-01", 2, notes="Batch job overran")
    print(f"Manual entry: {entry.skill} {entry.date} {entry.downtime_hours}h -> "
          f"{entry.percentage}% ({entry.status})")

    # ------------------------------------------------------------------
    # 2. KPI rollups
    # ------------------------------------------------------------------
    print("\n")
    print("[ 2 ] KPI ROLLUPS")
    print("-" * 40)

    monthly = state.monthly_kpi(LANDSCAPE, TARGET_MONTH)
    yearly = state.yearly_kpi(LANDSCAPE, 2024)
    print(f"\nMonthly KPI — {TARGET_MONTH}:")
    for name, value in monthly.items():
        print(f"  {name:20s} | {value}")
    print("\nYearly KPI — 2024:")
    for name, value in yearly.items():
        print(f"  {name:20s} | {value}")

    weekly = state.weekly_kpi(LANDSCAPE, TARGET_MONTH)
    print("\nWeekly availability:")
    print(build_weekly_kpi_frame(weekly).to_string(index=False))

    daily = state.daily_stats(LANDSCAPE, "2024-03-13")
    print(f"\nDaily stats 2024-03-13: {daily}")
    print(f"Summary counts: {state.summary_counts(LANDSCAPE)}")

    # ------------------------------------------------------------------
    # 3. Report shaping
    # ------------------------------------------------------------------
    print("\n")
    print("[ 3 ] REPORT SHAPING")
    print("-" * 40)

    skills = list(state.skills)
    monthly_matrix = get_monthly_matrix(state.store, LANDSCAPE, skills, TARGET_MONTH)
    print(f"\nMonthly matrix — {TARGET_MONTH}:")
    print(build_monthly_frame(monthly_matrix).to_string(index=False))

    daily_matrix = get_daily_matrix(state.store, LANDSCAPE, skills, "2024-03-13")
    print("\nDaily matrix — week of 2024-03-13:")
    print(build_daily_frame(daily_matrix).to_string(index=False))

    history = get_history(state.store, LANDSCAPE)
    print(f"\nHistory: {len(history)} rows (latest 5)")
    print(build_history_frame(history[:5]).to_string(index=False))

    # ------------------------------------------------------------------
    # 4. Export
    # ------------------------------------------------------------------
    print("\n")
    print("[ 4 ] EXPORT")
    print("-" * 40)

    EXPORT_DIR.mkdir(parents=True, exist_ok=True)
    report = get_monthly_report(state, LANDSCAPE, TARGET_MONTH)
    report_path = EXPORT_DIR / report["filename"]
    write_monthly_report(report, report_path)
    print(f"\nMonthly report written: {report_path}")

    history_report = get_history_report(state, LANDSCAPE, TARGET_MONTH)
    history_path = EXPORT_DIR / history_report["filename"]
    write_history_report(history_report, history_path)
    print(f"History report written: {history_path}")

    # ------------------------------------------------------------------
    # 5. Acceptance criteria verification
    # ------------------------------------------------------------------
    print("\n")
    print("[ 5 ] ACCEPTANCE CRITERIA CHECKS")
    print("-" * 40)

    checks = [
        ("score(0) == (100, green)", score(0) == (100, "green")),
        ("score(2) == (92, amber)", score(2) == (92, "amber")),
        ("score(24) == (0, red)", score(24) == (0, "red")),
        ("status boundaries 95/94/45/44",
         [status_from_percentage(p) for p in (95, 94, 45, 44)] == ["green", "amber", "amber", "red"]),
        ("Feb 2024 has 5 week buckets ending day 29",
         len(weeks_of_month(2024, 2)) == 5 and weeks_of_month(2024, 2)[-1].end_day == 29),
        ("monthly trend compares against February",
         monthly["previous_period"] == "2024-02" and monthly["trend"] in ("up", "down", "flat")),
    ]
    for label, passed in checks:
        print(f"  [{'PASS' if passed else 'FAIL'}] {label}")

    print("\n" + "=" * 70)
    print("  Pipeline complete.")
    print("=" * 70)


if __name__ == "__main__":
    main()
