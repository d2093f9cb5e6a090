import sys
import unittest
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from ops_dashboard import dashboard, transforms
from ops_dashboard.config import HISTORY_COLUMNS, LANDSCAPES_KEY, SKILLS_KEY
from ops_dashboard.state import AppState
from ops_dashboard.storage import MemoryStore
from ops_dashboard.store import Entry, EntryStore

SKILLS = ["Revenue", "Inventory"]


def fixed_clock():
    return datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def ticking_clock():
    current = [datetime(2024, 3, 1, tzinfo=timezone.utc)]

    def clock() -> datetime:
        current[0] = current[0] + timedelta(minutes=1)
        return current[0]

    return clock


class MonthlyMatrixTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = EntryStore()
        self.store.put("Europe", "Revenue", "2024-02-01", 2)
        self.matrix = dashboard.get_monthly_matrix(self.store, "Europe", SKILLS, "2024-02")

    def test_shape(self) -> None:
        self.assertEqual(self.matrix["period"], "2024-02")
        self.assertEqual(len(self.matrix["columns"]), 5)
        self.assertEqual(self.matrix["columns"][-1], {"index": 5, "label": "WK 5", "start_day": 29, "end_day": 29})
        self.assertEqual([r["skill"] for r in self.matrix["rows"]], SKILLS)
        self.assertTrue(all(len(r["cells"]) == 5 for r in self.matrix["rows"]))

    def test_cells(self) -> None:
        revenue, inventory = self.matrix["rows"]
        first = revenue["cells"][0]
        self.assertEqual((first["percentage"], first["status"], first["count"]), (92, "amber", 1))
        self.assertEqual(len(first["days"]), 7)
        self.assertEqual(
            first["days"][0],
            {"date": "2024-02-01", "weekday": "Thu", "percentage": 92, "status": "amber"},
        )
        self.assertEqual(first["days"][1]["status"], "none")
        self.assertIsNone(first["days"][1]["percentage"])

        empty = inventory["cells"][0]
        self.assertEqual((empty["percentage"], empty["status"], empty["count"]), (0, "none", 0))

    def test_frames(self) -> None:
        values = transforms.build_monthly_frame(self.matrix)
        self.assertEqual(values.shape, (2, 6))
        self.assertEqual(values.columns[1], "WK 1 (1-7)")
        self.assertEqual(values.iloc[0, 1], "92%")
        self.assertEqual(values.iloc[1, 1], "")

        statuses = transforms.build_monthly_status_frame(self.matrix)
        self.assertEqual(statuses.iloc[0, 1], "amber")
        self.assertEqual(statuses.iloc[1, 1], "none")


class DailyMatrixTests(unittest.TestCase):
    def test_week_columns_and_cells(self) -> None:
        store = EntryStore()
        store.put("Europe", "Revenue", "2024-03-13", 2, notes="slow", incident_ref="INC1")
        matrix = dashboard.get_daily_matrix(store, "Europe", SKILLS, "2024-03-13")

        self.assertEqual(matrix["columns"][0], {"date": "2024-03-10", "weekday": "Sun", "label": "10/3"})
        self.assertEqual(matrix["columns"][-1]["weekday"], "Sat")
        cell = matrix["rows"][0]["cells"][3]
        self.assertEqual(cell["key"], "Europe_Revenue_2024-03-13")
        self.assertEqual((cell["percentage"], cell["status"], cell["downtime_hours"]), (92, "amber", 2.0))
        self.assertEqual((cell["notes"], cell["incident_ref"]), ("slow", "INC1"))
        self.assertEqual(matrix["rows"][1]["cells"][3]["status"], "none")

        frame = transforms.build_daily_frame(matrix)
        self.assertEqual(frame.columns[4], "Wed 13/3")
        self.assertEqual(frame.iloc[0, 4], "92% / 2h")


class HistoryTests(unittest.TestCase):
    def test_newest_first(self) -> None:
        store = EntryStore(clock=ticking_clock())
        store.put("Europe", "Revenue", "2024-03-01", 0)
        store.put("Europe", "Revenue", "2024-03-02", 0)
        store.put("NAM", "Revenue", "2024-03-03", 0)
        history = dashboard.get_history(store)
        self.assertEqual([r["date"] for r in history], ["2024-03-03", "2024-03-02", "2024-03-01"])
        self.assertEqual(history[0]["key"], "NAM_Revenue_2024-03-03")

    def test_ties_keep_insertion_order(self) -> None:
        store = EntryStore(clock=fixed_clock)
        for day in ("2024-03-05", "2024-03-01", "2024-03-03"):
            store.put("Europe", "Revenue", day, 0)
        history = dashboard.get_history(store)
        self.assertEqual([r["date"] for r in history], ["2024-03-05", "2024-03-01", "2024-03-03"])

    def test_missing_timestamp_sorts_last_and_filter(self) -> None:
        store = EntryStore(clock=fixed_clock)
        store.merge([Entry("Europe", "Inventory", "2024-03-09")])
        store.put("Europe", "Revenue", "2024-03-01", 0)
        store.put("NAM", "Revenue", "2024-03-01", 0)
        history = dashboard.get_history(store, "Europe")
        self.assertEqual([r["skill"] for r in history], ["Revenue", "Inventory"])

    def test_history_frame(self) -> None:
        self.assertEqual(list(transforms.build_history_frame([]).columns), HISTORY_COLUMNS)
        store = EntryStore(clock=fixed_clock)
        store.put("Europe", "Revenue", "2024-03-01", 2, incident_ref="INC7")
        frame = transforms.build_history_frame(dashboard.get_history(store))
        self.assertEqual(list(frame.columns), HISTORY_COLUMNS)
        self.assertEqual(frame.loc[0, "Status"], "amber")
        self.assertEqual(frame.loc[0, "Incident"], "INC7")


class ReportTests(unittest.TestCase):
    def setUp(self) -> None:
        self.state = AppState(
            MemoryStore({SKILLS_KEY: SKILLS, LANDSCAPES_KEY: ["Europe"]}),
            clock=fixed_clock,
        )
        self.state.save_entry("Europe", "Revenue", "2024-03-01", 2)

    def test_monthly_report(self) -> None:
        report = dashboard.get_monthly_report(self.state, "Europe", "2024-03", generated_on=date(2024, 3, 31))
        self.assertEqual(report["filename"], "Operations_KPI_Report_Europe_March_2024.xlsx")
        self.assertIn("March 2024", report["title"])
        self.assertEqual(report["subtitle"], "Landscape: Europe | Report Generated: 2024-03-31")
        self.assertEqual(report["monthly_kpi"]["overall_avg"], 92)
        self.assertEqual(report["yearly_kpi"]["period"], "2024")
        self.assertEqual(len(report["weekly_kpi"]), 5)
        self.assertEqual(len(report["matrix"]["rows"]), 2)

    def test_history_report(self) -> None:
        report = dashboard.get_history_report(self.state, "Europe", "2024-03", generated_on=date(2024, 3, 31))
        self.assertEqual(report["filename"], "Operations_History_2024-03-31.xlsx")
        self.assertEqual(report["subtitle"], "Monthly Average: 92% | Yearly Average: 92%")
        self.assertEqual(report["columns"], HISTORY_COLUMNS)
        self.assertEqual(len(report["rows"]), 1)

    def test_kpi_overview(self) -> None:
        overview = dashboard.get_kpi_overview(self.state, "Europe", "2024-03")
        self.assertEqual(overview["counts"], {"total": 1, "green": 0, "amber": 1, "red": 0})
        self.assertEqual(overview["weekly"][0]["status"], "amber")


if __name__ == "__main__":
    unittest.main()
