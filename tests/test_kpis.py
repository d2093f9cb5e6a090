import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from ops_dashboard import kpis
from ops_dashboard.periods import weeks_of_month
from ops_dashboard.store import EntryStore

SKILLS = ["Revenue", "Inventory"]


class AverageOverTests(unittest.TestCase):
    def test_empty_window_is_zero(self) -> None:
        stats = kpis.average_over(EntryStore(), "Europe", SKILLS, ["2024-03-01"])
        self.assertEqual(
            stats,
            {"avg_percentage": 0, "count": 0, "green_count": 0, "amber_count": 0, "red_count": 0},
        )

    def test_missing_entries_are_skipped_not_zero(self) -> None:
        store = EntryStore()
        store.put("Europe", "Revenue", "2024-03-01", 0)
        stats = kpis.average_over(store, "Europe", SKILLS, ["2024-03-01", "2024-03-02"])
        self.assertEqual(stats["avg_percentage"], 100)
        self.assertEqual(stats["count"], 1)

    def test_other_landscapes_and_unlisted_skills_ignored(self) -> None:
        store = EntryStore()
        store.put("Europe", "Revenue", "2024-03-01", 0)
        store.put("NAM", "Revenue", "2024-03-01", 24)
        store.put("Europe", "Procurement", "2024-03-01", 24)
        stats = kpis.average_over(store, "Europe", SKILLS, ["2024-03-01"])
        self.assertEqual((stats["avg_percentage"], stats["count"]), (100, 1))


class PeriodKpiTests(unittest.TestCase):
    def test_single_amber_entry_month(self) -> None:
        store = EntryStore()
        store.put("Europe", "Revenue", "2024-03-01", 2)
        kpi = kpis.monthly_kpi(store, "Europe", SKILLS, "2024-03")
        self.assertEqual(kpi["period"], "2024-03")
        self.assertEqual(kpi["overall_avg"], 92)
        self.assertEqual(kpi["total_entries"], 1)
        self.assertEqual((kpi["green_pct"], kpi["amber_pct"], kpi["red_pct"]), (0, 100, 0))
        self.assertEqual(kpi["trend"], "flat")
        self.assertEqual(kpi["previous_period"], "2024-02")
        self.assertEqual(kpi["previous_period_avg"], 0)

    def test_january_compares_with_previous_december(self) -> None:
        store = EntryStore()
        store.put("Europe", "Revenue", "2023-12-05", 0)
        store.put("Europe", "Revenue", "2024-01-05", 2)
        kpi = kpis.monthly_kpi(store, "Europe", SKILLS, "2024-01")
        self.assertEqual(kpi["previous_period"], "2023-12")
        self.assertEqual(kpi["previous_period_avg"], 100)
        self.assertEqual(kpi["trend"], "down")

    def test_trend_up(self) -> None:
        store = EntryStore()
        store.put("Europe", "Revenue", "2024-02-10", 2)
        store.put("Europe", "Revenue", "2024-03-10", 0)
        self.assertEqual(kpis.monthly_kpi(store, "Europe", SKILLS, "2024-03")["trend"], "up")

    def test_status_shares(self) -> None:
        store = EntryStore()
        store.put("Europe", "Revenue", "2024-03-01", 0)
        store.put("Europe", "Inventory", "2024-03-01", 0)
        store.put("Europe", "Revenue", "2024-03-02", 24)
        kpi = kpis.monthly_kpi(store, "Europe", SKILLS, "2024-03")
        self.assertEqual((kpi["green_pct"], kpi["amber_pct"], kpi["red_pct"]), (67, 0, 33))
        self.assertEqual(kpi["overall_avg"], 67)

    def test_empty_month(self) -> None:
        kpi = kpis.monthly_kpi(EntryStore(), "Europe", SKILLS, "2024-03")
        self.assertEqual(kpi["overall_avg"], 0)
        self.assertEqual(kpi["total_entries"], 0)
        self.assertEqual((kpi["green_pct"], kpi["amber_pct"], kpi["red_pct"]), (0, 0, 0))
        self.assertEqual(kpi["trend"], "flat")

    def test_yearly(self) -> None:
        store = EntryStore()
        store.put("Europe", "Revenue", "2024-03-01", 2)
        store.put("Europe", "Inventory", "2024-06-10", 0)
        store.put("Europe", "Inventory", "2025-01-01", 24)
        kpi = kpis.yearly_kpi(store, "Europe", SKILLS, 2024)
        self.assertEqual(kpi["period"], "2024")
        self.assertEqual(kpi["previous_period"], "2023")
        self.assertEqual(kpi["overall_avg"], 96)
        self.assertEqual(kpi["total_entries"], 2)
        self.assertEqual((kpi["green_pct"], kpi["amber_pct"]), (50, 50))
        self.assertEqual(kpi["trend"], "flat")


class WeeklyKpiTests(unittest.TestCase):
    def test_one_result_per_bucket_in_order(self) -> None:
        store = EntryStore()
        store.put("Europe", "Revenue", "2024-03-01", 2)
        store.put("Europe", "Inventory", "2024-03-31", 0)
        weekly = kpis.weekly_kpi(store, "Europe", SKILLS, weeks_of_month(2024, 3))
        self.assertEqual([w["label"] for w in weekly], ["WK 1", "WK 2", "WK 3", "WK 4", "WK 5"])
        self.assertEqual(weekly[0], {"label": "WK 1", "avg_percentage": 92, "status": "amber", "count": 1})
        self.assertEqual(weekly[1], {"label": "WK 2", "avg_percentage": 0, "status": "red", "count": 0})
        self.assertEqual(weekly[4]["status"], "green")


class DailyStatsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = EntryStore()
        # Week of Sunday 2024-03-10 .. Saturday 2024-03-16
        self.store.put("Europe", "Revenue", "2024-03-13", 0)
        self.store.put("Europe", "Revenue", "2024-03-11", 24)
        # Outside the week
        self.store.put("Europe", "Revenue", "2024-03-09", 24)

    def test_day_against_its_week(self) -> None:
        stats = kpis.daily_stats(self.store, "Europe", SKILLS, "2024-03-13")
        self.assertEqual(stats["date"], "2024-03-13")
        self.assertEqual((stats["day_avg"], stats["day_count"]), (100, 1))
        self.assertEqual((stats["week_avg"], stats["week_count"]), (50, 2))
        self.assertEqual(stats["trend"], "up")

    def test_day_below_week_is_down(self) -> None:
        stats = kpis.daily_stats(self.store, "Europe", SKILLS, "2024-03-14")
        self.assertEqual(stats["day_count"], 0)
        self.assertEqual(stats["trend"], "down")


class SummaryCountsTests(unittest.TestCase):
    def test_counts_every_entry_of_landscape(self) -> None:
        store = EntryStore()
        store.put("Europe", "Revenue", "2023-01-01", 0)
        store.put("Europe", "Revenue", "2024-03-01", 2)
        store.put("Europe", "Anything", "2024-03-02", 20)
        store.put("NAM", "Revenue", "2024-03-01", 0)
        self.assertEqual(
            kpis.summary_counts(store, "Europe"),
            {"total": 3, "green": 1, "amber": 1, "red": 1},
        )


class KPICacheTests(unittest.TestCase):
    def test_memoises_until_invalidated(self) -> None:
        cache = kpis.KPICache()
        calls = []

        def compute():
            calls.append(1)
            return len(calls)

        self.assertEqual(cache.get_or_compute(("k",), compute), 1)
        self.assertEqual(cache.get_or_compute(("k",), compute), 1)
        self.assertEqual((cache.hits, cache.misses), (1, 1))
        cache.invalidate()
        self.assertEqual(len(cache), 0)
        self.assertEqual(cache.get_or_compute(("k",), compute), 2)


if __name__ == "__main__":
    unittest.main()
