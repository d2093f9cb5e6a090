import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from ops_dashboard import scoring


class ScoringTests(unittest.TestCase):
    def test_band_anchor_points(self) -> None:
        self.assertEqual(scoring.score(0), (100, "green"))
        self.assertEqual(scoring.score(1.2), (95, "green"))
        self.assertEqual(scoring.score(13.2), (45, "amber"))
        self.assertEqual(scoring.score(24), (0, "red"))

    def test_amber_band_is_linear(self) -> None:
        # 95 - (2 - 1.2) / 12 * 50 = 91.67
        self.assertEqual(scoring.score(2), (92, "amber"))
        # midpoint of the band
        self.assertEqual(scoring.percentage_from_downtime(7.2), 70)

    def test_red_band_saturates_at_zero(self) -> None:
        self.assertEqual(scoring.percentage_from_downtime(21.6), 10)
        self.assertEqual(scoring.score(30), (0, "red"))

    def test_invalid_input_is_clamped_to_zero_downtime(self) -> None:
        for value in (-3, None, "", "abc", float("nan")):
            with self.subTest(value=value):
                self.assertEqual(scoring.score(value), (100, "green"))
        self.assertEqual(scoring.score("2"), (92, "amber"))

    def test_status_boundaries(self) -> None:
        self.assertEqual(scoring.status_from_percentage(95), "green")
        self.assertEqual(scoring.status_from_percentage(94), "amber")
        self.assertEqual(scoring.status_from_percentage(45), "amber")
        self.assertEqual(scoring.status_from_percentage(44), "red")
        self.assertEqual(scoring.status_from_percentage(0), "red")

    def test_rounding_is_half_up(self) -> None:
        self.assertEqual(scoring.round_half_up(94.5), 95)
        self.assertEqual(scoring.round_half_up(44.5), 45)
        self.assertEqual(scoring.round_half_up(44.49), 44)
        self.assertEqual(scoring.round_half_up(0.5), 1)

    def test_monotonic_non_increasing(self) -> None:
        steps = [round(i * 0.1, 1) for i in range(0, 261)]
        percentages = [scoring.percentage_from_downtime(d) for d in steps]
        for earlier, later in zip(percentages, percentages[1:]):
            self.assertGreaterEqual(earlier, later)

    def test_status_matches_band(self) -> None:
        for downtime in (0.0, 0.5, 1.2):
            self.assertEqual(scoring.score(downtime)[1], "green")
        for downtime in (1.5, 6.0, 13.0):
            self.assertEqual(scoring.score(downtime)[1], "amber")
        for downtime in (14.0, 20.0, 24.0):
            self.assertEqual(scoring.score(downtime)[1], "red")


if __name__ == "__main__":
    unittest.main()
