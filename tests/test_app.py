import sys
import tempfile
import unittest
from datetime import date
from pathlib import Path
from unittest import mock

import streamlit as st
from streamlit.testing.v1 import AppTest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from ops_dashboard.config import LANDSCAPES_KEY, RAG_COLORS, SKILLS_KEY
from ops_dashboard.state import AppState
from ops_dashboard.storage import JsonFileStore

APP_FILE = str(ROOT / "app.py")


class AppPageTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        store_file = Path(self._tmp.name) / "store.json"
        kv = JsonFileStore(store_file)
        kv.set(SKILLS_KEY, ["Revenue", "Inventory"])
        kv.set(LANDSCAPES_KEY, ["Europe"])
        seeded = AppState(kv)
        seeded.save_entry("Europe", "Revenue", "2024-03-13", 2, notes="batch overran")
        seeded.save_entry("Europe", "Inventory", "2024-03-13", 5, notes="stock sync", incident_ref="INC7")

        patcher = mock.patch("ops_dashboard.config.STORE_FILE", store_file)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.addCleanup(self._tmp.cleanup)
        st.cache_resource.clear()
        self.addCleanup(st.cache_resource.clear)

    def _app(self) -> AppTest:
        at = AppTest.from_file(APP_FILE, default_timeout=30)
        at.run()
        at.sidebar.date_input[0].set_value(date(2024, 3, 1))
        at.sidebar.date_input[1].set_value(date(2024, 3, 13))
        return at

    def test_kpi_card_colour_comes_from_status_mapping(self) -> None:
        # March averages 86% (92 and 79), amber under the default bands
        at = self._app()
        at.run()
        self.assertFalse(at.exception)
        cards = [m.value for m in at.markdown if "Month 2024-03" in m.value]
        self.assertEqual(len(cards), 1)
        self.assertIn(RAG_COLORS["amber"], cards[0])

        with mock.patch("ops_dashboard.scoring.status_from_percentage", return_value="red") as mapping:
            at.run()
        cards = [m.value for m in at.markdown if "Month 2024-03" in m.value]
        self.assertIn(RAG_COLORS["red"], cards[0])
        mapping.assert_any_call(86)

    def test_entry_form_defaults_follow_picked_skill(self) -> None:
        at = self._app()
        at.sidebar.radio[0].set_value("Daily View")
        at.run()
        self.assertFalse(at.exception)
        self.assertEqual(at.main.number_input[0].value, 2.0)
        self.assertEqual(at.main.text_area[0].value, "batch overran")

        at.selectbox(key="entry_skill").set_value("Inventory")
        at.run()
        self.assertEqual(at.main.number_input[0].value, 5.0)
        self.assertEqual(at.main.text_area[0].value, "stock sync")
        self.assertEqual(at.main.text_input[0].value, "INC7")


if __name__ == "__main__":
    unittest.main()
