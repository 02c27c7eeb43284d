import tempfile
import unittest
from pathlib import Path

import _support  # noqa: F401

from settings_store import DEFAULT_SETTINGS, THEMES, load_settings, save_settings


class SettingsStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.path = Path(self._tmp.name) / "fitsnap" / "settings.json"

    def test_missing_file_gives_defaults(self) -> None:
        self.assertEqual(load_settings(self.path), DEFAULT_SETTINGS)

    def test_corrupt_file_gives_defaults(self) -> None:
        self.path.parent.mkdir(parents=True)
        self.path.write_text("{not json", encoding="utf-8")

        self.assertEqual(load_settings(self.path), DEFAULT_SETTINGS)

    def test_save_then_load_keeps_known_keys_only(self) -> None:
        save_settings({"model_name": "gemini-2.5-flash", "api_key": "secret"}, self.path)

        loaded = load_settings(self.path)

        self.assertEqual(loaded["model_name"], "gemini-2.5-flash")
        self.assertEqual(loaded["theme"], DEFAULT_SETTINGS["theme"])
        self.assertNotIn("api_key", loaded)
        self.assertNotIn("secret", self.path.read_text(encoding="utf-8"))

    def test_theme_round_trips_and_unknown_theme_falls_back(self) -> None:
        save_settings({"theme": "light_blue.xml"}, self.path)
        self.assertEqual(load_settings(self.path)["theme"], "light_blue.xml")
        self.assertIn("light_blue.xml", THEMES)

        save_settings({"theme": "neon.xml"}, self.path)
        self.assertEqual(load_settings(self.path)["theme"], DEFAULT_SETTINGS["theme"])


if __name__ == "__main__":
    unittest.main()
