from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from switch_playtime import paths
from switch_playtime.config import (
    DEVICE_SERIAL_SETTING_KEY,
    KEEP_CAPTURES_SETTING_KEY,
    PAGES_SETTING_KEY,
    SCROLL_RATIO_SETTING_KEY,
    TrackerOptions,
)
from switch_playtime.database import PlayTimeDatabase


class TrackerOptionsTests(unittest.TestCase):
    def test_defaults(self) -> None:
        options = TrackerOptions(xml_file=Path("ui.xml"))
        self.assertEqual(options.pages, 4)
        self.assertEqual(options.scroll_ratio, 0.3)
        self.assertEqual(options.refresh_seconds, 4.0)
        self.assertIsNone(options.serial)
        self.assertFalse(options.keep_captures)

    def test_rejects_invalid_values(self) -> None:
        with self.assertRaises(ValueError):
            TrackerOptions(pages=0, xml_file=Path("ui.xml"))
        with self.assertRaises(ValueError):
            TrackerOptions(scroll_ratio=1.5, xml_file=Path("ui.xml"))

    def test_from_settings(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            db = PlayTimeDatabase(Path(tmp_dir) / "playtime.sqlite3")
            db.set_setting(PAGES_SETTING_KEY, "7")
            db.set_setting(SCROLL_RATIO_SETTING_KEY, "2")
            db.set_setting(DEVICE_SERIAL_SETTING_KEY, "emulator-5554")
            db.set_setting(KEEP_CAPTURES_SETTING_KEY, "1")

            options = TrackerOptions.from_settings(db)
            self.assertEqual(options.pages, 7)
            self.assertEqual(options.scroll_ratio, 0.3)
            self.assertEqual(options.serial, "emulator-5554")
            self.assertTrue(options.keep_captures)

    def test_overrides_skip_unset_flags(self) -> None:
        options = TrackerOptions(xml_file=Path("ui.xml"))
        updated = options.with_overrides(pages=2, serial=None, scroll_ratio=None)
        self.assertEqual(updated.pages, 2)
        self.assertEqual(updated.scroll_ratio, 0.3)
        self.assertIs(options.with_overrides(serial=None), options)


class PathsTests(unittest.TestCase):
    def test_home_override(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            with mock.patch.dict(os.environ, {"SWITCH_PLAYTIME_HOME": tmp_dir}):
                self.assertEqual(paths.data_directory(), Path(tmp_dir))
                self.assertEqual(paths.database_path(), Path(tmp_dir) / "playtime.sqlite3")
                paths.ensure_directories()
                self.assertTrue(paths.captures_directory().is_dir())


if __name__ == "__main__":
    unittest.main()
