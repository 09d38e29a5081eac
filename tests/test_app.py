from __future__ import annotations

import contextlib
import io
import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

import switch_playtime
from switch_playtime import __version__
from switch_playtime.app import main
from switch_playtime.database import PlayTimeDatabase

from ui_dumps import day_row, hierarchy


class AppTests(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.tmp_dir = Path(tmp.name)
        patcher = mock.patch.dict(os.environ, {"SWITCH_PLAYTIME_HOME": str(self.tmp_dir)})
        patcher.start()
        self.addCleanup(patcher.stop)

    def _run(self, *argv: str) -> tuple[int, str, str]:
        out = io.StringIO()
        err = io.StringIO()
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            code = main(list(argv))
        return code, out.getvalue(), err.getvalue()

    def _write_dump(self, name: str, *rows: str) -> Path:
        path = self.tmp_dir / name
        path.write_text(hierarchy(*rows), encoding="utf-8")
        return path

    def test_version(self) -> None:
        code, out, _ = self._run("--version")
        self.assertEqual(code, 0)
        self.assertEqual(out.strip(), __version__)

    def test_from_xml_prints_and_stores(self) -> None:
        first = self._write_dump("a.xml", day_row(0, "14", "Thu", "0", "20"), day_row(1, "15", "Fri", "1", "0"))
        second = self._write_dump("b.xml", day_row(1, "15", "Fri", "1", "30"), day_row(2, "16", "Sat"))

        code, out, _ = self._run("--from-xml", str(first), str(second), "--today", "2024-03-20", "--json")
        self.assertEqual(code, 0)
        payload = json.loads(out)
        self.assertEqual([row["date"] for row in payload], ["2024-03-14", "2024-03-15", "2024-03-16"])
        self.assertEqual(payload[1]["minutes"], 90)

        stored = PlayTimeDatabase(self.tmp_dir / "playtime.sqlite3").list_game_days()
        self.assertEqual(len(stored), 3)

        code, out, _ = self._run("--history", "--since", "2024-03-15")
        self.assertEqual(code, 0)
        self.assertIn("2024-03-15 Fri", out)
        self.assertNotIn("2024-03-14", out)
        self.assertIn("Total over 2 days: 1h 30m", out)

    def test_no_save_skips_database(self) -> None:
        dump = self._write_dump("a.xml", day_row(0, "14", "Thu", "0", "20"))
        code, _, _ = self._run("--from-xml", str(dump), "--today", "2024-03-20", "--no-save")
        self.assertEqual(code, 0)
        self.assertEqual(PlayTimeDatabase(self.tmp_dir / "playtime.sqlite3").list_game_days(), [])

    def test_offline_run_without_saving_leaves_no_files(self) -> None:
        dump = self._write_dump("a.xml", day_row(0, "14", "Thu", "0", "20"))
        home = self.tmp_dir / "fresh-home"
        with mock.patch.dict(os.environ, {"SWITCH_PLAYTIME_HOME": str(home)}):
            code, out, _ = self._run("--from-xml", str(dump), "--today", "2024-03-20", "--no-save")
        self.assertEqual(code, 0)
        self.assertIn("2024-03-14 Thu", out)
        self.assertFalse(home.exists())

    def test_package_entry_point(self) -> None:
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            code = switch_playtime.main(["--version"])
        self.assertEqual(code, 0)
        self.assertEqual(out.getvalue().strip(), switch_playtime.__version__)

    def test_missing_anchor_reports_error(self) -> None:
        dump = self._write_dump("a.xml", day_row(0, "Today", "Wed", top=True))
        code, out, err = self._run("--from-xml", str(dump))
        self.assertEqual(code, 1)
        self.assertEqual(out, "")
        self.assertIn("parseable date", err)

    def test_device_capture_uses_settings_and_flags(self) -> None:
        db = PlayTimeDatabase(self.tmp_dir / "playtime.sqlite3")
        db.set_setting("capture_pages", "5")

        with mock.patch("switch_playtime.app.PlayTimeCaptureSession") as session_cls, mock.patch(
            "switch_playtime.app.AndroidDevice"
        ) as device_cls:
            session_cls.return_value.run.return_value = []
            code, out, _ = self._run("--serial", "emulator-5554", "--scroll-ratio", "0.5")

        self.assertEqual(code, 0)
        device_cls.assert_called_once_with(serial="emulator-5554")
        options = session_cls.call_args.args[1]
        self.assertEqual(options.pages, 5)
        self.assertEqual(options.scroll_ratio, 0.5)
        self.assertIn("No play time recorded.", out)


if __name__ == "__main__":
    unittest.main()
