from __future__ import annotations

import io
import logging
import re
import subprocess
import time
from pathlib import Path

from PIL import Image

from .models import Size

logger = logging.getLogger(__name__)

APP_PACKAGE = "com.nintendo.znma"
APP_ACTIVITY = "com.nintendo.nx.moon.SplashActivity"

SWIPE_DURATION_MS = 300

_DUMP_FILE_PATTERN = re.compile(r"[^\s]+\.xml")
_SIZE_PATTERN = re.compile(r"([\d.]+)x([\d.]+)")


class DeviceError(RuntimeError):
    pass


class AndroidDevice:
    """Drives the Parental Controls app on a phone through adb."""

    def __init__(self, serial: str | None = None, adb: str = "adb", timeout_seconds: float = 30.0):
        self._serial = serial
        self._adb = adb
        self._timeout_seconds = timeout_seconds

    def unlock(self) -> None:
        self._shell("input", "keyevent", "82")

    def kill_app(self) -> None:
        self._shell("am", "force-stop", APP_PACKAGE)

    def open_app(self) -> None:
        self._shell("am", "start", "-W", "-n", f"{APP_PACKAGE}/{APP_ACTIVITY}")

    def open_app_fresh(self, refresh_seconds: float = 4.0) -> None:
        self.kill_app()
        self.open_app()
        # The summary list loads asynchronously after launch.
        time.sleep(max(0.0, refresh_seconds))

    def screen_size(self) -> Size:
        output = self._shell("wm", "size").strip()
        match = _SIZE_PATTERN.search(output)
        if not match:
            raise DeviceError(f'Screen size not found! output = "{output}"')
        return Size(width=float(match.group(1)), height=float(match.group(2)))

    def scroll_down(self, size: Size, ratio: float) -> None:
        x = size.width / 2
        y0 = size.height * (1 + ratio) / 2
        y1 = size.height * (1 - ratio) / 2
        self._swipe(x, y0, x, y1)

    def scroll_up(self, size: Size, ratio: float) -> None:
        x = size.width / 2
        y0 = size.height * (1 - ratio) / 2
        y1 = size.height * (1 + ratio) / 2
        self._swipe(x, y0, x, y1)

    def dump_ui(self, out_file: Path) -> Path | None:
        output = self._shell("uiautomator", "dump")
        match = _DUMP_FILE_PATTERN.search(output)
        if not match:
            logger.warning("uiautomator did not report a dump file: %s", output.strip())
            return None

        out_file = Path(out_file)
        out_file.parent.mkdir(parents=True, exist_ok=True)
        self._run("pull", match.group(0), str(out_file))
        return out_file

    def screenshot(self, out_file: Path) -> Path:
        raw = self._run_bytes("exec-out", "screencap", "-p")
        try:
            image = Image.open(io.BytesIO(raw))
            image.load()
        except OSError as exc:
            raise DeviceError("screencap returned an unreadable image.") from exc
        if image.mode != "RGB":
            image = image.convert("RGB")

        out_file = Path(out_file)
        out_file.parent.mkdir(parents=True, exist_ok=True)
        image.save(out_file, format="JPEG", quality=85, optimize=True)
        return out_file

    def _swipe(self, x0: float, y0: float, x1: float, y1: float) -> None:
        self._shell(
            "input",
            "swipe",
            _coord(x0),
            _coord(y0),
            _coord(x1),
            _coord(y1),
            str(SWIPE_DURATION_MS),
        )

    def _shell(self, *args: str) -> str:
        return self._run("shell", *args)

    def _run(self, *args: str) -> str:
        completed = self._execute(list(args), text=True)
        return completed.stdout or ""

    def _run_bytes(self, *args: str) -> bytes:
        completed = self._execute(list(args), text=False)
        return completed.stdout or b""

    def _execute(self, args: list[str], text: bool) -> subprocess.CompletedProcess:
        cmd = [self._adb]
        if self._serial:
            cmd += ["-s", self._serial]
        cmd += args
        logger.debug("adb: %s", " ".join(cmd))

        try:
            completed = subprocess.run(
                cmd,
                capture_output=True,
                text=text,
                timeout=self._timeout_seconds,
            )
        except FileNotFoundError as exc:
            raise DeviceError(f"adb executable not found: {self._adb}") from exc
        except subprocess.TimeoutExpired as exc:
            raise DeviceError(f"adb command timed out: {' '.join(args)}") from exc

        if completed.returncode != 0:
            stderr = completed.stderr
            if isinstance(stderr, bytes):
                stderr = stderr.decode("utf-8", errors="replace")
            raise DeviceError(f"adb {' '.join(args)} failed ({completed.returncode}): {(stderr or '').strip()}")
        return completed


def _coord(value: float) -> str:
    return f"{value:g}"
