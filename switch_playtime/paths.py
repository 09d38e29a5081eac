from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path

APP_DIR_NAME = "SwitchPlaytime"


def data_directory() -> Path:
    override = os.environ.get("SWITCH_PLAYTIME_HOME")
    if override:
        return Path(override)
    local_appdata = os.environ.get("LOCALAPPDATA")
    if local_appdata:
        base = Path(local_appdata)
    else:
        base = Path.home() / ".local" / "share"
    return base / APP_DIR_NAME


def captures_directory() -> Path:
    return data_directory() / "captures"


def database_path() -> Path:
    return data_directory() / "playtime.sqlite3"


def ui_dump_path() -> Path:
    return data_directory() / "ui.xml"


def ensure_directories() -> None:
    captures_directory().mkdir(parents=True, exist_ok=True)


def page_dump_path(captured_at: datetime, page: int) -> Path:
    return _capture_folder(captured_at) / f"page_{page:02d}.xml"


def screenshot_path(captured_at: datetime, page: int) -> Path:
    return _capture_folder(captured_at) / f"page_{page:02d}.jpg"


def _capture_folder(captured_at: datetime) -> Path:
    folder = captures_directory() / captured_at.strftime("%Y%m%d_%H%M%S")
    folder.mkdir(parents=True, exist_ok=True)
    return folder
