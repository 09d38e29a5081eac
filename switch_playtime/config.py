from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import TYPE_CHECKING

from .paths import ui_dump_path

if TYPE_CHECKING:
    from .database import PlayTimeDatabase

PAGES_SETTING_KEY = "capture_pages"
SCROLL_RATIO_SETTING_KEY = "scroll_ratio"
REFRESH_SECONDS_SETTING_KEY = "refresh_seconds"
DEVICE_SERIAL_SETTING_KEY = "device_serial"
KEEP_CAPTURES_SETTING_KEY = "keep_captures"

DEFAULT_PAGES = 4
DEFAULT_SCROLL_RATIO = 0.3
DEFAULT_REFRESH_SECONDS = 4.0


@dataclass(frozen=True)
class TrackerOptions:
    pages: int = DEFAULT_PAGES
    xml_file: Path = field(default_factory=ui_dump_path)
    scroll_ratio: float = DEFAULT_SCROLL_RATIO
    refresh_seconds: float = DEFAULT_REFRESH_SECONDS
    serial: str | None = None
    keep_captures: bool = False

    def __post_init__(self) -> None:
        if self.pages < 1:
            raise ValueError("pages must be at least 1.")
        if not 0 < self.scroll_ratio < 1:
            raise ValueError("scroll_ratio must be between 0 and 1.")
        if self.refresh_seconds < 0:
            raise ValueError("refresh_seconds cannot be negative.")

    @classmethod
    def from_settings(cls, db: "PlayTimeDatabase") -> "TrackerOptions":
        ratio = db.get_setting_float(SCROLL_RATIO_SETTING_KEY, DEFAULT_SCROLL_RATIO)
        if ratio >= 1:
            ratio = DEFAULT_SCROLL_RATIO
        return cls(
            pages=db.get_setting_int(PAGES_SETTING_KEY, DEFAULT_PAGES),
            scroll_ratio=ratio,
            refresh_seconds=db.get_setting_float(REFRESH_SECONDS_SETTING_KEY, DEFAULT_REFRESH_SECONDS),
            serial=db.get_setting(DEVICE_SERIAL_SETTING_KEY) or None,
            keep_captures=(db.get_setting(KEEP_CAPTURES_SETTING_KEY, "0") == "1"),
        )

    def with_overrides(self, **overrides: object) -> "TrackerOptions":
        changes = {key: value for key, value in overrides.items() if value is not None}
        if not changes:
            return self
        return replace(self, **changes)
