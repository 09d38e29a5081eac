from __future__ import annotations

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Callable, Iterable

from .config import TrackerOptions
from .database import PlayTimeDatabase
from .device import AndroidDevice, DeviceError
from .extract import parse_days_from_xml
from .infer import infer_dates
from .models import CaptureResult, GameDay
from .paths import page_dump_path, screenshot_path
from .reconcile import DayList, merge_captures, merge_days, missing_indices

logger = logging.getLogger(__name__)

PageCallback = Callable[[CaptureResult], None]
ErrorCallback = Callable[[Exception], None]


class PlayTimeCaptureSession:
    """Scrolls through the daily summary list and folds every page into one history.

    Pages are captured strictly one after another. A device failure stops the
    loop; with an ``on_error`` callback the pages captured so far are still
    dated, without one the error propagates.
    """

    def __init__(
        self,
        device: AndroidDevice,
        options: TrackerOptions | None = None,
        db: PlayTimeDatabase | None = None,
    ):
        self._device = device
        self._options = options or TrackerOptions()
        self._db = db
        self._days: DayList = []

    @property
    def days(self) -> DayList:
        return list(self._days)

    def run(
        self,
        on_page: PageCallback | None = None,
        on_error: ErrorCallback | None = None,
        today: date | datetime | None = None,
    ) -> list[GameDay]:
        started_at = datetime.now().astimezone()
        self._days = []

        try:
            self._capture_pages(started_at, on_page)
        except DeviceError as exc:
            if on_error is None:
                raise
            logger.error("Capture aborted after %s indices: %s", len(self._days), exc)
            on_error(exc)

        holes = missing_indices(self._days)
        if holes:
            logger.info("Indices never captured: %s", holes)

        game_days = infer_dates(self._days, today=today)
        if self._db is not None:
            self._db.upsert_game_days(game_days, captured_at=started_at)
        return game_days

    def _capture_pages(self, started_at: datetime, on_page: PageCallback | None) -> None:
        options = self._options
        size = self._device.screen_size()
        self._device.unlock()
        self._device.open_app_fresh(options.refresh_seconds)

        for page in range(options.pages):
            if page > 0:
                self._device.scroll_down(size, options.scroll_ratio)

            result = self._capture_page(started_at, page)
            self._days = merge_days(self._days, result.entries)
            logger.info("Page %s/%s: %s day entries", page + 1, options.pages, len(result.entries))

            if on_page is not None:
                on_page(result)

    def _capture_page(self, started_at: datetime, page: int) -> CaptureResult:
        options = self._options
        target = page_dump_path(started_at, page) if options.keep_captures else Path(options.xml_file)
        dump = self._device.dump_ui(target)
        if dump is None:
            return CaptureResult(page=page, dump_path="", screenshot_path=None)

        shot: str | None = None
        if options.keep_captures:
            shot = str(self._device.screenshot(screenshot_path(started_at, page)))

        return CaptureResult(
            page=page,
            dump_path=str(dump),
            screenshot_path=shot,
            entries=tuple(parse_days_from_xml(dump)),
        )


def merge_capture_files(
    paths: Iterable[Path],
    today: date | datetime | None = None,
) -> list[GameDay]:
    days = merge_captures(parse_days_from_xml(Path(path)) for path in paths)
    return infer_dates(days, today=today)
