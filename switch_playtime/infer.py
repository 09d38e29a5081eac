from __future__ import annotations

import logging
import re
from datetime import date, datetime, timedelta
from typing import Sequence

from .models import DayEntry, GameDay

logger = logging.getLogger(__name__)

MAX_LOOKBACK_DAYS = 30

_DIGITS = re.compile(r"[0-9]+")


class NoAnchorDateError(ValueError):
    def __init__(self, message: str = "Failed to find a valid parseable date"):
        super().__init__(message)


class DateRangeError(ValueError):
    pass


def find_anchor(days: Sequence[DayEntry | None]) -> tuple[DayEntry, int]:
    """Return the first entry whose date text holds a day-of-month, and that day."""
    for day in days:
        if day is None:
            continue
        match = _DIGITS.search(day.date_string)
        if match:
            return day, int(match.group(0))
    raise NoAnchorDateError()


def resolve_anchor_date(day_of_month: int, today: date | datetime | None = None) -> date:
    """Most recent date on or before today falling on ``day_of_month``.

    Looks back at most MAX_LOOKBACK_DAYS days. When nothing matches, today is
    returned.
    """
    noon = _local_noon(today)
    for offset in range(MAX_LOOKBACK_DAYS + 1):
        candidate = noon - timedelta(days=offset)
        if candidate.day == day_of_month:
            return candidate.date()

    logger.warning(
        "No date with day-of-month %s in the last %s days; anchoring on %s",
        day_of_month,
        MAX_LOOKBACK_DAYS,
        noon.date().isoformat(),
    )
    return noon.date()


def infer_dates(
    days: Sequence[DayEntry | None],
    today: date | datetime | None = None,
) -> list[GameDay]:
    anchor, day_of_month = find_anchor(days)
    anchor_date = resolve_anchor_date(day_of_month, today)

    result: list[GameDay] = []
    for day in days:
        if day is None:
            continue
        try:
            day_date = anchor_date + timedelta(days=day.index - anchor.index)
        except OverflowError as exc:
            raise DateRangeError(
                f"Index {day.index} is too far from anchor index {anchor.index} to date"
            ) from exc
        result.append(GameDay.from_entry(day, day_date.isoformat()))
    return result


def _local_noon(today: date | datetime | None) -> datetime:
    if today is None:
        today = datetime.now()
    if isinstance(today, datetime):
        today = today.date()
    return datetime(today.year, today.month, today.day, 12)
