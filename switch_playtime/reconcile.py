from __future__ import annotations

from typing import Iterable, Sequence

from .models import DayEntry

DayList = list[DayEntry | None]

# The app keeps a few years of daily summaries; anything past this is a bad dump.
MAX_LIST_INDEX = 3660


def is_valid_entry(entry: DayEntry) -> bool:
    if not 0 <= entry.index <= MAX_LIST_INDEX:
        return False
    return bool(entry.date_string) and bool(entry.weekday)


def merge_days(existing: Sequence[DayEntry | None], incoming: Iterable[DayEntry]) -> DayList:
    """Fold one capture's entries into the index-addressed day list.

    Slots never observed stay ``None``. When an index is seen again the entry
    with more minutes wins outright; ties keep the entry already in place.
    """
    result: DayList = list(existing)
    for entry in incoming:
        if not is_valid_entry(entry):
            continue

        if entry.index >= len(result):
            result.extend([None] * (entry.index + 1 - len(result)))

        current = result[entry.index]
        if current is None or current.minutes < entry.minutes:
            result[entry.index] = entry

    return result


def merge_captures(captures: Iterable[Iterable[DayEntry]]) -> DayList:
    days: DayList = []
    for entries in captures:
        days = merge_days(days, entries)
    return days


def present_days(days: Iterable[DayEntry | None]) -> list[DayEntry]:
    return [day for day in days if day is not None]


def missing_indices(days: Sequence[DayEntry | None]) -> list[int]:
    return [index for index, day in enumerate(days) if day is None]
