from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Size:
    width: float
    height: float


@dataclass(frozen=True)
class DayEntry:
    date_string: str
    weekday: str
    minutes: int
    index: int


@dataclass(frozen=True)
class GameDay:
    date_string: str
    weekday: str
    minutes: int
    index: int
    date: str

    @classmethod
    def from_entry(cls, entry: DayEntry, day: str) -> "GameDay":
        return cls(
            date_string=entry.date_string,
            weekday=entry.weekday,
            minutes=entry.minutes,
            index=entry.index,
            date=day,
        )

    def as_dict(self) -> dict[str, object]:
        return {
            "date": self.date,
            "dateString": self.date_string,
            "weekday": self.weekday,
            "minutes": self.minutes,
            "index": self.index,
        }


@dataclass(frozen=True)
class CaptureResult:
    page: int
    dump_path: str
    screenshot_path: str | None
    entries: tuple[DayEntry, ...] = field(default_factory=tuple)
