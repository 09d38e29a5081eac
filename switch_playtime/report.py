from __future__ import annotations

import json
from typing import Sequence

from .models import GameDay


def format_minutes(total_minutes: int) -> str:
    minutes = max(0, int(total_minutes))
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes:02d}m"
    return f"{minutes}m"


def render_lines(days: Sequence[GameDay]) -> list[str]:
    if not days:
        return ["No play time recorded."]

    ordered = sorted(days, key=lambda day: day.date)
    lines = [
        f"{day.date} {(day.weekday or '-'):<4} {format_minutes(day.minutes):>8}"
        for day in ordered
    ]
    total = sum(day.minutes for day in ordered)
    lines.append(f"Total over {len(ordered)} days: {format_minutes(total)}")
    return lines


def render_json(days: Sequence[GameDay]) -> str:
    ordered = sorted(days, key=lambda day: day.date)
    return json.dumps([day.as_dict() for day in ordered], indent=2, ensure_ascii=False)
