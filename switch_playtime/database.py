from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
from typing import Iterable

from .models import GameDay


class PlayTimeDatabase:
    """Dated play time, one row per calendar day, plus capture settings."""

    def __init__(self, db_file: Path | str, busy_timeout_seconds: float = 30.0):
        self._path = Path(db_file)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._busy_timeout = busy_timeout_seconds
        self._lock = threading.Lock()
        self._init_schema()

    @property
    def path(self) -> Path:
        return self._path

    def _open(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._path, timeout=self._busy_timeout)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    @contextmanager
    def _connection(self):
        # Each block is one transaction: committed on success, rolled back on error.
        conn = self._open()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self) -> None:
        with self._lock, self._connection() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS game_days (
                    day TEXT PRIMARY KEY,
                    date_string TEXT NOT NULL DEFAULT '',
                    weekday TEXT NOT NULL DEFAULT '',
                    minutes INTEGER NOT NULL DEFAULT 0,
                    list_index INTEGER NOT NULL DEFAULT 0,
                    captured_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS app_settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );
                """
            )

    def upsert_game_days(
        self,
        days: Iterable[GameDay],
        captured_at: datetime | None = None,
    ) -> int:
        stamp = (captured_at or datetime.now().astimezone()).isoformat()
        count = 0
        with self._lock, self._connection() as conn:
            for day in days:
                conn.execute(
                    """
                    INSERT INTO game_days(day, date_string, weekday, minutes, list_index, captured_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    ON CONFLICT(day) DO UPDATE SET
                        date_string = excluded.date_string,
                        weekday = excluded.weekday,
                        minutes = excluded.minutes,
                        list_index = excluded.list_index,
                        captured_at = excluded.captured_at
                    """,
                    (
                        day.date,
                        day.date_string or "",
                        day.weekday or "",
                        int(day.minutes),
                        int(day.index),
                        stamp,
                    ),
                )
                count += 1
        return count

    def list_game_days(self, start: date | None = None, end: date | None = None) -> list[GameDay]:
        clauses: list[str] = []
        params: list[str] = []
        if start is not None:
            clauses.append("day >= ?")
            params.append(start.isoformat())
        if end is not None:
            clauses.append("day <= ?")
            params.append(end.isoformat())
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with self._lock, self._connection() as conn:
            rows = conn.execute(
                f"""
                SELECT day, date_string, weekday, minutes, list_index
                FROM game_days
                {where}
                ORDER BY day ASC
                """,
                params,
            ).fetchall()
        return [self._row_to_game_day(row) for row in rows]

    def get_game_day(self, day: date) -> GameDay | None:
        with self._lock, self._connection() as conn:
            row = conn.execute(
                """
                SELECT day, date_string, weekday, minutes, list_index
                FROM game_days
                WHERE day = ?
                """,
                (day.isoformat(),),
            ).fetchone()
        if row is None:
            return None
        return self._row_to_game_day(row)

    def total_minutes(self, start: date | None = None, end: date | None = None) -> int:
        return sum(day.minutes for day in self.list_game_days(start, end))

    def get_setting(self, key: str, default: str | None = None) -> str | None:
        with self._lock, self._connection() as conn:
            row = conn.execute(
                "SELECT value FROM app_settings WHERE key = ?",
                (key,),
            ).fetchone()
        if row is None:
            return default
        return str(row["value"])

    def get_setting_float(self, key: str, default: float) -> float:
        value = self.get_setting(key)
        if value is None:
            return default
        try:
            parsed = float(value)
        except ValueError:
            return default
        if parsed <= 0:
            return default
        return parsed

    def get_setting_int(self, key: str, default: int) -> int:
        value = self.get_setting(key)
        if value is None:
            return default
        try:
            parsed = int(value)
        except ValueError:
            return default
        if parsed <= 0:
            return default
        return parsed

    def set_setting(self, key: str, value: str) -> None:
        with self._lock, self._connection() as conn:
            conn.execute(
                """
                INSERT INTO app_settings(key, value)
                VALUES(?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (key, value),
            )

    @staticmethod
    def _row_to_game_day(row: sqlite3.Row) -> GameDay:
        return GameDay(
            date_string=str(row["date_string"]),
            weekday=str(row["weekday"]),
            minutes=int(row["minutes"]),
            index=int(row["list_index"]),
            date=str(row["day"]),
        )
