from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

from . import __version__
from .capture import PlayTimeCaptureSession, merge_capture_files
from .config import TrackerOptions
from .database import PlayTimeDatabase
from .device import AndroidDevice, DeviceError
from .extract import UiDumpError
from .infer import NoAnchorDateError
from .models import CaptureResult, GameDay
from .paths import database_path, ensure_directories
from .report import render_json, render_lines


def _parse_iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid date: {value!r} (expected YYYY-MM-DD)") from exc


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="switch-playtime",
        description="Recover daily Nintendo Switch play time from the Parental Controls app.",
    )
    parser.add_argument("--pages", type=int, help="Number of list pages to capture")
    parser.add_argument("--serial", help="adb device serial")
    parser.add_argument("--scroll-ratio", type=float, help="Fraction of the screen height to scroll per page")
    parser.add_argument("--refresh-seconds", type=float, help="Seconds to wait after relaunching the app")
    parser.add_argument(
        "--keep-captures",
        action="store_true",
        default=None,
        help="Archive every page dump with a screenshot",
    )
    parser.add_argument("--from-xml", nargs="+", type=Path, metavar="FILE", help="Date saved UI dumps instead of capturing")
    parser.add_argument("--today", type=_parse_iso_date, help="Reference date (YYYY-MM-DD)")
    parser.add_argument("--history", action="store_true", help="Print stored play time and exit")
    parser.add_argument("--since", type=_parse_iso_date, help="With --history, first day to show")
    parser.add_argument("--db", type=Path, help="Database file")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of a table")
    parser.add_argument("--no-save", action="store_true", help="Do not store the result")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log adb commands")
    parser.add_argument("--version", action="store_true", help="Print app version and exit")
    return parser


def _print_days(days: list[GameDay], as_json: bool) -> None:
    if as_json:
        print(render_json(days))
        return
    for line in render_lines(days):
        print(line)


def _open_database(db_file: Path | None) -> PlayTimeDatabase:
    ensure_directories()
    return PlayTimeDatabase(db_file or database_path())


def _on_page(result: CaptureResult) -> None:
    print(f"page={result.page + 1} entries={len(result.entries)} dump={result.dump_path or '-'}")


def _on_error(error: Exception) -> None:
    print(f"Capture stopped early: {error}", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    if args.version:
        print(__version__)
        return 0

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.history:
        _print_days(_open_database(args.db).list_game_days(start=args.since), args.json)
        return 0

    try:
        if args.from_xml:
            days = merge_capture_files(args.from_xml, today=args.today)
            if not args.no_save:
                _open_database(args.db).upsert_game_days(days)
        else:
            db = _open_database(args.db)
            options = TrackerOptions.from_settings(db).with_overrides(
                pages=args.pages,
                serial=args.serial,
                scroll_ratio=args.scroll_ratio,
                refresh_seconds=args.refresh_seconds,
                keep_captures=args.keep_captures,
            )
            session = PlayTimeCaptureSession(
                AndroidDevice(serial=options.serial),
                options,
                db=None if args.no_save else db,
            )
            days = session.run(
                on_page=None if args.json else _on_page,
                on_error=_on_error,
                today=args.today,
            )
    except (DeviceError, UiDumpError, NoAnchorDateError, ValueError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    _print_days(days, args.json)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
