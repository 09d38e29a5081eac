"""Nintendo Switch play-time history recovered from the Parental Controls app.

The pipeline is ``parse_days_from_xml`` per captured page, ``merge_days``
across pages, then ``infer_dates`` once capturing is done.
"""

from .extract import parse_day_node, parse_days_from_xml
from .infer import NoAnchorDateError, infer_dates
from .models import DayEntry, GameDay
from .reconcile import merge_days

__version__ = "0.1.0"


def main(argv: list[str] | None = None) -> int:
    from .app import main as run_cli

    return run_cli(argv)


__all__ = [
    "DayEntry",
    "GameDay",
    "NoAnchorDateError",
    "infer_dates",
    "main",
    "merge_days",
    "parse_day_node",
    "parse_days_from_xml",
    "__version__",
]
