from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Iterable, Mapping, Protocol

from .models import DayEntry

# Children of this element carry the day's index in the full list.
PARENT_ID = "com.nintendo.znma:id/recycler_view_fragment_daily_summary"

TOP_DAY_ID = "com.nintendo.znma:id/card_view_element_daily_summary_top_about_day"
DAY_ID = "com.nintendo.znma:id/layout_daily_summary_about_day"

DAY_DATE_ID = "com.nintendo.znma:id/text_view_element_daily_summary_about_top_day"
DAY_WEEKDAY_ID = "com.nintendo.znma:id/text_view_element_daily_summary_about_top_day_of_week"

DAY_HOUR_ID = "com.nintendo.znma:id/text_view_element_daily_summary_top_hour"
DAY_MIN_ID = "com.nintendo.znma:id/text_view_element_daily_summary_top_minute"

DAY_NODE_IDS = (TOP_DAY_ID, DAY_ID)

_LEADING_INT = re.compile(r"\s*([0-9]+)")


class UiDumpError(ValueError):
    pass


class DayNode(Protocol):
    def resource_id(self) -> str: ...

    def descendant_text(self, resource_id: str) -> str: ...

    def ancestor_attribute(self, parent_resource_id: str, attribute: str) -> str: ...


class UiNode:
    """A node of a uiautomator dump, with the ancestor lookups ElementTree lacks."""

    def __init__(self, element: ET.Element, parents: Mapping[ET.Element, ET.Element]):
        self._element = element
        self._parents = parents

    def resource_id(self) -> str:
        return self._element.get("resource-id", "")

    def descendant_text(self, resource_id: str) -> str:
        for child in self._element.iterfind(f".//node[@resource-id='{resource_id}']"):
            return child.get("text", "")
        return ""

    def ancestor_attribute(self, parent_resource_id: str, attribute: str) -> str:
        current = self._parents.get(self._element)
        while current is not None:
            parent = self._parents.get(current)
            if parent is not None and parent.get("resource-id") == parent_resource_id:
                return current.get(attribute, "")
            current = parent
        return ""


class FieldBag:
    """Values already pulled out of a day node, keyed by resource id."""

    def __init__(
        self,
        fields: Mapping[str, str],
        node_id: str = DAY_ID,
        positions: Mapping[str, str] | None = None,
    ):
        self._fields = dict(fields)
        self._node_id = node_id
        self._positions = dict(positions or {})

    def resource_id(self) -> str:
        return self._node_id

    def descendant_text(self, resource_id: str) -> str:
        return self._fields.get(resource_id, "")

    def ancestor_attribute(self, parent_resource_id: str, attribute: str) -> str:
        if parent_resource_id != PARENT_ID:
            return ""
        return self._positions.get(attribute, "")

    @classmethod
    def for_day(
        cls,
        day: str = "",
        weekday: str = "",
        hour: str = "",
        minute: str = "",
        index: str = "",
        node_id: str = DAY_ID,
    ) -> "FieldBag":
        return cls(
            {
                DAY_DATE_ID: day,
                DAY_WEEKDAY_ID: weekday,
                DAY_HOUR_ID: hour,
                DAY_MIN_ID: minute,
            },
            node_id=node_id,
            positions={"index": index} if index != "" else {},
        )


def number_or_zero(value: object) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        return 0
    match = _LEADING_INT.match(value)
    if not match:
        return 0
    return int(match.group(1))


def is_day_node(node: DayNode) -> bool:
    return node.resource_id() in DAY_NODE_IDS


def parse_day_node(node: DayNode) -> DayEntry:
    hours = number_or_zero(node.descendant_text(DAY_HOUR_ID))
    minutes = number_or_zero(node.descendant_text(DAY_MIN_ID))
    index = number_or_zero(node.ancestor_attribute(PARENT_ID, "index"))
    return DayEntry(
        date_string=node.descendant_text(DAY_DATE_ID),
        weekday=node.descendant_text(DAY_WEEKDAY_ID),
        minutes=minutes + 60 * hours,
        index=index,
    )


def load_ui_tree(source: str | Path) -> ET.ElementTree:
    """Parse a uiautomator dump given as a file path or as raw XML text.

    Dumps pulled over ``adb shell`` sometimes carry a status line before the
    ``<hierarchy>`` root; anything before it is dropped.
    """
    if isinstance(source, str) and "<" in source:
        raw = source
    else:
        raw = Path(source).read_text(encoding="utf-8", errors="replace")

    start = raw.find("<hierarchy")
    if start > 0:
        raw = raw[start:]
    try:
        return ET.ElementTree(ET.fromstring(raw))
    except ET.ParseError as exc:
        raise UiDumpError(f"Invalid UI dump: {exc}") from exc


def find_day_nodes(tree: ET.ElementTree) -> list[UiNode]:
    root = tree.getroot()
    parents = {child: parent for parent in root.iter() for child in parent}
    nodes = [UiNode(element, parents) for element in root.iter("node")]
    return [node for node in nodes if is_day_node(node)]


def parse_days(nodes: Iterable[DayNode]) -> list[DayEntry]:
    return [parse_day_node(node) for node in nodes]


def parse_days_from_xml(source: str | Path) -> list[DayEntry]:
    return parse_days(find_day_nodes(load_ui_tree(source)))
