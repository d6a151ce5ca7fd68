"""Parse `uiautomator dump` XML into UiNode snapshots."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET

from .node import Bounds, UiNode

_BOUNDS_RE = re.compile(r"\[(-?\d+),(-?\d+)\]\[(-?\d+),(-?\d+)\]")


def parse_bounds(raw: str | None) -> Bounds:
    m = _BOUNDS_RE.match((raw or "").strip())
    if not m:
        return Bounds()
    left, top, right, bottom = (int(g) for g in m.groups())
    return Bounds(left=left, top=top, right=right, bottom=bottom)


def _flag(el: ET.Element, name: str) -> bool:
    return (el.get(name) or "").strip().lower() == "true"


def _convert(el: ET.Element) -> UiNode:
    return UiNode(
        id=el.get("resource-id") or "",
        text=el.get("text") or "",
        class_name=el.get("class") or "",
        content_description=el.get("content-desc") or "",
        package_name=el.get("package") or "",
        bounds=parse_bounds(el.get("bounds")),
        clickable=_flag(el, "clickable"),
        enabled=_flag(el, "enabled"),
        checked=_flag(el, "checked"),
        scrollable=_flag(el, "scrollable"),
        children=tuple(_convert(child) for child in el if child.tag == "node"),
    )


def parse_dump(xml_text: str) -> UiNode | None:
    """Convert a dump into a snapshot root.

    The `<hierarchy>` element usually holds one window root; when it holds
    several they are wrapped in a synthetic container with empty attributes.
    Returns None for empty or malformed input.
    """
    text = (xml_text or "").strip()
    if not text:
        return None
    # `exec-out uiautomator dump /dev/tty` appends a status line after the XML.
    end = text.rfind("</hierarchy>")
    if end != -1:
        text = text[: end + len("</hierarchy>")]
    start = text.find("<")
    if start == -1:
        return None
    try:
        root_el = ET.fromstring(text[start:])
    except ET.ParseError:
        return None
    if root_el.tag == "node":
        return _convert(root_el)
    windows = [_convert(child) for child in root_el if child.tag == "node"]
    if not windows:
        return None
    if len(windows) == 1:
        return windows[0]
    return UiNode(class_name="hierarchy", children=tuple(windows))
