"""Small selector syntaxes for ad-hoc lookups.

- XPath-like: "//Button" (any class containing Button), "LinearLayout/TextView"
  (class path), or a bare class name.
- Attribute selector: "Button[text='OK'][clickable='true']".
"""

from __future__ import annotations

import re

from .node import UiNode
from .query import SearchCriteria, find_all, find_by_class, find_by_path

_CLASS_RE = re.compile(r"^([A-Za-z][\w.$]*)")
_ATTR_RE = re.compile(r"\[([^=\]]+)='([^']*)'\]")

_BOOL_ATTRS = {"clickable", "enabled"}
_STR_ATTRS = {
    "id": "id",
    "text": "text",
    "textContains": "text_contains",
    "contentDescription": "content_description",
}


def _parse_bool(raw: str) -> bool:
    return raw.strip().lower() == "true"


def parse_selector(selector: str) -> SearchCriteria:
    """Parse `Class[attr='value']...` into criteria.

    The leading class name is a containment predicate, so "Button" matches
    "android.widget.Button". Unknown attributes are ignored.
    """
    values: dict[str, object] = {}
    selector = (selector or "").strip()
    m = _CLASS_RE.match(selector)
    if m:
        values["class_contains"] = m.group(1)
    for name, value in _ATTR_RE.findall(selector):
        name = name.strip()
        if name in _STR_ATTRS:
            values[_STR_ATTRS[name]] = value
        elif name in _BOOL_ATTRS:
            values[name] = _parse_bool(value)
    return SearchCriteria(**values)  # type: ignore[arg-type]


def find_by_xpath(root: UiNode | None, xpath: str, *, anchored: bool = True) -> list[UiNode]:
    xpath = (xpath or "").strip()
    if not xpath:
        return []
    if xpath.startswith("//"):
        return find_by_class(root, xpath[2:])
    if "/" in xpath:
        return find_by_path(root, xpath.split("/"), anchored=anchored)
    return find_by_class(root, xpath)


def select(root: UiNode | None, expr: str) -> list[UiNode]:
    """Dispatch to the attribute selector or the XPath-like form."""
    if "[" in (expr or ""):
        return find_all(root, parse_selector(expr))
    return find_by_xpath(root, expr)
