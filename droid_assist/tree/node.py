"""Immutable UI tree snapshot types.

A snapshot is frozen at fetch time. It goes stale as soon as the real UI
changes, so callers fetch a fresh one for every query instead of holding
nodes across waits.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class Bounds:
    """Screen rectangle in pixels (right/bottom exclusive, Android style)."""

    left: int = 0
    top: int = 0
    right: int = 0
    bottom: int = 0

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top

    @property
    def center_x(self) -> int:
        return (self.left + self.right) // 2

    @property
    def center_y(self) -> int:
        return (self.top + self.bottom) // 2

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    @classmethod
    def from_dict(cls, raw: Any) -> Bounds:
        if not isinstance(raw, dict):
            return cls()
        return cls(
            left=_as_int(raw.get("left")),
            top=_as_int(raw.get("top")),
            right=_as_int(raw.get("right")),
            bottom=_as_int(raw.get("bottom")),
        )

    def __str__(self) -> str:
        return f"[{self.left},{self.top}][{self.right},{self.bottom}]"


@dataclass(frozen=True, slots=True)
class UiNode:
    """Handle into a point-in-time UI tree snapshot."""

    id: str = ""
    text: str = ""
    class_name: str = ""
    content_description: str = ""
    package_name: str = ""
    bounds: Bounds = field(default_factory=Bounds)
    clickable: bool = False
    enabled: bool = False
    checked: bool = False
    scrollable: bool = False
    children: tuple[UiNode, ...] = ()

    def iter_preorder(self) -> Iterator[UiNode]:
        """Yield this node and its descendants in document (pre-order) order."""
        stack: list[UiNode] = [self]
        while stack:
            node = stack.pop()
            yield node
            if node.children:
                stack.extend(reversed(node.children))

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> UiNode:
        """Build a node tree from the on-device agent's JSON node payload."""
        children_raw = raw.get("children")
        children: tuple[UiNode, ...] = ()
        if isinstance(children_raw, list):
            children = tuple(cls.from_dict(c) for c in children_raw if isinstance(c, dict))
        return cls(
            id=_as_str(raw.get("id")),
            text=_as_str(raw.get("text")),
            class_name=_as_str(raw.get("className")),
            content_description=_as_str(raw.get("contentDescription")),
            package_name=_as_str(raw.get("packageName")),
            bounds=Bounds.from_dict(raw.get("bounds")),
            clickable=bool(raw.get("isClickable")),
            enabled=bool(raw.get("isEnabled")),
            checked=bool(raw.get("isChecked")),
            scrollable=bool(raw.get("isScrollable")),
            children=children,
        )


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0
