"""
UI tree query engine.

Pure functions over a snapshot root plus `UiQuery`, which binds them to a
tree provider and fetches a fresh snapshot for every call.

Matching rules:
- id matching is exact;
- text and class lookups match by substring containment;
- absent attributes are empty strings and never satisfy a non-empty predicate;
- absence is `None` / `[]`, never an exception.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, fields
from typing import TYPE_CHECKING

from .node import UiNode

if TYPE_CHECKING:
    from ..providers import TreeProvider

logger = logging.getLogger("droid_assist.tree")


@dataclass(frozen=True, slots=True)
class SearchCriteria:
    """Conjunction of optional predicates; `None` fields are wildcards."""

    id: str | None = None
    text: str | None = None
    text_contains: str | None = None
    class_name: str | None = None
    class_contains: str | None = None
    content_description: str | None = None
    clickable: bool | None = None
    enabled: bool | None = None

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    def matches(self, node: UiNode) -> bool:
        if self.id is not None and node.id != self.id:
            return False
        if self.text is not None and node.text != self.text:
            return False
        if self.text_contains is not None:
            # Content description counts as text: icon buttons often carry only that.
            if self.text_contains not in node.text and self.text_contains not in node.content_description:
                return False
        if self.class_name is not None and node.class_name != self.class_name:
            return False
        if self.class_contains is not None and self.class_contains not in node.class_name:
            return False
        if self.content_description is not None and node.content_description != self.content_description:
            return False
        if self.clickable is not None and node.clickable != self.clickable:
            return False
        if self.enabled is not None and node.enabled != self.enabled:
            return False
        return True

    def describe(self) -> str:
        parts = [f"{f.name}={getattr(self, f.name)!r}" for f in fields(self) if getattr(self, f.name) is not None]
        return ", ".join(parts) or "*"


def find_all(root: UiNode | None, criteria: SearchCriteria) -> list[UiNode]:
    """All matches in pre-order document order."""
    if root is None:
        return []
    return [node for node in root.iter_preorder() if criteria.matches(node)]


def find_first(root: UiNode | None, criteria: SearchCriteria) -> UiNode | None:
    """First match of a pre-order depth-first traversal."""
    if root is None:
        return None
    for node in root.iter_preorder():
        if criteria.matches(node):
            return node
    return None


def find_by_id(root: UiNode | None, node_id: str) -> list[UiNode]:
    return find_all(root, SearchCriteria(id=node_id))


def find_by_text(root: UiNode | None, text: str) -> list[UiNode]:
    return find_all(root, SearchCriteria(text_contains=text))


def find_by_class(root: UiNode | None, class_name: str) -> list[UiNode]:
    return find_all(root, SearchCriteria(class_contains=class_name))


def find_by_path(root: UiNode | None, segments: Sequence[str], *, anchored: bool = True) -> list[UiNode]:
    """Match a simplified class-name path such as ["FrameLayout", "TextView"].

    Each segment matches a node whose class name contains it.

    anchored=True: the first segment must match `root` and each following
    segment must match a direct child of the previous match.

    anchored=False: legacy matching. After a segment matches, the remaining
    segments are searched among all descendants, and the full path is
    re-attempted at every descendant. The same node can be reported more
    than once; callers usually take index 0.
    """
    if root is None:
        return []
    parts = [s for s in segments if s]
    if not parts:
        return [root]
    if anchored:
        return _path_anchored(root, parts)
    return _path_loose(root, parts)


def _path_anchored(node: UiNode, parts: list[str]) -> list[UiNode]:
    if parts[0] not in node.class_name:
        return []
    if len(parts) == 1:
        return [node]
    out: list[UiNode] = []
    for child in node.children:
        out.extend(_path_anchored(child, parts[1:]))
    return out


def _path_loose(node: UiNode, parts: list[str]) -> list[UiNode]:
    out: list[UiNode] = []
    if parts[0] in node.class_name:
        if len(parts) == 1:
            out.append(node)
        else:
            for child in node.children:
                out.extend(_path_loose(child, parts[1:]))
    for child in node.children:
        out.extend(_path_loose(child, parts))
    return out


def first_level_children(container: UiNode | None, criteria: SearchCriteria | None = None) -> list[UiNode]:
    """Direct children of `container` that match `criteria` (all when None)."""
    if container is None:
        return []
    if criteria is None:
        return list(container.children)
    return [child for child in container.children if criteria.matches(child)]


def subtree_contains(node: UiNode | None, node_id: str, text: str) -> bool:
    """True when `node` or a descendant has exactly this id and this text."""
    return find_first(node, SearchCriteria(id=node_id, text=text)) is not None


def describe(node: UiNode) -> str:
    flags = []
    if node.clickable:
        flags.append("clickable")
    if not node.enabled:
        flags.append("disabled")
    if node.checked:
        flags.append("checked")
    if node.scrollable:
        flags.append("scrollable")
    out = node.class_name or "?"
    if node.id:
        out += f" #{node.id}"
    if node.text:
        out += f" text={node.text!r}"
    if node.content_description:
        out += f" desc={node.content_description!r}"
    out += f" {node.bounds}"
    if flags:
        out += " (" + ",".join(flags) + ")"
    return out


def render_tree(root: UiNode | None, *, indent: str = "  ") -> str:
    """Indented one-line-per-node dump of a snapshot."""
    if root is None:
        return "<no tree>"
    lines: list[str] = []
    stack: list[tuple[UiNode, int]] = [(root, 0)]
    while stack:
        node, depth = stack.pop()
        lines.append(f"{indent * depth}{describe(node)}")
        stack.extend((child, depth + 1) for child in reversed(node.children))
    return "\n".join(lines)


class UiQuery:
    """Query engine bound to a tree provider.

    Every call fetches a new snapshot. Provider faults are logged and
    treated as "no tree".
    """

    def __init__(self, provider: TreeProvider):
        self.provider = provider

    def snapshot(self) -> UiNode | None:
        try:
            return self.provider.get_foreground_tree()
        except Exception as exc:  # noqa: BLE001
            logger.warning("tree fetch failed: %s", exc)
            return None

    def first(self, criteria: SearchCriteria) -> UiNode | None:
        return find_first(self.snapshot(), criteria)

    def all(self, criteria: SearchCriteria) -> list[UiNode]:
        return find_all(self.snapshot(), criteria)

    def by_id(self, node_id: str) -> UiNode | None:
        return self.first(SearchCriteria(id=node_id))

    def exists(self, criteria: SearchCriteria) -> bool:
        return self.first(criteria) is not None

    def in_container(self, container_id: str, criteria: SearchCriteria) -> list[UiNode]:
        """Matches inside the first container with this id (container included)."""
        container = self.by_id(container_id)
        if container is None:
            return []
        return find_all(container, criteria)

    def children_of(self, container_id: str, criteria: SearchCriteria | None = None) -> list[UiNode]:
        return first_level_children(self.by_id(container_id), criteria)

    def select(self, expr: str) -> list[UiNode]:
        from .selector import select

        return select(self.snapshot(), expr)
