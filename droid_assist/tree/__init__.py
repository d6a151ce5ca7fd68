"""
UI tree snapshots and queries.

Provides:
- UiNode / Bounds: immutable snapshot types
- SearchCriteria and find_* functions: pre-order queries over a snapshot
- UiQuery: queries bound to a tree provider, fresh snapshot per call
- parse_selector / find_by_xpath: ad-hoc selector syntaxes
- parse_dump: uiautomator XML to snapshot
"""

from .node import Bounds, UiNode
from .query import (
    SearchCriteria,
    UiQuery,
    describe,
    find_all,
    find_by_class,
    find_by_id,
    find_by_path,
    find_by_text,
    find_first,
    first_level_children,
    render_tree,
    subtree_contains,
)
from .selector import find_by_xpath, parse_selector, select
from .uiautomator import parse_bounds, parse_dump

__all__ = [
    # Snapshot
    "Bounds",
    "UiNode",
    # Queries
    "SearchCriteria",
    "UiQuery",
    "find_all",
    "find_first",
    "find_by_id",
    "find_by_text",
    "find_by_class",
    "find_by_path",
    "first_level_children",
    "subtree_contains",
    # Selectors
    "find_by_xpath",
    "parse_selector",
    "select",
    # Rendering / parsing
    "describe",
    "render_tree",
    "parse_bounds",
    "parse_dump",
]
