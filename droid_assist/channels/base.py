"""Execution channel contract."""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Protocol, runtime_checkable

PRIVILEGED_RPC = "privileged_rpc"
SYNTHETIC_INPUT = "synthetic_input"
GESTURE = "gesture"

CHANNEL_NAMES = (PRIVILEGED_RPC, SYNTHETIC_INPUT, GESTURE)


class ActionKind(str, Enum):
    CLICK = "click"
    LONG_CLICK = "long_click"
    DOUBLE_CLICK = "double_click"
    DRAG = "drag"
    DRAG_PATH = "drag_path"
    SLIDE = "slide"
    TYPE_TEXT = "type_text"
    SEND_KEY = "send_key"

    @classmethod
    def parse(cls, raw: str) -> ActionKind:
        key = (raw or "").strip().lower().replace("-", "_")
        for kind in cls:
            if kind.value == key:
                return kind
        raise ValueError(f"unknown action kind: {raw!r}")


@runtime_checkable
class ActionChannel(Protocol):
    """One mechanism able to inject input.

    Every method returns True on success. False means failure or an unknown
    partial effect, never a guaranteed no-op.
    """

    name: str

    def is_available(self) -> bool: ...

    def click(self, x: float, y: float) -> bool: ...

    def long_click(self, x: float, y: float, duration_ms: int) -> bool: ...

    def double_click(self, x: float, y: float) -> bool: ...

    def drag(self, x0: float, y0: float, x1: float, y1: float, duration_ms: int) -> bool: ...

    def drag_path(self, points: Sequence[tuple[float, float]], duration_ms: int) -> bool: ...

    def slide(self, x0: float, y0: float, x1: float, y1: float, steps: int) -> bool: ...

    def type_text(self, text: str) -> bool: ...

    def send_key(self, code: int) -> bool: ...
