"""Gesture injector: whole timed strokes handed to the accessibility agent."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from typing import Any

from ..rpc import RpcConnection, RpcError
from . import timing
from .base import GESTURE

logger = logging.getLogger("droid_assist.channels.gesture")

# KEYCODE_* -> AccessibilityService.GLOBAL_ACTION_*
_GLOBAL_ACTIONS = {4: 1, 3: 2, 187: 3}


def stroke_from_events(events: list[timing.TouchEvent]) -> dict[str, Any]:
    """One stroke whose points keep the planned offsets."""
    points = [{"x": e.x, "y": e.y, "t": e.at_ms} for e in events]
    duration = max(1, events[-1].at_ms if events else 1)
    return {"points": points, "durationMs": duration}


class GestureChannel:
    """Delivers each plan as a single `dispatchGesture` call."""

    name = GESTURE

    def __init__(self, connection: RpcConnection, *, sleep: Callable[[float], None] = time.sleep):
        self.connection = connection
        self._sleep = sleep

    def is_available(self) -> bool:
        try:
            return bool(self.connection.call("isServiceAvailable"))
        except RpcError as exc:
            logger.debug("accessibility agent unavailable: %s", exc)
            return False

    def _call(self, method: str, params: dict[str, Any], *, extra_ms: int = 0) -> bool:
        try:
            result = self.connection.call(method, params, timeout=self.connection.timeout + extra_ms / 1000.0)
        except RpcError as exc:
            logger.warning("gesture %s failed: %s", method, exc)
            return False
        return result is True

    def _dispatch(self, events: list[timing.TouchEvent]) -> bool:
        stroke = stroke_from_events(events)
        return self._call("dispatchGesture", {"strokes": [stroke]}, extra_ms=stroke["durationMs"])

    def click(self, x: float, y: float) -> bool:
        return self._dispatch(timing.plan_click(x, y))

    def long_click(self, x: float, y: float, duration_ms: int) -> bool:
        return self._dispatch(timing.plan_long_click(x, y, duration_ms))

    def double_click(self, x: float, y: float) -> bool:
        if not self.click(x, y):
            return False
        self._sleep(timing.DOUBLE_CLICK_GAP_MS / 1000.0)
        return self.click(x, y)

    def drag(self, x0: float, y0: float, x1: float, y1: float, duration_ms: int) -> bool:
        return self._dispatch(timing.plan_drag(x0, y0, x1, y1, duration_ms))

    def drag_path(self, points: Sequence[tuple[float, float]], duration_ms: int) -> bool:
        return self._dispatch(timing.plan_path(points, duration_ms))

    def slide(self, x0: float, y0: float, x1: float, y1: float, steps: int) -> bool:
        return self._dispatch(timing.plan_slide(x0, y0, x1, y1, steps))

    def type_text(self, text: str) -> bool:
        return self._call("setText", {"text": text})

    def send_key(self, code: int) -> bool:
        action = _GLOBAL_ACTIONS.get(int(code))
        if action is None:
            logger.debug("keycode %s has no global action", code)
            return False
        return self._call("performGlobalAction", {"action": action})
