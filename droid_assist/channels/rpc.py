"""Privileged channel: the on-device agent performs each action itself."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from ..rpc import RpcConnection, RpcError
from . import timing
from .base import PRIVILEGED_RPC

logger = logging.getLogger("droid_assist.channels.rpc")


class PrivilegedRpcChannel:
    """Forwards every capability as one JSON-RPC call.

    The agent applies the shared timing model on the device, so a call can
    block for the whole gesture duration.
    """

    name = PRIVILEGED_RPC

    def __init__(self, connection: RpcConnection):
        self.connection = connection

    def is_available(self) -> bool:
        try:
            return bool(self.connection.call("isAvailable"))
        except RpcError as exc:
            logger.debug("privileged agent unavailable: %s", exc)
            return False

    def _invoke(self, method: str, params: dict[str, Any], *, extra_ms: int = 0) -> bool:
        timeout = self.connection.timeout + extra_ms / 1000.0
        try:
            result = self.connection.call(method, params, timeout=timeout)
        except RpcError as exc:
            logger.warning("privileged %s failed: %s", method, exc)
            return False
        return result is True

    def click(self, x: float, y: float) -> bool:
        return self._invoke("click", {"x": x, "y": y})

    def long_click(self, x: float, y: float, duration_ms: int) -> bool:
        return self._invoke("longClick", {"x": x, "y": y, "durationMs": int(duration_ms)}, extra_ms=duration_ms)

    def double_click(self, x: float, y: float) -> bool:
        return self._invoke("doubleClick", {"x": x, "y": y})

    def drag(self, x0: float, y0: float, x1: float, y1: float, duration_ms: int) -> bool:
        params = {"x0": x0, "y0": y0, "x1": x1, "y1": y1, "durationMs": int(duration_ms)}
        return self._invoke("drag", params, extra_ms=duration_ms)

    def drag_path(self, points: Sequence[tuple[float, float]], duration_ms: int) -> bool:
        if len(points) < 2:
            return False
        params = {"points": [{"x": x, "y": y} for x, y in points], "durationMs": int(duration_ms)}
        return self._invoke("dragPath", params, extra_ms=duration_ms)

    def slide(self, x0: float, y0: float, x1: float, y1: float, steps: int) -> bool:
        params = {"x0": x0, "y0": y0, "x1": x1, "y1": y1, "steps": int(steps)}
        extra_ms = timing.SLIDE_SETTLE_MS + timing.slide_steps(steps) * timing.SLIDE_STEP_MS
        return self._invoke("slide", params, extra_ms=extra_ms)

    def type_text(self, text: str) -> bool:
        return self._invoke("typeText", {"text": text})

    def send_key(self, code: int) -> bool:
        return self._invoke("sendKey", {"code": int(code)})
