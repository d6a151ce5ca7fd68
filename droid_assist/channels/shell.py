"""Synthetic input injector: `adb shell input` driven by the timing plan."""

from __future__ import annotations

import logging
import shlex
import time
from collections.abc import Callable, Sequence

from ..device import AdbDevice, AdbError
from . import timing
from .base import SYNTHETIC_INPUT

logger = logging.getLogger("droid_assist.channels.shell")

_MOTION_ACTIONS = {timing.DOWN: "DOWN", timing.MOVE: "MOVE", timing.UP: "UP"}


def motion_script(events: Sequence[timing.TouchEvent]) -> str:
    """One device-side command line for a whole plan.

    Events are chained with `&&` so the first failing `input` ends the
    gesture; the planned gaps become `sleep` calls between them.
    """
    parts: list[str] = []
    prev_ms = 0
    for event in events:
        gap = event.at_ms - prev_ms
        if gap > 0:
            parts.append(f"sleep {gap / 1000.0:.3f}")
        parts.append(f"input motionevent {_MOTION_ACTIONS[event.action]} {round(event.x)} {round(event.y)}")
        prev_ms = event.at_ms
    return " && ".join(parts)


class ShellInputChannel:
    """Plays timing plans through `input motionevent` (Android 11+).

    A plan is sent as a single `adb shell` invocation. Each `input` still
    starts a process on the device, so the 16/20 ms cadence is a lower bound:
    on a typical device every sample adds tens of milliseconds and a 1.5 s
    slider drag runs noticeably longer.
    """

    name = SYNTHETIC_INPUT

    def __init__(self, device: AdbDevice, *, sleep: Callable[[float], None] = time.sleep):
        self.device = device
        self._sleep = sleep

    def is_available(self) -> bool:
        return self.device.is_connected()

    def _shell(self, label: str, *args: str, timeout: float | None = None) -> bool:
        try:
            res = self.device.shell(*args, timeout=timeout)
        except AdbError as exc:
            logger.warning("%s failed: %s", label, exc)
            return False
        if not res.ok:
            logger.warning("%s exited %s: %s", label, res.returncode, res.stderr.strip())
        return res.ok

    def _play(self, events: list[timing.TouchEvent]) -> bool:
        if not events:
            return False
        timeout = self.device.timeout + events[-1].at_ms / 1000.0
        return self._shell("input motionevent", motion_script(events), timeout=timeout)

    def click(self, x: float, y: float) -> bool:
        return self._play(timing.plan_click(x, y))

    def long_click(self, x: float, y: float, duration_ms: int) -> bool:
        return self._play(timing.plan_long_click(x, y, duration_ms))

    def double_click(self, x: float, y: float) -> bool:
        if not self.click(x, y):
            return False
        self._sleep(timing.DOUBLE_CLICK_GAP_MS / 1000.0)
        return self.click(x, y)

    def drag(self, x0: float, y0: float, x1: float, y1: float, duration_ms: int) -> bool:
        return self._play(timing.plan_drag(x0, y0, x1, y1, duration_ms))

    def drag_path(self, points: Sequence[tuple[float, float]], duration_ms: int) -> bool:
        return self._play(timing.plan_path(points, duration_ms))

    def slide(self, x0: float, y0: float, x1: float, y1: float, steps: int) -> bool:
        return self._play(timing.plan_slide(x0, y0, x1, y1, steps))

    def type_text(self, text: str) -> bool:
        if not text:
            return True
        if not text.isascii():
            logger.warning("input text only accepts ASCII; refusing %d chars", len(text))
            return False
        # `input text` reads %s as a space; the device shell re-parses the argument.
        return self._shell("input text", "input", "text", shlex.quote(text.replace(" ", "%s")))

    def send_key(self, code: int) -> bool:
        return self._shell("input keyevent", "input", "keyevent", str(int(code)))
