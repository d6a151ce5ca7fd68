"""Pointer timing model shared by every execution channel.

Gestures are planned as timed touch events first and only then delivered,
so all channels produce the same samples at the same offsets:

- click: down, up after CLICK_HOLD_MS
- long click: down, up after the caller's duration
- double click: two clicks DOUBLE_CLICK_GAP_MS apart
- drag: down, a move every DRAG_STEP_MS, up at the end point
- slide: down, SLIDE_SETTLE_MS pause, a move every SLIDE_STEP_MS, up
- path: like drag, with samples spread evenly over the waypoint segments
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

CLICK_HOLD_MS = 100
DOUBLE_CLICK_GAP_MS = 100
DRAG_STEP_MS = 16
SLIDE_STEP_MS = 20
SLIDE_MIN_STEPS = 10
SLIDE_SETTLE_MS = 50

DOWN = "down"
MOVE = "move"
UP = "up"


@dataclass(frozen=True, slots=True)
class TouchEvent:
    action: str
    x: float
    y: float
    at_ms: int


def interpolate(x0: float, y0: float, x1: float, y1: float, steps: int) -> list[tuple[float, float]]:
    """Intermediate samples i/steps for i in 1..steps-1 (end points excluded)."""
    steps = max(1, int(steps))
    return [(x0 + (x1 - x0) * i / steps, y0 + (y1 - y0) * i / steps) for i in range(1, steps)]


def drag_steps(duration_ms: int) -> int:
    return max(1, int(duration_ms) // DRAG_STEP_MS)


def slide_steps(steps: int) -> int:
    return max(SLIDE_MIN_STEPS, int(steps))


def plan_click(x: float, y: float) -> list[TouchEvent]:
    return [TouchEvent(DOWN, x, y, 0), TouchEvent(UP, x, y, CLICK_HOLD_MS)]


def plan_long_click(x: float, y: float, duration_ms: int) -> list[TouchEvent]:
    return [TouchEvent(DOWN, x, y, 0), TouchEvent(UP, x, y, max(0, int(duration_ms)))]


def plan_drag(x0: float, y0: float, x1: float, y1: float, duration_ms: int) -> list[TouchEvent]:
    steps = drag_steps(duration_ms)
    events = [TouchEvent(DOWN, x0, y0, 0)]
    for i, (x, y) in enumerate(interpolate(x0, y0, x1, y1, steps), start=1):
        events.append(TouchEvent(MOVE, x, y, i * DRAG_STEP_MS))
    events.append(TouchEvent(UP, x1, y1, steps * DRAG_STEP_MS))
    return events


def plan_slide(x0: float, y0: float, x1: float, y1: float, steps: int) -> list[TouchEvent]:
    n = slide_steps(steps)
    events = [TouchEvent(DOWN, x0, y0, 0)]
    for i, (x, y) in enumerate(interpolate(x0, y0, x1, y1, n), start=1):
        events.append(TouchEvent(MOVE, x, y, SLIDE_SETTLE_MS + i * SLIDE_STEP_MS))
    events.append(TouchEvent(UP, x1, y1, SLIDE_SETTLE_MS + n * SLIDE_STEP_MS))
    return events


def plan_path(points: Sequence[tuple[float, float]], duration_ms: int) -> list[TouchEvent]:
    """Drag through waypoints, a move every DRAG_STEP_MS.

    Sample i of n sits at fraction i/n of the way along the waypoint
    sequence, each segment taking an equal share of the samples.
    """
    if len(points) < 2:
        raise ValueError("a path needs at least two points")
    steps = drag_steps(duration_ms)
    last = len(points) - 1
    x0, y0 = points[0]
    events = [TouchEvent(DOWN, x0, y0, 0)]
    for i in range(1, steps):
        pos = last * i / steps
        seg = min(int(pos), last - 1)
        frac = pos - seg
        (ax, ay), (bx, by) = points[seg], points[seg + 1]
        events.append(TouchEvent(MOVE, ax + (bx - ax) * frac, ay + (by - ay) * frac, i * DRAG_STEP_MS))
    xn, yn = points[-1]
    events.append(TouchEvent(UP, xn, yn, steps * DRAG_STEP_MS))
    return events

