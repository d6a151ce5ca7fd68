"""Try-in-order dispatch over execution channels."""

from __future__ import annotations

import logging
import random
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from ..tree.node import UiNode
from .base import CHANNEL_NAMES, ActionChannel, ActionKind

logger = logging.getLogger("droid_assist.channels")

DEFAULT_PRIORITY: dict[ActionKind, tuple[str, ...]] = {kind: CHANNEL_NAMES for kind in ActionKind}

_METHODS = {
    ActionKind.CLICK: "click",
    ActionKind.LONG_CLICK: "long_click",
    ActionKind.DOUBLE_CLICK: "double_click",
    ActionKind.DRAG: "drag",
    ActionKind.DRAG_PATH: "drag_path",
    ActionKind.SLIDE: "slide",
    ActionKind.TYPE_TEXT: "type_text",
    ActionKind.SEND_KEY: "send_key",
}


@dataclass(frozen=True, slots=True)
class DispatchResult:
    ok: bool
    kind: ActionKind
    channel: str | None = None
    attempted: tuple[str, ...] = ()

    def __bool__(self) -> bool:
        return self.ok

    def to_dict(self) -> dict[str, Any]:
        return {"ok": self.ok, "kind": self.kind.value, "channel": self.channel, "attempted": list(self.attempted)}


class DispatchChain:
    """Ordered fallback across channels implementing the same capabilities.

    For each action kind the priority list names the channels to try.
    Unavailable channels are skipped; the first channel that reports success
    ends the dispatch; failures and exceptions move on to the next one.
    """

    def __init__(
        self,
        channels: Sequence[ActionChannel],
        priority: Mapping[ActionKind, Sequence[str]] | None = None,
        *,
        rng: random.Random | None = None,
    ):
        self.channels: dict[str, ActionChannel] = {}
        for channel in channels:
            self.channels[channel.name] = channel
        self.priority: dict[ActionKind, tuple[str, ...]] = dict(DEFAULT_PRIORITY)
        for kind, names in (priority or {}).items():
            self.priority[kind] = tuple(names)
        self._rng = rng or random.Random()
        self.last_result: DispatchResult | None = None

    def order_for(self, kind: ActionKind) -> list[ActionChannel]:
        return [self.channels[name] for name in self.priority.get(kind, ()) if name in self.channels]

    def dispatch(self, kind: ActionKind, *args: Any) -> DispatchResult:
        method = _METHODS[kind]
        attempted: list[str] = []
        for channel in self.order_for(kind):
            try:
                available = channel.is_available()
            except Exception as exc:  # noqa: BLE001
                logger.warning("%s availability check failed: %s", channel.name, exc)
                available = False
            if not available:
                logger.debug("%s: skipping unavailable channel %s", kind.value, channel.name)
                continue
            attempted.append(channel.name)
            try:
                ok = bool(getattr(channel, method)(*args))
            except Exception as exc:  # noqa: BLE001
                logger.warning("%s via %s raised: %s", kind.value, channel.name, exc)
                ok = False
            if ok:
                result = DispatchResult(True, kind, channel.name, tuple(attempted))
                logger.debug("%s%s succeeded via %s", kind.value, args, channel.name)
                self.last_result = result
                return result
            logger.info("%s via %s failed, falling back", kind.value, channel.name)
        result = DispatchResult(False, kind, None, tuple(attempted))
        logger.warning("%s failed on every channel (tried: %s)", kind.value, ", ".join(attempted) or "none")
        self.last_result = result
        return result

    # Convenience wrappers

    def click(self, x: float, y: float) -> bool:
        return self.dispatch(ActionKind.CLICK, x, y).ok

    def long_click(self, x: float, y: float, duration_ms: int = 1000) -> bool:
        return self.dispatch(ActionKind.LONG_CLICK, x, y, duration_ms).ok

    def double_click(self, x: float, y: float) -> bool:
        return self.dispatch(ActionKind.DOUBLE_CLICK, x, y).ok

    def drag(self, x0: float, y0: float, x1: float, y1: float, duration_ms: int = 500) -> bool:
        return self.dispatch(ActionKind.DRAG, x0, y0, x1, y1, duration_ms).ok

    def drag_path(self, points: Sequence[tuple[float, float]], duration_ms: int = 500) -> bool:
        if len(points) < 2:
            logger.info("drag_path needs at least two points, got %d", len(points))
            return False
        return self.dispatch(ActionKind.DRAG_PATH, list(points), duration_ms).ok

    def slide(self, x0: float, y0: float, x1: float, y1: float, steps: int = 20) -> bool:
        return self.dispatch(ActionKind.SLIDE, x0, y0, x1, y1, steps).ok

    def type_text(self, text: str) -> bool:
        return self.dispatch(ActionKind.TYPE_TEXT, text).ok

    def send_key(self, code: int) -> bool:
        return self.dispatch(ActionKind.SEND_KEY, code).ok

    def click_node(self, node: UiNode | None, *, jitter: float = 0.0) -> bool:
        """Click inside a node's bounds.

        jitter is the fraction of width/height the point may stray from the
        centre in each direction (0.35 keeps it inside the central 70%).
        """
        if node is None:
            return False
        b = node.bounds
        if b.is_empty:
            logger.info("cannot click %s: empty bounds %s", node.id or node.class_name, b)
            return False
        x, y = b.center_x, b.center_y
        if jitter > 0:
            rx = int(b.width * jitter)
            ry = int(b.height * jitter)
            x += self._rng.randint(-rx, rx)
            y += self._rng.randint(-ry, ry)
        return self.click(x, y)
