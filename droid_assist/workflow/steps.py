"""Per-page actions of the purchase funnel."""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from typing import TYPE_CHECKING

from ..channels.dispatch import DispatchChain
from ..config import FunnelMarkers, WorkflowTiming
from ..tree.node import UiNode
from ..tree.query import SearchCriteria, UiQuery, find_first, first_level_children, subtree_contains

if TYPE_CHECKING:
    from .orchestrator import WorkflowRun

logger = logging.getLogger("droid_assist.workflow")

Pause = Callable[[float], None]

_CLICKABLE = SearchCriteria(clickable=True)
_SLIDER_WAYPOINTS = 5


class FunnelSteps:
    """Actions for each page state.

    Every lookup goes through `query`, so each one sees a fresh snapshot.
    `pause` raises when the run is cancelled mid-wait.
    """

    def __init__(
        self,
        query: UiQuery,
        chain: DispatchChain,
        markers: FunnelMarkers,
        timing: WorkflowTiming,
        *,
        click_jitter: float = 0.0,
        rng: random.Random | None = None,
    ):
        self.query = query
        self.chain = chain
        self.markers = markers
        self.timing = timing
        self.click_jitter = click_jitter
        self._rng = rng or random.Random()

    def click(self, node: UiNode | None, label: str) -> bool:
        if node is None:
            logger.info("%s not found", label)
            return False
        ok = self.chain.click_node(node, jitter=self.click_jitter)
        if not ok:
            logger.info("click on %s failed", label)
        return ok

    def prime(self) -> bool:
        return self.click(self.query.by_id(self.markers.buy_entry_id), "buy entry")

    # Captcha

    def solve_captcha(self) -> bool:
        root = self.query.snapshot()
        container = find_first(root, SearchCriteria(id=self.markers.captcha_retry_container_id))
        retry = find_first(container, SearchCriteria(text_contains=self.markers.captcha_retry_text))
        if retry is not None:
            logger.info("captcha: retry control found")
            return self.click(retry, "captcha retry")

        track = find_first(root, SearchCriteria(id=self.markers.slider_track_id))
        handle = find_first(root, SearchCriteria(id=self.markers.slider_handle_id))
        if track is None or handle is None:
            logger.info("captcha: no retry control and no slider")
            return False
        return self.drag_slider(track, handle)

    def slider_path(self, track: UiNode, handle: UiNode) -> list[tuple[float, float]]:
        """Waypoints from the handle centre to the far edge of the track.

        Evenly spaced along x, each intermediate waypoint shaken by up to
        slider_jitter_px vertically; the path ends back on the start row.
        """
        start_x = float(handle.bounds.center_x)
        start_y = float(handle.bounds.center_y)
        end_x = track.bounds.right - handle.bounds.width / 2.0
        jitter = self.timing.slider_jitter_px
        n = _SLIDER_WAYPOINTS
        points = [(start_x, start_y)]
        for i in range(1, n + 1):
            x = start_x + (end_x - start_x) * i / n
            points.append((x, start_y + self._rng.uniform(-jitter, jitter)))
        points.append((end_x, start_y))
        return points

    def drag_slider(self, track: UiNode, handle: UiNode) -> bool:
        """Drag the handle along a shaky path over a random duration."""
        t = self.timing
        points = self.slider_path(track, handle)
        duration_ms = self._rng.randint(t.slider_min_ms, t.slider_max_ms)
        (x0, y0), (x1, y1) = points[0], points[-1]
        logger.info("captcha: sliding (%.0f, %.0f) -> (%.0f, %.0f) over %d ms", x0, y0, x1, y1, duration_ms)
        return self.chain.drag_path(points, duration_ms)

    # Network error

    def refresh(self) -> bool:
        return self.click(self.query.by_id(self.markers.refresh_id), "refresh button")

    # Order page

    def submit_order(self) -> bool:
        criteria = SearchCriteria(class_name=self.markers.submit_class, text=self.markers.submit_text)
        return self.click(self.query.first(criteria), "submit button")

    # Ticket selection

    def date_options(self) -> list[UiNode]:
        return first_level_children(self.query.by_id(self.markers.date_container_id), _CLICKABLE)

    def price_options(self) -> list[UiNode]:
        """Clickable price options whose subtree carries no sold-out marker."""
        container = self.query.by_id(self.markers.price_container_id)
        eligible: list[UiNode] = []
        for option in first_level_children(container, _CLICKABLE):
            if any(subtree_contains(option, mid, text) for mid, text in self.markers.sold_out_markers):
                logger.debug("price option %r is sold out", option.text)
                continue
            eligible.append(option)
        return eligible

    def select_tickets(self, run: WorkflowRun, pause: Pause) -> None:
        t = self.timing
        dates = self.date_options()
        if not dates:
            logger.info("no date options yet, waiting")
            pause(t.no_dates_wait)
            return

        if run.date_cursor >= len(dates):
            run.date_cursor = 0
        date = dates[run.date_cursor]
        run.date_cursor += 1
        self.click(date, f"date option {date.text!r}")
        pause(t.after_date_click)

        prices = self.price_options()
        if prices:
            self.click(prices[0], f"price option {prices[0].text!r}")
            pause(t.after_price_click)

        buy = self.query.by_id(self.markers.buy_button_id)
        if buy is not None:
            self.click(buy, "buy button")
            pause(t.after_buy_click)
