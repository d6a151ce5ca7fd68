"""Page classification for the purchase funnel.

Checks run in a fixed order and the first hit wins:

1. captcha challenge   - activity signature matches the verification provider
2. network error       - the retry marker is anywhere in the tree
3. order page          - activity signature matches order confirmation
4. ticket selection    - the date selector container is present
5. unknown

The order is an operational preference, not a claim that the states are
mutually exclusive: an error overlay on top of the order page reports
network error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .config import FunnelMarkers
from .providers import TreeProvider
from .tree.node import UiNode
from .tree.query import SearchCriteria, find_first

logger = logging.getLogger("droid_assist.classifier")


class PageState(str, Enum):
    CAPTCHA_CHALLENGE = "captcha_challenge"
    NETWORK_ERROR = "network_error"
    ORDER_PAGE = "order_page"
    TICKET_SELECTION_PAGE = "ticket_selection_page"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class Classification:
    state: PageState
    activity: str | None = None
    package: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"state": self.state.value, "activity": self.activity, "package": self.package}


class PageClassifier:
    def __init__(self, provider: TreeProvider, markers: FunnelMarkers):
        self.provider = provider
        self.markers = markers

    def _read(self, getter_name: str) -> Any:
        try:
            return getattr(self.provider, getter_name)()
        except Exception as exc:  # noqa: BLE001
            logger.warning("%s failed: %s", getter_name, exc)
            return None

    def classify(self) -> Classification:
        """Classify the current foreground from one fresh snapshot."""
        activity = self._read("get_foreground_activity") or ""
        markers = self.markers

        if markers.captcha_activity and markers.captcha_activity in activity:
            return Classification(PageState.CAPTCHA_CHALLENGE, activity or None)

        tree: UiNode | None = self._read("get_foreground_tree")
        if tree is not None and find_first(tree, SearchCriteria(id=markers.refresh_id)) is not None:
            return Classification(PageState.NETWORK_ERROR, activity or None)

        if markers.order_activity and markers.order_activity in activity:
            return Classification(PageState.ORDER_PAGE, activity or None)

        if tree is not None and find_first(tree, SearchCriteria(id=markers.date_container_id)) is not None:
            package = None
            if markers.target_package:
                package = self._read("get_foreground_package") or ""
                if markers.target_package not in package:
                    logger.debug("date selector seen in foreign package %r", package)
                    return Classification(PageState.UNKNOWN, activity or None, package or None)
            return Classification(PageState.TICKET_SELECTION_PAGE, activity or None, package)

        return Classification(PageState.UNKNOWN, activity or None)
