from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

from .channels.base import CHANNEL_NAMES, ActionKind
from .channels.dispatch import DEFAULT_PRIORITY
from .errors import AssistError

DEFAULT_RETRY_BUDGET = 99_999_999


def expand_path(raw: str) -> str:
    return str(Path(raw).expanduser())


_OPTIONAL_MARKERS = ("submit_class", "target_package")


def _valid_marker(name: str, value: Any) -> bool:
    # An empty or missing id would turn its lookup into a match-all.
    if value is None:
        return name in _OPTIONAL_MARKERS
    return isinstance(value, str) and bool(value.strip())


@dataclass(frozen=True)
class FunnelMarkers:
    """Node ids, texts and activity signatures that steer the funnel.

    Defaults target the Damai ticketing app.
    """

    buy_entry_id: str = "cn.damai:id/trade_project_detail_purchase_status_bar_container_fl"
    refresh_id: str = "cn.damai:id/state_view_refresh_btn"
    date_container_id: str = "cn.damai:id/project_detail_perform_flowlayout"
    price_container_id: str = "cn.damai:id/project_detail_perform_price_flowlayout"
    buy_button_id: str = "cn.damai:id/bottom_layout"
    submit_text: str = "立即提交"
    submit_class: str | None = "android.widget.TextView"
    sold_out_markers: tuple[tuple[str, str], ...] = (
        ("cn.damai:id/layout_tag", "缺货登记"),
        ("cn.damai:id/layout_tag", "可预约"),
    )
    captcha_activity: str = "com.alibaba.wireless.security.open.middletier.fc.ui.ContainerActivity"
    order_activity: str = ".ultron.view.activity.DmOrderActivity"
    captcha_retry_container_id: str = "nc_1_refresh1"
    captcha_retry_text: str = "重试"
    slider_track_id: str = "nc_1_n1t"
    slider_handle_id: str = "nc_1_n1z"
    target_package: str | None = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any], *, base: FunnelMarkers | None = None) -> FunnelMarkers:
        base = base or cls()
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(raw) - known)
        if unknown:
            raise AssistError(
                component="config",
                action="markers",
                reason=f"unknown marker fields: {', '.join(unknown)}",
                suggestion=f"Use only: {', '.join(sorted(known))}",
            )
        values = dict(raw)
        bad = [
            name
            for name, value in values.items()
            if name != "sold_out_markers" and not _valid_marker(name, value)
        ]
        if bad:
            raise AssistError(
                component="config",
                action="markers",
                reason=f"markers must be non-empty strings: {', '.join(sorted(bad))}",
                suggestion=f"Only {', '.join(_OPTIONAL_MARKERS)} may be null",
                details={name: values[name] for name in bad},
            )
        if "sold_out_markers" in values:
            pairs = values["sold_out_markers"] or []
            if not isinstance(pairs, (list, tuple)) or not all(
                isinstance(p, (list, tuple)) and len(p) == 2 and all(_valid_marker("", v) for v in p) for p in pairs
            ):
                raise AssistError(
                    component="config",
                    action="markers",
                    reason="sold_out_markers must be a list of [id, text] pairs",
                    suggestion='e.g. [["cn.damai:id/layout_tag", "缺货登记"]]',
                )
            values["sold_out_markers"] = tuple((p[0], p[1]) for p in pairs)
        return replace(base, **values)

    @classmethod
    def from_file(cls, path: str) -> FunnelMarkers:
        try:
            raw = json.loads(Path(expand_path(path)).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise AssistError(
                component="config",
                action="markers",
                reason=f"cannot read {path}: {exc}",
                suggestion="Point ASSIST_MARKERS_FILE at a JSON object of marker overrides",
            ) from exc
        if not isinstance(raw, dict):
            raise AssistError(
                component="config",
                action="markers",
                reason=f"{path} must contain a JSON object",
                suggestion="Wrap overrides in {...}",
            )
        return cls.from_dict(raw)


@dataclass(frozen=True)
class WorkflowTiming:
    """Fixed waits of the funnel loop, in seconds."""

    captcha_settle: float = 3.0
    network_settle: float = 3.0
    no_dates_wait: float = 1.0
    after_date_click: float = 0.5
    after_price_click: float = 0.5
    after_buy_click: float = 2.0
    unknown_wait: float = 2.0
    slider_min_ms: int = 1000
    slider_max_ms: int = 1500
    slider_jitter_px: float = 5.0


_ORDER_PREFIX = "ASSIST_CHANNEL_ORDER_"


def _parse_order(raw: str, *, source: str) -> tuple[str, ...]:
    names = tuple(n.strip().lower() for n in raw.split(",") if n.strip())
    bad = [n for n in names if n not in CHANNEL_NAMES]
    if bad or not names:
        raise AssistError(
            component="config",
            action="channel_order",
            reason=f"{source}: invalid channel list {raw!r}",
            suggestion=f"Use a comma separated subset of: {', '.join(CHANNEL_NAMES)}",
        )
    return names


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise AssistError(component="config", action="env", reason=f"{name}={raw!r} is not a number", suggestion="") from exc


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise AssistError(component="config", action="env", reason=f"{name}={raw!r} is not an integer", suggestion="") from exc


@dataclass
class AssistConfig:
    adb_path: str = "adb"
    serial: str | None = None
    adb_timeout: float = 10.0
    rpc_url: str | None = None
    gesture_url: str | None = None
    rpc_timeout: float = 5.0
    tree_source: str = "auto"
    retry_budget: int = DEFAULT_RETRY_BUDGET
    click_jitter: float = 0.35
    channel_priority: dict[ActionKind, tuple[str, ...]] = field(default_factory=lambda: dict(DEFAULT_PRIORITY))
    markers: FunnelMarkers = field(default_factory=FunnelMarkers)
    timing: WorkflowTiming = field(default_factory=WorkflowTiming)

    @staticmethod
    def normalize_tree_source(raw: str | None) -> str:
        src = (raw or "").strip().lower()
        if src in {"adb", "uiautomator"}:
            return "adb"
        if src in {"rpc", "agent"}:
            return "rpc"
        return "auto"

    @classmethod
    def from_env(cls) -> AssistConfig:
        priority = dict(DEFAULT_PRIORITY)
        default_order = os.environ.get("ASSIST_CHANNEL_ORDER", "")
        if default_order.strip():
            order = _parse_order(default_order, source="ASSIST_CHANNEL_ORDER")
            priority = {kind: order for kind in ActionKind}
        for env_name, raw in sorted(os.environ.items()):
            if not env_name.startswith(_ORDER_PREFIX) or not raw.strip():
                continue
            try:
                kind = ActionKind.parse(env_name[len(_ORDER_PREFIX) :])
            except ValueError as exc:
                raise AssistError(
                    component="config",
                    action="channel_order",
                    reason=f"{env_name}: {exc}",
                    suggestion=f"Use one of: {', '.join(_ORDER_PREFIX + k.value.upper() for k in ActionKind)}",
                ) from exc
            priority[kind] = _parse_order(raw, source=env_name)

        markers_file = os.environ.get("ASSIST_MARKERS_FILE", "")
        markers = FunnelMarkers.from_file(markers_file) if markers_file.strip() else FunnelMarkers()

        jitter = _env_float("ASSIST_CLICK_JITTER", 0.35)
        return cls(
            adb_path=expand_path(os.environ.get("ASSIST_ADB", "adb")),
            serial=os.environ.get("ASSIST_SERIAL") or None,
            adb_timeout=_env_float("ASSIST_ADB_TIMEOUT", 10.0),
            rpc_url=os.environ.get("ASSIST_RPC_URL") or None,
            gesture_url=os.environ.get("ASSIST_GESTURE_URL") or None,
            rpc_timeout=_env_float("ASSIST_RPC_TIMEOUT", 5.0),
            tree_source=cls.normalize_tree_source(os.environ.get("ASSIST_TREE_SOURCE")),
            retry_budget=max(1, _env_int("ASSIST_RETRY_BUDGET", DEFAULT_RETRY_BUDGET)),
            click_jitter=max(0.0, min(jitter, 0.5)),
            channel_priority=priority,
            markers=markers,
        )
