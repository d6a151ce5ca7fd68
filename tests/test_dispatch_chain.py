from __future__ import annotations

import pytest


class _DummyChannel:
    def __init__(self, name: str, log: list[str], *, available: bool = True, ok: bool = True, raises: bool = False):
        self.name = name
        self.log = log
        self.available = available
        self.ok = ok
        self.raises = raises
        self.points: list[tuple] = []

    def is_available(self) -> bool:
        return self.available

    def _act(self, method: str, *args) -> bool:  # noqa: ANN002
        self.log.append(f"{self.name}.{method}")
        self.points.append(args)
        if self.raises:
            raise RuntimeError("channel exploded")
        return self.ok

    def click(self, x, y):  # noqa: ANN001, ANN201
        return self._act("click", x, y)

    def long_click(self, x, y, duration_ms):  # noqa: ANN001, ANN201
        return self._act("long_click", x, y, duration_ms)

    def double_click(self, x, y):  # noqa: ANN001, ANN201
        return self._act("double_click", x, y)

    def drag(self, x0, y0, x1, y1, duration_ms):  # noqa: ANN001, ANN201
        return self._act("drag", x0, y0, x1, y1, duration_ms)

    def drag_path(self, points, duration_ms):  # noqa: ANN001, ANN201
        return self._act("drag_path", points, duration_ms)

    def slide(self, x0, y0, x1, y1, steps):  # noqa: ANN001, ANN201
        return self._act("slide", x0, y0, x1, y1, steps)

    def type_text(self, text):  # noqa: ANN001, ANN201
        return self._act("type_text", text)

    def send_key(self, code):  # noqa: ANN001, ANN201
        return self._act("send_key", code)


def test_dummy_channel_satisfies_protocol() -> None:
    from droid_assist.channels import ActionChannel

    assert isinstance(_DummyChannel("privileged_rpc", []), ActionChannel)


def test_first_success_stops_the_chain() -> None:
    from droid_assist.channels import ActionKind, DispatchChain

    log: list[str] = []
    chain = DispatchChain(
        [
            _DummyChannel("privileged_rpc", log, ok=False),
            _DummyChannel("synthetic_input", log, ok=True),
            _DummyChannel("gesture", log, ok=True),
        ]
    )
    result = chain.dispatch(ActionKind.CLICK, 10, 20)
    assert result.ok and bool(result)
    assert result.channel == "synthetic_input"
    assert result.attempted == ("privileged_rpc", "synthetic_input")
    assert log == ["privileged_rpc.click", "synthetic_input.click"]
    assert chain.last_result is result


def test_all_failures_try_each_channel_once_in_order() -> None:
    from droid_assist.channels import DispatchChain

    log: list[str] = []
    chain = DispatchChain(
        [
            _DummyChannel("privileged_rpc", log, ok=False),
            _DummyChannel("synthetic_input", log, raises=True),
            _DummyChannel("gesture", log, ok=False),
        ]
    )
    assert chain.drag(0, 0, 100, 0, 300) is False
    assert log == ["privileged_rpc.drag", "synthetic_input.drag", "gesture.drag"]
    assert chain.last_result is not None
    assert chain.last_result.to_dict() == {
        "ok": False,
        "kind": "drag",
        "channel": None,
        "attempted": ["privileged_rpc", "synthetic_input", "gesture"],
    }


def test_unavailable_channels_are_skipped() -> None:
    from droid_assist.channels import ActionKind, DispatchChain

    log: list[str] = []
    chain = DispatchChain(
        [
            _DummyChannel("privileged_rpc", log, available=False),
            _DummyChannel("synthetic_input", log, ok=True),
        ]
    )
    result = chain.dispatch(ActionKind.SEND_KEY, 4)
    assert result.channel == "synthetic_input"
    assert result.attempted == ("synthetic_input",)
    assert log == ["synthetic_input.send_key"]


def test_per_kind_priority_overrides_default_order() -> None:
    from droid_assist.channels import ActionKind, DispatchChain

    log: list[str] = []
    chain = DispatchChain(
        [
            _DummyChannel("privileged_rpc", log, ok=False),
            _DummyChannel("synthetic_input", log, ok=False),
            _DummyChannel("gesture", log, ok=True),
        ],
        {ActionKind.SLIDE: ("gesture", "missing", "privileged_rpc")},
    )
    assert [c.name for c in chain.order_for(ActionKind.SLIDE)] == ["gesture", "privileged_rpc"]
    assert chain.slide(0, 0, 100, 0)
    assert log == ["gesture.slide"]

    log.clear()
    assert chain.click(1, 1)
    assert log == ["privileged_rpc.click", "synthetic_input.click", "gesture.click"]


def test_wrappers_pass_default_durations() -> None:
    from droid_assist.channels import DispatchChain

    channel = _DummyChannel("synthetic_input", [])
    chain = DispatchChain([channel])
    chain.long_click(5, 6)
    chain.drag(0, 0, 1, 1)
    chain.slide(0, 0, 1, 1)
    assert channel.points == [(5, 6, 1000), (0, 0, 1, 1, 500), (0, 0, 1, 1, 20)]


def test_click_node_uses_centre_and_keeps_jitter_inside_bounds() -> None:
    import random

    from droid_assist.channels import DispatchChain
    from droid_assist.tree import Bounds, UiNode

    channel = _DummyChannel("synthetic_input", [])
    chain = DispatchChain([channel], rng=random.Random(7))
    node = UiNode(id="buy", bounds=Bounds(100, 200, 300, 300))

    assert chain.click_node(node)
    assert channel.points[-1] == (200, 250)

    for _ in range(50):
        assert chain.click_node(node, jitter=0.35)
        x, y = channel.points[-1]
        assert 130 <= x <= 270
        assert 215 <= y <= 285

    channel.points.clear()
    assert chain.click_node(None) is False
    assert chain.click_node(UiNode(id="hidden", bounds=Bounds(10, 10, 10, 40))) is False
    assert channel.points == []


def test_action_kind_parse() -> None:
    from droid_assist.channels import ActionKind

    assert ActionKind.parse("long-click") is ActionKind.LONG_CLICK
    assert ActionKind.parse(" TYPE_TEXT ") is ActionKind.TYPE_TEXT
    with pytest.raises(ValueError):
        ActionKind.parse("swipe")


def test_drag_path_dispatches_waypoints_and_rejects_single_points() -> None:
    from droid_assist.channels import DispatchChain

    log: list[str] = []
    channel = _DummyChannel("gesture", log)
    chain = DispatchChain([channel])
    assert chain.drag_path(((0, 0), (50, 5), (100, 0)), 1200)
    assert channel.points == [([(0, 0), (50, 5), (100, 0)], 1200)]
    assert chain.last_result is not None and chain.last_result.kind.value == "drag_path"

    assert chain.drag_path([(0, 0)]) is False
    assert log == ["gesture.drag_path"]
