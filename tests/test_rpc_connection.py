from __future__ import annotations

import json

import pytest


class _DummyWebSocket:
    def __init__(self, frames: list[object]) -> None:
        self.frames = list(frames)
        self.sent: list[dict] = []
        self.connected = True
        self.closed = False

    def send(self, raw: str) -> None:
        self.sent.append(json.loads(raw))

    def settimeout(self, _timeout: float) -> None:
        return None

    def recv(self) -> str:
        import websocket

        if not self.frames:
            raise websocket.WebSocketTimeoutException("timed out")
        frame = self.frames.pop(0)
        if isinstance(frame, Exception):
            raise frame
        return frame if isinstance(frame, str) else json.dumps(frame)

    def close(self) -> None:
        self.closed = True
        self.connected = False


def _patch(monkeypatch, ws: _DummyWebSocket) -> list[str]:  # noqa: ANN001
    from droid_assist import rpc

    urls: list[str] = []

    def fake_create_connection(url: str, timeout: float = 5.0):  # noqa: ANN202, ARG001
        urls.append(url)
        return ws

    monkeypatch.setattr(rpc.websocket, "create_connection", fake_create_connection)
    return urls


def test_call_skips_notifications_and_foreign_ids(monkeypatch) -> None:  # noqa: ANN001
    from droid_assist.rpc import RpcConnection

    ws = _DummyWebSocket(
        [
            {"method": "windowChanged", "params": {}},
            "not json",
            {"id": 99, "result": False},
            {"id": 1, "result": True},
        ]
    )
    urls = _patch(monkeypatch, ws)

    conn = RpcConnection("ws://127.0.0.1:9008/rpc", timeout=1.0)
    assert conn.call("click", {"x": 1, "y": 2}) is True
    assert ws.sent == [{"id": 1, "method": "click", "params": {"x": 1, "y": 2}}]
    assert urls == ["ws://127.0.0.1:9008/rpc"]

    ws.frames = [{"id": 2, "result": {"rootNode": {}}}]
    assert conn.call("getRootNode") == {"rootNode": {}}
    assert ws.sent[-1] == {"id": 2, "method": "getRootNode"}
    assert urls == ["ws://127.0.0.1:9008/rpc"]


def test_error_response_raises(monkeypatch) -> None:  # noqa: ANN001
    from droid_assist.rpc import RpcConnection, RpcError

    ws = _DummyWebSocket([{"id": 1, "error": {"message": "no such method"}}])
    _patch(monkeypatch, ws)
    with pytest.raises(RpcError, match="no such method"):
        RpcConnection("ws://x").call("teleport")


def test_timeout_raises(monkeypatch) -> None:  # noqa: ANN001
    from droid_assist.rpc import RpcConnection, RpcError

    ws = _DummyWebSocket([])
    _patch(monkeypatch, ws)
    with pytest.raises(RpcError, match="timed out"):
        RpcConnection("ws://x").call("isAvailable", timeout=0.05)


def test_broken_socket_is_dropped(monkeypatch) -> None:  # noqa: ANN001
    from droid_assist.rpc import RpcConnection, RpcError

    ws = _DummyWebSocket([ConnectionResetError("peer reset")])
    _patch(monkeypatch, ws)
    conn = RpcConnection("ws://x")
    with pytest.raises(RpcError):
        conn.call("isAvailable")
    assert ws.closed
    assert not conn.connected


def test_connect_failure_raises_rpc_error(monkeypatch) -> None:  # noqa: ANN001
    from droid_assist import rpc

    def refuse(url: str, timeout: float = 5.0):  # noqa: ANN202, ARG001
        raise ConnectionRefusedError("refused")

    monkeypatch.setattr(rpc.websocket, "create_connection", refuse)
    conn = rpc.RpcConnection("ws://127.0.0.1:1")
    with pytest.raises(rpc.RpcError, match="connect to ws://127.0.0.1:1 failed"):
        conn.call("isAvailable")
    assert not conn.connected
