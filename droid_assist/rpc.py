"""JSON-RPC over WebSocket to the on-device agents.

Both the privileged agent and the accessibility agent speak the same
framing: requests are `{"id", "method", "params"}`, responses carry the
same `id` with either `result` or `error`. Frames without an `id` are
agent notifications and are skipped.
"""

from __future__ import annotations

import json
import logging
import threading
import time
from contextlib import suppress
from typing import Any

import websocket

logger = logging.getLogger("droid_assist.rpc")


class RpcError(Exception):
    pass


class RpcConnection:
    """Blocking JSON-RPC client; one call in flight at a time."""

    def __init__(self, ws_url: str, timeout: float = 5.0):
        self.ws_url = ws_url
        self.timeout = timeout
        self._ws: Any | None = None
        self._next_id = 1
        self._lock = threading.Lock()

    @property
    def connected(self) -> bool:
        ws = self._ws
        return ws is not None and bool(getattr(ws, "connected", True))

    def connect(self) -> None:
        if self.connected:
            return
        try:
            self._ws = websocket.create_connection(self.ws_url, timeout=self.timeout)
        except Exception as exc:  # noqa: BLE001
            self._ws = None
            raise RpcError(f"connect to {self.ws_url} failed: {exc}") from exc

    def close(self) -> None:
        ws, self._ws = self._ws, None
        if ws is not None:
            with suppress(Exception):
                ws.close()

    def call(self, method: str, params: dict[str, Any] | None = None, *, timeout: float | None = None) -> Any:
        """Send one request and block until its response arrives."""
        with self._lock:
            self.connect()
            ws = self._ws
            msg_id = self._next_id
            self._next_id += 1
            msg: dict[str, Any] = {"id": msg_id, "method": method}
            if params:
                msg["params"] = params
            try:
                ws.send(json.dumps(msg))
            except Exception as exc:  # noqa: BLE001
                # A broken socket is dropped so the next call reconnects.
                self.close()
                raise RpcError(f"{method}: send failed: {exc}") from exc
            return self._recv_until(ws, msg_id, method, timeout or self.timeout)

    def _recv_until(self, ws: Any, expected_id: int, method: str, timeout: float) -> Any:
        deadline = time.monotonic() + timeout
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise RpcError(f"{method}: response timed out")
            try:
                ws.settimeout(min(0.5, remaining))
                raw = ws.recv()
            except Exception as exc:  # noqa: BLE001
                text = str(exc).lower()
                if isinstance(exc, (TimeoutError, websocket.WebSocketTimeoutException)) or "timed out" in text:
                    continue
                self.close()
                raise RpcError(f"{method}: {exc}") from exc

            try:
                data = json.loads(raw)
            except (TypeError, json.JSONDecodeError):
                continue
            if not isinstance(data, dict) or data.get("id") != expected_id:
                continue
            if data.get("error") is not None:
                raise RpcError(f"{method}: {data['error']}")
            return data.get("result")
