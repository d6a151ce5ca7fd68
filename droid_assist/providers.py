"""
UI tree providers.

A provider answers three questions about the foreground application: its UI
tree, its package and its activity signature. Implementations:
- AdbTreeProvider: `uiautomator dump` + `dumpsys` over adb
- RpcTreeProvider: the on-device agent's accessors
- FallbackTreeProvider: first provider with an answer wins

The core treats them as interchangeable.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence
from typing import Any, Protocol, TypeVar

from .device import AdbDevice, AdbError
from .rpc import RpcConnection, RpcError
from .tree.node import UiNode
from .tree.uiautomator import parse_dump

logger = logging.getLogger("droid_assist.providers")

T = TypeVar("T")


class TreeProvider(Protocol):
    def get_foreground_tree(self) -> UiNode | None: ...

    def get_foreground_package(self) -> str | None: ...

    def get_foreground_activity(self) -> str | None: ...


_RESUMED_RE = re.compile(
    r"(?:mResumedActivity|topResumedActivity|ResumedActivity)[:=]\s*ActivityRecord\{\S+\s+\S+\s+([\w.]+)/([\w.$]+)"
)
_FOCUS_RE = re.compile(r"mCurrentFocus=Window\{\S+\s+\S+\s+([\w.]+)/([\w.$]+)\}")


def _expand_activity(package: str, activity: str) -> str:
    if activity.startswith("."):
        return package + activity
    return activity


def parse_resumed_activity(dumpsys_text: str) -> tuple[str, str] | None:
    """Return (package, fully-qualified activity) from dumpsys output."""
    text = dumpsys_text or ""
    m = _RESUMED_RE.search(text) or _FOCUS_RE.search(text)
    if not m:
        return None
    package, activity = m.group(1), m.group(2)
    return package, _expand_activity(package, activity)


class AdbTreeProvider:
    """Reads the foreground state with adb shell tools."""

    def __init__(self, device: AdbDevice, *, dump_timeout: float = 15.0):
        self.device = device
        self.dump_timeout = dump_timeout

    def get_foreground_tree(self) -> UiNode | None:
        try:
            res = self.device.exec_out("uiautomator", "dump", "/dev/tty", timeout=self.dump_timeout)
        except AdbError as exc:
            logger.warning("uiautomator dump failed: %s", exc)
            return None
        if not res.ok:
            logger.warning("uiautomator dump exited %s: %s", res.returncode, res.stderr.strip())
            return None
        return parse_dump(res.stdout)

    def _resumed(self) -> tuple[str, str] | None:
        for args in (("dumpsys", "activity", "activities"), ("dumpsys", "window", "windows")):
            try:
                res = self.device.shell(*args)
            except AdbError as exc:
                logger.warning("%s failed: %s", " ".join(args), exc)
                return None
            found = parse_resumed_activity(res.stdout) if res.ok else None
            if found:
                return found
        return None

    def get_foreground_package(self) -> str | None:
        found = self._resumed()
        return found[0] if found else None

    def get_foreground_activity(self) -> str | None:
        found = self._resumed()
        return found[1] if found else None


class RpcTreeProvider:
    """Reads the foreground state from the on-device agent."""

    def __init__(self, connection: RpcConnection):
        self.connection = connection

    def _call(self, method: str) -> Any:
        try:
            return self.connection.call(method)
        except RpcError as exc:
            logger.warning("agent %s failed: %s", method, exc)
            return None

    def get_foreground_tree(self) -> UiNode | None:
        payload = self._call("getRootNode")
        if isinstance(payload, dict) and isinstance(payload.get("rootNode"), dict):
            payload = payload["rootNode"]
        if not isinstance(payload, dict) or not payload:
            return None
        return UiNode.from_dict(payload)

    def get_foreground_package(self) -> str | None:
        value = self._call("getCurrentPackageName")
        return str(value) if value else None

    def get_foreground_activity(self) -> str | None:
        value = self._call("getCurrentActivity")
        return str(value) if value else None


class FallbackTreeProvider:
    """Asks each provider in order; the first non-empty answer wins."""

    def __init__(self, providers: Sequence[TreeProvider]):
        self.providers = list(providers)

    def _first(self, getter: Callable[[TreeProvider], T | None]) -> T | None:
        for provider in self.providers:
            try:
                value = getter(provider)
            except Exception as exc:  # noqa: BLE001
                logger.warning("%s failed: %s", type(provider).__name__, exc)
                continue
            if value:
                return value
        return None

    def get_foreground_tree(self) -> UiNode | None:
        return self._first(lambda p: p.get_foreground_tree())

    def get_foreground_package(self) -> str | None:
        return self._first(lambda p: p.get_foreground_package())

    def get_foreground_activity(self) -> str | None:
        return self._first(lambda p: p.get_foreground_activity())
