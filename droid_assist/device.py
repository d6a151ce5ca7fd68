"""adb access to the target device."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass

logger = logging.getLogger("droid_assist.device")


class AdbError(Exception):
    pass


@dataclass(frozen=True, slots=True)
class ShellResult:
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class AdbDevice:
    """Thin wrapper over the adb binary for one device."""

    def __init__(self, adb_path: str = "adb", serial: str | None = None, timeout: float = 10.0):
        self.adb_path = adb_path
        self.serial = serial or None
        self.timeout = timeout

    def _base(self) -> list[str]:
        cmd = [self.adb_path]
        if self.serial:
            cmd.extend(["-s", self.serial])
        return cmd

    def run(self, *args: str, timeout: float | None = None) -> ShellResult:
        cmd = [*self._base(), *args]
        try:
            proc = subprocess.run(cmd, capture_output=True, timeout=timeout or self.timeout)
        except FileNotFoundError as exc:
            raise AdbError(f"adb binary not found: {self.adb_path}") from exc
        except subprocess.TimeoutExpired as exc:
            raise AdbError(f"adb timed out: {' '.join(args)}") from exc
        return ShellResult(
            returncode=proc.returncode,
            stdout=proc.stdout.decode(errors="replace"),
            stderr=proc.stderr.decode(errors="replace"),
        )

    def shell(self, *args: str, timeout: float | None = None) -> ShellResult:
        return self.run("shell", *args, timeout=timeout)

    def exec_out(self, *args: str, timeout: float | None = None) -> ShellResult:
        return self.run("exec-out", *args, timeout=timeout)

    def is_connected(self) -> bool:
        try:
            res = self.run("get-state", timeout=min(self.timeout, 5.0))
        except AdbError as exc:
            logger.debug("adb get-state failed: %s", exc)
            return False
        return res.ok and res.stdout.strip() == "device"
