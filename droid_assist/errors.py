"""Structured errors for configuration and command-line failures."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class AssistError(Exception):
    """Structured error with enough context to act on."""

    component: str
    action: str
    reason: str
    suggestion: str = ""
    details: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        msg = f"[{self.component}] {self.action} failed: {self.reason}"
        if self.suggestion:
            msg += f". Suggestion: {self.suggestion}"
        return msg

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": True,
            "component": self.component,
            "action": self.action,
            "reason": self.reason,
            "suggestion": self.suggestion,
            "details": self.details,
        }
