"""
Execution channels and the fallback chain.

Provides:
- ActionKind / ActionChannel: the shared capability contract
- PrivilegedRpcChannel: on-device privileged agent over JSON-RPC
- ShellInputChannel: `adb shell input` synthetic events
- GestureChannel: accessibility gestures as timed strokes
- DispatchChain: priority-ordered try-until-success dispatch
- timing: the pointer timing model every channel follows
"""

from .base import CHANNEL_NAMES, GESTURE, PRIVILEGED_RPC, SYNTHETIC_INPUT, ActionChannel, ActionKind
from .dispatch import DEFAULT_PRIORITY, DispatchChain, DispatchResult
from .gesture import GestureChannel
from .rpc import PrivilegedRpcChannel
from .shell import ShellInputChannel

__all__ = [
    # Contract
    "ActionChannel",
    "ActionKind",
    "CHANNEL_NAMES",
    "PRIVILEGED_RPC",
    "SYNTHETIC_INPUT",
    "GESTURE",
    # Channels
    "PrivilegedRpcChannel",
    "ShellInputChannel",
    "GestureChannel",
    # Dispatch
    "DEFAULT_PRIORITY",
    "DispatchChain",
    "DispatchResult",
]
