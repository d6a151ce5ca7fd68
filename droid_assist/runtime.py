"""Wire collaborators from configuration."""

from __future__ import annotations

from contextlib import suppress
from dataclasses import dataclass, field

from .channels import DispatchChain, GestureChannel, PrivilegedRpcChannel, ShellInputChannel
from .channels.base import ActionChannel
from .classifier import PageClassifier
from .config import AssistConfig
from .device import AdbDevice
from .providers import AdbTreeProvider, FallbackTreeProvider, RpcTreeProvider, TreeProvider
from .rpc import RpcConnection
from .tree.query import UiQuery
from .workflow import WorkflowController, WorkflowOrchestrator


@dataclass
class Runtime:
    config: AssistConfig
    device: AdbDevice
    provider: TreeProvider
    query: UiQuery
    chain: DispatchChain
    classifier: PageClassifier
    orchestrator: WorkflowOrchestrator
    controller: WorkflowController
    connections: list[RpcConnection] = field(default_factory=list)

    def close(self) -> None:
        for conn in self.connections:
            with suppress(Exception):
                conn.close()


def _build_provider(config: AssistConfig, device: AdbDevice, agent: RpcConnection | None) -> TreeProvider:
    adb_provider = AdbTreeProvider(device)
    if agent is None or config.tree_source == "adb":
        return adb_provider
    rpc_provider = RpcTreeProvider(agent)
    if config.tree_source == "rpc":
        return rpc_provider
    return FallbackTreeProvider([rpc_provider, adb_provider])


def build_runtime(config: AssistConfig) -> Runtime:
    device = AdbDevice(config.adb_path, config.serial, timeout=config.adb_timeout)
    connections: list[RpcConnection] = []
    channels: list[ActionChannel] = []

    agent: RpcConnection | None = None
    if config.rpc_url:
        agent = RpcConnection(config.rpc_url, timeout=config.rpc_timeout)
        connections.append(agent)
        channels.append(PrivilegedRpcChannel(agent))
    channels.append(ShellInputChannel(device))
    if config.gesture_url:
        gesture_conn = RpcConnection(config.gesture_url, timeout=config.rpc_timeout)
        connections.append(gesture_conn)
        channels.append(GestureChannel(gesture_conn))

    provider = _build_provider(config, device, agent)
    query = UiQuery(provider)
    chain = DispatchChain(channels, config.channel_priority)
    classifier = PageClassifier(provider, config.markers)
    orchestrator = WorkflowOrchestrator(
        classifier,
        query,
        chain,
        config.markers,
        config.timing,
        retry_budget=config.retry_budget,
        click_jitter=config.click_jitter,
    )
    return Runtime(
        config=config,
        device=device,
        provider=provider,
        query=query,
        chain=chain,
        classifier=classifier,
        orchestrator=orchestrator,
        controller=WorkflowController(orchestrator),
        connections=connections,
    )
