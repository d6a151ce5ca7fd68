from __future__ import annotations


def test_adb_only_runtime() -> None:
    from droid_assist.config import AssistConfig
    from droid_assist.providers import AdbTreeProvider
    from droid_assist.runtime import build_runtime

    rt = build_runtime(AssistConfig(serial="emulator-5554"))
    assert list(rt.chain.channels) == ["synthetic_input"]
    assert isinstance(rt.provider, AdbTreeProvider)
    assert rt.device.serial == "emulator-5554"
    assert rt.connections == []
    rt.close()


def test_agents_add_channels_and_tree_fallback() -> None:
    from droid_assist.config import AssistConfig
    from droid_assist.providers import FallbackTreeProvider, RpcTreeProvider
    from droid_assist.runtime import build_runtime

    rt = build_runtime(AssistConfig(rpc_url="ws://127.0.0.1:9008", gesture_url="ws://127.0.0.1:9009"))
    assert list(rt.chain.channels) == ["privileged_rpc", "synthetic_input", "gesture"]
    assert isinstance(rt.provider, FallbackTreeProvider)
    assert len(rt.connections) == 2
    assert rt.controller.orchestrator is rt.orchestrator
    rt.close()

    rt = build_runtime(AssistConfig(rpc_url="ws://127.0.0.1:9008", tree_source="rpc"))
    assert isinstance(rt.provider, RpcTreeProvider)
