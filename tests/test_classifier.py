from __future__ import annotations

from dataclasses import replace


class _DummyProvider:
    def __init__(self, activity: str | None = "", tree=None, package: str | None = "cn.damai") -> None:  # noqa: ANN001
        self.activity = activity
        self.tree = tree
        self.package = package

    def get_foreground_tree(self):  # noqa: ANN201
        if isinstance(self.tree, Exception):
            raise self.tree
        return self.tree

    def get_foreground_package(self):  # noqa: ANN201
        return self.package

    def get_foreground_activity(self):  # noqa: ANN201
        return self.activity


def _markers():  # noqa: ANN202
    from droid_assist.config import FunnelMarkers

    return FunnelMarkers()


def _screen(*ids: str):  # noqa: ANN202
    from droid_assist.tree import UiNode

    return UiNode(id="root", children=tuple(UiNode(id=i) for i in ids))


def _classify(provider: _DummyProvider, markers=None):  # noqa: ANN001, ANN202
    from droid_assist.classifier import PageClassifier

    return PageClassifier(provider, markers or _markers()).classify()  # type: ignore[arg-type]


def test_captcha_wins_over_everything() -> None:
    from droid_assist.classifier import PageState

    m = _markers()
    provider = _DummyProvider(
        activity="com.taobao.x/" + m.captcha_activity,
        tree=_screen(m.refresh_id, m.date_container_id),
    )
    result = _classify(provider)
    assert result.state is PageState.CAPTCHA_CHALLENGE
    assert result.to_dict()["state"] == "captcha_challenge"


def test_network_error_overlay_beats_order_page() -> None:
    from droid_assist.classifier import PageState

    m = _markers()
    provider = _DummyProvider(activity="cn.damai" + m.order_activity, tree=_screen(m.refresh_id))
    assert _classify(provider).state is PageState.NETWORK_ERROR


def test_order_page_by_activity_signature() -> None:
    from droid_assist.classifier import PageState

    m = _markers()
    provider = _DummyProvider(activity="cn.damai" + m.order_activity, tree=_screen(m.date_container_id))
    result = _classify(provider)
    assert result.state is PageState.ORDER_PAGE
    assert result.activity == "cn.damai.ultron.view.activity.DmOrderActivity"


def test_ticket_selection_and_unknown() -> None:
    from droid_assist.classifier import PageState

    m = _markers()
    assert _classify(_DummyProvider(tree=_screen(m.date_container_id))).state is PageState.TICKET_SELECTION_PAGE
    assert _classify(_DummyProvider(tree=_screen("cn.damai:id/home"))).state is PageState.UNKNOWN
    assert _classify(_DummyProvider(activity=None, tree=None)).state is PageState.UNKNOWN


def test_target_package_guards_ticket_selection() -> None:
    from droid_assist.classifier import PageState

    m = replace(_markers(), target_package="cn.damai")
    tree = _screen(m.date_container_id)
    assert _classify(_DummyProvider(tree=tree, package="cn.damai"), m).state is PageState.TICKET_SELECTION_PAGE

    result = _classify(_DummyProvider(tree=tree, package="com.other.app"), m)
    assert result.state is PageState.UNKNOWN
    assert result.package == "com.other.app"


def test_provider_faults_classify_as_unknown() -> None:
    from droid_assist.classifier import PageState

    provider = _DummyProvider(activity="", tree=RuntimeError("uiautomator crashed"))
    assert _classify(provider).state is PageState.UNKNOWN
