from __future__ import annotations

_DUMP = (
    "<?xml version='1.0' encoding='UTF-8' standalone='yes' ?>"
    '<hierarchy rotation="0">'
    '<node index="0" text="" resource-id="" class="android.widget.FrameLayout" package="cn.damai" '
    'content-desc="" checked="false" clickable="false" enabled="true" scrollable="false" bounds="[0,0][1080,2340]">'
    '<node index="0" text="Buy" resource-id="cn.damai:id/bottom_layout" class="android.widget.TextView" '
    'package="cn.damai" content-desc="buy tickets" checked="false" clickable="true" enabled="true" '
    'scrollable="false" bounds="[0,2200][1080,2340]" />'
    "</node>"
    "</hierarchy>"
    "UI hierchary dumped to: /dev/tty\n"
)


def _tree():
    from droid_assist.tree import UiNode

    ok = UiNode(id="ok", text="OK", class_name="android.widget.Button", clickable=True, enabled=True)
    cancel = UiNode(id="cancel", text="Cancel", class_name="android.widget.Button", clickable=True)
    label = UiNode(id="label", text="Confirm purchase", class_name="android.widget.TextView")
    row = UiNode(class_name="android.widget.LinearLayout", children=(label, ok, cancel))
    return UiNode(class_name="android.widget.FrameLayout", children=(row,))


def test_parse_selector_attributes() -> None:
    from droid_assist.tree import parse_selector

    c = parse_selector("Button[text='OK'][clickable='true'][enabled='false'][bogus='x']")
    assert c.class_contains == "Button"
    assert c.class_name is None
    assert c.text == "OK"
    assert c.clickable is True
    assert c.enabled is False

    c = parse_selector("[id='cn.damai:id/bottom_layout'][textContains='Buy']")
    assert c.class_contains is None
    assert c.id == "cn.damai:id/bottom_layout"
    assert c.text_contains == "Buy"


def test_selector_class_matches_fully_qualified_names() -> None:
    from droid_assist.tree import select

    root = _tree()
    assert [n.id for n in select(root, "Button[text='OK']")] == ["ok"]
    assert [n.id for n in select(root, "Button[enabled='true']")] == ["ok"]
    assert [n.id for n in select(root, "[textContains='purchase']")] == ["label"]


def test_find_by_xpath_forms() -> None:
    from droid_assist.tree import find_by_xpath

    root = _tree()
    assert [n.id for n in find_by_xpath(root, "//Button")] == ["ok", "cancel"]
    assert [n.id for n in find_by_xpath(root, "TextView")] == ["label"]
    assert [n.id for n in find_by_xpath(root, "FrameLayout/LinearLayout/Button")] == ["ok", "cancel"]
    assert find_by_xpath(root, "LinearLayout/Button") == []
    assert [n.id for n in find_by_xpath(root, "LinearLayout/Button", anchored=False)] == ["ok", "cancel"]
    assert find_by_xpath(root, "") == []


def test_parse_dump_single_window() -> None:
    from droid_assist.tree import find_by_id, parse_dump

    root = parse_dump(_DUMP)
    assert root is not None
    assert root.class_name == "android.widget.FrameLayout"
    assert root.package_name == "cn.damai"
    assert root.enabled and not root.clickable

    (buy,) = find_by_id(root, "cn.damai:id/bottom_layout")
    assert buy.text == "Buy"
    assert buy.content_description == "buy tickets"
    assert buy.clickable
    assert (buy.bounds.left, buy.bounds.top, buy.bounds.right, buy.bounds.bottom) == (0, 2200, 1080, 2340)
    assert buy.bounds.center_y == 2270


def test_parse_dump_wraps_multiple_windows() -> None:
    from droid_assist.tree import parse_dump

    xml = (
        "<hierarchy>"
        '<node class="android.widget.FrameLayout" resource-id="win1" bounds="[0,0][10,10]" />'
        '<node class="android.widget.FrameLayout" resource-id="win2" bounds="[0,0][10,10]" />'
        "</hierarchy>"
    )
    root = parse_dump(xml)
    assert root is not None
    assert root.class_name == "hierarchy"
    assert [w.id for w in root.children] == ["win1", "win2"]


def test_parse_dump_rejects_garbage() -> None:
    from droid_assist.tree import parse_dump

    assert parse_dump("") is None
    assert parse_dump("ERROR: null root node returned by UiTestAutomationBridge.") is None
    assert parse_dump("<hierarchy><node") is None
    assert parse_dump("<hierarchy></hierarchy>") is None


def test_parse_bounds() -> None:
    from droid_assist.tree import parse_bounds

    b = parse_bounds("[10,20][110,70]")
    assert (b.width, b.height, b.center_x, b.center_y) == (100, 50, 60, 45)
    assert str(b) == "[10,20][110,70]"
    assert parse_bounds("nonsense").is_empty
    assert parse_bounds(None).is_empty


def test_node_from_agent_payload() -> None:
    from droid_assist.tree import UiNode

    node = UiNode.from_dict(
        {
            "id": "root",
            "className": "android.widget.FrameLayout",
            "bounds": {"left": 0, "top": 0, "right": 1080, "bottom": "2340"},
            "isEnabled": True,
            "children": [
                {"id": "x", "text": None, "isClickable": True, "bounds": None},
                "not-a-node",
            ],
        }
    )
    assert node.bounds.bottom == 2340
    assert node.enabled
    assert len(node.children) == 1
    child = node.children[0]
    assert child.text == ""
    assert child.clickable
    assert child.bounds.is_empty
