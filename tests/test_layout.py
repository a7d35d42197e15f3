"""Tests for the anchor layout engine."""

import pytest

from otuigen.config import OTUIConfig
from otuigen.layout import compute_layout, infer_anchors
from otuigen.layout.engine import parse_padding
from otuigen.parser import parse_document


DIALOG = """\
MainWindow
  id: main
  size: 300 200
  padding: 10
  Button
    id: ok
    size: 80 20
    anchors.right: parent.right
    anchors.bottom: parent.bottom
    margin-right: 5
  Button
    id: cancel
    size: 80 20
    anchors.right: prev.left
    anchors.top: prev.top
    margin-right: 4
  Label
    id: title
    size: 100 20
    anchors.centerIn: parent
"""


def laid_out(text: str, **kwargs):
    """Parse a document and lay out its widgets."""
    widgets, _ = parse_document(text)
    return compute_layout(widgets, **kwargs)


def rect(node):
    layout = node.layout
    return (layout.left, layout.top, layout.width, layout.height)


def test_dialog_layout():
    root = laid_out(DIALOG)[0]
    ok, cancel, title = root.children

    assert rect(root) == (0, 0, 300, 200)
    assert rect(ok) == (205, 170, 80, 20)
    assert rect(cancel) == (121, 170, 80, 20)
    assert rect(title) == (100, 90, 100, 20)

    assert ok.layout.parent_width == 300
    assert ok.layout.parent_padding_left == 10
    assert ok.layout.parent_padding_bottom == 10


def test_inference_recovers_anchors_from_layout():
    ok = laid_out(DIALOG)[0].children[0]
    result = infer_anchors(ok.layout)
    assert result.anchors == ["right", "bottom"]
    assert result.margins == {"right": 5}


def test_input_is_not_modified():
    widgets, _ = parse_document(DIALOG)
    compute_layout(widgets)
    assert widgets[0].layout is None
    assert widgets[0].children[0].layout is None


def test_roots_use_origin_and_default_size():
    roots = laid_out("Panel\n  Label\n", origin=(5, 7), config=OTUIConfig(default_width=320, default_height=240))
    assert rect(roots[0]) == (5, 7, 320, 240)
    assert rect(roots[0].children[0]) == (0, 0, 100, 100)


def test_fill_sizes_to_hooked_rect():
    root = laid_out(
        "Panel\n  size: 200 100\n  Panel\n    anchors.fill: parent\n    margin-left: 5\n    margin-bottom: 10\n"
    )[0]
    assert rect(root.children[0]) == (5, 0, 195, 90)


def test_sibling_hook_is_laid_out_first():
    """A widget can anchor to a sibling declared after it."""
    root = laid_out(
        "Panel\n"
        "  size: 200 100\n"
        "  Label\n"
        "    id: a\n"
        "    size: 20 10\n"
        "    anchors.left: b.right\n"
        "  Label\n"
        "    id: b\n"
        "    size: 30 10\n"
        "    anchors.left: parent.left\n"
        "    margin-left: 10\n"
    )[0]
    a, b = root.children
    assert a.layout.left == 40
    assert b.layout.left == 10


def test_anchor_cycles_are_broken(caplog):
    root = laid_out(
        "Panel\n"
        "  size: 200 100\n"
        "  Label\n"
        "    id: a\n"
        "    anchors.left: b.right\n"
        "  Label\n"
        "    id: b\n"
        "    anchors.left: a.right\n"
    )[0]
    assert all(child.layout.left >= 0 for child in root.children)
    assert "recursively anchored" in caplog.text


def test_invalid_anchors_are_skipped(caplog):
    root = laid_out(
        "Panel\n"
        "  size: 200 100\n"
        "  Label\n"
        "    size: 20 20\n"
        "    anchors.left: nowhere.left\n"
        "    anchors.top: parent\n"
        "    anchors.right: parent.middle\n"
        "    anchors.bottom: none\n"
    )[0]
    assert rect(root.children[0]) == (0, 0, 20, 20)
    assert "Unknown anchor hook" in caplog.text
    assert "Invalid anchor" in caplog.text
    assert "Invalid hooked edge" in caplog.text


def test_positions_are_clamped_at_zero():
    root = laid_out("Panel\n  size: 200 100\n  Label\n    size: 20 20\n    anchors.right: parent.left\n")[0]
    assert root.children[0].layout.left == 0


def test_nested_children_are_relative_to_their_parent():
    root = laid_out(
        "Panel\n"
        "  size: 200 200\n"
        "  Panel\n"
        "    size: 100 100\n"
        "    anchors.right: parent.right\n"
        "    Label\n"
        "      size: 10 10\n"
        "      anchors.bottom: parent.bottom\n"
    )[0]
    inner = root.children[0]
    assert rect(inner) == (100, 0, 100, 100)
    assert rect(inner.children[0]) == (0, 90, 10, 10)
    assert inner.children[0].layout.parent_width == 100


@pytest.mark.parametrize("properties,expected", [
    ({}, (0, 0, 0, 0)),
    ({"padding": "4"}, (4, 4, 4, 4)),
    ({"padding": "4 8"}, (8, 4, 8, 4)),
    ({"padding": "1 2 3"}, (2, 1, 2, 3)),
    ({"padding": "1 2 3 4"}, (4, 1, 2, 3)),
    ({"padding": "4", "padding-left": "9"}, (9, 4, 4, 4)),
])
def test_parse_padding(properties, expected):
    padding = parse_padding(properties)
    assert (padding["left"], padding["top"], padding["right"], padding["bottom"]) == expected
