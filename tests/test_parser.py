"""Tests for the OTUI document parser."""

import pytest

from otuigen.core.node import TemplateRef
from otuigen.core.registry import WidgetRegistry
from otuigen.parser import DocumentParser, parse_document


WINDOW = """\
MainWindow
  id: main
  size: 200 100
  // a comment
  Label
    id: title
    !text: tr('Hello')
  # another comment

  Panel
    Button
      id: ok
      @onClick: modules.main.ok()
"""

TEMPLATES = """\
HotkeyLabel < UILabel
  color: #ffffff
  Label
    id: inner

MainWindow
  id: main
  HotkeyLabel
    id: first
"""


def parse_one(text: str):
    """Parse a document and return its only root widget."""
    widgets, _ = parse_document(text)
    assert len(widgets) == 1
    return widgets[0]


def test_nesting_follows_indentation():
    """Children attach to the nearest shallower open widget."""
    root = parse_one(WINDOW)
    assert root.type == "UIWindow"
    assert root.surface_type == "MainWindow"
    assert [child.id for child in root.children] == ["title", "panel_1"]

    panel = root.children[1]
    assert panel.type == "UIPanel"
    assert [child.id for child in panel.children] == ["ok"]
    assert panel.children[0].has_events


def test_size_expands_to_width_and_height():
    """'size W H' stores width and height and marks the size as defined."""
    root = parse_one(WINDOW)
    assert root.properties["width"] == "200"
    assert root.properties["height"] == "100"
    assert root.size_defined is True
    assert root.children[0].size_defined is False
    assert [entry.key for entry in root.property_list] == ["id", "size"]


def test_translatable_key_is_stored_without_marker():
    """'!text' is stored as 'text' and remembers how it was written."""
    title = parse_one(WINDOW).children[0]
    assert title.properties["text"] == "tr('Hello')"
    assert title.original_keys == {"text": "!text"}
    assert title.property_list[1].key == "!text"
    assert title.property_list[1].line == 7


def test_first_write_wins():
    """A repeated key on the same node is ignored entirely."""
    label = parse_one("Label\n  color: red\n  color: blue\n")
    assert label.properties["color"] == "red"
    assert len(label.property_list) == 1


def test_compound_key_ignored_when_parts_exist():
    label = parse_one("Label\n  width: 10\n  size: 20 30\n")
    assert label.properties == {"width": "10"}
    assert label.size_defined is False


@pytest.mark.parametrize("line,key,value,raw", [
    ('text: "Hello"', "text", "Hello", '"Hello"'),
    ("text: 'Hi there'", "text", "Hi there", "'Hi there'"),
    ("text: it's", "text", "it's", "it's"),
    ("color #ff0000", "color", "#ff0000", "#ff0000"),
    ("focusable", "focusable", "true", "true"),
    ("@onClick: doIt()", "@onClick", "doIt()", "doIt()"),
])
def test_property_forms(line, key, value, raw):
    """Colon, space and bare-boolean property lines."""
    widget = parse_one(f"Button\n  {line}\n")
    assert widget.properties[key] == value
    assert widget.property_list[0].key == key
    assert widget.property_list[0].value == raw


def test_text_offset_space_form():
    label = parse_one("Label\n  text-offset 2 3\n")
    assert label.properties["text-offset-x"] == "2"
    assert label.properties["text-offset-y"] == "3"
    assert label.property_list[0].key == "text-offset"


def test_bare_word_at_top_level_is_ignored():
    widgets, _ = parse_document("focusable\nButton\n")
    assert len(widgets) == 1
    assert widgets[0].properties == {}


def test_anchors_and_margins_are_collected():
    """Anchor keys are normalized; non-numeric margins stay out of the originals."""
    button = parse_one(
        "Button\n"
        "  anchors.center-in: parent\n"
        "  anchors.horizontal-center: parent.horizontalCenter\n"
        "  margin-left: 5\n"
        "  margin-top: abc\n"
        "  margin-right: 5px\n"
    )
    assert button.original_anchors == [
        ("anchors.centerIn", "parent"),
        ("anchors.horizontalCenter", "parent.horizontalCenter"),
    ]
    assert button.original_margins == {"left": 5}
    assert button.properties["margin-right"] == "5px"
    assert button.properties["anchors.center-in"] == "parent"


def test_no_anchors_leaves_originals_unset():
    button = parse_one("Button\n  text: Ok\n")
    assert button.original_anchors is None
    assert button.original_margins is None


def test_auto_ids_count_per_type():
    root = parse_one("Panel\n  Label\n  Label\n  Button\n")
    assert root.id == "panel_1"
    assert [child.id for child in root.children] == ["label_1", "label_2", "button_1"]


def test_odd_indentation_rounds_down():
    """Three spaces is level 1, same as two."""
    root = parse_one("Panel\n   Label\n  Button\n")
    assert [child.surface_type for child in root.children] == ["Label", "Button"]


def test_templates_are_parsed_separately():
    widgets, templates = parse_document(TEMPLATES)
    assert len(templates) == 1
    template = templates[0]
    assert template.name == "HotkeyLabel"
    assert template.base_type == "UILabel"
    assert template.resolved_base == "UILabel"
    assert template.properties == {"color": "#ffffff"}
    assert [child.id for child in template.children] == ["inner"]

    instance = widgets[0].children[0]
    assert instance.template == TemplateRef("HotkeyLabel", "UILabel")
    assert instance.base_type == "UILabel"
    assert instance.children == []


def test_forward_template_reference():
    """Instances before the template definition are flagged too."""
    widgets, templates = parse_document("Row\n  id: r\n\nRow < FlatPanel\n  height: 20\n")
    assert widgets[0].template == TemplateRef("Row", "UIPanel")
    assert templates[0].base_type == "FlatPanel"


def test_parser_does_not_mutate_registry():
    registry = WidgetRegistry.default()
    parser = DocumentParser(registry)
    parser.parse(TEMPLATES + "FancyPanel\n")
    assert "HotkeyLabel" not in registry
    assert "HotkeyLabel" in parser.registry
    assert "UIFancyPanel" not in registry


@pytest.mark.parametrize("written,resolved,container", [
    ("VerticalScrollBar", "UIScrollBar", False),
    ("MainWindow", "UIWindow", True),
    ("Button", "UIButton", False),
    ("UIButton", "UIButton", False),
    ("FancyPanel", "UIFancyPanel", True),
    ("LootCategory", "UILootCategory", True),
    ("Gizmo", "UIGizmo", False),
])
def test_type_resolution(written, resolved, container):
    parser = DocumentParser()
    widgets, _ = parser.parse(f"{written}\n")
    assert widgets[0].type == resolved
    assert parser.registry.get(resolved).is_container is container


def test_rejects_non_text():
    with pytest.raises(TypeError):
        parse_document(b"MainWindow\n")


def test_lines_split_only_on_newlines():
    button = parse_one("Button\r\n  text: a\x0bb\u2028c\r\n  color: red\r\n")
    assert button.properties == {"text": "a\x0bb\u2028c", "color": "red"}
