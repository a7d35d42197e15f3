"""Tests for style sheet parsing, inheritance and style lookup."""

import pytest

from otuigen.core.registry import WidgetRegistry
from otuigen.styles import StyleLoader, parse_style_sheet, resolve_inheritance, style_for_widget


BUTTONS = """\
// buttons
Button < UIButton
  color: #dfdfdf
  size: 106 23
  $hover
    color: #ffffff
  $!checked
    image-clip: 0 0 12 12
  $hover !disabled
    opacity: 1
  text-align: center

SmallButton < Button
  size: 40 20
"""


def resolved(text: str):
    """Parse and resolve a style sheet."""
    return resolve_inheritance(parse_style_sheet(text))


def test_parent_properties_are_inherited():
    styles = resolved("A\n  color: red\nB < A\n  background: blue\n")
    assert styles["B"].resolved == {"color": "red", "background": "blue"}
    assert styles["B"].parent == "A"
    assert styles["A"].parent is None


def test_state_overlays_resolved_properties():
    styles = resolved("A\n  size: 10 10\n  $checked\n    color: green\n")
    assert styles["A"].resolved_states["checked"] == {"size": "10 10", "color": "green"}


def test_state_block_closes_on_dedent():
    """A property at the state's own indentation belongs to the style again."""
    styles = parse_style_sheet(BUTTONS)
    button = styles["Button"]
    assert button.properties == {"color": "#dfdfdf", "size": "106 23", "text-align": "center"}
    assert button.states == {
        "hover": {"color": "#ffffff"},
        "!checked": {"image-clip": "0 0 12 12"},
        "hover !disabled": {"opacity": "1"},
    }


MINI_WINDOW = """\
MiniWindow < UIWindow
  color: white
  size: 192 200
  Label
    id: miniwindowTitle
    color: red
    text-offset: 24 5
  UIButton
    id: closeButton
    size: 14 14
    image-source: /images/ui/miniwindow_buttons
    $hover
      image-clip: 28 0 14 14
  $on
    height: 24
  text-align: left
"""


def test_child_widget_blocks_are_skipped():
    style = resolved(MINI_WINDOW)["MiniWindow"]
    assert style.resolved == {"color": "white", "size": "192 200", "text-align": "left"}
    assert style.states == {"on": {"height": "24"}}


def test_lines_split_only_on_newlines():
    styles = parse_style_sheet("A\r\n  text: one\x0ctwo\r\n  color: red\r\n")
    assert styles["A"].properties == {"text": "one\x0ctwo", "color": "red"}


def test_chain_resolution_with_states():
    styles = resolved(BUTTONS)
    small = styles["SmallButton"]
    assert small.resolved["color"] == "#dfdfdf"
    assert small.resolved["size"] == "40 20"
    assert small.states == {}
    assert styles["Button"].get("color", state="hover") == "#ffffff"
    assert styles["Button"].get("size", state="hover") == "106 23"


def test_later_lines_overwrite_earlier():
    styles = parse_style_sheet("A\n  color: red\n  color blue\n")
    assert styles["A"].properties["color"] == "blue"


def test_bare_boolean_never_overwrites():
    styles = parse_style_sheet("A\n  focusable: false\n  focusable\n  phantom\n")
    assert styles["A"].properties == {"focusable": "false", "phantom": "true"}


def test_quotes_are_stripped():
    styles = parse_style_sheet("A\n  font: \"verdana-11px\"\n  !text: 'Ok'\n")
    assert styles["A"].properties == {"font": "verdana-11px", "!text": "Ok"}


def test_cycles_do_not_recurse_forever():
    styles = resolved("A < B\n  a: 1\nB < A\n  b: 2\n")
    assert styles["A"].resolved["a"] == "1"
    assert styles["B"].resolved["b"] == "2"


def test_missing_parent_contributes_nothing():
    styles = resolved("C < Missing\n  c: 3\n")
    assert styles["C"].resolved == {"c": "3"}


def test_resolution_is_idempotent_and_pure():
    parsed = parse_style_sheet(BUTTONS)
    once = resolve_inheritance(parsed)
    twice = resolve_inheritance(once)
    assert once == twice
    assert all(entry.resolved is None for entry in parsed.values())


@pytest.mark.parametrize("widget_type,expected", [
    ("UILabel", "GameLabel"),
    ("UIButton", "Button"),
    ("UIGizmo", "Gizmo"),
    ("UICheckBox", None),
])
def test_style_for_widget(widget_type, expected):
    styles = resolved("GameLabel\n  color: white\nButton\n  color: grey\nGizmo\n  color: red\n")
    entry = style_for_widget(styles, widget_type, WidgetRegistry.default())
    if expected is None:
        assert entry is None
    else:
        assert entry.name == expected


def test_style_for_widget_resolves_on_demand():
    styles = parse_style_sheet("Panel\n  color: red\nWindow < Panel\n  size: 10 10\n")
    entry = style_for_widget(styles, "UIWindow", WidgetRegistry.default())
    assert entry.resolved == {"color": "red", "size": "10 10"}


def test_loader_finds_sheets_by_name(tmp_path):
    (tmp_path / "buttons.otui").write_text(BUTTONS)
    loader = StyleLoader([tmp_path])

    styles = loader.load("buttons")
    assert set(styles) == {"Button", "SmallButton"}
    assert loader.load("buttons.otui") is styles

    with pytest.raises(FileNotFoundError):
        loader.load("missing")


def test_loader_resolves_across_files(tmp_path):
    (tmp_path / "10-base.otui").write_text("Base\n  color: red\n")
    nested = tmp_path / "widgets"
    nested.mkdir()
    (nested / "20-child.otui").write_text("Child < Base\n  size: 10 10\n")

    styles = StyleLoader([tmp_path]).load_all()
    assert styles["Child"].resolved == {"color": "red", "size": "10 10"}


def test_loader_rejects_binary_files(tmp_path):
    path = tmp_path / "broken.otui"
    path.write_bytes(b"\xff\xfe\x00bad")
    with pytest.raises(ValueError):
        StyleLoader([tmp_path]).load_file(path)
