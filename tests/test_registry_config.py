"""Tests for the widget registry and configuration loading."""

import pytest

from otuigen.config import OTUIConfig, load_config, load_config_string
from otuigen.core.registry import WidgetRegistry


CUSTOM_REGISTRY = """\
widgets:
  UIThing:
    category: Controls
    container: true
    props: {text: Hi}
    events: {onPoke: "function(widget)"}
aliases:
  Thingy: UIThing
style_names:
  UIThing: Thing
"""


def test_default_registry():
    registry = WidgetRegistry.default()
    assert "UIButton" in registry
    assert registry.get("UIButton").events == {"onClick": "function()"}
    assert registry.get("UIWindow").is_container
    assert registry.style_names["UILabel"] == ["Label", "GameLabel"]


@pytest.mark.parametrize("name,resolved", [
    ("MainWindow", "UIWindow"),
    ("ScrollablePanel", "UIScrollArea"),
    ("Button", "UIButton"),
    ("UIButton", "UIButton"),
    ("CleanStaticMainWindow", "CleanStaticMainWindow"),
    ("Foo", "UIFoo"),
])
def test_resolve_type(name, resolved):
    assert WidgetRegistry.default().resolve_type(name) == resolved


@pytest.mark.parametrize("name,container,category", [
    ("UIBattlePanel", True, "Layout"),
    ("UIScrollThing", True, "Layout"),
    ("UIGizmo", False, "Display"),
])
def test_ensure_synthesizes_unknown_types(name, container, category):
    registry = WidgetRegistry.default()
    definition = registry.ensure(name)
    assert definition.synthesized
    assert definition.is_container is container
    assert definition.category == category
    assert registry.ensure(name) is definition


def test_register_template_copies_base():
    registry = WidgetRegistry.default()
    definition = registry.register_template("OkButton", "UIButton")
    assert definition.events == {"onClick": "function()"}
    assert definition.category == "Controls"
    assert not definition.synthesized
    assert registry.resolve_type("OkButton") == "OkButton"


def test_copy_is_independent():
    registry = WidgetRegistry.default()
    clone = registry.copy()
    clone.ensure("UINewThing")
    clone.get("UIButton").events["onHover"] = "function()"
    assert "UINewThing" not in registry
    assert "onHover" not in registry.get("UIButton").events


def test_load_custom_registry(tmp_path):
    path = tmp_path / "widgets.yaml"
    path.write_text(CUSTOM_REGISTRY)
    registry = WidgetRegistry.load(path)
    assert len(registry) == 1
    assert registry.resolve_type("Thingy") == "UIThing"
    assert registry.get("UIThing").is_container
    assert registry.style_names == {"UIThing": ["Thing"]}


def test_registry_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        WidgetRegistry.load(tmp_path / "missing.yaml")
    with pytest.raises(ValueError):
        WidgetRegistry.load_string("- just\n- a list\n")
    with pytest.raises(ValueError):
        WidgetRegistry.load_string("widgets:\n  UIThing: 5\n")


def test_config_defaults():
    config = load_config_string("")
    assert config == OTUIConfig()
    assert config.center_threshold == 10.0
    assert (config.default_width, config.default_height) == (400, 300)


def test_config_paths_resolve_against_file(tmp_path):
    path = tmp_path / "otuigen.yaml"
    path.write_text(
        "module_name: hotkeys\n"
        "registry_path: widgets.yaml\n"
        "style_paths: data/styles\n"
        "image_paths: null\n"
    )
    config = load_config(path)
    assert config.module_name == "hotkeys"
    assert config.registry_path == tmp_path / "widgets.yaml"
    assert config.style_paths == [tmp_path / "data" / "styles"]
    assert config.image_paths == []


@pytest.mark.parametrize("text", [
    "colour: red\n",
    "center_threshold: -1\n",
    "default_width: 0\n",
    "[1, 2]\n",
    "center_threshold: wide\n",
    "default_width: big\n",
    "default_height: [1, 2]\n",
])
def test_invalid_config(text):
    with pytest.raises(ValueError):
        load_config_string(text)


def test_missing_config(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_numeric_strings_are_coerced():
    config = load_config_string("center_threshold: '4.5'\ndefault_width: '320'\n")
    assert config.center_threshold == 4.5
    assert config.default_width == 320
