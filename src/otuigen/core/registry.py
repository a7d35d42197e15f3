"""Registry of known widget types loaded from YAML."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_PATH = Path(__file__).parent.parent / "data" / "widgets.yaml"

# Substrings that mark an unknown type as a container
CONTAINER_HINTS = ("Panel", "Window", "Area", "Layout", "Container", "Scroll", "Loot", "Category")


@dataclass
class WidgetDefinition:
    """Definition of a widget type.

    Attributes:
        name: Canonical type name (e.g. UIButton)
        category: Palette category (Layout, Controls, Display, Game UI)
        is_container: Whether the widget can hold children
        props: Default property values
        events: Event name -> Lua handler signature
        synthesized: True when the entry was created for an unknown type
    """

    name: str
    category: str = "Display"
    is_container: bool = False
    props: dict[str, Any] = field(default_factory=dict)
    events: dict[str, str] = field(default_factory=dict)
    synthesized: bool = False


class WidgetRegistry:
    """Known widget types plus the alias and style-name tables.

    YAML format:
    ```yaml
    widgets:
      UIButton:
        category: Controls
        container: false
        props: {text: Click}
        events: {onClick: function()}
    aliases:
      MainWindow: UIWindow
    style_names:
      UIButton: [Button]
    ```
    """

    def __init__(
        self,
        definitions: dict[str, WidgetDefinition] | None = None,
        aliases: dict[str, str] | None = None,
        style_names: dict[str, list[str]] | None = None,
    ) -> None:
        self._definitions: dict[str, WidgetDefinition] = dict(definitions or {})
        self.aliases: dict[str, str] = dict(aliases or {})
        self.style_names: dict[str, list[str]] = {k: list(v) for k, v in (style_names or {}).items()}

    @classmethod
    def default(cls) -> WidgetRegistry:
        """Load the registry shipped with the package."""
        return cls.load(DEFAULT_REGISTRY_PATH)

    @classmethod
    def load(cls, path: str | Path) -> WidgetRegistry:
        """Load a registry from a YAML file.

        Args:
            path: Path to the YAML file

        Returns:
            WidgetRegistry instance

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the YAML structure is invalid
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Widget registry not found: {path}")
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls._from_data(data)

    @classmethod
    def load_string(cls, yaml_string: str) -> WidgetRegistry:
        """Load a registry from a YAML string."""
        return cls._from_data(yaml.safe_load(yaml_string))

    @classmethod
    def _from_data(cls, data: Any) -> WidgetRegistry:
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError("Widget registry must be a mapping")

        definitions = {}
        for name, widget_def in (data.get("widgets") or {}).items():
            widget_def = widget_def or {}
            if not isinstance(widget_def, dict):
                raise ValueError(f"Widget definition for '{name}' must be a mapping")
            definitions[name] = WidgetDefinition(
                name=name,
                category=widget_def.get("category", "Display"),
                is_container=bool(widget_def.get("container", False)),
                props=dict(widget_def.get("props") or {}),
                events={str(k): str(v) for k, v in (widget_def.get("events") or {}).items()},
            )

        style_names = {}
        for type_name, names in (data.get("style_names") or {}).items():
            if isinstance(names, str):
                names = [names]
            style_names[type_name] = [str(n) for n in names]

        return cls(definitions, dict(data.get("aliases") or {}), style_names)

    def __contains__(self, name: str) -> bool:
        return name in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)

    def get(self, name: str) -> WidgetDefinition | None:
        """Get the definition for a type name, or None."""
        return self._definitions.get(name)

    def names(self) -> list[str]:
        """List all registered type names."""
        return list(self._definitions.keys())

    def resolve_type(self, name: str) -> str:
        """Map an OTUI type name to its canonical widget type.

        Lookup order: alias table, direct registry entry, 'UI'-prefixed
        registry entry, and finally the 'UI'-prefixed name itself.

        Args:
            name: Type name as written in OTUI text

        Returns:
            Canonical type name (may not be registered yet)
        """
        if name in self.aliases:
            return self.aliases[name]
        if name in self._definitions:
            return name
        ui_name = name if name.startswith("UI") else f"UI{name}"
        return ui_name

    def ensure(self, name: str) -> WidgetDefinition:
        """Return the definition for a type, synthesizing one if unknown.

        Unknown types are never an error: a minimal definition is created,
        treating names that look like containers (Panel, Window, ...) as
        layout widgets.
        """
        definition = self._definitions.get(name)
        if definition is None:
            is_container = any(hint in name for hint in CONTAINER_HINTS)
            definition = WidgetDefinition(
                name=name,
                category="Layout" if is_container else "Display",
                is_container=is_container,
                synthesized=True,
            )
            self._definitions[name] = definition
            logger.debug(f"Synthesized widget definition for unknown type {name}")
        return definition

    def register_template(self, name: str, base_type: str) -> WidgetDefinition:
        """Register a template name, inheriting its base type's definition."""
        base = self.ensure(base_type)
        definition = WidgetDefinition(
            name=name,
            category=base.category,
            is_container=base.is_container,
            props=dict(base.props),
            events=dict(base.events),
        )
        self._definitions[name] = definition
        return definition

    def copy(self) -> WidgetRegistry:
        """Create an independent copy of the registry."""
        return WidgetRegistry(
            copy.deepcopy(self._definitions),
            dict(self.aliases),
            self.style_names,
        )
