"""WidgetNode and TemplateDefinition classes for the OTUI widget tree."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, fields
from typing import Any, Iterator


MARGIN_EDGES = ("left", "top", "right", "bottom")


@dataclass
class PropertyEntry:
    """A single property line in the order it was written.

    Attributes:
        key: Key as written, including a leading '!' or '@' marker
        value: Raw value text as written (quotes are not stripped)
        line: 1-based source line number, 0 when the entry was not parsed
    """

    key: str
    value: str
    line: int = 0


@dataclass
class LayoutSnapshot:
    """Absolute layout of a widget inside its parent.

    Positions are relative to the parent's padding box (the parent's outer
    top-left corner), sizes are in pixels. A root widget has a zero-sized
    parent box.
    """

    left: float = 0.0
    top: float = 0.0
    width: float = 0.0
    height: float = 0.0
    parent_width: float = 0.0
    parent_height: float = 0.0
    parent_padding_left: float = 0.0
    parent_padding_top: float = 0.0
    parent_padding_right: float = 0.0
    parent_padding_bottom: float = 0.0

    @property
    def content_width(self) -> float:
        """Width of the parent's content box (never negative)."""
        return max(0.0, self.parent_width - self.parent_padding_left - self.parent_padding_right)

    @property
    def content_height(self) -> float:
        """Height of the parent's content box (never negative)."""
        return max(0.0, self.parent_height - self.parent_padding_top - self.parent_padding_bottom)


@dataclass
class TemplateRef:
    """Marks a widget as an instance of a named template."""

    name: str
    base_type: str


@dataclass
class WidgetNode:
    """A node in the widget tree.

    Each node keeps both the flat property map used for layout and styling,
    and the ordered list of property lines it was parsed from so that code
    generation can reproduce the source faithfully. ``inherited`` marks
    children copied in from a template definition; they are never written
    back out under the instance.

    Example:
        window = WidgetNode("UIWindow", surface_type="MainWindow", id="main")
        window.add_child(WidgetNode("UIButton", surface_type="Button", id="ok"))
    """

    type: str
    surface_type: str | None = None
    base_type: str | None = None
    id: str | None = None
    property_list: list[PropertyEntry] = field(default_factory=list)
    properties: dict[str, str] = field(default_factory=dict)
    original_keys: dict[str, str] = field(default_factory=dict)
    children: list[WidgetNode] = field(default_factory=list)
    template: TemplateRef | None = None
    layout: LayoutSnapshot | None = None
    original_anchors: list[tuple[str, str]] | None = None
    original_margins: dict[str, int] | None = None
    size_defined: bool | None = None
    inherited: bool = False

    def add_child(self, node: WidgetNode) -> WidgetNode:
        """Add a child node.

        Args:
            node: The node to add as a child

        Returns:
            The added node (for chaining)
        """
        self.children.append(node)
        return node

    @property
    def display_type(self) -> str:
        """Type name as it should appear in OTUI text."""
        if self.surface_type:
            return self.surface_type
        return strip_ui_prefix(self.type)

    @property
    def has_events(self) -> bool:
        """Whether the node carries any '@' event binding."""
        if any(key.startswith("@") for key in self.properties):
            return True
        return any(entry.key.startswith("@") for entry in self.property_list)

    def iter_nodes(self, include_self: bool = True) -> Iterator[WidgetNode]:
        """Iterate over this node and all descendants (depth-first).

        Args:
            include_self: Whether to include this node in the iteration

        Yields:
            WidgetNode instances
        """
        if include_self:
            yield self
        for child in self.children:
            yield from child.iter_nodes(include_self=True)

    def find(self, widget_id: str) -> WidgetNode | None:
        """Find a descendant node by id.

        Args:
            widget_id: The id to search for

        Returns:
            The first matching node, or None
        """
        for node in self.iter_nodes():
            if node.id == widget_id:
                return node
        return None

    def copy(self, deep: bool = True) -> WidgetNode:
        """Create a copy of this node.

        Args:
            deep: If True, recursively copy children

        Returns:
            New WidgetNode with copied data
        """
        new_node = copy.copy(self)
        new_node.property_list = [copy.copy(entry) for entry in self.property_list]
        new_node.properties = dict(self.properties)
        new_node.original_keys = dict(self.original_keys)
        new_node.template = copy.copy(self.template)
        new_node.layout = copy.copy(self.layout)
        if self.original_anchors is not None:
            new_node.original_anchors = list(self.original_anchors)
        if self.original_margins is not None:
            new_node.original_margins = dict(self.original_margins)
        new_node.children = [child.copy(deep=True) for child in self.children] if deep else []
        return new_node

    def to_dict(self) -> dict[str, Any]:
        """Convert the node (and its children) to plain data."""
        data: dict[str, Any] = {
            "type": self.type,
            "surface_type": self.surface_type,
            "base_type": self.base_type,
            "id": self.id,
            "property_list": [_entry_to_dict(entry) for entry in self.property_list],
            "properties": dict(self.properties),
            "original_keys": dict(self.original_keys),
            "children": [child.to_dict() for child in self.children],
            "template": None,
            "layout": None,
            "original_anchors": None,
            "original_margins": None,
            "size_defined": self.size_defined,
            "inherited": self.inherited,
        }
        if self.template is not None:
            data["template"] = {"name": self.template.name, "base_type": self.template.base_type}
        if self.layout is not None:
            data["layout"] = {f.name: getattr(self.layout, f.name) for f in fields(self.layout)}
        if self.original_anchors is not None:
            data["original_anchors"] = [[key, value] for key, value in self.original_anchors]
        if self.original_margins is not None:
            data["original_margins"] = dict(self.original_margins)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WidgetNode:
        """Build a node tree from plain data produced by to_dict()."""
        template = data.get("template")
        layout = data.get("layout")
        anchors = data.get("original_anchors")
        margins = data.get("original_margins")
        return cls(
            type=data["type"],
            surface_type=data.get("surface_type"),
            base_type=data.get("base_type"),
            id=data.get("id"),
            property_list=[_entry_from_dict(entry) for entry in data.get("property_list", [])],
            properties=dict(data.get("properties", {})),
            original_keys=dict(data.get("original_keys", {})),
            children=[cls.from_dict(child) for child in data.get("children", [])],
            template=TemplateRef(**template) if template else None,
            layout=LayoutSnapshot(**layout) if layout else None,
            original_anchors=[(key, value) for key, value in anchors] if anchors is not None else None,
            original_margins={edge: int(v) for edge, v in margins.items()} if margins is not None else None,
            size_defined=data.get("size_defined"),
            inherited=bool(data.get("inherited", False)),
        )

    def __repr__(self) -> str:
        id_str = f", id={self.id!r}" if self.id else ""
        children_str = f", children={len(self.children)}" if self.children else ""
        return f"WidgetNode({self.display_type!r}{id_str}{children_str})"


@dataclass
class TemplateDefinition:
    """A named, reusable widget definition (``Name < Base``).

    Attributes:
        name: Template name, used by instances as their type
        base_type: Base type exactly as declared after '<'
        resolved_base: Canonical type the declared base resolves to
        property_list: Ordered property lines of the template body
        properties: Property map derived from property_list
        original_keys: Stored key -> key as written (for '!' keys)
        children: Child widgets of the template body
    """

    name: str
    base_type: str
    resolved_base: str | None = None
    property_list: list[PropertyEntry] = field(default_factory=list)
    properties: dict[str, str] = field(default_factory=dict)
    original_keys: dict[str, str] = field(default_factory=dict)
    children: list[WidgetNode] = field(default_factory=list)

    def add_child(self, node: WidgetNode) -> WidgetNode:
        """Add a child widget to the template body."""
        self.children.append(node)
        return node

    def to_dict(self) -> dict[str, Any]:
        """Convert the template to plain data."""
        return {
            "name": self.name,
            "base_type": self.base_type,
            "resolved_base": self.resolved_base,
            "property_list": [_entry_to_dict(entry) for entry in self.property_list],
            "properties": dict(self.properties),
            "original_keys": dict(self.original_keys),
            "children": [child.to_dict() for child in self.children],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TemplateDefinition:
        """Build a template from plain data produced by to_dict()."""
        return cls(
            name=data["name"],
            base_type=data["base_type"],
            resolved_base=data.get("resolved_base"),
            property_list=[_entry_from_dict(entry) for entry in data.get("property_list", [])],
            properties=dict(data.get("properties", {})),
            original_keys=dict(data.get("original_keys", {})),
            children=[WidgetNode.from_dict(child) for child in data.get("children", [])],
        )


def strip_ui_prefix(type_name: str) -> str:
    """Remove the 'UI' prefix from a widget type (UIButton -> Button)."""
    if type_name.startswith("UI") and len(type_name) > 2:
        return type_name[2:]
    return type_name


def _entry_to_dict(entry: PropertyEntry) -> dict[str, Any]:
    return {"key": entry.key, "value": entry.value, "line": entry.line}


def _entry_from_dict(data: dict[str, Any]) -> PropertyEntry:
    return PropertyEntry(key=data["key"], value=data["value"], line=int(data.get("line", 0)))
