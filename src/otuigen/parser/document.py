"""Parser for OTUI documents (widget trees and inline templates)."""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from dataclasses import dataclass

from ..core.node import PropertyEntry, TemplateDefinition, TemplateRef, WidgetNode
from ..core.registry import WidgetRegistry


logger = logging.getLogger(__name__)

INDENT_UNIT = 2

WIDGET_RE = re.compile(r"^([A-Z][a-zA-Z0-9_]*)(?:\s*<\s*([A-Za-z][A-Za-z0-9_]*))?$")
PROP_COLON_RE = re.compile(r"^([!@a-zA-Z.-]+):\s*(.*)$")
PROP_SPACE_RE = re.compile(r"^([@a-zA-Z.-]+)\s+(.+)$")
PROP_BOOL_RE = re.compile(r"^([a-z-]+)$")

# Keys whose value expands into several stored properties
COMPOUND_KEYS = {
    "size": ("width", "height"),
    "text-offset": ("text-offset-x", "text-offset-y"),
}

ANCHOR_KEY_ALIASES = {
    "centerin": "centerIn",
    "center-in": "centerIn",
    "horizontalcenter": "horizontalCenter",
    "horizontal-center": "horizontalCenter",
    "verticalcenter": "verticalCenter",
    "vertical-center": "verticalCenter",
}


@dataclass
class _Frame:
    """An open node on the indentation stack."""

    target: WidgetNode | TemplateDefinition
    level: int


def strip_quotes(value: str) -> str:
    """Strip exactly one pair of matching surrounding quotes."""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def normalize_anchor_key(key: str) -> str:
    """Normalize spelling variants of an anchors.* key (center-in -> centerIn)."""
    edge = key[len("anchors."):]
    return "anchors." + ANCHOR_KEY_ALIASES.get(edge.lower(), edge)


class DocumentParser:
    """Parses OTUI text into widget trees and template definitions.

    Nesting is decided purely by indentation: the parser keeps a stack of
    open nodes and, before each structural line, pops every node whose level
    is at or below the line's level. The top of the stack is the parent.

    Document format:
        HotkeyLabel < UILabel           # template definition
          color: #ffffff

        MainWindow                      # widget
          id: hotkeys
          !text: tr('Hotkeys')
          size 200 100
          HotkeyLabel                   # template instance
            anchors.top: parent.top
    """

    def __init__(self, registry: WidgetRegistry | None = None) -> None:
        """Initialize the parser.

        Args:
            registry: Known widget types. The parser works on a private copy,
                      available as ``self.registry`` after parsing.
        """
        self._base_registry = registry if registry is not None else WidgetRegistry.default()
        self.registry = self._base_registry.copy()

    def parse(self, text: str) -> tuple[list[WidgetNode], list[TemplateDefinition]]:
        """Parse an OTUI document.

        Args:
            text: OTUI source text

        Returns:
            Tuple of (root widgets, template definitions), both in source order

        Raises:
            TypeError: If text is not a string
        """
        if not isinstance(text, str):
            raise TypeError(f"OTUI source must be text, not {type(text).__name__}")

        self.registry = self._base_registry.copy()
        self._id_counters: dict[str, int] = defaultdict(int)

        widgets: list[WidgetNode] = []
        templates: list[TemplateDefinition] = []
        stack: list[_Frame] = []

        for line_number, line in enumerate(text.split("\n"), start=1):
            line = line.rstrip("\r")
            stripped = line.strip()
            if not stripped or stripped.startswith("//") or stripped.startswith("#"):
                continue

            indent = len(line) - len(line.lstrip())
            level = indent // INDENT_UNIT

            while stack and stack[-1].level >= level:
                stack.pop()

            widget_match = WIDGET_RE.match(stripped)
            if widget_match:
                type_name, parent_name = widget_match.groups()
                if parent_name:
                    template = self._open_template(type_name, parent_name)
                    templates.append(template)
                    stack.append(_Frame(template, level))
                else:
                    node = self._open_widget(type_name)
                    if level > 0 and stack:
                        stack[-1].target.add_child(node)
                    else:
                        widgets.append(node)
                    stack.append(_Frame(node, level))
                continue

            if not stack:
                continue
            self._parse_property(stack[-1].target, stripped, indent, line_number)

        self._finish(widgets, templates)
        return widgets, templates

    def _open_template(self, name: str, parent_name: str) -> TemplateDefinition:
        """Create a template definition and register its name as a type."""
        resolved_base = self.registry.resolve_type(parent_name)
        self.registry.ensure(resolved_base)
        self.registry.register_template(name, resolved_base)
        return TemplateDefinition(name=name, base_type=parent_name, resolved_base=resolved_base)

    def _open_widget(self, type_name: str) -> WidgetNode:
        """Create a widget node for a type line without inheritance."""
        resolved = self.registry.resolve_type(type_name)
        self.registry.ensure(resolved)
        return WidgetNode(type=resolved, surface_type=type_name, size_defined=False)

    def _parse_property(
        self, target: WidgetNode | TemplateDefinition, stripped: str, indent: int, line_number: int
    ) -> None:
        """Parse one property line into the current node."""
        match = PROP_COLON_RE.match(stripped)
        if match:
            key, raw_value = match.group(1), match.group(2).strip()
            self._store(target, key, strip_quotes(raw_value), raw_value, line_number)
            return

        match = PROP_SPACE_RE.match(stripped)
        if match:
            key, raw_value = match.group(1), match.group(2).strip()
            self._store(target, key, raw_value, raw_value, line_number)
            return

        match = PROP_BOOL_RE.match(stripped)
        if match and indent > 0:
            self._store(target, match.group(1), "true", "true", line_number)

    def _store(
        self,
        target: WidgetNode | TemplateDefinition,
        key: str,
        value: str,
        raw_value: str,
        line_number: int,
    ) -> None:
        """Store a property, keeping the first occurrence of every key."""
        properties = target.properties

        if key in COMPOUND_KEYS:
            parts = value.split()
            expanded = COMPOUND_KEYS[key]
            if any(k in properties for k in expanded):
                return
            if len(parts) >= 2:
                properties[expanded[0]] = parts[0]
                properties[expanded[1]] = parts[1]
                if key == "size" and isinstance(target, WidgetNode):
                    target.size_defined = True
            target.property_list.append(PropertyEntry(key, raw_value, line_number))
            return

        stored_key = key[1:] if key.startswith("!") else key
        if not stored_key or stored_key in properties:
            return

        properties[stored_key] = value
        if key.startswith("!"):
            target.original_keys[stored_key] = key
        target.property_list.append(PropertyEntry(key, raw_value, line_number))

        if not isinstance(target, WidgetNode):
            return
        if key == "id":
            target.id = value
        elif key.startswith("anchors."):
            if target.original_anchors is None:
                target.original_anchors = []
            target.original_anchors.append((normalize_anchor_key(key), value))
        elif key.startswith("margin-"):
            margin = _parse_int(value)
            if margin is None:
                logger.debug(f"Line {line_number}: ignoring non-numeric margin {key}: {value}")
                return
            if target.original_margins is None:
                target.original_margins = {}
            target.original_margins[key[len("margin-"):]] = margin

    def _finish(self, widgets: list[WidgetNode], templates: list[TemplateDefinition]) -> None:
        """Assign missing ids and flag template instances."""
        template_map: dict[str, TemplateDefinition] = {}
        for template in templates:
            template_map.setdefault(template.name, template)

        roots = list(widgets)
        for template in templates:
            roots.extend(template.children)

        for root in roots:
            for node in root.iter_nodes():
                if node.id is None:
                    node.id = self._auto_id(node.surface_type or node.type)
                template = template_map.get(node.surface_type or "")
                if template is not None:
                    node.template = TemplateRef(template.name, template.resolved_base or template.base_type)
                    node.base_type = node.template.base_type

    def _auto_id(self, type_name: str) -> str:
        """Generate an id of the form <type>_<n> for nodes without one."""
        prefix = re.sub(r"[^a-z]", "", type_name.lower()) or "widget"
        self._id_counters[prefix] += 1
        return f"{prefix}_{self._id_counters[prefix]}"


def parse_document(
    text: str, registry: WidgetRegistry | None = None
) -> tuple[list[WidgetNode], list[TemplateDefinition]]:
    """Parse OTUI text into (widgets, templates).

    Args:
        text: OTUI source text
        registry: Known widget types (defaults to the packaged registry)

    Returns:
        Tuple of (root widgets, template definitions)
    """
    return DocumentParser(registry).parse(text)


def _parse_int(value: str) -> int | None:
    try:
        return int(float(value))
    except (ValueError, OverflowError):
        return None
