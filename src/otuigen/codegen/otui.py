"""Generate OTUI text from widget trees and templates."""

from __future__ import annotations

import logging
import re
from typing import Iterable

from ..config import OTUIConfig
from ..core.node import MARGIN_EDGES, PropertyEntry, TemplateDefinition, WidgetNode, strip_ui_prefix
from ..layout.anchors import infer_anchors
from ..parser.document import COMPOUND_KEYS, normalize_anchor_key


logger = logging.getLogger(__name__)

INDENT = "  "

# Ids the parser assigns to nodes without one (label_1, button_12)
AUTO_ID_RE = re.compile(r"^[a-z]+_\d+$", re.IGNORECASE)
TR_CALL_RE = re.compile(r"^tr\s*\(", re.IGNORECASE)

SIZE_KEYS = ("size", "width", "height")


def format_translation(value: str) -> str:
    """Wrap a value for a '!' (translatable) property in a tr() call.

    'tr(...)' is kept as is, a quoted string becomes tr(<quoted string>)
    and anything else is quoted with single quotes.

    Args:
        value: Raw property value

    Returns:
        The value as a tr() expression ('' for an empty value)
    """
    if not value:
        return ""
    trimmed = value.strip()
    if TR_CALL_RE.match(trimmed):
        return trimmed
    if len(trimmed) >= 2 and trimmed[0] == trimmed[-1] and trimmed[0] in ("'", '"'):
        return f"tr({trimmed})"
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"tr('{escaped}')"


def is_auto_id(widget_id: str) -> bool:
    """Whether an id looks like one the parser generated."""
    return bool(AUTO_ID_RE.match(widget_id))


class OTUICodeGenerator:
    """Writes widget trees back out as OTUI text.

    Output layout: template definitions first, then every root widget, with
    one blank line between top-level blocks. Property lines are replayed in
    the order they were parsed; anchors are taken from the source when the
    node has any and otherwise inferred from its layout. Children a
    template instance inherited from its definition are left out.
    """

    def __init__(self, config: OTUIConfig | None = None) -> None:
        self.config = config or OTUIConfig()

    def generate(
        self, widgets: Iterable[WidgetNode], templates: Iterable[TemplateDefinition] = ()
    ) -> str:
        """Generate OTUI text.

        Args:
            widgets: Root widgets
            templates: Template definitions to emit before the widgets

        Returns:
            OTUI document text ending with a newline
        """
        widgets = list(widgets)
        templates = list(templates)

        blocks: list[list[str]] = []
        emitted_templates: set[str] = set()

        for template in templates:
            if template.name in emitted_templates:
                continue
            emitted_templates.add(template.name)
            blocks.append(self._template_lines(template))

        for template in self._discover_templates(widgets, emitted_templates):
            emitted_templates.add(template.name)
            blocks.append(self._template_lines(template))

        for root in widgets:
            lines = self._node_lines(root, depth=0, is_root=True)
            if lines:
                blocks.append(lines)

        if not blocks:
            return self.default_document()
        return "\n\n".join("\n".join(block) for block in blocks) + "\n"

    def default_document(self) -> str:
        """The starter document used when there is nothing to generate."""
        lines = [
            "MainWindow < UIWindow",
            f"{INDENT}id: {self.config.module_name}",
            f"{INDENT}!text: {format_translation(self.config.module_title)}",
            f"{INDENT}size: {self.config.default_width} {self.config.default_height}",
        ]
        return "\n".join(lines) + "\n"

    def _discover_templates(
        self, widgets: list[WidgetNode], known: set[str]
    ) -> list[TemplateDefinition]:
        """Build definitions for templates referenced by instances only.

        The first instance found (depth-first) supplies the definition; its
        inherited children become the template body.
        """
        discovered: dict[str, TemplateDefinition] = {}
        for root in widgets:
            for node in root.iter_nodes():
                ref = node.template
                if ref is None or ref.name in known or ref.name in discovered:
                    continue
                discovered[ref.name] = TemplateDefinition(
                    name=ref.name,
                    base_type=ref.base_type,
                    resolved_base=ref.base_type,
                    property_list=[entry for entry in node.property_list if entry.key != "id"],
                    properties={k: v for k, v in node.properties.items() if k != "id"},
                    original_keys=dict(node.original_keys),
                    children=[_template_child(child) for child in node.children if child.inherited],
                )
        return list(discovered.values())

    def _template_lines(self, template: TemplateDefinition) -> list[str]:
        lines = [f"{template.name} < {template.base_type}"]
        emitted: set[str] = set()
        if template.property_list:
            self._replay(template.property_list, INDENT, lines, emitted, skip_id=False)
        else:
            self._from_properties(template.properties, template.original_keys, INDENT, lines, emitted)
        for child in template.children:
            lines.extend(self._node_lines(child, depth=1, is_root=False))
        return lines

    def _node_lines(self, node: WidgetNode, depth: int, is_root: bool) -> list[str]:
        if not node.type or not node.id:
            logger.warning(f"Skipping widget without type or id: {node!r}")
            return []

        indent = INDENT * depth
        inner = indent + INDENT
        lines = [indent + self._header(node)]

        if is_root or node.has_events or not is_auto_id(node.id):
            lines.append(f"{inner}id: {node.id}")

        emitted: set[str] = set()
        if node.property_list:
            self._replay(node.property_list, inner, lines, emitted, skip_id=True)
        else:
            properties = {k: v for k, v in node.properties.items() if k != "id"}
            self._from_properties(properties, node.original_keys, inner, lines, emitted)

        if not emitted.intersection(SIZE_KEYS) and node.size_defined is not False:
            width, height = self._size(node)
            lines.append(f"{inner}size: {width} {height}")

        if not is_root:
            self._anchor_lines(node, inner, lines, emitted)

        for child in node.children:
            if child.inherited:
                continue
            lines.extend(self._node_lines(child, depth + 1, is_root=False))
        return lines

    def _header(self, node: WidgetNode) -> str:
        if node.template is not None:
            return node.template.name
        surface = node.display_type
        if node.base_type and strip_ui_prefix(node.base_type) != strip_ui_prefix(surface):
            return f"{surface} < {strip_ui_prefix(node.base_type)}"
        return surface

    def _replay(
        self,
        entries: list[PropertyEntry],
        indent: str,
        lines: list[str],
        emitted: set[str],
        skip_id: bool,
    ) -> None:
        """Emit property lines in their original order."""
        for entry in entries:
            key = entry.key
            stored = key[1:] if key.startswith("!") else key
            if stored.startswith("_") or (skip_id and stored == "id"):
                continue
            if _emitted_key(stored) in emitted:
                continue
            value = format_translation(entry.value) if key.startswith("!") else entry.value
            lines.append(_property_line(indent, key, value))
            _mark_emitted(emitted, stored)

    def _from_properties(
        self,
        properties: dict[str, str],
        original_keys: dict[str, str],
        indent: str,
        lines: list[str],
        emitted: set[str],
    ) -> None:
        """Emit property lines from a flat property map."""
        compound_of = {part: key for key, parts in COMPOUND_KEYS.items() for part in parts}
        for key, value in properties.items():
            if key.startswith("_") or value is None or value == "":
                continue
            if _emitted_key(key) in emitted:
                continue

            compound = compound_of.get(key)
            if compound is not None:
                parts = COMPOUND_KEYS[compound]
                if all(properties.get(part) not in (None, "") for part in parts):
                    combined = " ".join(str(properties[part]) for part in parts)
                    lines.append(_property_line(indent, compound, combined))
                    _mark_emitted(emitted, compound)
                    continue

            written = original_keys.get(key, key)
            value = str(value)
            if written.startswith("!"):
                value = format_translation(value)
            lines.append(_property_line(indent, written, value))
            _mark_emitted(emitted, key)

    def _size(self, node: WidgetNode) -> tuple[str, str]:
        """Size for a node without a size line: layout, properties, then defaults."""
        layout = node.layout
        width = layout.width if layout is not None and layout.width else node.properties.get("width")
        height = layout.height if layout is not None and layout.height else node.properties.get("height")
        return (
            _format_number(width or self.config.default_width),
            _format_number(height or self.config.default_height),
        )

    def _anchor_lines(self, node: WidgetNode, indent: str, lines: list[str], emitted: set[str]) -> None:
        if node.original_anchors is not None or node.original_margins is not None:
            anchors = node.original_anchors or []
            margins = node.original_margins or {}
        else:
            if any(key.startswith("anchors.") for key in emitted):
                return
            result = infer_anchors(node.layout, self.config.center_threshold)
            if result is None:
                return
            anchors = result.directives()
            margins = result.margins

        for key, value in anchors:
            if _emitted_key(key) in emitted:
                continue
            lines.append(_property_line(indent, key, value))
            _mark_emitted(emitted, key)

        for edge in MARGIN_EDGES:
            key = f"margin-{edge}"
            if edge not in margins or key in emitted:
                continue
            lines.append(_property_line(indent, key, str(margins[edge])))
            _mark_emitted(emitted, key)


def generate(
    widgets: Iterable[WidgetNode],
    templates: Iterable[TemplateDefinition] = (),
    config: OTUIConfig | None = None,
) -> str:
    """Generate OTUI text for widgets and templates.

    Args:
        widgets: Root widgets
        templates: Template definitions
        config: Generator settings (default size, module id and title)

    Returns:
        OTUI document text
    """
    return OTUICodeGenerator(config).generate(widgets, templates)


def _emitted_key(key: str) -> str:
    if key.startswith("anchors."):
        return normalize_anchor_key(key)
    return key


def _mark_emitted(emitted: set[str], key: str) -> None:
    emitted.add(_emitted_key(key))
    emitted.update(COMPOUND_KEYS.get(key, ()))


def _property_line(indent: str, key: str, value: str) -> str:
    return f"{indent}{key}: {value}".rstrip()


def _format_number(value: float | str) -> str:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return str(value)
    if number.is_integer():
        return str(int(number))
    return f"{number:g}"


def _template_child(node: WidgetNode) -> WidgetNode:
    child = node.copy()
    child.inherited = False
    return child
