"""Generate the Lua module and .otmod descriptor that load an OTUI file."""

from __future__ import annotations

import re
from dataclasses import dataclass

from ..core.node import WidgetNode
from ..core.registry import WidgetDefinition, WidgetRegistry


LUA_IDENTIFIER_INVALID = re.compile(r"[^a-zA-Z0-9_]")


def sanitize_lua_identifier(name: str | None) -> str:
    """Turn a widget id into a valid Lua identifier (ok-button -> ok_button)."""
    if not name:
        return "widget"
    sanitized = LUA_IDENTIFIER_INVALID.sub("_", name)
    if sanitized[0].isdigit():
        sanitized = "_" + sanitized
    return sanitized


def signature_params(signature: str) -> list[str]:
    """Parameter names of an event signature ('function(widget, text)' -> [widget, text])."""
    match = re.search(r"\(([^)]*)\)", signature)
    inner = match.group(1) if match else ""
    return [param.strip() for param in inner.split(",") if param.strip()]


@dataclass
class _WidgetRef:
    var: str
    lookup_id: str
    type: str
    events: dict[str, str]
    is_root: bool


def generate_lua(
    widgets: list[WidgetNode],
    registry: WidgetRegistry,
    module_name: str = "main",
    module_title: str = "My Module",
) -> str:
    """Generate a Lua module controlling the widgets of an OTUI file.

    The first root widget is loaded with g_ui.loadUI in init(); every widget
    whose type has events gets a local reference, a handler stub per event,
    and is connected in init() and disconnected in terminate().

    Args:
        widgets: Root widgets of the OTUI document
        registry: Registry used to look up each widget's events
        module_name: Module id (also the .otui file name)
        module_title: Title used in comments and log messages

    Returns:
        Lua source text
    """
    root_var = sanitize_lua_identifier(widgets[0].id if widgets else module_name)
    root_type = widgets[0].type if widgets else ""

    refs: dict[str, _WidgetRef] = {}
    for index, root in enumerate(widgets):
        for node in root.iter_nodes():
            is_root = index == 0 and node is root
            events = _definition_events(node, registry)
            if not (is_root or events):
                continue
            var = root_var if is_root else sanitize_lua_identifier(node.id)
            refs.setdefault(var, _WidgetRef(var, node.id or var, node.type, events, is_root))

    children = [ref for ref in refs.values() if not ref.is_root]
    with_events = [ref for ref in refs.values() if ref.events]

    lines = [
        "-- Generated by otuigen",
        "-- OTClient module",
        f"-- Module: {module_title}",
        "",
        f"local {root_var} = nil",
    ]
    lines += [f"local {ref.var} = nil" for ref in children]
    lines.append("")

    if with_events:
        lines.append("-- Event handlers")
        for ref in with_events:
            for event, signature in ref.events.items():
                params = ", ".join(signature_params(signature))
                lines.append(f"local function {ref.var}_{event}({params})")
                lines.append(f"  -- Handle {event} for {ref.type} '{ref.lookup_id}'")
                lines.append("end")
                lines.append("")

    lines += [
        "-- Initialize module",
        "function init()",
        f"  {root_var} = g_ui.loadUI('{module_name}', rootWidget)",
        f"  if not {root_var} then",
        f"    g_logger.error(\"{module_title}: Failed to load UI from '{module_name}.otui'\")",
        "    return false",
        "  end",
        "",
    ]

    if children:
        lines.append("  -- Widget references")
        for ref in children:
            lines += [
                f"  {ref.var} = {root_var}:recursiveGetChildById('{ref.lookup_id}')",
                f"  if not {ref.var} then",
                f"    g_logger.warning(\"{module_title}: Widget '{ref.lookup_id}' not found in UI\")",
                "  end",
            ]
        lines.append("")

    if with_events:
        lines.append("  -- Connect event handlers")
        for ref in with_events:
            lines += [f"  if {ref.var} then", f"    connect({ref.var}, {{"]
            events = list(ref.events)
            for i, event in enumerate(events):
                separator = "," if i < len(events) - 1 else ""
                lines.append(f"      {event} = {ref.var}_{event}{separator}")
            lines += ["    })", "  end"]
        lines.append("")

    lines += ["  return true", "end", ""]

    lines += [
        "-- Show the root widget",
        "function show()",
        f"  if {root_var} then",
        f"    {root_var}:show()",
    ]
    if root_type == "UIWindow":
        lines += [f"    {root_var}:raise()", f"    {root_var}:focus()"]
    lines += ["  end", "end", ""]

    lines += [
        "-- Hide the root widget",
        "function hide()",
        f"  if {root_var} then",
        f"    {root_var}:hide()",
        "  end",
        "end",
        "",
        "-- Toggle root widget visibility",
        "function toggle()",
        f"  if {root_var} then",
        f"    if {root_var}:isVisible() then",
        "      hide()",
        "    else",
        "      show()",
        "    end",
        "  end",
        "end",
        "",
        "-- Cleanup module",
        "function terminate()",
    ]
    for ref in with_events:
        lines += [f"  if {ref.var} then", f"    disconnect({ref.var})", "  end"]
    lines += [
        f"  if {root_var} then",
        f"    {root_var}:destroy()",
        "  end",
        f"  {root_var} = nil",
    ]
    lines += [f"  {ref.var} = nil" for ref in children]
    lines.append("end")

    return "\n".join(lines) + "\n"


def generate_manifest(
    module_name: str,
    description: str,
    author: str | None = None,
    website: str | None = None,
    sandboxed: bool = True,
    autoload: bool = True,
) -> str:
    """Generate the .otmod descriptor for a module.

    Args:
        module_name: Module id; the script is <module_name>.lua
        description: Module description
        author: Optional author line
        website: Optional website line
        sandboxed: Whether the module runs sandboxed
        autoload: Whether the client loads the module at startup

    Returns:
        .otmod text
    """
    lines = ["Module", f"  name: {module_name}", f"  description: {description}"]
    if author:
        lines.append(f"  author: {author}")
    if website:
        lines.append(f"  website: {website}")
    lines += [
        f"  sandboxed: {'true' if sandboxed else 'false'}",
        f"  autoload: {'true' if autoload else 'false'}",
        "  scripts:",
        f"    - {module_name}.lua",
        "  @onLoad: init()",
        "  @onUnload: terminate()",
    ]
    return "\n".join(lines) + "\n"


def _definition_events(node: WidgetNode, registry: WidgetRegistry) -> dict[str, str]:
    """Events of a node's type, looking through template instances to their base."""
    names = [node.template.name if node.template else None, node.type, node.base_type]
    for name in names:
        definition: WidgetDefinition | None = registry.get(name) if name else None
        if definition is not None and not definition.synthesized:
            return dict(definition.events)
    return {}
