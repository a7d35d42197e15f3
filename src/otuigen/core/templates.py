"""Expand template instances into full widget trees."""

from __future__ import annotations

import logging

from .node import TemplateDefinition, TemplateRef, WidgetNode


logger = logging.getLogger(__name__)


def expand_templates(
    widgets: list[WidgetNode], templates: list[TemplateDefinition]
) -> list[WidgetNode]:
    """Apply template definitions to their instances.

    Every node whose surface type names a template gets the template's
    properties merged under its own and copies of the template's children
    (flagged ``inherited``) placed before its own children. The instance's
    ``property_list`` is left as written, so code generation still refers to
    the template by name.

    Args:
        widgets: Root widgets (left unchanged)
        templates: Template definitions; the first definition of a name wins

    Returns:
        Expanded copies of the root widgets
    """
    template_map: dict[str, TemplateDefinition] = {}
    for template in templates:
        template_map.setdefault(template.name, template)

    roots = [widget.copy() for widget in widgets]
    for root in roots:
        _expand(root, template_map, expanding=())
    return roots


def _expand(
    node: WidgetNode, template_map: dict[str, TemplateDefinition], expanding: tuple[str, ...]
) -> None:
    template = template_map.get(node.surface_type or "")
    if template is not None and template.name in expanding:
        logger.warning(f"Template {template.name} contains an instance of itself, not expanding")
        template = None

    if template is not None:
        node.properties = {**template.properties, **node.properties}
        node.original_keys = {**template.original_keys, **node.original_keys}
        inherited = [child.copy() for child in template.children]
        for child in inherited:
            child.inherited = True
        node.children = inherited + node.children
        base_type = template.resolved_base or template.base_type
        node.template = TemplateRef(template.name, base_type)
        node.base_type = base_type
        expanding = expanding + (template.name,)

    for child in node.children:
        _expand(child, template_map, expanding)
