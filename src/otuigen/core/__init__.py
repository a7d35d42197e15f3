"""Widget tree, widget registry and template expansion."""

from .node import LayoutSnapshot, PropertyEntry, TemplateDefinition, TemplateRef, WidgetNode
from .registry import WidgetDefinition, WidgetRegistry
from .templates import expand_templates

__all__ = [
    "LayoutSnapshot",
    "PropertyEntry",
    "TemplateDefinition",
    "TemplateRef",
    "WidgetNode",
    "WidgetDefinition",
    "WidgetRegistry",
    "expand_templates",
]
