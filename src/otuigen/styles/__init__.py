"""Style sheets, style inheritance and style images."""

from .style import StyleEntry
from .loader import StyleLoader, parse_style_sheet, resolve_inheritance, style_for_widget
from .images import ImageResolver

__all__ = [
    "StyleEntry",
    "StyleLoader",
    "parse_style_sheet",
    "resolve_inheritance",
    "style_for_widget",
    "ImageResolver",
]
