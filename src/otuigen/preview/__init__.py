"""Static preview rendering."""

from .renderer import PreviewRenderer

__all__ = ["PreviewRenderer"]
