"""Anchor inference and anchor-driven layout."""

from .anchors import AnchorEdge, AnchorResult, infer_anchors, resolve_edge, translate_anchor_edge
from .engine import LayoutEngine, compute_layout

__all__ = [
    "AnchorEdge",
    "AnchorResult",
    "infer_anchors",
    "resolve_edge",
    "translate_anchor_edge",
    "LayoutEngine",
    "compute_layout",
]
