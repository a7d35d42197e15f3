"""Anchor edges and anchor inference from absolute widget positions."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from ..core.node import LayoutSnapshot


class AnchorEdge(Enum):
    """Edges and center lines a widget can be anchored by.

    Each edge lies on one axis (0 = horizontal, 1 = vertical) at a
    normalized position within a rect: 0 = left/top, 1 = right/bottom.
    """

    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"
    HORIZONTAL_CENTER = "horizontalCenter"
    VERTICAL_CENTER = "verticalCenter"


# Mapping from edge to (axis, normalized position along that axis)
EDGE_POSITIONS: dict[AnchorEdge, tuple[int, float]] = {
    AnchorEdge.LEFT: (0, 0.0),
    AnchorEdge.HORIZONTAL_CENTER: (0, 0.5),
    AnchorEdge.RIGHT: (0, 1.0),
    AnchorEdge.TOP: (1, 0.0),
    AnchorEdge.VERTICAL_CENTER: (1, 0.5),
    AnchorEdge.BOTTOM: (1, 1.0),
}

# Per axis: (near edge, center, far edge)
AXIS_EDGES = (
    (AnchorEdge.LEFT, AnchorEdge.HORIZONTAL_CENTER, AnchorEdge.RIGHT),
    (AnchorEdge.TOP, AnchorEdge.VERTICAL_CENTER, AnchorEdge.BOTTOM),
)

DEFAULT_CENTER_THRESHOLD = 10.0
CENTER_MARGIN_EPSILON = 0.5


def translate_anchor_edge(name: str) -> AnchorEdge | None:
    """Parse an edge name as written in OTUI (case and dashes are ignored).

    Args:
        name: Edge name such as 'left', 'horizontalCenter', 'vertical-center'

    Returns:
        The matching AnchorEdge, or None for anything else
    """
    normalized = "".join(name.split()).lower().replace("-", "")
    for edge in AnchorEdge:
        if edge.value.lower() == normalized:
            return edge
    return None


def resolve_edge(edge: AnchorEdge | str, rect: np.ndarray) -> float:
    """Convert an anchor edge to a coordinate within a rect.

    Args:
        edge: The anchor edge (enum or OTUI name)
        rect: The rect as [left, top, width, height]

    Returns:
        The x coordinate for horizontal edges, y for vertical ones
    """
    if isinstance(edge, str):
        parsed = translate_anchor_edge(edge)
        if parsed is None:
            raise ValueError(f"Unknown anchor edge: {edge}")
        edge = parsed

    axis, norm = EDGE_POSITIONS[edge]
    return float(rect[axis] + norm * rect[axis + 2])


@dataclass
class AnchorResult:
    """Inferred anchors for one widget.

    Attributes:
        anchors: Anchored edges, one horizontal then one vertical
        margins: Edge -> margin in pixels, only for non-zero margins
    """

    anchors: list[str] = field(default_factory=list)
    margins: dict[str, int] = field(default_factory=dict)

    def directives(self) -> list[tuple[str, str]]:
        """Anchors as OTUI property pairs, e.g. ('anchors.left', 'parent.left')."""
        return [(f"anchors.{edge}", f"parent.{edge}") for edge in self.anchors]


def infer_anchors(
    layout: LayoutSnapshot | None, threshold: float = DEFAULT_CENTER_THRESHOLD
) -> AnchorResult | None:
    """Compute the best-fit anchors and margins for a positioned widget.

    Each axis is handled independently. A widget whose center lies within
    ``threshold`` pixels of the parent's center is anchored to the center
    line (with a margin for any residual offset over half a pixel);
    otherwise it is anchored to the nearer edge of the parent's content box.

    Args:
        layout: Absolute layout of the widget, None for unpositioned widgets
        threshold: Max center distance in pixels to treat a widget as centered

    Returns:
        AnchorResult, or None when the widget has no usable parent content box
    """
    if layout is None:
        return None

    padding_near = np.array([_finite(layout.parent_padding_left), _finite(layout.parent_padding_top)])
    padding_far = np.array([_finite(layout.parent_padding_right), _finite(layout.parent_padding_bottom)])
    parent_size = np.array([_finite(layout.parent_width), _finite(layout.parent_height)])
    if np.any(parent_size <= 0):
        return None

    content = np.maximum(0.0, parent_size - padding_near - padding_far)
    if np.any(content == 0):
        return None

    size = np.array([_finite(layout.width), _finite(layout.height)])
    # Layout positions are relative to the parent's padding box
    position = np.array([_finite(layout.left), _finite(layout.top)]) - padding_near

    offsets = (position + size / 2) - content / 2
    dist_near = np.maximum(0.0, position)
    dist_far = np.maximum(0.0, content - position - size)

    result = AnchorResult()
    for axis, (near_edge, center_edge, far_edge) in enumerate(AXIS_EDGES):
        offset = float(offsets[axis])
        if abs(offset) < threshold:
            result.anchors.append(center_edge.value)
            if abs(offset) > CENTER_MARGIN_EPSILON:
                side = far_edge if offset > 0 else near_edge
                result.margins[side.value] = _round(abs(offset))
        elif dist_near[axis] <= dist_far[axis]:
            result.anchors.append(near_edge.value)
            margin = _round(float(dist_near[axis]))
            if margin != 0:
                result.margins[near_edge.value] = margin
        else:
            result.anchors.append(far_edge.value)
            margin = _round(float(dist_far[axis]))
            if margin != 0:
                result.margins[far_edge.value] = margin

    return result


def _round(value: float) -> int:
    """Round half away from zero (0.5 -> 1), not to even."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _finite(value: float | None) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0
