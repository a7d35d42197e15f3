"""Compute absolute widget layouts from anchors, margins and sizes."""

from __future__ import annotations

import logging

import numpy as np

from .anchors import AnchorEdge, resolve_edge, translate_anchor_edge
from ..config import OTUIConfig
from ..core.node import MARGIN_EDGES, LayoutSnapshot, WidgetNode


logger = logging.getLogger(__name__)

DEFAULT_CHILD_SIZE = 100.0


def parse_padding(properties: dict[str, str]) -> dict[str, float]:
    """Read padding from 'padding' (1-4 values, CSS order) and 'padding-<edge>'.

    Args:
        properties: Widget property map

    Returns:
        Dict with keys left, top, right, bottom
    """
    padding = {edge: 0.0 for edge in MARGIN_EDGES}
    values = [_to_float(v) for v in properties.get("padding", "").split()]
    if len(values) == 1:
        padding.update(top=values[0], right=values[0], bottom=values[0], left=values[0])
    elif len(values) == 2:
        padding.update(top=values[0], bottom=values[0], right=values[1], left=values[1])
    elif len(values) == 3:
        padding.update(top=values[0], right=values[1], left=values[1], bottom=values[2])
    elif len(values) >= 4:
        padding.update(top=values[0], right=values[1], bottom=values[2], left=values[3])

    for edge in MARGIN_EDGES:
        key = f"padding-{edge}"
        if key in properties:
            padding[edge] = _to_float(properties[key])
    return padding


def parse_margins(properties: dict[str, str]) -> dict[str, float]:
    """Read 'margin-<edge>' values (unparsable values count as 0)."""
    return {edge: _to_float(properties.get(f"margin-{edge}", "0")) for edge in MARGIN_EDGES}


class LayoutEngine:
    """Places widgets by evaluating their anchors.

    Children are positioned relative to their parent's padding box. An
    anchor's hook is 'parent', 'prev', 'next' or a sibling id; anchoring to
    the parent uses the parent's content rect (inside padding), anchoring to
    a sibling uses the sibling's rect, which is laid out first.

    Example:
        engine = LayoutEngine()
        laid_out = engine.layout(widgets)
        laid_out[0].children[0].layout.left
    """

    def __init__(self, config: OTUIConfig | None = None) -> None:
        self.config = config or OTUIConfig()

    def layout(self, widgets: list[WidgetNode], origin: tuple[float, float] = (0, 0)) -> list[WidgetNode]:
        """Lay out copies of the given root widgets.

        Args:
            widgets: Root widgets (left unchanged)
            origin: Position of every root widget

        Returns:
            Copies of the widgets with ``layout`` filled in on every node
        """
        roots = [widget.copy() for widget in widgets]
        for root in roots:
            width = _size_property(root, "width", self.config.default_width)
            height = _size_property(root, "height", self.config.default_height)
            root.layout = LayoutSnapshot(
                left=float(origin[0]), top=float(origin[1]), width=width, height=height
            )
            self._layout_children(root)
        return roots

    def _layout_children(self, parent: WidgetNode) -> None:
        if not parent.children:
            return

        padding = parse_padding(parent.properties)
        parent_width, parent_height = parent.layout.width, parent.layout.height
        content_rect = np.array([
            padding["left"],
            padding["top"],
            max(0.0, parent_width - padding["left"] - padding["right"]),
            max(0.0, parent_height - padding["top"] - padding["bottom"]),
        ])

        rects = {
            id(child): np.array([
                0.0,
                0.0,
                _size_property(child, "width", DEFAULT_CHILD_SIZE),
                _size_property(child, "height", DEFAULT_CHILD_SIZE),
            ])
            for child in parent.children
        }
        placed: set[int] = set()
        resolving: set[int] = set()

        for child in parent.children:
            self._place(child, parent.children, content_rect, rects, placed, resolving)

        for child in parent.children:
            left, top, width, height = (float(v) for v in rects[id(child)])
            child.layout = LayoutSnapshot(
                left=left,
                top=top,
                width=width,
                height=height,
                parent_width=parent_width,
                parent_height=parent_height,
                parent_padding_left=padding["left"],
                parent_padding_top=padding["top"],
                parent_padding_right=padding["right"],
                parent_padding_bottom=padding["bottom"],
            )
            self._layout_children(child)

    def _place(
        self,
        node: WidgetNode,
        siblings: list[WidgetNode],
        content_rect: np.ndarray,
        rects: dict[int, np.ndarray],
        placed: set[int],
        resolving: set[int],
    ) -> None:
        """Position one child, laying out the siblings it hooks to first."""
        if id(node) in placed:
            return
        if id(node) in resolving:
            logger.warning(f"Widget {node.id or node.type} is recursively anchored to itself")
            return
        resolving.add(id(node))

        rect = rects[id(node)]
        margins = parse_margins(node.properties)
        edges: list[tuple[AnchorEdge, str]] = []
        center_in = fill = None

        for key, value in node.properties.items():
            if not key.startswith("anchors."):
                continue
            raw_edge = key[len("anchors."):]
            lowered = raw_edge.lower()
            if lowered in ("centerin", "center-in"):
                center_in = value
                continue
            if lowered == "fill":
                fill = value
                continue
            edge = translate_anchor_edge(raw_edge)
            if edge is None:
                logger.warning(f"Invalid anchored edge '{raw_edge}' on {node.id or node.type}")
                continue
            edges.append((edge, value))

        def hooked_rect(hook_name: str) -> np.ndarray | None:
            hooked = _hooked_widget(node, siblings, hook_name)
            if hooked is None:
                logger.warning(f"Unknown anchor hook '{hook_name}' on {node.id or node.type}")
                return None
            if isinstance(hooked, str):
                return content_rect
            self._place(hooked, siblings, content_rect, rects, placed, resolving)
            return rects[id(hooked)]

        left, top = float(rect[0]), float(rect[1])
        width, height = float(rect[2]), float(rect[3])

        if center_in is not None:
            target = hooked_rect(center_in.strip())
            if target is not None:
                left = resolve_edge(AnchorEdge.HORIZONTAL_CENTER, target) - width / 2 + margins["left"] - margins["right"]
                top = resolve_edge(AnchorEdge.VERTICAL_CENTER, target) - height / 2 + margins["top"] - margins["bottom"]
        elif fill is not None:
            target = hooked_rect(fill.strip())
            if target is not None:
                left = resolve_edge(AnchorEdge.LEFT, target) + margins["left"]
                top = resolve_edge(AnchorEdge.TOP, target) + margins["top"]
                width = max(0.0, float(target[2]) - margins["left"] - margins["right"])
                height = max(0.0, float(target[3]) - margins["top"] - margins["bottom"])
        else:
            for edge, value in edges:
                value = value.strip()
                if value == "none":
                    continue
                parts = value.split(".")
                if len(parts) != 2:
                    logger.warning(f"Invalid anchor '{value}' on {node.id or node.type}")
                    continue
                hooked_edge = translate_anchor_edge(parts[1])
                if hooked_edge is None:
                    logger.warning(f"Invalid hooked edge '{parts[1]}' on {node.id or node.type}")
                    continue
                target = hooked_rect(parts[0])
                if target is None:
                    continue
                point = resolve_edge(hooked_edge, target)

                if edge is AnchorEdge.HORIZONTAL_CENTER:
                    left = point - width / 2 + margins["left"] - margins["right"]
                elif edge is AnchorEdge.LEFT:
                    left = point + margins["left"]
                elif edge is AnchorEdge.RIGHT:
                    left = point - width - margins["right"]
                elif edge is AnchorEdge.VERTICAL_CENTER:
                    top = point - height / 2 + margins["top"] - margins["bottom"]
                elif edge is AnchorEdge.TOP:
                    top = point + margins["top"]
                elif edge is AnchorEdge.BOTTOM:
                    top = point - height - margins["bottom"]

        rects[id(node)] = np.array([max(0.0, left), max(0.0, top), width, height])
        resolving.discard(id(node))
        placed.add(id(node))


def compute_layout(
    widgets: list[WidgetNode],
    config: OTUIConfig | None = None,
    origin: tuple[float, float] = (0, 0),
) -> list[WidgetNode]:
    """Lay out widget trees.

    Args:
        widgets: Root widgets (left unchanged)
        config: Default sizes for roots
        origin: Position of every root widget

    Returns:
        Copies of the widgets with ``layout`` snapshots filled in
    """
    return LayoutEngine(config).layout(widgets, origin)


def _hooked_widget(
    node: WidgetNode, siblings: list[WidgetNode], hook_name: str
) -> WidgetNode | str | None:
    """Find the widget an anchor hooks to; 'parent' for the parent itself."""
    hook = hook_name.lower()
    if hook == "parent":
        return "parent"

    index = next(i for i, sibling in enumerate(siblings) if sibling is node)
    if hook == "prev":
        return siblings[index - 1] if index > 0 else None
    if hook == "next":
        return siblings[index + 1] if index + 1 < len(siblings) else None
    for sibling in siblings:
        if sibling is not node and sibling.id is not None and sibling.id.lower() == hook:
            return sibling
    return None


def _size_property(node: WidgetNode, key: str, default: float) -> float:
    value = node.properties.get(key)
    if value is None:
        return float(default)
    try:
        size = float(value)
    except ValueError:
        return float(default)
    return size if size > 0 else float(default)


def _to_float(value: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0
