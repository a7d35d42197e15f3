"""Render a static preview image of widget trees with Pillow."""

from __future__ import annotations

import logging
import re

from PIL import Image, ImageColor, ImageDraw

from ..config import OTUIConfig
from ..core.node import WidgetNode
from ..core.registry import WidgetRegistry
from ..layout.engine import compute_layout
from ..styles.images import ImageResolver
from ..styles.loader import style_for_widget
from ..styles.style import StyleEntry


logger = logging.getLogger(__name__)

CANVAS_COLOR = (32, 32, 32, 255)
DEFAULT_TEXT_COLOR = "#dfdfdf"
ROOT_SPACING = 10

TR_VALUE_RE = re.compile(r"^tr\s*\(\s*(['\"])(.*)\1\s*\)$", re.IGNORECASE | re.DOTALL)


def display_text(value: str) -> str:
    """Text as shown on screen: tr('Hello') and quoted strings are unwrapped."""
    value = value.strip()
    match = TR_VALUE_RE.match(value)
    if match:
        return match.group(2)
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def parse_color(value: str | None) -> tuple[int, int, int, int] | None:
    """Parse an OTUI color (#rgb, #rrggbb, #rrggbbaa or a color name)."""
    if not value:
        return None
    try:
        color = ImageColor.getcolor(value.strip(), "RGBA")
    except ValueError:
        logger.debug(f"Ignoring invalid color {value!r}")
        return None
    return color


class PreviewRenderer:
    """Paints widget boxes, style images and text onto an RGBA canvas.

    Root widgets are placed left to right with a small gap. Each widget's
    effective properties are its resolved style (looked up by type) with the
    widget's own properties on top.
    """

    def __init__(
        self,
        styles: dict[str, StyleEntry] | None = None,
        images: ImageResolver | None = None,
        config: OTUIConfig | None = None,
        registry: WidgetRegistry | None = None,
    ) -> None:
        self.styles = styles or {}
        self.images = images
        self.config = config or OTUIConfig()
        self.registry = registry

    def render(self, widgets: list[WidgetNode]) -> Image.Image:
        """Render root widgets to an image.

        Args:
            widgets: Root widgets (layouts are computed here)

        Returns:
            RGBA image covering every root widget
        """
        roots = compute_layout(widgets, self.config)

        offsets = []
        x = 0
        for root in roots:
            offsets.append(x)
            x += int(round(root.layout.width)) + ROOT_SPACING
        width = max(1, x - ROOT_SPACING)
        height = max([int(round(root.layout.height)) for root in roots] or [1])

        canvas = Image.new("RGBA", (width, height), CANVAS_COLOR)
        draw = ImageDraw.Draw(canvas)
        for root, offset in zip(roots, offsets):
            self._paint(canvas, draw, root, (offset, 0))
        return canvas

    def effective_properties(self, node: WidgetNode) -> dict[str, str]:
        """Resolved style properties for the node's type overlaid with its own."""
        style = style_for_widget(self.styles, node.base_type or node.type, self.registry)
        if style is None and node.template is not None:
            style = style_for_widget(self.styles, node.template.name, self.registry)
        base = dict(style.resolved or style.properties) if style is not None else {}
        return {**base, **node.properties}

    def _paint(
        self,
        canvas: Image.Image,
        draw: ImageDraw.ImageDraw,
        node: WidgetNode,
        parent_origin: tuple[float, float],
    ) -> None:
        layout = node.layout
        left = parent_origin[0] + layout.left
        top = parent_origin[1] + layout.top
        box = (
            int(round(left)),
            int(round(top)),
            int(round(left + layout.width)),
            int(round(top + layout.height)),
        )
        props = self.effective_properties(node)

        if box[2] > box[0] and box[3] > box[1]:
            background = parse_color(props.get("background-color") or props.get("background"))
            if background is not None:
                draw.rectangle((box[0], box[1], box[2] - 1, box[3] - 1), fill=background)

            self._paint_image(canvas, props, box)

            border = parse_color(props.get("border-color"))
            if border is not None:
                border_width = _to_int(props.get("border-width"), 1)
                draw.rectangle((box[0], box[1], box[2] - 1, box[3] - 1), outline=border, width=border_width)

            text = props.get("text")
            if text:
                self._paint_text(draw, display_text(text), props, box)

        for child in node.children:
            self._paint(canvas, draw, child, (left, top))

    def _paint_image(self, canvas: Image.Image, props: dict[str, str], box: tuple[int, int, int, int]) -> None:
        source = props.get("image-source")
        if not source or self.images is None:
            return
        try:
            image = self.images.open(source)
        except OSError as e:
            logger.warning(f"Cannot read image {source}: {e}")
            return
        if image is None:
            logger.debug(f"Image {source} not found")
            return

        clip = [_to_int(v, 0) for v in props.get("image-clip", "").split()]
        if len(clip) == 4 and clip[2] > 0 and clip[3] > 0:
            image = image.crop((clip[0], clip[1], clip[0] + clip[2], clip[1] + clip[3]))

        size = (box[2] - box[0], box[3] - box[1])
        image = image.resize(size)
        canvas.alpha_composite(image, dest=(max(0, box[0]), max(0, box[1])))

    def _paint_text(
        self, draw: ImageDraw.ImageDraw, text: str, props: dict[str, str], box: tuple[int, int, int, int]
    ) -> None:
        color = parse_color(props.get("color")) or parse_color(DEFAULT_TEXT_COLOR)
        text_box = draw.textbbox((0, 0), text)
        text_width = text_box[2] - text_box[0]
        text_height = text_box[3] - text_box[1]

        align = props.get("text-align", "center").lower()
        if align.endswith("left"):
            x = box[0] + 2
        elif align.endswith("right"):
            x = box[2] - text_width - 2
        else:
            x = box[0] + (box[2] - box[0] - text_width) / 2
        y = box[1] + (box[3] - box[1] - text_height) / 2
        x += _to_int(props.get("text-offset-x"), 0)
        y += _to_int(props.get("text-offset-y"), 0)
        draw.text((x, y), text, fill=color)


def _to_int(value: str | None, default: int) -> int:
    if value is None:
        return default
    try:
        return int(float(value))
    except ValueError:
        return default
