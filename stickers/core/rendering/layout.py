"""
Flex Layout
===========

A small flexbox engine covering what sticker cards use: row/column direction,
gap, padding, margins, justify-content, align-items (including baseline),
explicit sizes, aspect-ratio images, absolute positioning and translate
transforms. Sizes are border-box, there is no wrapping and no flex grow or shrink.

Layout runs in two steps. Each node is measured and its children are arranged
relative to the node's own origin; a final pass converts every box to canvas
coordinates.
"""

from dataclasses import dataclass, field, replace
from typing import List, Mapping, Optional, Tuple

from stickers.core.errors import RenderError
from stickers.core.markup.tree import ContainerNode, ImageNode, Node, Style, TextNode
from stickers.core.rendering.images import ResolvedImage
from stickers.core.rendering.text import TextMeasurer


@dataclass(frozen=True)
class TextStyle:
    """Inherited text properties resolved for one node."""

    color: str = "black"
    font_size: float = 16
    font_weight: int = 400
    line_height: Optional[float] = None

    def inherit(self, style: Style) -> "TextStyle":
        return replace(
            self,
            color=style.color if style.color is not None else self.color,
            font_size=style.font_size if style.font_size is not None else self.font_size,
            font_weight=style.font_weight if style.font_weight is not None else self.font_weight,
            line_height=style.line_height if style.line_height is not None else self.line_height,
        )


@dataclass
class LayoutBox:
    """Positioned node. Coordinates are canvas pixels once layout completes."""

    node: Node
    text_style: TextStyle
    width: float
    height: float
    x: float = 0
    y: float = 0
    baseline: Optional[float] = None
    image: Optional[ResolvedImage] = None
    children: List["LayoutBox"] = field(default_factory=list)

    @property
    def style(self) -> Style:
        return self.node.style

    @property
    def baseline_or_bottom(self) -> float:
        return self.baseline if self.baseline is not None else self.height


def _justify(mode: str, free: float, count: int) -> Tuple[float, float]:
    """Return (leading offset, extra spacing between items)."""
    if mode == "center":
        return free / 2, 0
    if mode == "flex-end":
        return free, 0
    if mode == "space-between" and count > 1 and free > 0:
        return 0, free / (count - 1)
    return 0, 0


class LayoutEngine:
    """Computes box geometry for a visual tree."""

    def __init__(self, measurer: TextMeasurer, images: Mapping[str, ResolvedImage]):
        self.measurer = measurer
        self.images = images

    def layout(self, root: Node, width: float, height: float) -> LayoutBox:
        """Lay out a tree on a canvas of the given size."""
        box = self._measure(root, TextStyle(), width=width, height=height)
        self._to_canvas(box, 0, 0)
        return box

    def _measure(
        self,
        node: Node,
        parent: TextStyle,
        width: Optional[float] = None,
        height: Optional[float] = None,
    ) -> LayoutBox:
        style = node.style
        text_style = parent.inherit(style)
        width = style.width if style.width is not None else width
        height = style.height if style.height is not None else height

        if isinstance(node, TextNode):
            return self._measure_text(node, text_style, width, height)
        if isinstance(node, ImageNode):
            return self._measure_image(node, text_style, width, height)
        return self._measure_container(node, text_style, width, height)

    def _measure_text(
        self, node: TextNode, ts: TextStyle, width: Optional[float], height: Optional[float]
    ) -> LayoutBox:
        pad = node.style.padding
        ascent, descent = self.measurer.metrics(ts.font_size, ts.font_weight)
        content = ascent + descent
        line = ts.line_height * ts.font_size if ts.line_height is not None else content

        if width is None:
            width = self.measurer.measure(node.text, ts.font_size, ts.font_weight) + pad.horizontal
        if height is None:
            height = line + pad.vertical

        baseline = pad.top + (line - content) / 2 + ascent
        return LayoutBox(node=node, text_style=ts, width=width, height=height, baseline=baseline)

    def _measure_image(
        self, node: ImageNode, ts: TextStyle, width: Optional[float], height: Optional[float]
    ) -> LayoutBox:
        try:
            image = self.images[node.src]
        except KeyError as e:
            raise RenderError(f"Image was not resolved before layout: {node.src[:80]}") from e

        pad = node.style.padding
        ratio = image.aspect_ratio
        if width is not None and height is None:
            height = (width - pad.horizontal) / ratio + pad.vertical
        elif height is not None and width is None:
            width = (height - pad.vertical) * ratio + pad.horizontal
        elif width is None and height is None:
            width = image.width + pad.horizontal
            height = image.height + pad.vertical

        return LayoutBox(node=node, text_style=ts, width=width, height=height, image=image)

    def _measure_container(
        self,
        node: ContainerNode,
        ts: TextStyle,
        width: Optional[float],
        height: Optional[float],
    ) -> LayoutBox:
        style = node.style
        pad = style.padding
        column = style.flex_direction == "column"
        stretch = style.align_items == "stretch"
        baseline_row = style.align_items == "baseline" and not column

        flow_indexes = [i for i, child in enumerate(node.children) if child.style.position != "absolute"]
        flow = [node.children[i] for i in flow_indexes]
        inner_w = width - pad.horizontal if width is not None else None
        inner_h = height - pad.vertical if height is not None else None

        if column:
            boxes = [
                self._measure(
                    child,
                    ts,
                    width=inner_w - child.style.margin.horizontal
                    if stretch and inner_w is not None
                    else None,
                )
                for child in flow
            ]
            if stretch and inner_w is None:
                cross = max((b.width + c.style.margin.horizontal for c, b in zip(flow, boxes)), default=0)
                boxes = [
                    self._measure(c, ts, width=cross - c.style.margin.horizontal)
                    if c.style.width is None
                    else b
                    for c, b in zip(flow, boxes)
                ]
        else:
            boxes = [self._measure(child, ts) for child in flow]
            if stretch:
                cross = (
                    inner_h
                    if inner_h is not None
                    else max((b.height + c.style.margin.vertical for c, b in zip(flow, boxes)), default=0)
                )
                boxes = [
                    self._measure(c, ts, height=cross - c.style.margin.vertical)
                    if c.style.height is None
                    else b
                    for c, b in zip(flow, boxes)
                ]

        if column:
            main_sizes = [b.height + c.style.margin.vertical for c, b in zip(flow, boxes)]
            cross_sizes = [b.width + c.style.margin.horizontal for c, b in zip(flow, boxes)]
        else:
            main_sizes = [b.width + c.style.margin.horizontal for c, b in zip(flow, boxes)]
            cross_sizes = [b.height + c.style.margin.vertical for c, b in zip(flow, boxes)]

        gaps = style.gap * (len(flow) - 1) if flow else 0
        content_main = sum(main_sizes) + gaps

        max_above = 0.0
        if baseline_row and flow:
            above = [c.style.margin.top + b.baseline_or_bottom for c, b in zip(flow, boxes)]
            below = [
                b.height + c.style.margin.bottom - b.baseline_or_bottom for c, b in zip(flow, boxes)
            ]
            max_above = max(above)
            content_cross = max_above + max(below)
        else:
            content_cross = max(cross_sizes, default=0)

        if width is None:
            width = (content_cross if column else content_main) + pad.horizontal
        if height is None:
            height = (content_main if column else content_cross) + pad.vertical

        inner_main = height - pad.vertical if column else width - pad.horizontal
        inner_cross = width - pad.horizontal if column else height - pad.vertical
        offset, spacing = _justify(style.justify_content, inner_main - content_main, len(flow))

        cursor = offset
        for child, box, main, cross_size in zip(flow, boxes, main_sizes, cross_sizes):
            margin = child.style.margin
            if style.align_items == "center":
                cross_offset = (inner_cross - cross_size) / 2
            elif style.align_items == "flex-end":
                cross_offset = inner_cross - cross_size
            elif baseline_row:
                cross_offset = max_above - (margin.top + box.baseline_or_bottom)
            else:
                cross_offset = 0

            if column:
                box.x = pad.left + cross_offset + margin.left
                box.y = pad.top + cursor + margin.top
            else:
                box.x = pad.left + cursor + margin.left
                box.y = pad.top + cross_offset + margin.top
            cursor += main + style.gap + spacing

        baseline = None
        if boxes:
            baseline = boxes[0].y + boxes[0].baseline_or_bottom

        placed = dict(zip(flow_indexes, boxes))
        children: List[LayoutBox] = []
        for index, child in enumerate(node.children):
            if index in placed:
                box = placed[index]
            else:
                box = self._place_absolute(child, ts, width, height)
            self._apply_transform(box)
            children.append(box)

        return LayoutBox(
            node=node,
            text_style=ts,
            width=width,
            height=height,
            baseline=baseline,
            children=children,
        )

    def _place_absolute(self, child: Node, ts: TextStyle, width: float, height: float) -> LayoutBox:
        style = child.style
        box = self._measure(child, ts)
        margin = style.margin
        if style.left_percent is not None:
            box.x = width * style.left_percent / 100 + margin.left
        else:
            box.x = margin.left
        if style.bottom is not None:
            box.y = height - style.bottom - box.height - margin.bottom
        else:
            box.y = margin.top
        return box

    @staticmethod
    def _apply_transform(box: LayoutBox) -> None:
        style = box.style
        box.x += style.translate_x_percent * box.width / 100
        box.y += style.translate_y

    def _to_canvas(self, box: LayoutBox, origin_x: float, origin_y: float) -> None:
        box.x += origin_x
        box.y += origin_y
        for child in box.children:
            self._to_canvas(child, box.x, box.y)
