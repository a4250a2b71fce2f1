"""
SVG Renderer
============

Turns a visual tree plus font configuration into SVG markup. Images are
resolved and inlined first, the tree is laid out with the flex engine, and the
positioned boxes are written through a Jinja2 template with the fonts embedded.
"""

import base64
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional

import jinja2
from markupsafe import Markup

from stickers.config.logging import get_logger
from stickers.core.errors import RenderError
from stickers.core.fonts import FontConfig, FontSpec
from stickers.core.markup.tree import ImageNode, Node, walk
from stickers.core.rendering.images import ImageResolver
from stickers.core.rendering.layout import LayoutBox, LayoutEngine
from stickers.core.rendering.text import FontMeasurer, TextMeasurer, css_color

logger = get_logger(__name__)

FONT_FORMATS = {
    b"wOFF": ("font/woff", "woff"),
    b"wOF2": ("font/woff2", "woff2"),
    b"OTTO": ("font/otf", "opentype"),
}

OBJECT_FIT = {
    "cover": "xMidYMid slice",
    "contain": "xMidYMid meet",
    "fill": "none",
}


@dataclass(frozen=True)
class ClipRect:
    """Rounded clip rectangle emitted into <defs>."""

    id: str
    x: float
    y: float
    width: float
    height: float
    radius: float


def num(value: float) -> str:
    """Compact decimal for SVG attributes."""
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def font_src(font: FontSpec) -> Markup:
    """CSS ``src`` value embedding a font as a data URI."""
    mime, fmt = FONT_FORMATS.get(font.data[:4], ("font/ttf", "truetype"))
    payload = base64.b64encode(font.data).decode("ascii")
    return Markup(f'url(data:{mime};base64,{payload}) format("{fmt}")')


def _radius(box: LayoutBox) -> float:
    radius = box.style.border_radius or 0
    return min(radius, box.width / 2, box.height / 2)


class SVGRenderer:
    """Renders visual trees to SVG documents."""

    def __init__(
        self,
        image_resolver: Optional[ImageResolver] = None,
        measurer: Optional[TextMeasurer] = None,
    ) -> None:
        self.image_resolver = image_resolver
        self.measurer = measurer
        self.logger: Any = logger.bind(component="svg_renderer")
        self._setup_jinja2_environment()

    def _setup_jinja2_environment(self) -> None:
        """Setup Jinja2 template environment."""
        template_dir = Path(__file__).parent / "templates"
        self.env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
            enable_async=True,
        )
        self.env.filters["num"] = num
        self.env.filters["color"] = css_color
        self.env.filters["aspect"] = lambda fit: OBJECT_FIT[fit]
        self.env.filters["font_src"] = font_src
        self.env.globals["radius"] = _radius

    async def render(self, tree: Node, font_config: FontConfig) -> str:
        """
        Render a visual tree to SVG.

        Args:
            tree: Root node of the sticker
            font_config: Canvas size and fonts

        Returns:
            SVG markup string

        Raises:
            RenderError: If an image cannot be resolved or the tree cannot be drawn
        """
        start = time.perf_counter()
        try:
            sources = [node.src for node in walk(tree) if isinstance(node, ImageNode)]
            resolver = self.image_resolver or ImageResolver()
            images = await resolver.resolve_all(sources)

            measurer = self.measurer or FontMeasurer(font_config)
            root = LayoutEngine(measurer, images).layout(tree, font_config.width, font_config.height)

            clips = self._collect_clips(root)
            by_box = {id(box): clip for box, clip in clips}

            template = self.env.get_template("sticker.svg.j2")
            svg = await template.render_async(
                width=font_config.width,
                height=font_config.height,
                family=font_config.family,
                fonts=font_config.fonts,
                clips=[clip for _, clip in clips],
                clip_of=lambda box: by_box.get(id(box)),
                root=root,
            )
        except RenderError:
            raise
        except Exception as e:
            self.logger.error("SVG rendering failed", error=str(e))
            raise RenderError(f"SVG rendering failed: {e}", cause=e) from e

        svg = svg.strip()
        self.logger.info(
            "SVG rendered",
            images=len(images),
            svg_length=len(svg),
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return svg

    def _collect_clips(self, root: LayoutBox) -> List[tuple]:
        """Clip boxes that hide overflow and images with rounded corners."""
        clips: List[tuple] = []
        stack = [root]
        while stack:
            box = stack.pop()
            style = box.style
            rounded_image = box.image is not None and style.border_radius
            if style.overflow == "hidden" or rounded_image:
                clip = ClipRect(
                    id=f"clip-{len(clips)}",
                    x=box.x,
                    y=box.y,
                    width=box.width,
                    height=box.height,
                    radius=_radius(box),
                )
                clips.append((box, clip))
            stack.extend(reversed(box.children))
        return clips


async def render(
    tree: Node,
    font_config: FontConfig,
    *,
    image_resolver: Optional[ImageResolver] = None,
    measurer: Optional[TextMeasurer] = None,
) -> str:
    """Render a visual tree to SVG with a one-off renderer."""
    renderer = SVGRenderer(image_resolver=image_resolver, measurer=measurer)
    return await renderer.render(tree, font_config)
