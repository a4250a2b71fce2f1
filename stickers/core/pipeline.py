"""
Sticker Pipeline
================

Coordinates one sticker render: load fonts, render the visual tree to SVG and,
unless SVG output was requested, rasterize it to PNG.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Union

from stickers.config.logging import get_logger
from stickers.config.settings import get_settings
from stickers.core.fonts import FontConfig, load_fonts
from stickers.core.markup.tree import Node
from stickers.core.rendering import png_generator
from stickers.core.rendering.svg_renderer import SVGRenderer
from stickers.models.schemas import ImageType

logger = get_logger(__name__)

FontLoader = Callable[[], Awaitable[FontConfig]]
Rasterizer = Callable[[str, int], Awaitable[bytes]]


@dataclass
class RenderedSticker:
    """Rendered output and its media type."""

    content: Union[str, bytes]
    image_type: ImageType

    @property
    def media_type(self) -> str:
        return "image/svg+xml" if self.image_type is ImageType.SVG else "image/png"


class StickerPipeline:
    """Fonts → SVG → optional PNG."""

    def __init__(
        self,
        font_loader: Optional[FontLoader] = None,
        renderer: Optional[SVGRenderer] = None,
        rasterizer: Optional[Rasterizer] = None,
        raster_quality: Optional[int] = None,
    ):
        self.font_loader = font_loader or load_fonts
        self.renderer = renderer or SVGRenderer()
        self.rasterizer = rasterizer or png_generator.rasterize
        self.raster_quality = raster_quality or get_settings().raster_quality

    async def run(self, tree: Node, image_type: ImageType) -> RenderedSticker:
        """Render a tree in the requested output format."""
        font_config = await self.font_loader()
        svg = await self.renderer.render(tree, font_config)

        if image_type is ImageType.SVG:
            return RenderedSticker(content=svg, image_type=ImageType.SVG)

        png = await self.rasterizer(svg, self.raster_quality)
        return RenderedSticker(content=png, image_type=ImageType.PNG)
