"""
Text Metrics
============

Measures text runs for the layout engine using the sticker fonts. Pillow's
FreeType bindings read the same WOFF data that is embedded in the SVG, so the
measured widths match what the browser draws.
"""

import io
from typing import Dict, Protocol, Tuple

from PIL import ImageColor, ImageFont

from stickers.core.errors import RenderError
from stickers.core.fonts import FontConfig


class TextMeasurer(Protocol):
    """Text measurement used by the layout engine."""

    def measure(self, text: str, size: float, weight: int) -> float:
        """Advance width of a single line of text."""
        ...

    def metrics(self, size: float, weight: int) -> Tuple[float, float]:
        """Ascent and descent (both positive) of the font at a size."""
        ...


class FontMeasurer:
    """Pillow-backed measurer over the fonts of a FontConfig."""

    def __init__(self, font_config: FontConfig):
        self.font_config = font_config
        self._fonts: Dict[Tuple[int, float], ImageFont.FreeTypeFont] = {}

    def _font(self, size: float, weight: int) -> ImageFont.FreeTypeFont:
        spec = self.font_config.font_for_weight(weight)
        key = (spec.weight, size)
        if key not in self._fonts:
            try:
                self._fonts[key] = ImageFont.truetype(io.BytesIO(spec.data), size=size)
            except OSError as e:
                raise RenderError(
                    f"Cannot read font {spec.name} weight {spec.weight}", cause=e
                ) from e
        return self._fonts[key]

    def measure(self, text: str, size: float, weight: int) -> float:
        return float(self._font(size, weight).getlength(text))

    def metrics(self, size: float, weight: int) -> Tuple[float, float]:
        ascent, descent = self._font(size, weight).getmetrics()
        return float(ascent), float(abs(descent))


def css_color(value: str) -> str:
    """Normalize a CSS colour (hex, name, rgb() with spaces or commas) to #rrggbb."""
    color = value.strip()
    if color.startswith("rgb(") and "," not in color:
        color = "rgb(" + ",".join(color[4:-1].split()) + ")"
    try:
        rgb = ImageColor.getrgb(color)
    except ValueError as e:
        raise RenderError(f"Unsupported colour: {value}", cause=e) from e
    return "#{:02x}{:02x}{:02x}".format(*rgb[:3])
