"""
Font Assets
===========

Loads the Inter font weights used by sticker cards. Fonts are re-read on every
call and travel with the canvas size as renderer configuration.
"""

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from stickers.config.logging import get_logger
from stickers.config.settings import get_settings
from stickers.core.errors import AssetNotFoundError

logger = get_logger(__name__)


FONT_FILES: Dict[int, str] = {
    400: "Inter-Regular.woff",
    500: "Inter-Medium.woff",
    600: "Inter-SemiBold.woff",
    700: "Inter-Bold.woff",
    800: "Inter-ExtraBold.woff",
    900: "Inter-Black.woff",
}

REQUIRED_WEIGHTS = tuple(sorted(FONT_FILES))


@dataclass(frozen=True)
class FontSpec:
    """One weight variant of a font family."""

    name: str
    data: bytes
    weight: int
    style: str = "normal"


@dataclass(frozen=True)
class FontConfig:
    """Canvas size and fonts handed to the vector renderer."""

    width: int
    height: int
    fonts: Tuple[FontSpec, ...]

    def __post_init__(self) -> None:
        weights = {font.weight for font in self.fonts}
        missing = [weight for weight in REQUIRED_WEIGHTS if weight not in weights]
        if missing:
            raise AssetNotFoundError(f"Font weights missing from configuration: {missing}")

    @property
    def family(self) -> str:
        return self.fonts[0].name

    def font_for_weight(self, weight: int) -> FontSpec:
        """Return the loaded font closest to the requested weight."""
        return min(self.fonts, key=lambda font: (abs(font.weight - weight), font.weight))


def _read_font(path: Path) -> bytes:
    try:
        data = path.read_bytes()
    except OSError as e:
        raise AssetNotFoundError(f"Font file not readable: {path}", cause=e) from e
    if not data:
        raise AssetNotFoundError(f"Font file is empty: {path}")
    return data


async def load_fonts(fonts_dir: Optional[Path] = None) -> FontConfig:
    """
    Read all six Inter weights from disk.

    Args:
        fonts_dir: Directory holding the font files, defaults to settings

    Returns:
        FontConfig with the canvas size and the font list ordered by weight

    Raises:
        AssetNotFoundError: If any font file is missing or unreadable
    """
    settings = get_settings()
    directory = Path(fonts_dir) if fonts_dir is not None else settings.fonts_dir

    paths = [directory / FONT_FILES[weight] for weight in REQUIRED_WEIGHTS]
    payloads = await asyncio.gather(*(asyncio.to_thread(_read_font, path) for path in paths))

    fonts = tuple(
        FontSpec(name=settings.font_family, data=data, weight=weight)
        for weight, data in zip(REQUIRED_WEIGHTS, payloads)
    )

    logger.debug(
        "Fonts loaded",
        fonts_dir=str(directory),
        total_bytes=sum(len(font.data) for font in fonts),
    )

    return FontConfig(width=settings.canvas_width, height=settings.canvas_height, fonts=fonts)


def missing_font_files(fonts_dir: Optional[Path] = None) -> List[str]:
    """List required font files absent from the fonts directory."""
    directory = Path(fonts_dir) if fonts_dir is not None else get_settings().fonts_dir
    return [name for name in FONT_FILES.values() if not (directory / name).is_file()]
