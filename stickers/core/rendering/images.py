"""
Image Resolver
==============

Fetches logo and chart images, inlines them as data URIs and reports their
intrinsic size for layout. SVG images are sized from their root attributes,
raster images through Pillow.
"""

import asyncio
import base64
import io
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple
from urllib.parse import unquote_to_bytes

import httpx
from PIL import Image

from stickers.config.logging import get_logger
from stickers.config.settings import get_settings
from stickers.core.errors import RenderError

logger = get_logger(__name__)

# Browser default size for replaced elements without intrinsic dimensions
DEFAULT_SIZE = (300.0, 150.0)

_LENGTH = re.compile(r"^\s*([0-9]*\.?[0-9]+)\s*(px)?\s*$")


@dataclass(frozen=True)
class ResolvedImage:
    """Inlined image ready for embedding."""

    href: str
    width: float
    height: float

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height if self.height else 1.0


def _parse_length(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    match = _LENGTH.match(value)
    return float(match.group(1)) if match else None


def svg_size(data: bytes) -> Tuple[float, float]:
    """Intrinsic size of an SVG document from width/height or viewBox."""
    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        raise RenderError("Image is not a valid SVG document", cause=e) from e

    width = _parse_length(root.get("width"))
    height = _parse_length(root.get("height"))
    view_box = root.get("viewBox")
    if view_box and (width is None or height is None):
        parts = [float(part) for part in view_box.replace(",", " ").split()]
        if len(parts) == 4 and parts[2] > 0 and parts[3] > 0:
            ratio = parts[2] / parts[3]
            if width is None and height is None:
                width, height = parts[2], parts[3]
            elif width is None:
                width = height * ratio
            else:
                height = width / ratio
    if width is None or height is None:
        return DEFAULT_SIZE
    return width, height


def raster_size(data: bytes) -> Tuple[float, float]:
    """Intrinsic size of a raster image."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            return float(img.width), float(img.height)
    except Exception as e:
        raise RenderError("Image format not recognized", cause=e) from e


def _is_svg(data: bytes, content_type: str) -> bool:
    if "svg" in content_type:
        return True
    head = data.lstrip()[:256].lower()
    return head.startswith(b"<svg") or (head.startswith(b"<?xml") and b"<svg" in data[:1024].lower())


def inline_image(data: bytes, content_type: str = "") -> ResolvedImage:
    """Build a data URI image and read its intrinsic size."""
    if _is_svg(data, content_type):
        width, height = svg_size(data)
        mime = "image/svg+xml"
    else:
        width, height = raster_size(data)
        mime = content_type.split(";")[0].strip() or "image/png"
    href = f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"
    return ResolvedImage(href=href, width=width, height=height)


def decode_data_uri(uri: str) -> Tuple[bytes, str]:
    """Split a data URI into its payload and media type."""
    try:
        header, payload = uri[len("data:"):].split(",", 1)
    except ValueError as e:
        raise RenderError("Malformed data URI", cause=e) from e
    params = header.split(";")
    mime = params[0] or "text/plain"
    if "base64" in params[1:]:
        try:
            return base64.b64decode(payload, validate=True), mime
        except ValueError as e:
            raise RenderError("Malformed base64 payload in data URI", cause=e) from e
    return unquote_to_bytes(payload), mime


class ImageResolver:
    """Resolves image sources to inlined images."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        self.client = client
        self.timeout = timeout if timeout is not None else get_settings().image_fetch_timeout
        self.logger = logger.bind(component="image_resolver")

    async def resolve_all(self, sources: Iterable[str]) -> Dict[str, ResolvedImage]:
        """Resolve every distinct source concurrently."""
        unique = list(dict.fromkeys(sources))
        if self.client is not None:
            resolved = await asyncio.gather(*(self._resolve(self.client, src) for src in unique))
        else:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                resolved = await asyncio.gather(*(self._resolve(client, src) for src in unique))
        return dict(zip(unique, resolved))

    async def _resolve(self, client: httpx.AsyncClient, src: str) -> ResolvedImage:
        if src.startswith("data:"):
            data, mime = decode_data_uri(src)
            return inline_image(data, mime)

        if not src.startswith(("http://", "https://")):
            raise RenderError(f"Unsupported image source: {src[:80]}")

        try:
            response = await client.get(src)
            response.raise_for_status()
        except httpx.HTTPError as e:
            self.logger.warning("Image fetch failed", url=src, error=str(e))
            raise RenderError(f"Failed to fetch image {src}: {e}", cause=e) from e

        self.logger.debug("Image fetched", url=src, size=len(response.content))
        return inline_image(response.content, response.headers.get("content-type", ""))
