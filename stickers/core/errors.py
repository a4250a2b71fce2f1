"""
Sticker Errors
==============

Exceptions raised by the rendering pipeline. Each carries the error code and
HTTP status the API layer reports for it.
"""

from typing import Optional


class StickerError(Exception):
    """Base exception for sticker pipeline failures."""

    error_code = "STICKER_ERROR"
    status_code = 500

    def __init__(self, message: str, *, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class AssetNotFoundError(StickerError):
    """Raised when a required font file is missing or unreadable."""

    error_code = "ASSET_NOT_FOUND"


class RenderError(StickerError):
    """Raised when a visual tree cannot be rendered to SVG."""

    error_code = "RENDER_ERROR"


class ConversionError(StickerError):
    """Raised when SVG to PNG conversion fails."""

    error_code = "CONVERSION_ERROR"
