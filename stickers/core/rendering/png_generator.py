"""
PNG Generator
=============

Playwright-based rasterization of sticker SVGs. A headless Chromium page shows
the SVG as an image at the canvas size and is screenshotted with a device scale
factor derived from the requested quality.
"""

from typing import Any, AsyncGenerator, List, Optional
import asyncio
import base64
import io
import time
from contextlib import asynccontextmanager
from pathlib import Path

import jinja2
from playwright.async_api import async_playwright, Browser
from PIL import Image  # type: ignore

from stickers.config.logging import get_logger
from stickers.config.settings import get_settings
from stickers.core.errors import ConversionError
from stickers.core.rendering.images import svg_size

logger = get_logger(__name__)


class BrowserPool:
    """Browser instance pool for efficient resource management."""

    def __init__(self, pool_size: int = 2):
        self.pool_size = pool_size
        self.browsers: List[Browser] = []
        self._semaphore = asyncio.Semaphore(pool_size)
        self._playwright = None
        self.settings = get_settings()
        self.logger: Any = logger.bind(component="browser_pool")

    async def initialize(self) -> None:
        """Initialize browser pool."""
        try:
            self._playwright = await async_playwright().start()

            for _ in range(self.pool_size):
                browser = await self._playwright.chromium.launch(
                    headless=self.settings.playwright_headless,
                    args=[
                        "--no-sandbox",
                        "--disable-setuid-sandbox",
                        "--disable-dev-shm-usage",
                    ],
                )
                self.browsers.append(browser)

            self.logger.info("Browser pool initialized", pool_size=self.pool_size)
        except Exception as e:
            self.logger.error("Failed to initialize browser pool", error=str(e))
            try:
                await self.close()
            except Exception as cleanup_error:
                self.logger.warning("Browser pool cleanup failed", error=str(cleanup_error))
            raise ConversionError(f"Browser pool initialization failed: {e}", cause=e) from e

    async def close(self) -> None:
        """Close all browsers in the pool."""
        for browser in self.browsers:
            await browser.close()
        self.browsers = []

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

        self.logger.info("Browser pool closed")

    @asynccontextmanager
    async def get_browser(self) -> AsyncGenerator[Browser, None]:
        """Get a browser instance from the pool."""
        async with self._semaphore:
            if not self.browsers:
                raise ConversionError("Browser pool not initialized")

            browser = self.browsers.pop()
            try:
                yield browser
            finally:
                self.browsers.append(browser)


class PlaywrightRasterizer:
    """Converts SVG markup to PNG bytes in a headless browser."""

    def __init__(self, browser_pool: BrowserPool):
        self.settings = get_settings()
        self.logger: Any = logger.bind(component="rasterizer")
        self.browser_pool = browser_pool
        self.env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(Path(__file__).parent / "templates")),
            autoescape=jinja2.select_autoescape(["html", "j2"]),
            enable_async=True,
        )

    async def rasterize(self, svg: str, quality: int) -> bytes:
        """
        Convert an SVG document to PNG.

        Args:
            svg: SVG markup with fonts and images embedded
            quality: Output scale in percent (200 renders at twice the canvas size)

        Returns:
            PNG bytes

        Raises:
            ConversionError: If the browser fails to produce an image
        """
        start = time.perf_counter()
        try:
            width, height = svg_size(svg.encode("utf-8"))
            width, height = int(round(width)), int(round(height))
            scale = quality / 100

            template = self.env.get_template("raster.html.j2")
            page_html = await template.render_async(
                width=width,
                height=height,
                svg_base64=base64.b64encode(svg.encode("utf-8")).decode("ascii"),
            )

            async with self.browser_pool.get_browser() as browser:
                context = await browser.new_context(
                    viewport={"width": width, "height": height},
                    device_scale_factor=scale,
                )
                try:
                    page = await context.new_page()
                    page.set_default_timeout(self.settings.playwright_timeout)
                    await page.set_content(page_html, wait_until="load")
                    await page.evaluate("document.getElementById('sticker').decode()")
                    png_bytes = await page.screenshot(
                        type="png",
                        omit_background=True,
                        clip={"x": 0, "y": 0, "width": width, "height": height},
                    )
                finally:
                    await context.close()
        except ConversionError:
            raise
        except Exception as e:
            self.logger.error("Rasterization failed", error=str(e))
            raise ConversionError(f"PNG conversion failed: {e}", cause=e) from e

        if not png_bytes:
            raise ConversionError("PNG conversion produced an empty image")

        png_bytes = self._optimize_png(png_bytes)
        self.logger.info(
            "PNG rasterized",
            file_size=len(png_bytes),
            scale=scale,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return png_bytes

    def _optimize_png(self, png_bytes: bytes) -> bytes:
        """Re-encode the screenshot with maximum PNG compression."""
        try:
            with Image.open(io.BytesIO(png_bytes)) as image:
                output = io.BytesIO()
                image.save(output, format="PNG", optimize=True)
            optimized = output.getvalue()
        except Exception as e:
            self.logger.warning("PNG optimization failed, using original", error=str(e))
            return png_bytes

        self.logger.debug(
            "PNG optimization completed",
            original_size=len(png_bytes),
            optimized_size=len(optimized),
        )
        return optimized if len(optimized) < len(png_bytes) else png_bytes


# Global browser pool instance
_global_browser_pool: Optional[BrowserPool] = None
_pool_lock = asyncio.Lock()


async def initialize_browser_pool() -> None:
    """Initialize global browser pool unless another caller already has."""
    global _global_browser_pool
    async with _pool_lock:
        if _global_browser_pool is not None:
            return
        settings = get_settings()
        pool = BrowserPool(settings.browser_pool_size)
        await pool.initialize()
        _global_browser_pool = pool


async def close_browser_pool() -> None:
    """Close global browser pool."""
    global _global_browser_pool
    if _global_browser_pool:
        await _global_browser_pool.close()
        _global_browser_pool = None


def browser_pool_ready() -> bool:
    """Whether the global pool has browsers available."""
    return _global_browser_pool is not None and len(_global_browser_pool.browsers) > 0


async def rasterize(svg: str, quality: int = 200) -> bytes:
    """Rasterize an SVG using the global browser pool, starting it on first use."""
    if not _global_browser_pool:
        logger.info("Auto-initializing browser pool for rasterization")
        await initialize_browser_pool()

    rasterizer = PlaywrightRasterizer(_global_browser_pool)
    return await rasterizer.rasterize(svg, quality)
