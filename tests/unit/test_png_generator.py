"""
Unit Tests for PNG Generator
============================

Browser pool management and SVG rasterization with a mocked Playwright.
"""

import asyncio
import base64
import io
from unittest.mock import AsyncMock, Mock, patch

import pytest
from PIL import Image

from stickers.core.errors import ConversionError
from stickers.core.rendering import png_generator
from stickers.core.rendering.png_generator import (
    BrowserPool,
    PlaywrightRasterizer,
    browser_pool_ready,
    close_browser_pool,
    rasterize,
)

from tests.utils.assertions import assert_png_bytes
from tests.utils.mocks import make_browser_pool

SVG = '<svg xmlns="http://www.w3.org/2000/svg" width="512" height="430" viewBox="0 0 512 430"></svg>'


def real_png() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGBA", (8, 8), (17, 24, 39, 255)).save(buffer, format="PNG")
    return buffer.getvalue()


class TestBrowserPool:
    """Test browser pool management."""

    @pytest.fixture
    def mock_settings(self):
        settings = Mock()
        settings.playwright_headless = True
        settings.playwright_timeout = 30000
        return settings

    @pytest.fixture
    def browser_pool(self, mock_settings):
        with patch("stickers.core.rendering.png_generator.get_settings", return_value=mock_settings):
            return BrowserPool(pool_size=2)

    def test_browser_pool_initialization(self, browser_pool):
        assert browser_pool.pool_size == 2
        assert browser_pool.browsers == []
        assert browser_pool._playwright is None
        assert browser_pool._semaphore._value == 2

    @pytest.mark.asyncio
    async def test_initialize_browser_pool_success(self, browser_pool):
        mock_browser = AsyncMock()
        mock_chromium = AsyncMock()
        mock_chromium.launch.return_value = mock_browser
        mock_playwright = AsyncMock()
        mock_playwright.chromium = mock_chromium

        with patch("stickers.core.rendering.png_generator.async_playwright") as mock_async_playwright:
            mock_async_playwright.return_value.start = AsyncMock(return_value=mock_playwright)

            await browser_pool.initialize()

        assert len(browser_pool.browsers) == 2
        assert browser_pool._playwright == mock_playwright
        assert mock_chromium.launch.call_count == 2
        assert mock_chromium.launch.call_args.kwargs["headless"] is True

    @pytest.mark.asyncio
    async def test_initialize_browser_pool_failure(self, browser_pool):
        with patch("stickers.core.rendering.png_generator.async_playwright") as mock_async_playwright:
            mock_async_playwright.return_value.start = AsyncMock(side_effect=Exception("Playwright failed"))

            with pytest.raises(ConversionError, match="Browser pool initialization failed"):
                await browser_pool.initialize()

    @pytest.mark.asyncio
    async def test_partial_launch_failure_releases_started_resources(self, browser_pool):
        mock_browser = AsyncMock()
        mock_chromium = AsyncMock()
        mock_chromium.launch.side_effect = [mock_browser, Exception("launch failed")]
        mock_playwright = AsyncMock()
        mock_playwright.chromium = mock_chromium

        with patch("stickers.core.rendering.png_generator.async_playwright") as mock_async_playwright:
            mock_async_playwright.return_value.start = AsyncMock(return_value=mock_playwright)

            with pytest.raises(ConversionError, match="launch failed"):
                await browser_pool.initialize()

        mock_browser.close.assert_awaited_once()
        mock_playwright.stop.assert_awaited_once()
        assert browser_pool.browsers == []
        assert browser_pool._playwright is None

    @pytest.mark.asyncio
    async def test_cleanup_failure_keeps_original_error(self, browser_pool):
        mock_browser = AsyncMock()
        mock_browser.close.side_effect = Exception("already gone")
        mock_chromium = AsyncMock()
        mock_chromium.launch.side_effect = [mock_browser, Exception("launch failed")]
        mock_playwright = AsyncMock()
        mock_playwright.chromium = mock_chromium

        with patch("stickers.core.rendering.png_generator.async_playwright") as mock_async_playwright:
            mock_async_playwright.return_value.start = AsyncMock(return_value=mock_playwright)

            with pytest.raises(ConversionError, match="launch failed"):
                await browser_pool.initialize()

    @pytest.mark.asyncio
    async def test_close_browser_pool(self, browser_pool):
        mock_browser1 = AsyncMock()
        mock_browser2 = AsyncMock()
        browser_pool.browsers = [mock_browser1, mock_browser2]
        mock_playwright = AsyncMock()
        browser_pool._playwright = mock_playwright

        await browser_pool.close()

        mock_browser1.close.assert_awaited_once()
        mock_browser2.close.assert_awaited_once()
        mock_playwright.stop.assert_awaited_once()
        assert browser_pool.browsers == []

    @pytest.mark.asyncio
    async def test_get_browser_context_manager(self, browser_pool):
        mock_browser = AsyncMock()
        browser_pool.browsers = [mock_browser]

        async with browser_pool.get_browser() as browser:
            assert browser == mock_browser
            assert len(browser_pool.browsers) == 0

        assert browser_pool.browsers == [mock_browser]

    @pytest.mark.asyncio
    async def test_browser_returned_after_error(self, browser_pool):
        mock_browser = AsyncMock()
        browser_pool.browsers = [mock_browser]

        with pytest.raises(RuntimeError):
            async with browser_pool.get_browser():
                raise RuntimeError("page crashed")

        assert browser_pool.browsers == [mock_browser]

    @pytest.mark.asyncio
    async def test_get_browser_empty_pool(self, browser_pool):
        with pytest.raises(ConversionError, match="not initialized"):
            async with browser_pool.get_browser():
                pass


class TestPlaywrightRasterizer:
    """SVG to PNG conversion."""

    @pytest.mark.asyncio
    async def test_scale_follows_quality(self):
        pool, context, page = make_browser_pool(real_png())
        browser = pool.get_browser.return_value.__aenter__.return_value

        png = await PlaywrightRasterizer(pool).rasterize(SVG, 200)

        assert_png_bytes(png)
        browser.new_context.assert_awaited_once_with(
            viewport={"width": 512, "height": 430}, device_scale_factor=2.0
        )
        page.screenshot.assert_awaited_once_with(
            type="png",
            omit_background=True,
            clip={"x": 0, "y": 0, "width": 512, "height": 430},
        )
        context.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_quality_100_is_canvas_size(self):
        pool, _, _ = make_browser_pool(real_png())
        browser = pool.get_browser.return_value.__aenter__.return_value

        await PlaywrightRasterizer(pool).rasterize(SVG, 100)

        assert browser.new_context.await_args.kwargs["device_scale_factor"] == 1.0

    @pytest.mark.asyncio
    async def test_page_embeds_svg_as_image(self):
        pool, _, page = make_browser_pool(real_png())

        await PlaywrightRasterizer(pool).rasterize(SVG, 200)

        html = page.set_content.await_args.args[0]
        assert 'id="sticker"' in html
        assert base64.b64encode(SVG.encode()).decode() in html
        page.evaluate.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_screenshot_failure_raises_conversion_error(self):
        pool, context, page = make_browser_pool()
        page.screenshot.side_effect = Exception("Target closed")

        with pytest.raises(ConversionError, match="PNG conversion failed"):
            await PlaywrightRasterizer(pool).rasterize(SVG, 200)

        context.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_empty_screenshot_raises(self):
        pool, _, _ = make_browser_pool(b"")

        with pytest.raises(ConversionError, match="empty"):
            await PlaywrightRasterizer(pool).rasterize(SVG, 200)

    @pytest.mark.asyncio
    async def test_invalid_svg_raises_conversion_error(self):
        pool, _, _ = make_browser_pool()

        with pytest.raises(ConversionError):
            await PlaywrightRasterizer(pool).rasterize("<svg", 200)

        pool.get_browser.assert_not_called()

    def test_optimize_keeps_original_on_failure(self):
        pool, _, _ = make_browser_pool()

        assert PlaywrightRasterizer(pool)._optimize_png(b"not a png") == b"not a png"


class TestGlobalPool:
    """Module-level pool helpers."""

    @pytest.mark.asyncio
    async def test_rasterize_uses_global_pool(self, monkeypatch):
        pool, _, page = make_browser_pool(real_png())
        pool.browsers = [object()]
        monkeypatch.setattr(png_generator, "_global_browser_pool", pool)

        png = await rasterize(SVG)

        assert_png_bytes(png)
        page.screenshot.assert_awaited_once()
        assert browser_pool_ready() is True

    @pytest.mark.asyncio
    async def test_rasterize_initializes_pool_on_first_use(self, monkeypatch):
        pool, _, _ = make_browser_pool(real_png())
        monkeypatch.setattr(png_generator, "_global_browser_pool", None)

        async def fake_initialize():
            monkeypatch.setattr(png_generator, "_global_browser_pool", pool)

        initialize = AsyncMock(side_effect=fake_initialize)
        monkeypatch.setattr(png_generator, "initialize_browser_pool", initialize)

        await rasterize(SVG, 200)

        initialize.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_concurrent_first_use_starts_one_pool(self, monkeypatch):
        mock_pool, _, _ = make_browser_pool(real_png())
        browser = mock_pool.get_browser.return_value.__aenter__.return_value
        monkeypatch.setattr(png_generator, "_global_browser_pool", None)
        monkeypatch.setattr(png_generator, "_pool_lock", asyncio.Lock())
        started = []

        async def fake_initialize(self):
            started.append(self)
            await asyncio.sleep(0.01)
            self.browsers = [browser, browser]

        monkeypatch.setattr(BrowserPool, "initialize", fake_initialize)

        first, second = await asyncio.gather(rasterize(SVG), rasterize(SVG))

        assert_png_bytes(first)
        assert_png_bytes(second)
        assert len(started) == 1
        assert png_generator._global_browser_pool is started[0]

    @pytest.mark.asyncio
    async def test_initialize_keeps_existing_pool(self, monkeypatch):
        existing = AsyncMock()
        monkeypatch.setattr(png_generator, "_global_browser_pool", existing)
        monkeypatch.setattr(png_generator, "_pool_lock", asyncio.Lock())
        initialize = AsyncMock()
        monkeypatch.setattr(BrowserPool, "initialize", initialize)

        await png_generator.initialize_browser_pool()

        initialize.assert_not_awaited()
        assert png_generator._global_browser_pool is existing

    @pytest.mark.asyncio
    async def test_close_browser_pool(self, monkeypatch):
        pool = AsyncMock()
        monkeypatch.setattr(png_generator, "_global_browser_pool", pool)

        await close_browser_pool()

        pool.close.assert_awaited_once()
        assert png_generator._global_browser_pool is None
        assert browser_pool_ready() is False
