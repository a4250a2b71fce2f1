"""
Test Configuration
==================

Pytest configuration with fixtures shared by unit and integration tests.
Provides test settings, fake fonts and images, and an application wired to
a pipeline that never touches the network or a real browser.
"""

import os

# Settings are read on first import of the package
os.environ.setdefault("STICKERS_ENVIRONMENT", "testing")
os.environ.setdefault("STICKERS_PREWARM_BROWSER_POOL", "false")
os.environ.setdefault("STICKERS_DEBUG", "true")

from datetime import datetime
from pathlib import Path
from typing import Generator
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from stickers.api.main import create_app
from stickers.api.routes.stickers import get_now
from stickers.core.fonts import FONT_FILES, FontConfig
from stickers.core.pipeline import StickerPipeline
from stickers.core.rendering.svg_renderer import SVGRenderer

from tests.utils.data_generators import StickerDataGenerator
from tests.utils.mocks import PNG_BYTES, MockImageResolver, MockTextMeasurer, make_font_config

FIXED_NOW = datetime(2024, 3, 5, 14, 30, 0)


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def font_config() -> FontConfig:
    return make_font_config()


@pytest.fixture
def fonts_dir(tmp_path: Path) -> Path:
    """Directory holding placeholder files for all six font weights."""
    for weight, name in FONT_FILES.items():
        (tmp_path / name).write_bytes(b"wOFF" + str(weight).encode())
    return tmp_path


@pytest.fixture
def image_resolver() -> MockImageResolver:
    return MockImageResolver()


@pytest.fixture
def svg_renderer(image_resolver: MockImageResolver) -> SVGRenderer:
    return SVGRenderer(image_resolver=image_resolver, measurer=MockTextMeasurer())


@pytest.fixture
def rasterizer() -> AsyncMock:
    return AsyncMock(return_value=PNG_BYTES)


@pytest.fixture
def font_loader(font_config: FontConfig) -> AsyncMock:
    return AsyncMock(return_value=font_config)


@pytest.fixture
def pipeline(font_loader: AsyncMock, svg_renderer: SVGRenderer, rasterizer: AsyncMock) -> StickerPipeline:
    return StickerPipeline(
        font_loader=font_loader,
        renderer=svg_renderer,
        rasterizer=rasterizer,
        raster_quality=200,
    )


@pytest.fixture
def app(pipeline: StickerPipeline):
    application = create_app(pipeline=pipeline)
    application.dependency_overrides[get_now] = lambda: FIXED_NOW
    return application


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    """FastAPI test client; lifespan is not started so no browsers launch."""
    yield TestClient(app)


@pytest.fixture
def jetton_payload() -> dict:
    return StickerDataGenerator.jetton_payload()


@pytest.fixture
def tracker_payload() -> dict:
    return StickerDataGenerator.tracker_payload()
