"""
Health Routes
=============

FastAPI routes for health check endpoints.
"""

from fastapi import APIRouter

from stickers import __version__
from stickers.config.logging import get_logger
from stickers.core.fonts import missing_font_files
from stickers.core.rendering.png_generator import browser_pool_ready
from stickers.models.schemas import HealthStatus

logger = get_logger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthStatus)
async def health_check() -> HealthStatus:
    """
    Get application health status.

    The service is unhealthy when font files are missing. The browser pool
    starts lazily, so an idle pool is reported but does not fail the check.
    """
    missing = missing_font_files()
    pool_ready = browser_pool_ready()

    status = "healthy" if not missing else "unhealthy"
    logger.info(
        "Health check completed",
        status=status,
        missing_fonts=missing,
        browser_pool=pool_ready,
    )

    return HealthStatus(
        status=status,
        version=__version__,
        fonts=not missing,
        browser_pool=pool_ready,
    )
