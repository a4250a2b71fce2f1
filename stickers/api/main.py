"""
FastAPI Application
==================

Main FastAPI application serving sticker images and the static catalog.
"""

from contextlib import asynccontextmanager
import uuid
from typing import AsyncGenerator, Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from stickers import __version__
from stickers.config.settings import get_settings
from stickers.config.logging import get_logger
from stickers.core.errors import StickerError
from stickers.core.pipeline import StickerPipeline
from stickers.core.rendering.png_generator import (
    initialize_browser_pool,
    close_browser_pool,
)
from stickers.data.catalog import Catalog, default_catalog
from stickers.api.routes.catalog import router as catalog_router
from stickers.api.routes.health import router as health_router
from stickers.api.routes.stickers import router as stickers_router
from stickers.models.schemas import ErrorResponse

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = get_settings()
    logger.info("Starting sticker service", environment=settings.environment)

    if settings.prewarm_browser_pool:
        try:
            await initialize_browser_pool()
        except StickerError as e:
            # The pool starts again on the first PNG request
            logger.warning("Browser pool prewarm failed", error=str(e))

    try:
        yield
    finally:
        logger.info("Shutting down sticker service")
        try:
            await close_browser_pool()
        except Exception as e:
            logger.error("Error closing browser pool", error=str(e))


def _error_response(
    request: Request,
    status_code: int,
    error: str,
    error_code: str,
    details: Optional[dict] = None,
) -> JSONResponse:
    error_response = ErrorResponse(
        error=error,
        error_code=error_code,
        details=details,
        request_id=getattr(request.state, "request_id", None),
    )
    return JSONResponse(status_code=status_code, content=error_response.model_dump(mode="json"))


def create_app(
    catalog: Optional[Catalog] = None,
    pipeline: Optional[StickerPipeline] = None,
) -> FastAPI:
    """
    Application factory.

    Args:
        catalog: Read-only catalog tables, defaults to the shipped catalog
        pipeline: Sticker pipeline, defaults to fonts from disk and Playwright PNGs

    Returns:
        FastAPI application instance
    """
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        description="Render jetton price and project tracker stickers as SVG or PNG",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.enable_docs else None,
        redoc_url="/redoc" if settings.enable_docs else None,
    )

    app.state.catalog = catalog or default_catalog()
    app.state.pipeline = pipeline or StickerPipeline()

    # Add middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_hosts,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Request ID middleware
    @app.middleware("http")
    async def add_request_id(request: Request, call_next):  # type: ignore
        """Add request ID to all requests."""
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    # Exception handlers
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """HTTP exceptions with the structured error body."""
        logger.warning("HTTP exception", status_code=exc.status_code, detail=exc.detail)
        return _error_response(request, exc.status_code, str(exc.detail), str(exc.status_code))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Malformed sticker bodies never reach the rendering pipeline."""
        errors = jsonable_encoder(exc.errors())
        logger.info("Request validation failed", path=request.url.path, errors=len(errors))
        return _error_response(
            request, 422, "Request validation failed", "VALIDATION_ERROR", {"errors": errors}
        )

    @app.exception_handler(StickerError)
    async def sticker_exception_handler(request: Request, exc: StickerError) -> JSONResponse:
        """Pipeline failures become server errors, never partial images."""
        logger.error(
            "Sticker pipeline error",
            error_code=exc.error_code,
            error_message=str(exc),
            cause=repr(exc.cause) if exc.cause else None,
            request_id=getattr(request.state, "request_id", None),
        )
        return _error_response(
            request,
            exc.status_code,
            str(exc),
            exc.error_code,
            {"cause": str(exc.cause)} if settings.debug and exc.cause else None,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """General exception handler for unexpected errors."""
        logger.error("Unhandled exception", exception=str(exc), exc_info=True)
        return _error_response(
            request,
            500,
            "Internal server error",
            "INTERNAL_ERROR",
            {"exception": str(exc)} if settings.debug else None,
        )

    app.include_router(stickers_router)
    app.include_router(catalog_router)
    app.include_router(health_router)

    @app.get("/", tags=["General"])
    async def root() -> dict[str, Any]:
        """Root endpoint with basic API information."""
        return {
            "name": settings.app_name,
            "version": __version__,
            "health_check": "/health",
            "endpoints": {
                "jetton_sticker": "GET /sticker/jetton?image_type=svg|png",
                "tracker_sticker": "GET /sticker/tracker?image_type=svg|png",
                "jettons": "GET /jettons",
                "projects": "GET /tracker",
            },
        }

    return app


app = create_app()


def run_development_server() -> None:
    """Run the server on the configured port."""
    settings = get_settings()
    logger.info(f"Server is listening at http://localhost:{settings.port}")
    uvicorn.run(
        "stickers.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


if __name__ == "__main__":
    run_development_server()
