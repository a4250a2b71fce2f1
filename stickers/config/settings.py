"""
Application Settings
===================

Main application settings and environment configuration using Pydantic Settings.
Supports development, testing, and production environments.
"""

from typing import Annotated, List, Union
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
import json
from pathlib import Path


class Settings(BaseSettings):
    """Main application settings with environment variable support."""

    # Application Configuration
    app_name: str = Field(default="Sticker Service", description="Application name")
    environment: str = Field(
        default="development", description="Environment: development, testing, production"
    )
    debug: bool = Field(default=False, description="Debug mode")

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(
        default=3033,
        validation_alias=AliasChoices("PORT", "STICKERS_PORT"),
        description="Server port",
    )

    # Font Configuration
    fonts_dir: Path = Field(default=Path("./fonts"), description="Directory with Inter font files")
    font_family: str = Field(default="Inter", description="Font family name used in stickers")

    # Rendering Configuration
    canvas_width: int = Field(default=512, gt=0, description="Sticker canvas width")
    canvas_height: int = Field(default=430, gt=0, description="Sticker canvas height")
    raster_quality: int = Field(default=200, description="Raster scale in percent")
    image_fetch_timeout: float = Field(
        default=10.0, gt=0, description="Timeout for fetching logo and chart images"
    )

    # Browser Configuration
    playwright_headless: bool = Field(default=True, description="Run browser in headless mode")
    playwright_timeout: int = Field(default=30000, description="Playwright timeout in milliseconds")
    browser_pool_size: int = Field(default=2, gt=0, description="Browser instance pool size")
    prewarm_browser_pool: bool = Field(
        default=True, description="Launch browsers on startup instead of on first raster"
    )

    # API Documentation Configuration
    enable_docs: bool = Field(default=True, description="Enable FastAPI docs endpoint")

    # Security Configuration
    allowed_hosts: Annotated[List[str], NoDecode] = Field(
        default=["*"], description="Allowed hosts for CORS, as a JSON list or comma separated"
    )

    # Monitoring Configuration
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed = {"development", "testing", "production"}
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("raster_quality")
    @classmethod
    def validate_raster_quality(cls, v: int) -> int:
        """Raster quality is a scale percentage and must be positive."""
        if v <= 0:
            raise ValueError("Raster quality must be a positive percentage")
        return v

    @field_validator("allowed_hosts", mode="before")
    @classmethod
    def parse_allowed_hosts(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse allowed hosts from string or list."""
        if isinstance(v, str):
            # Handle JSON-like string: ["*"] or ["host1", "host2"]
            v = v.strip()
            if v.startswith("[") and v.endswith("]"):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
            # Handle comma-separated string: "*" or "host1,host2"
            return [host.strip() for host in v.split(",") if host.strip()]
        return v

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="STICKERS_",
        populate_by_name=True,
        extra="ignore",
    )


# Global settings instance - will be initialized when needed
settings = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global settings
    if settings is None:
        settings = Settings()
    return settings
