"""
Pydantic Models and Schemas
===========================

Request records for sticker rendering, catalog entries and API responses.
JSON payloads use camelCase keys; Python attributes are snake_case.
"""

from typing import Optional, Dict, Any, Literal, Union
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, field_validator


class ImageType(str, Enum):
    """Sticker output formats."""
    SVG = "svg"
    PNG = "png"

    @classmethod
    def from_query(cls, value: Optional[str]) -> "ImageType":
        """Only an explicit ``svg`` skips rasterization."""
        return cls.SVG if value == cls.SVG.value else cls.PNG


class StickerRecord(BaseModel):
    """Base for immutable sticker input records.

    Numeric fields are strict: numbers must arrive as JSON numbers, never as
    strings or booleans.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Price(StickerRecord):
    """Token price in TON and USD."""
    ton: StrictFloat = Field(..., description="Price denominated in TON")
    usd: StrictFloat = Field(..., description="Price denominated in USD")


class Token(StickerRecord):
    """Price snapshot of a tradeable jetton."""
    price: Price = Field(..., description="Current price")
    delta: StrictFloat = Field(..., description="Signed price change in percent")
    logo_url: str = Field(..., alias="logoUrl", description="Logo image URL")
    symbol: str = Field(..., description="Ticker symbol")
    chart_url: str = Field(..., alias="chartUrl", description="Price chart image URL")


class Project(StickerRecord):
    """Usage snapshot of a protocol."""
    name: str = Field(..., description="Project name")
    logo_url: str = Field(..., alias="logoUrl", description="Logo image URL")
    uaw: Union[StrictInt, StrictFloat] = Field(..., description="Unique active wallets")
    uaw_delta: StrictFloat = Field(..., alias="uawDelta", description="Signed UAW change in percent")
    chart_url: str = Field(..., alias="chartUrl", description="Usage chart image URL")

    @field_validator("uaw")
    @classmethod
    def integral_uaw(cls, v: Union[int, float]) -> Union[int, float]:
        """Keep whole wallet counts below 1e21 as integers."""
        if abs(v) < 1e21 and float(v).is_integer():
            return int(v)
        return v


# Health Check Models
class HealthStatus(BaseModel):
    """Health check status."""
    status: Literal["healthy", "unhealthy", "degraded"] = Field(..., description="Overall status")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), description="Check timestamp"
    )
    version: str = Field(..., description="Application version")

    # Component statuses
    fonts: bool = Field(..., description="All font files present")
    browser_pool: bool = Field(..., description="Browser pool status")


# Error Models
class ErrorResponse(BaseModel):
    """Standard error response model."""
    error: str = Field(..., description="Error message")
    error_code: Optional[str] = Field(None, description="Error code")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), description="Error timestamp"
    )
    request_id: Optional[str] = Field(None, description="Request identifier for tracking")
