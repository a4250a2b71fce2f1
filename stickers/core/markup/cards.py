"""
Sticker Cards
=============

Builds the visual trees for the jetton price card and the project tracker
card. Both share the same dark chrome: a header with logo, title and date, a
body block, a chart footer and the re:doubt watermark.
"""

import base64
from datetime import datetime
from decimal import Decimal
from typing import Tuple, Union

from stickers.core.markup.tree import ContainerNode, Edges, ImageNode, box, image, text
from stickers.models.schemas import Project, Token

MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

CARD_WIDTH = 512
CARD_HEIGHT = 410
CARD_BACKGROUND = "rgb(17 24 39)"
DATE_COLOR = "rgb(209 213 219)"
TON_PRICE_COLOR = "#f3f4f6"
UAW_LABEL_COLOR = "#d1d5db"
WATERMARK_COLOR = "#6b7280"
WATERMARK_TEXT = "made by re:doubt"

POSITIVE_COLOR = "#48DE80"
NEGATIVE_COLOR = "rgb(244, 63, 94)"

ARROW_SVG = (
    '<svg width="16" height="23" viewBox="0 0 17 25" fill="none" '
    'xmlns="http://www.w3.org/2000/svg">'
    '<g transform="rotate({angle} 8.5 12.5)" stroke="{color}" stroke-width="3" '
    'stroke-linecap="round" stroke-linejoin="round">'
    '<path d="M15.125 8.5625L8.5625 2L2 8.5625"/>'
    '<path d="M8.5625 2V23"/>'
    "</g></svg>"
)


def format_date(now: datetime) -> str:
    """Format a timestamp as ``<day> <Mon> <year>``, e.g. ``5 Mar 2024``."""
    return f"{now.day} {MONTHS[now.month - 1]} {now.year}"


def format_number(value: Union[int, float]) -> str:
    """Print a number the way JavaScript string interpolation does."""
    if isinstance(value, int):
        if abs(value) < 10**21:
            return str(value)
        value = float(value)
    if value == 0:
        return "0"

    # repr gives the shortest round-trip digits, as JavaScript does
    digits = repr(value)
    if "e" not in digits:
        return digits[:-2] if digits.endswith(".0") else digits

    mantissa, exponent = digits.split("e")
    exp = int(exponent)
    if -7 < exp < 21:
        return format(Decimal(digits), "f")
    return f"{mantissa}e{'+' if exp > 0 else '-'}{abs(exp)}"


def delta_style(delta: float) -> Tuple[str, str]:
    """Return (colour, arrow direction) for a signed change; zero reads as down."""
    if delta > 0:
        return POSITIVE_COLOR, "up"
    return NEGATIVE_COLOR, "down"


def arrow_icon(direction: str, color: str) -> ImageNode:
    """Arrow glyph as an inline SVG image with its colour baked in."""
    angle = 0 if direction == "up" else 180
    markup = ARROW_SVG.format(angle=angle, color=color)
    src = "data:image/svg+xml;base64," + base64.b64encode(markup.encode("utf-8")).decode("ascii")
    return image(src, width=16, height=23, margin=Edges(bottom=2))


def _delta_row(delta: float) -> ContainerNode:
    color, direction = delta_style(delta)
    return box(
        arrow_icon(direction, color),
        text(f"{format_number(abs(delta))}%", font_size=30, line_height=1, font_weight=500),
        align_items="center",
        gap=8,
        color=color,
    )


def _header(logo_url: str, title: str, now: datetime) -> ContainerNode:
    return box(
        box(
            image(logo_url, width=40, height=40, border_radius=20, object_fit="cover"),
            text(title, font_size=26, font_weight=600),
            align_items="center",
            gap=12,
        ),
        text(format_date(now), font_size=24, color=DATE_COLOR, font_weight=500),
        justify_content="space-between",
        align_items="center",
    )


def _card(logo_url: str, title: str, now: datetime, body: ContainerNode, chart_url: str) -> ContainerNode:
    content = box(
        _header(logo_url, title, now),
        body,
        flex_direction="column",
        gap=16,
        padding=Edges.of(28, 28, 0, 28),
    )
    card = box(
        content,
        image(chart_url, padding=Edges(bottom=70)),
        background_color=CARD_BACKGROUND,
        border_radius=40,
        overflow="hidden",
        width=CARD_WIDTH,
        height=CARD_HEIGHT,
        color="white",
        flex_direction="column",
        justify_content="space-between",
    )
    watermark = text(
        WATERMARK_TEXT,
        position="absolute",
        bottom=32,
        left_percent=50,
        translate_x_percent=-50,
        color=WATERMARK_COLOR,
        font_size=26,
        font_weight=500,
    )
    return box(card, watermark, padding=Edges.of(10, 0))


def build_jetton_card(token: Token, now: datetime) -> ContainerNode:
    """
    Build the price ticker card for a jetton.

    Args:
        token: Validated token snapshot
        now: Timestamp shown in the header

    Returns:
        Root container of the card
    """
    body = box(
        text(f"${format_number(token.price.usd)}", font_size=56, font_weight=800, line_height=1),
        text(
            f"{format_number(token.price.ton)} TON",
            color=TON_PRICE_COLOR,
            font_size=32,
            line_height=1,
            font_weight=500,
            margin=Edges(bottom=2),
        ),
        _delta_row(token.delta),
        flex_direction="column",
        gap=12,
    )
    return _card(token.logo_url, token.symbol, now, body, token.chart_url)


def build_tracker_card(project: Project, now: datetime) -> ContainerNode:
    """Build the usage tracker card for a project."""
    metric = box(
        box(
            text(format_number(project.uaw)),
            text(
                "UAW",
                font_size=26,
                font_weight=500,
                color=UAW_LABEL_COLOR,
                line_height=1,
                translate_y=-6,
            ),
            font_size=56,
            font_weight=800,
            line_height=1,
            align_items="baseline",
            gap=8,
        ),
        align_items="baseline",
        gap=6,
    )
    body = box(metric, _delta_row(project.uaw_delta), flex_direction="column", gap=10)
    return _card(project.logo_url, project.name, now, body, project.chart_url)
