"""
Sticker Routes
==============

Render jetton and tracker stickers. The record to draw is sent as a JSON body;
``image_type=svg`` returns SVG markup, anything else returns PNG bytes.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, Request
from fastapi.responses import Response

from stickers.config.logging import get_logger
from stickers.core.markup.cards import build_jetton_card, build_tracker_card
from stickers.core.markup.tree import Node
from stickers.core.pipeline import StickerPipeline
from stickers.models.schemas import ImageType, Project, Token

logger = get_logger(__name__)

router = APIRouter(tags=["Stickers"])

IMAGE_RESPONSES = {
    200: {
        "content": {"image/svg+xml": {}, "image/png": {}},
        "description": "Rendered sticker",
    }
}


def get_pipeline(request: Request) -> StickerPipeline:
    """Pipeline configured on the application at startup."""
    return request.app.state.pipeline


def get_now() -> datetime:
    """Timestamp printed on the sticker (server local time)."""
    return datetime.now()


async def _render(
    tree: Node, image_type: Optional[str], pipeline: StickerPipeline, sticker: str
) -> Response:
    output = ImageType.from_query(image_type)
    logger.info("Sticker render requested", sticker=sticker, image_type=output.value)

    result = await pipeline.run(tree, output)

    logger.info(
        "Sticker render completed",
        sticker=sticker,
        image_type=output.value,
        size=len(result.content),
    )
    return Response(content=result.content, media_type=result.media_type)


@router.api_route(
    "/sticker/jetton",
    methods=["GET", "POST"],
    response_class=Response,
    responses=IMAGE_RESPONSES,
)
async def jetton_sticker(
    token: Token = Body(...),
    image_type: Optional[str] = Query(None, description="svg for vector output, otherwise PNG"),
    pipeline: StickerPipeline = Depends(get_pipeline),
    now: datetime = Depends(get_now),
) -> Response:
    """Render the price ticker card for a jetton."""
    return await _render(build_jetton_card(token, now), image_type, pipeline, "jetton")


@router.api_route(
    "/sticker/tracker",
    methods=["GET", "POST"],
    response_class=Response,
    responses=IMAGE_RESPONSES,
)
async def tracker_sticker(
    project: Project = Body(...),
    image_type: Optional[str] = Query(None, description="svg for vector output, otherwise PNG"),
    pipeline: StickerPipeline = Depends(get_pipeline),
    now: datetime = Depends(get_now),
) -> Response:
    """Render the usage tracker card for a project."""
    return await _render(build_tracker_card(project, now), image_type, pipeline, "tracker")
