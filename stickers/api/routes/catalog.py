"""
Catalog Routes
==============

Read endpoints for the example jettons and tracked projects.
"""

from typing import List

from fastapi import APIRouter, Depends, Request

from stickers.data.catalog import Catalog
from stickers.models.schemas import Project, Token

router = APIRouter(tags=["Catalog"])


def get_catalog(request: Request) -> Catalog:
    """Catalog injected into the application at startup."""
    return request.app.state.catalog


@router.get("/jettons", response_model=List[Token])
async def list_jettons(catalog: Catalog = Depends(get_catalog)) -> List[Token]:
    """All jettons in the catalog."""
    return catalog.token_list()


@router.get("/tracker", response_model=List[Project])
async def list_projects(catalog: Catalog = Depends(get_catalog)) -> List[Project]:
    """All tracked projects in the catalog."""
    return catalog.project_list()
