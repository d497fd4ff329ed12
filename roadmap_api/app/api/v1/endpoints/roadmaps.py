"""
Roadmap read endpoints for API v1.

These routes are public.  Ids are taken as strings from the path so
that malformed ids produce a 400 ``{"error": ...}`` response from the
service layer instead of a validation error from the framework.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from roadmap_api.app.core.db import Database, get_db
from roadmap_api.app.schemas.roadmap import RoadmapMini, RoadmapRead, RoadmapTags
from roadmap_api.app.services.roadmap_service import RoadmapService
from roadmap_api.app.services.user_client import UsersClient, get_users_client

router = APIRouter()


@router.get("/{roadmap_id}", response_model=RoadmapRead, summary="Get a roadmap")
async def get_roadmap(roadmap_id: str, db: Database = Depends(get_db)) -> RoadmapRead:
    """Return the full view of a roadmap, including its issue count."""
    return await RoadmapService.get_full(db, roadmap_id)


@router.get("/{roadmap_id}/mini", response_model=RoadmapMini, summary="Get a roadmap summary")
async def get_roadmap_mini(roadmap_id: str, db: Database = Depends(get_db)) -> RoadmapMini:
    return await RoadmapService.get_mini(db, roadmap_id)


@router.get("/{roadmap_id}/tags", response_model=RoadmapTags, summary="List roadmap tags")
async def get_roadmap_tags(roadmap_id: str, db: Database = Depends(get_db)) -> RoadmapTags:
    return await RoadmapService.get_tags(db, roadmap_id)


@router.get("/{roadmap_id}/owner", summary="Get the roadmap owner's profile")
async def get_roadmap_owner(
    roadmap_id: str,
    db: Database = Depends(get_db),
    users: UsersClient = Depends(get_users_client),
) -> JSONResponse:
    """Proxy the users service profile of the roadmap owner.

    Status code and body come straight from the users service.
    """
    proxied = await RoadmapService.get_owner(db, users, roadmap_id)
    return JSONResponse(status_code=proxied.status_code, content=proxied.body)


@router.get("/{roadmap_id}/owner/mini", summary="Get the roadmap owner's short profile")
async def get_roadmap_owner_mini(
    roadmap_id: str,
    db: Database = Depends(get_db),
    users: UsersClient = Depends(get_users_client),
) -> JSONResponse:
    proxied = await RoadmapService.get_owner(db, users, roadmap_id, mini=True)
    return JSONResponse(status_code=proxied.status_code, content=proxied.body)
