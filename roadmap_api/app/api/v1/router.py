"""
Top‑level router for version 1 of the API.

Both resource routers live under ``/roadmaps``: issues are addressed
as ``/roadmaps/{roadmap_id}/issues``.
"""

from fastapi import APIRouter

from .endpoints import issues, roadmaps

router = APIRouter()

router.include_router(roadmaps.router, prefix="/roadmaps", tags=["roadmaps"])
router.include_router(issues.router, prefix="/roadmaps", tags=["issues"])
