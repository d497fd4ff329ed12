"""
Pydantic schemas for roadmap views.

Roadmaps are read-only in this API.  ``RoadmapRead`` is the full view,
``RoadmapMini`` the reduced projection used in lists and summaries,
and ``RoadmapTags`` wraps the tag names of a roadmap.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field


class RoadmapMini(BaseModel):
    """Reduced roadmap view for summary contexts."""

    id: str
    name: str
    description: Optional[str] = None
    issue_count: str = Field(..., alias="issueCount")
    owner_id: str = Field(..., alias="ownerId")

    model_config = {
        "populate_by_name": True,
    }


class RoadmapRead(BaseModel):
    """Full roadmap view."""

    id: str
    name: str
    description: Optional[str] = None
    owner_id: str = Field(..., alias="ownerId")
    issue_count: str = Field(..., alias="issueCount")
    created_at: Optional[str] = Field(None, alias="createdAt")
    updated_at: Optional[str] = Field(None, alias="updatedAt")
    is_public: bool = Field(..., alias="isPublic")
    data: Any = None

    model_config = {
        "populate_by_name": True,
    }


class RoadmapTags(BaseModel):
    tags: List[str]
