"""
Read operations for roadmaps.

The ``RoadmapService`` resolves a roadmap by id and assembles the full
and mini views, lists tag names and fetches the owner's profile from
the users service.  Every operation validates the id first and reports
a missing roadmap as ``NotFound`` before doing any further work.
"""

import json
import logging
from typing import Any, Dict, Optional

from fastapi.concurrency import run_in_threadpool

from ..core.db import Database
from ..core.errors import NotFound
from ..schemas.roadmap import RoadmapMini, RoadmapRead, RoadmapTags
from .user_client import ProxiedResponse, UsersClient
from .validation import parse_id, render_id

logger = logging.getLogger(__name__)


def _decode_data(raw: Optional[str]) -> Any:
    # Stored as JSON text; anything that does not decode is returned as-is
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


class RoadmapService:
    """Service for reading roadmaps, their tags and owners."""

    @classmethod
    async def _require_roadmap(cls, db: Database, roadmap_id: Optional[str]) -> Dict[str, Any]:
        rid = parse_id(roadmap_id, "Roadmap")
        roadmap = await run_in_threadpool(db.get, "roadmaps", rid)
        if not roadmap:
            raise NotFound("Roadmap does not exist.")
        return roadmap

    @classmethod
    async def get_full(cls, db: Database, roadmap_id: Optional[str]) -> RoadmapRead:
        """Return the full view of a roadmap.

        Star count and progress are not tracked yet and are not part of
        the view.
        """
        roadmap = await cls._require_roadmap(db, roadmap_id)
        issue_count = await run_in_threadpool(db.count_where, "issues", "roadmap_id", roadmap["id"])
        return RoadmapRead(
            id=render_id(roadmap["id"]),
            name=roadmap["name"],
            description=roadmap["description"],
            owner_id=render_id(roadmap["owner_id"]),
            issue_count=render_id(issue_count),
            created_at=roadmap["created_at"],
            updated_at=roadmap["updated_at"],
            is_public=bool(roadmap["is_public"]),
            data=_decode_data(roadmap["data"]),
        )

    @classmethod
    async def get_mini(cls, db: Database, roadmap_id: Optional[str]) -> RoadmapMini:
        roadmap = await cls._require_roadmap(db, roadmap_id)
        issue_count = await run_in_threadpool(db.count_where, "issues", "roadmap_id", roadmap["id"])
        return RoadmapMini(
            id=render_id(roadmap["id"]),
            name=roadmap["name"],
            description=roadmap["description"],
            issue_count=render_id(issue_count),
            owner_id=render_id(roadmap["owner_id"]),
        )

    @classmethod
    async def get_tags(cls, db: Database, roadmap_id: Optional[str]) -> RoadmapTags:
        """Return the tag names of a roadmap in scan order.

        A roadmap without tags yields an empty list, not an error.
        """
        roadmap = await cls._require_roadmap(db, roadmap_id)
        tags = await run_in_threadpool(db.get_all_where, "roadmap_tags", "roadmap_id", roadmap["id"])
        return RoadmapTags(tags=[tag["name"] for tag in tags])

    @classmethod
    async def get_owner(
        cls,
        db: Database,
        users: UsersClient,
        roadmap_id: Optional[str],
        *,
        mini: bool = False,
    ) -> ProxiedResponse:
        """Fetch the roadmap owner's profile from the users service.

        The users service response is returned unchanged; failures
        surface as ``DependencyFailure`` (see ``user_client``).
        """
        roadmap = await cls._require_roadmap(db, roadmap_id)
        logger.debug(
            "Resolving owner %s of roadmap %s (mini=%s)", roadmap["owner_id"], roadmap["id"], mini
        )
        return await users.fetch_profile(int(roadmap["owner_id"]), mini=mini)
