"""
Business logic for roadmap issues.

Issues are created by any authenticated user and deleted by either
their creator or the owner of the roadmap they belong to.  Each
operation runs its checks first and touches the store at most once,
so a failed call never leaves a partial write behind.
"""

import json
import logging
from typing import Any, Dict, Optional, Union

from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

from ..core.db import Database
from ..core.errors import Forbidden, InvalidArgument, NotFound, PersistenceFailure
from ..core.security import CallerIdentity
from ..schemas.issue import IssueCreate, IssueCreated, IssueDeleted
from .validation import parse_id, render_id

logger = logging.getLogger(__name__)

INVALID_ISSUE = "Issue data is invalid."


def parse_issue_payload(raw_body: Union[bytes, str]) -> IssueCreate:
    """Parse a create-issue request body into an ``IssueCreate``.

    The body is ``{"issue": ...}`` where the issue is either a JSON
    encoded string or an object.  Every failure is reported as the
    same ``InvalidArgument`` so clients get no detail about which part
    was wrong.
    """
    try:
        body = json.loads(raw_body)
    except (TypeError, ValueError):
        raise InvalidArgument(INVALID_ISSUE) from None
    if not isinstance(body, dict):
        raise InvalidArgument(INVALID_ISSUE)
    issue_data: Any = body.get("issue")
    if isinstance(issue_data, str):
        try:
            issue_data = json.loads(issue_data)
        except ValueError:
            raise InvalidArgument(INVALID_ISSUE) from None
    if not issue_data or not isinstance(issue_data, dict):
        raise InvalidArgument(INVALID_ISSUE)
    try:
        return IssueCreate.model_validate(issue_data)
    except ValidationError as e:
        logger.debug("Rejected issue payload: %s", e)
        raise InvalidArgument(INVALID_ISSUE) from None


class IssueService:
    """Service for creating and deleting issues."""

    @classmethod
    async def create_issue(
        cls,
        db: Database,
        roadmap_id: Optional[str],
        raw_body: Union[bytes, str],
        caller: CallerIdentity,
    ) -> IssueCreated:
        """Create an issue on a roadmap and return its new id.

        The caller must already be authenticated.  Any ``id`` or
        ``userId`` in the payload is discarded: the store assigns the
        id and the creator is always the caller.  A roadmap that does
        not exist makes the insert fail (foreign key), reported as
        ``PersistenceFailure``.
        """
        rid = parse_id(roadmap_id, "Roadmap")
        issue = parse_issue_payload(raw_body)
        record: Dict[str, Any] = {
            "roadmap_id": rid,
            "user_id": caller.user_id,
            "open": int(issue.open),
            "title": issue.title,
            "content": issue.content,
            "created_at": issue.created_at.isoformat(),
            "updated_at": issue.updated_at.isoformat(),
        }
        issue_id = await run_in_threadpool(db.insert, "issues", record)
        if issue_id < 0:
            logger.error("Failed to save issue for roadmap %s by user %s", rid, caller.user_id)
            raise PersistenceFailure("Issue could not be saved to database.")
        logger.info("User %s created issue %s on roadmap %s", caller.user_id, issue_id, rid)
        return IssueCreated(id=render_id(issue_id))

    @classmethod
    async def delete_issue(
        cls,
        db: Database,
        issue_id: Optional[str],
        caller: CallerIdentity,
    ) -> IssueDeleted:
        """Delete an issue.

        Only the issue's creator or the owner of its roadmap may delete
        it.  A missing issue is reported before any permission check.
        """
        iid = parse_id(issue_id, "Issue")
        issue = await run_in_threadpool(db.get, "issues", iid)
        if not issue:
            raise NotFound("Issue not found.")
        roadmap = await run_in_threadpool(db.get, "roadmaps", issue["roadmap_id"])
        if not roadmap:
            raise NotFound("Roadmap not found.")
        if caller.user_id not in (issue["user_id"], roadmap["owner_id"]):
            logger.warning(
                "User %s denied deleting issue %s on roadmap %s",
                caller.user_id,
                iid,
                roadmap["id"],
            )
            raise Forbidden("User is not owner of issue or roadmap.")
        deleted = await run_in_threadpool(db.delete, "issues", iid)
        if not deleted:
            logger.error("Failed to delete issue %s", iid)
            raise PersistenceFailure("Issue could not be deleted.")
        logger.info("User %s deleted issue %s", caller.user_id, iid)
        return IssueDeleted(success=True)
