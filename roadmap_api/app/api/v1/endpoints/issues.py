"""
Issue endpoints for API v1.

Both routes require an authenticated caller.  The session dependency
runs before the request body is read, so anonymous callers are
rejected with 401 without learning whether their payload was valid.
"""

from fastapi import APIRouter, Depends, Request, status

from roadmap_api.app.core.db import Database, get_db
from roadmap_api.app.core.security import CallerIdentity, get_current_user
from roadmap_api.app.schemas.issue import IssueCreated, IssueDeleted
from roadmap_api.app.services.issue_service import IssueService

router = APIRouter()


@router.post(
    "/{roadmap_id}/issues",
    response_model=IssueCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Create an issue",
)
async def create_issue(
    roadmap_id: str,
    request: Request,
    current_user: CallerIdentity = Depends(get_current_user),
    db: Database = Depends(get_db),
) -> IssueCreated:
    """Create an issue on a roadmap.

    The body is ``{"issue": <issue>}`` where ``<issue>`` is a JSON
    object or a JSON encoded string of one.  The creator is always the
    authenticated caller.
    """
    raw_body = await request.body()
    return await IssueService.create_issue(db, roadmap_id, raw_body, current_user)


@router.delete(
    "/{roadmap_id}/issues/{issue_id}",
    response_model=IssueDeleted,
    summary="Delete an issue",
)
async def delete_issue(
    roadmap_id: str,
    issue_id: str,
    current_user: CallerIdentity = Depends(get_current_user),
    db: Database = Depends(get_db),
) -> IssueDeleted:
    """Delete an issue.

    Allowed for the issue's creator and the owner of its roadmap.  The
    roadmap is resolved from the issue record; ``roadmap_id`` in the
    path only routes the request.
    """
    return await IssueService.delete_issue(db, issue_id, current_user)
