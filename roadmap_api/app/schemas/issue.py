"""
Pydantic schemas for roadmap issues.

``IssueCreate`` validates the issue object supplied by clients.  The
``id``, ``userId`` and ``roadmapId`` a client might send are not part
of the model: the store assigns the id, the caller identity provides
the user and the route provides the roadmap.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field, ValidationError, ValidatorFunctionWrapHandler, field_validator

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class IssueCreate(BaseModel):
    """Schema for creating an issue.

    ``createdAt`` and ``updatedAt`` are re-parsed from whatever the
    client sent.  Missing, null or unparseable values fall back to the
    current UTC time instead of failing the request.  Values without a
    timezone are taken as UTC.
    """

    title: str = Field(..., min_length=1, max_length=255)
    content: str = ""
    open: bool = True
    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")
    updated_at: datetime = Field(default_factory=_utcnow, alias="updatedAt")

    model_config = {
        "populate_by_name": True,
    }

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title must not be blank")
        return v

    @field_validator("created_at", "updated_at", mode="wrap")
    @classmethod
    def timestamp_or_now(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> datetime:
        if value is None:
            return _utcnow()
        try:
            parsed = handler(value)
        except ValidationError:
            logger.warning("Unparseable issue timestamp %r replaced with current time", value)
            return _utcnow()
        # Timestamps without an offset are taken as UTC
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed


class IssueCreated(BaseModel):
    id: str


class IssueDeleted(BaseModel):
    success: bool = True
