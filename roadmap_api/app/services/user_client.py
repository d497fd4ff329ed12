"""
Client for the users service.

Owner lookups compose roadmap data with user profiles that live in a
separately owned service.  ``UsersClient.fetch_profile`` performs one
``GET`` per call and returns a ``ProxiedResponse`` that endpoints send
back unchanged.

Forwarding contract: a 2xx response with a JSON body is forwarded
verbatim (status code and body).  Anything else (transport error,
non-2xx status, body that is not JSON) is logged and raised as
``DependencyFailure``, which clients only see as a generic 500.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from ..core.config import settings
from ..core.errors import DependencyFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProxiedResponse:
    """Status code and decoded JSON body of a users service response."""

    status_code: int
    body: Any


class UsersClient:
    """Thin ``httpx`` wrapper around ``GET /users/{id}`` and ``/users/{id}/mini``.

    A new ``httpx.AsyncClient`` is opened for every call; there is no
    pooling, retry or timeout override.  ``transport`` lets tests plug
    in ``httpx.MockTransport``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._transport = transport

    async def fetch_profile(self, user_id: int, *, mini: bool = False) -> ProxiedResponse:
        path = f"/users/{user_id}/mini" if mini else f"/users/{user_id}"
        url = f"{self.base_url}{path}"
        logger.debug("Fetching user profile from %s", url)
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.get(url)
        except httpx.HTTPError as exc:
            logger.error("Users service request to %s failed: %s", url, exc)
            raise DependencyFailure(f"Users service request failed: {exc}") from exc

        if not response.is_success:
            logger.error(
                "Users service returned %s for %s: %s",
                response.status_code,
                url,
                response.text[:200],
            )
            raise DependencyFailure(f"Users service returned {response.status_code}")
        try:
            body = response.json()
        except ValueError as exc:
            logger.error("Users service returned a non-JSON body for %s", url)
            raise DependencyFailure("Users service returned a non-JSON body") from exc
        return ProxiedResponse(status_code=response.status_code, body=body)


def get_users_client() -> UsersClient:
    """FastAPI dependency providing a client for the configured users service."""
    return UsersClient(settings.users_api_url)
