"""
Error taxonomy shared by services and endpoints.

Services raise subclasses of ``ServiceError``; the application turns
them into JSON responses of the form ``{"error": <message>}`` with the
status code carried by the exception class (see ``main.create_app``).
"""

from typing import Dict, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse


class ServiceError(Exception):
    """Base class for failures reported at the operation boundary."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    headers: Optional[Dict[str, str]] = None

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidArgument(ServiceError):
    """Missing or unparseable identifier or payload."""

    status_code = status.HTTP_400_BAD_REQUEST


class Unauthenticated(ServiceError):
    """No caller identity on a mutating call."""

    status_code = status.HTTP_401_UNAUTHORIZED
    headers = {"WWW-Authenticate": "Bearer"}


class Forbidden(ServiceError):
    """Caller is authenticated but not allowed to perform the action."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND


class DependencyFailure(ServiceError):
    """A remote service call failed.

    The message given at construction is kept for logging only; clients
    always receive a generic message.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message = "An error occurred."


class PersistenceFailure(ServiceError):
    """The store reported that a write did not happen."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Render a ``ServiceError`` as ``{"error": message}``."""
    message = getattr(exc, "public_message", exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": message},
        headers=exc.headers,
    )
