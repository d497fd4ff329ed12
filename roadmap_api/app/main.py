"""
Main entrypoint for the Roadmap API.

This module assembles the FastAPI application, sets up logging,
registers the error handler and includes versioned routers.  The
``create_app`` function builds and configures the app, which is then
instantiated at module import time as ``app``, e.g.::

    uvicorn roadmap_api.app.main:app --reload
"""

from fastapi import FastAPI

from .api.v1.router import router as v1_router
from .core.config import settings
from .core.db import init_db
from .core.errors import ServiceError, service_error_handler
from .core.logging_config import setup_logging


def create_app() -> FastAPI:
    """Create and configure a FastAPI application.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    # Logging first so that everything below can log.
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)

    # Every ServiceError becomes {"error": message} with its status code.
    app.add_exception_handler(ServiceError, service_error_handler)

    app.include_router(v1_router, prefix="/api/v1")

    @app.on_event("startup")
    async def startup_event() -> None:
        # Creates the database file if needed and applies migrations.
        init_db()

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
