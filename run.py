"""Entry point for the Roadmap API.

Starts the FastAPI application with Uvicorn.  Host and port are read
from the environment variables ``API_HOST`` and ``API_PORT`` (defaults
``0.0.0.0`` and ``8000``).  Other configuration (database path, users
service URL, secret key) is read by ``roadmap_api.app.core.config``.

Usage:
    python run.py
"""
import asyncio
import os

from uvicorn import Config, Server

from roadmap_api.app.core.config import settings


async def main() -> None:
    host = os.getenv("API_HOST", "0.0.0.0")
    port = int(os.getenv("API_PORT", "8000"))
    config = Config(
        app="roadmap_api.app.main:app",
        host=host,
        port=port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    server = Server(config)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
