"""
Application package initializer.

The project is organised by layer: ``api/v1/endpoints`` holds the HTTP
surface, ``services`` the business rules for roadmaps and issues,
``schemas`` the pydantic request/response models and ``core`` the
configuration, logging, storage access and session handling.  Each
resource (roadmaps, issues) exposes a router included by
``api/v1/router.py``.
"""

from .main import app  # noqa: F401
