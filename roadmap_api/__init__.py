"""
Top‑level package for the Roadmap API.

This file makes ``roadmap_api`` a Python package so that modules
within ``app`` can be imported using fully qualified names like
``roadmap_api.app.main``.  The package provides no public exports;
all functionality lives in submodules under ``app``.
"""

__all__ = []
