"""
HTTP adapter for the point-of-sale engine.

Exposes read-only snapshots and the engine operations through FastAPI.
"""

from api.main import app, create_app

__all__ = ["app", "create_app"]
