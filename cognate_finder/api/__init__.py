"""API layer with FastAPI routes.

Barrel export for route definitions.
"""

from .routes import router

__all__ = ["router"]
