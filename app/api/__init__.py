"""API endpoints for ProspectIntel"""

from .routes import router

__all__ = ["router"]
