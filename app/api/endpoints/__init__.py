"""Expose API endpoint routers."""

from app.api.endpoints import places, recommendations, search

__all__ = ["places", "recommendations", "search"]
