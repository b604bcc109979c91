"""API v1: router and dependency providers."""

from app.api.v1.router import api_router

__all__ = ["api_router"]
