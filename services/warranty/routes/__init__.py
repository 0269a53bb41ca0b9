"""Warranty registry API routes."""

from services.warranty.routes.registry import router as registry_router
from services.warranty.routes.warranties import router as warranties_router

__all__ = [
    "registry_router",
    "warranties_router",
]
