"""API package - HTTP routers over the shared services."""

from .routes_heuristics import router as heuristics_router
from .routes_mind import router as mind_router
from .routes_validation import router as validation_router

__all__ = [
    "heuristics_router",
    "mind_router",
    "validation_router",
]
