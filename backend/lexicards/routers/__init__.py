"""API routers module."""

from .cards import router as cards_router
from .srs import router as srs_router
from .seed import router as seed_router
from .images import router as images_router
from .history import router as history_router

__all__ = [
    "cards_router",
    "srs_router",
    "seed_router",
    "images_router",
    "history_router",
]
