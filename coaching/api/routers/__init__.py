"""API routers."""

from .classes import router as classes_router
from .courses import router as courses_router
from .health import router as health_router

__all__ = [
    "classes_router",
    "courses_router",
    "health_router",
]
