"""API routers package."""

from .health import router as health_router
from .plan import router as plan_router

__all__ = [
    "health_router",
    "plan_router",
]
