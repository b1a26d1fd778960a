"""FastAPI routers package."""

from .enlistments import router as enlistment_router
from .health import router as health_router
from .metrics import router as metrics_router
from .presentations import router as presentation_router
from .showcase import router as showcase_router

__all__ = [
    "enlistment_router",
    "health_router",
    "metrics_router",
    "presentation_router",
    "showcase_router",
]
