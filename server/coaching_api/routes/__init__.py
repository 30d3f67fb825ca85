"""API route modules."""
from .insights import router as insights_router
from .sessions import router as sessions_router
from .records import router as records_router

__all__ = [
    "insights_router",
    "sessions_router",
    "records_router",
]
