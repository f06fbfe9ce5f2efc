"""API routes package."""

from app.routes.analysis import router as analysis_router
from app.routes.documents import router as documents_router
from app.routes.health import router as health_router
from app.routes.settings import router as settings_router
from app.routes.templates import router as templates_router

__all__ = [
    "analysis_router",
    "documents_router",
    "health_router",
    "settings_router",
    "templates_router",
]
