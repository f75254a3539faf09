from app.api.routes.auth import router as auth_router
from app.api.routes.properties import router as properties_router
from app.api.routes.media import router as media_router
from app.api.routes.viewings import router as viewings_router
from app.api.routes.photo_jobs import router as photo_jobs_router
from app.api.routes.notifications import (
    router as notifications_router,
    announcements_router,
)
from app.api.routes.analytics import router as analytics_router
from app.api.routes.admin import router as admin_router

__all__ = [
    "auth_router",
    "properties_router",
    "media_router",
    "viewings_router",
    "photo_jobs_router",
    "notifications_router",
    "announcements_router",
    "analytics_router",
    "admin_router",
]
