"""API routers."""

from reviewgate.routers.analytics import router as analytics_router
from reviewgate.routers.applications import router as applications_router
from reviewgate.routers.guilds import router as guilds_router
from reviewgate.routers.lookup import router as lookup_router
from reviewgate.routers.modmail import router as modmail_router
from reviewgate.routers.review import router as review_router

__all__ = [
    "analytics_router",
    "applications_router",
    "guilds_router",
    "lookup_router",
    "modmail_router",
    "review_router",
]
