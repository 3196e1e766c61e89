"""API routers."""

from app.routers.applications import router as applications_router
from app.routers.employers import admin_router
from app.routers.employers import router as employers_router
from app.routers.jobs import router as jobs_router
from app.routers.notifications import router as notifications_router

__all__ = [
    "admin_router",
    "applications_router",
    "employers_router",
    "jobs_router",
    "notifications_router",
]
