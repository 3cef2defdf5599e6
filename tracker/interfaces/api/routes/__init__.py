from fastapi import FastAPI

from .admin import router as admin_router
from .auth import router as auth_router
from .cron import router as cron_router
from .notifications import router as notifications_router
from .notifications import test_router as test_notification_router
from .preferences import router as preferences_router
from .version_history import router as version_history_router
from .webhook import router as webhook_router


def register_routes(app: FastAPI) -> None:
    """Register every API router on the FastAPI application."""

    app.include_router(auth_router)
    app.include_router(admin_router)
    app.include_router(notifications_router)
    app.include_router(test_notification_router)
    app.include_router(preferences_router)
    app.include_router(cron_router)
    app.include_router(webhook_router)
    app.include_router(version_history_router)
