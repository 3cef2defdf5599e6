import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tracker.config import get_settings
from tracker.infrastructure.database import engine, initialize_database
from tracker.interfaces.api.routes import register_routes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the schema on start-up and release the engine on shutdown."""

    settings = get_settings()
    initialize_database()
    if not settings.vcs_webhook_token:
        logger.warning(
            "VCS_WEBHOOK_TOKEN is not set; the version-control webhook accepts unauthenticated requests"
        )
    if not settings.cron_secret:
        logger.warning(
            "CRON_SECRET is not set; the deadline reminder trigger accepts unauthenticated requests"
        )
    yield
    engine.dispose()


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="Tracker notifications", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.app_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(Exception, unhandled_exception_handler)

    register_routes(app)
    return app


app = create_app()
