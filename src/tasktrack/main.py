"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. The AppContext (engine, session factory, token signer) is
built here from Settings and hung on app.state, so nothing in the
request path reaches for module-level globals.

Run with:  uvicorn --factory tasktrack.main:create_app
(or `tasktrack serve`, which does the same).
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tasktrack import __version__
from tasktrack.api import api_router
from tasktrack.api.health import router as health_router
from tasktrack.config import Settings, get_settings
from tasktrack.context import AppContext
from tasktrack.db.engine import create_tables
from tasktrack.errors import install_exception_handlers
from tasktrack.logging_setup import configure_logging
from tasktrack.middleware.request_id import RequestIdMiddleware
from tasktrack.middleware.security import SecurityHeadersMiddleware

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs
    at shutdown.
    """
    ctx: AppContext = app.state.ctx
    settings = ctx.settings
    configure_logging(settings)

    logger.info(
        "tasktrack.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )
    if settings.uses_default_secret:
        logger.warning(
            "tasktrack.default_jwt_secret",
            hint="set TASKTRACK_JWT_SECRET before deploying",
        )

    if settings.create_tables:
        await create_tables(ctx.engine)
        logger.info("tasktrack.tables_created")

    yield

    logger.info("tasktrack.shutdown")
    await ctx.close()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="tasktrack",
        description="Multi-user task tracker with per-user task isolation",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.ctx = AppContext.from_settings(settings)

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → RequestId → Security → handler
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    install_exception_handlers(app)

    app.include_router(health_router, tags=["health"])
    app.include_router(api_router)

    return app
