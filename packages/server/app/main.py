"""
Roomdesk API Server

Entry point for the FastAPI application.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import Settings, get_settings
from app.core.database import create_engine, make_session_factory, run_migrations
from app.core.errors import register_error_handlers
from app.core.logging import configure_logging
from app.core.middleware import RequestContextMiddleware
from app.api.v1 import router as api_v1_router
from app.api.v1.auth import router as auth_router

log = structlog.get_logger()


def create_app(
    settings: Optional[Settings] = None,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``session_factory`` overrides the engine built from ``settings.database_url``.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_format)

    engine = None
    if session_factory is None:
        engine = create_engine(settings)
        session_factory = make_session_factory(engine)

    app = FastAPI(
        title="Roomdesk",
        description="Residents, rooms and cleaning/maintenance requests.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    app.state.settings = settings
    app.state.session_factory = session_factory

    # Middleware (the last one added runs outermost)
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "Content-Type", "Accept", "Authorization"],
        expose_headers=["Content-Length"],
        max_age=12 * 60 * 60,
    )

    register_error_handlers(app)

    # Auth routes (sign-up / sign-in)
    app.include_router(auth_router, prefix="/auth", tags=["Authentication"])

    # API routes
    app.include_router(api_v1_router, prefix="/api/v1")

    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint for liveness probes."""
        return {"status": "ok"}

    @app.get("/ready", tags=["System"])
    async def readiness_check():
        """Readiness check endpoint: the database must answer."""
        try:
            async with app.state.session_factory() as session:
                await session.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as exc:
            log.warning("readiness.database_unavailable", error=str(exc))
            return JSONResponse(status_code=503, content={"status": "unavailable"})
        return {"status": "ready"}

    @app.on_event("startup")
    async def on_startup():
        log.info("roomdesk.starting", should_migrate=settings.should_migrate)
        if settings.should_migrate:
            await asyncio.to_thread(run_migrations, settings.database_url)

    @app.on_event("shutdown")
    async def on_shutdown():
        log.info("roomdesk.shutting_down")
        if engine is not None:
            await engine.dispose()

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run("app.main:app", host=settings.host, port=settings.port)
