"""
FastAPI Application Entry Point

This module initializes the FastAPI application and configures:
- The catch-all request route
- Middleware (request logging)
- Shared services (visitor log store, origin proxy) on app.state

Design Decisions:
- Interactive docs are disabled: every path on a parked domain belongs to
  the parked surface
- Startup never fails on an unreachable store; the parked page is served
  regardless of store health
"""

import logging

import httpx
from fastapi import FastAPI

from app.api import endpoints
from app.core.setting import settings
from app.db.session import async_session_maker, engine, init_db
from app.middleware.logging import add_logging_middleware
from app.services.log_store import VisitorLogStore
from app.services.origin_proxy import OriginProxy

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Parked Domain Tracker",
    description="Parking page and visitor logging for parked domains",
    version="1.0.0",
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)

add_logging_middleware(app)

app.include_router(endpoints.router)


@app.on_event("startup")
async def startup_event():
    """Create shared services and, if configured, missing tables."""
    app.state.log_store = VisitorLogStore(async_session_maker)
    app.state.origin_proxy = OriginProxy(
        client=httpx.AsyncClient(timeout=settings.ORIGIN_TIMEOUT_SECONDS),
        origin_overrides=settings.ORIGIN_OVERRIDES,
        origin_scheme=settings.ORIGIN_SCHEME,
    )

    if settings.AUTO_CREATE_TABLES:
        try:
            await init_db()
        except Exception as e:
            logger.error(f"Failed to create database tables: {str(e)}", exc_info=True)

    logger.info(
        f"Parked domain tracker started: "
        f"active_subdomains={settings.ACTIVE_SUBDOMAINS}, "
        f"env={settings.ENV_SETTING.value}"
    )


@app.on_event("shutdown")
async def shutdown_event():
    """Close the origin client and the database engine."""
    await app.state.origin_proxy.aclose()
    await engine.dispose()
