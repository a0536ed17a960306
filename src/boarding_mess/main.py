"""Main entry point for the Boarding Mess application."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from boarding_mess.api.v1 import (
    changes_router,
    chat_router,
    ledger_router,
    meals_router,
    members_router,
    reports_router,
    system_router,
)
from boarding_mess.core.logging import configure_logging
from boarding_mess.core.settings import settings
from boarding_mess.services.change_feed import install_change_feed_hooks
from boarding_mess.services.scheduler import CutoffScheduler

configure_logging()
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Boarding Mess API",
    description="Meal registration and shared accounting for a boarding household",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(system_router, prefix="/api/v1")
app.include_router(members_router, prefix="/api/v1")
app.include_router(meals_router, prefix="/api/v1")
app.include_router(chat_router, prefix="/api/v1")
app.include_router(changes_router, prefix="/api/v1")
app.include_router(reports_router, prefix="/api/v1")
app.include_router(ledger_router, prefix="/api/v1")

install_change_feed_hooks()


@app.on_event("startup")
async def on_startup() -> None:
    if settings.scheduler_enabled:
        scheduler = CutoffScheduler()
        await scheduler.start()
        app.state.scheduler = scheduler
        logger.info("Cutoff scheduler started")
    else:
        app.state.scheduler = None


@app.on_event("shutdown")
async def on_shutdown() -> None:
    scheduler: CutoffScheduler | None = getattr(app.state, "scheduler", None)
    if scheduler:
        await scheduler.stop()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Meal registration and shared accounting for a boarding household",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("boarding_mess.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
