"""
Main entrypoint for the Workspace Booking API.

This module assembles the FastAPI application: it sets up logging,
registers the error envelope handlers, includes the versioned routers
and applies database migrations on startup.  ``create_app`` builds the
app, which is then instantiated at import time as ``app`` so it can be
served directly::

    uvicorn workspace_booking_api.app.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .api.v1.router import router as v1_router
from .core.config import settings
from .core.db import init_db
from .core.exception_handlers import setup_exception_handlers
from .core.logging_config import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Creates the database file if needed and brings the schema up to date.
    init_db()
    logging.getLogger(__name__).info("%s %s ready", settings.project_name, settings.api_version)
    yield


def create_app() -> FastAPI:
    """Create and configure a FastAPI application.

    Logging is configured first so that everything below can log.
    Routes are mounted under ``/api/v1``.
    """
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug, lifespan=lifespan)
    setup_exception_handlers(app)
    app.include_router(v1_router, prefix="/api/v1")
    return app


app = create_app()
