"""
Main entrypoint for the Perilla API.

``create_app`` assembles the FastAPI application from an explicit
installation config: it builds the ``AppContext`` (database and
services), installs the envelope exception handlers and mounts the API
under ``/api``.  The database is migrated on startup and closed on
shutdown.  When a built frontend is present it is served at ``/``.

Run it with ``perilla serve`` or any ASGI server, e.g.::

    uvicorn --factory perilla_api.app.main:get_application
"""

import logging
import os
from typing import Optional

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from .api.router import router as api_router
from .core.config import Settings, SystemConfig, load_config
from .core.context import AppContext
from .core.envelope import register_exception_handlers
from .core.logging_config import setup_logging

logger = logging.getLogger(__name__)


def create_app(config: SystemConfig, settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    config : SystemConfig
        Installation configuration (usually ``load_config()``).
    settings : Optional[Settings]
        Process settings; read from the environment when omitted.

    Returns
    -------
    FastAPI
        A configured application.  Its ``state.context`` holds the
        ``AppContext`` used by the request handlers.
    """
    settings = settings or Settings()
    setup_logging(settings.log_level, settings.log_file or None)

    context = AppContext.from_config(config, settings)
    app = FastAPI(title=settings.project_name, version=settings.api_version)
    app.state.context = context

    register_exception_handlers(app)
    app.include_router(api_router, prefix="/api")

    @app.on_event("startup")
    async def startup_event() -> None:
        context.init()

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        context.close()

    # Mounted last so the API routes take precedence.
    if settings.frontend_path and os.path.isdir(settings.frontend_path):
        app.mount("/", StaticFiles(directory=settings.frontend_path, html=True), name="frontend")
        logger.info("Serving frontend from %s", settings.frontend_path)

    return app


def get_application() -> FastAPI:
    """Factory for ASGI servers: builds the app from ``config.json``."""
    return create_app(load_config())
