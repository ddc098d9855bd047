"""
Main entrypoint for the Cocktail Catalog API.

This module assembles the FastAPI application, sets up logging,
registers the error handlers and includes versioned routers.  The
``create_app`` function builds and configures the app, which is then
instantiated at module import time as ``app``::

    uvicorn cocktail_catalog_api.app.main:app --reload

Every catalog error is answered as ``{"detail": <message>}`` with the
status code its class declares; request validation failures become
400 rather than FastAPI's default 422.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.responses import JSONResponse

from .core.config import settings
from .core.exceptions import AuthRequiredError, CatalogError, describe_validation_error
from .core.logging_config import setup_logging
from .core.supabase_client import create_backend
from .api.v1.router import router as v1_router
from .services.mutation_state import MutationTracker

logger = logging.getLogger(__name__)


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s rejected (%s): %s", request.method, request.url.path, exc.status_code, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthRequiredError) else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": describe_validation_error(exc)})


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    if isinstance(exc, HTTPException):
        raise exc
    logger.exception("Unhandled exception occurred", exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "An unexpected error occurred."})


def create_app(backend: Optional[object] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    backend:
        Object exposing ``auth`` and ``storage_for(access_token)``.  When
        omitted, a Supabase backend is created from the settings at
        startup.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    # Initialise logging before anything else so that imports below can
    # safely log messages.
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)
    # One tracker per application so that repeated submissions are seen
    # across requests.
    app.state.tracker = MutationTracker()
    app.state.backend = backend

    app.add_exception_handler(CatalogError, catalog_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(v1_router, prefix="/api/v1")

    @app.on_event("startup")
    async def startup_event() -> None:
        if app.state.backend is None:
            backend = create_backend()
            await backend.connect()
            app.state.backend = backend

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
