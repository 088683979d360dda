"""
Main entrypoint for the TechTrove API.

``create_app`` builds the FastAPI application: logging, CORS, error
handlers, routes and the document store lifecycle.  The store is
connected on startup and closed on shutdown, so no request is served
before the database answers.  A module-level ``app`` is created for
ASGI servers::

    uvicorn techtrove_api.app.main:app --port 5000
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.router import router
from .core.config import Settings, settings as default_settings
from .core.db import DocumentStore, build_store
from .core.errors import ServiceError
from .core.logging_config import setup_logging

logger = logging.getLogger(__name__)


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return f"{location}: {message}" if location else message


def register_exception_handlers(app: FastAPI) -> None:
    """Render every error as ``{"error": "<message>"}``."""

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        # Malformed bodies are a client error like any other missing field.
        return _error_response(status.HTTP_400_BAD_REQUEST, _describe_validation_error(exc))

    # Must be added before CORSMiddleware so 500s still carry CORS headers.
    @app.middleware("http")
    async def unexpected_error_middleware(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            logger.exception("Unhandled error on %s %s", request.method, request.url.path)
            return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))


def create_app(settings: Optional[Settings] = None, store: Optional[DocumentStore] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    settings : Optional[Settings]
        Configuration to use; defaults to the values read from the
        environment.
    store : Optional[DocumentStore]
        Store backend.  When omitted one is built from ``settings``.
        Tests pass an ``InMemoryDocumentStore`` here.

    Returns
    -------
    FastAPI
        The configured application.  ``app.state.store`` holds the
        store; it is connected when the application starts.
    """
    settings = settings or default_settings
    setup_logging(settings.log_level, settings.log_file or None)

    store = store if store is not None else build_store(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # Connect before the first request and release the client on exit.
        await store.connect()
        try:
            yield
        finally:
            await store.close()

    app = FastAPI(title=settings.project_name, version=settings.api_version, lifespan=lifespan)
    app.state.store = store

    register_exception_handlers(app)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)

    return app


# Created at import time so uvicorn can discover it.
app = create_app()
