"""
Main entrypoint for the CarVault API.

This module assembles the FastAPI application, sets up logging,
registers error handlers and includes versioned routers.  The
``create_app`` function builds and configures the app, which is then
instantiated at module import time as ``app``, e.g.::

    uvicorn carvault_api.app.main:app --reload

Every error leaves the API as ``{"kind": ..., "message": ...}`` so
clients can branch on ``kind`` without parsing messages.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.v1.router import router as v1_router
from .core.config import settings
from .core.db import init_db
from .core.exceptions import CarVaultError
from .core.logging_config import setup_logging
from .schemas.car import CarDeletePolicy


logger = logging.getLogger(__name__)

_KIND_BY_STATUS = {
    400: "ValidationError",
    401: "Unauthorized",
    404: "NotFound",
    405: "MethodNotAllowed",
}


async def carvault_error_handler(request: Request, exc: CarVaultError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report request validation failures as 400 ``ValidationError``."""
    errors = []
    for err in exc.errors():
        loc = ".".join(str(item) for item in err.get("loc", []) if item != "body")
        errors.append({"field": loc or "body", "message": err.get("msg", "validation error")})
    message = errors[0]["message"] if len(errors) == 1 else "Invalid request payload"
    return JSONResponse(
        status_code=400,
        content={"kind": "ValidationError", "message": message, "errors": errors},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"kind": _KIND_BY_STATUS.get(exc.status_code, "HTTPError"), "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    # Details stay in the log; the client only learns that something failed.
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"kind": "ServerError", "message": "Server error"})


def create_app() -> FastAPI:
    """Create and configure a FastAPI application.

    This function performs one‑time setup tasks such as configuring
    logging, checking the car delete policy, registering exception
    handlers and including versioned API routers.  Raises ``ValueError``
    if ``ON_CAR_DELETE`` is not a known policy.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    # Initialise logging before anything else so that setup below can
    # safely log messages.
    setup_logging(
        settings.log_level,
        settings.log_file or None,
        max_bytes=settings.log_max_bytes,
        backup_count=settings.log_backup_count,
    )

    # A misspelt ON_CAR_DELETE fails here rather than on the first delete.
    delete_policy = CarDeletePolicy.from_setting(settings.on_car_delete)
    logger.info("Car delete policy: %s", delete_policy.value)

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)

    app.add_exception_handler(CarVaultError, carvault_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Mount versioned routes under /api/v1.
    app.include_router(v1_router, prefix="/api/v1")

    @app.get("/api/v1/health", tags=["health"])
    async def health() -> dict:
        return {"status": "ok"}

    @app.on_event("startup")
    async def startup_event() -> None:
        # Creates the database file if needed and applies pending migrations.
        init_db()
        logger.info("Database ready at %s", settings.database_url)

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
