"""
SSP Realty - FastAPI Application
==================================
Creates and configures the FastAPI application for the SSP Realty backend.

Responsibilities:
    - Load settings (or accept injected ones) and set up logging
    - Build the credential verifier, token service and record store
    - Register CORS, the API router and the global error handlers
    - Close the record store on shutdown (lifespan)

Error handlers:
    RealtyError             -> its own status with {"error": message}
    RequestValidationError  -> 400 {"error": "Invalid request body"}
    Exception (catch-all)   -> 500 {"error": "Internal server error"},
                               detail logged server-side only
"""

import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from realty_api.auth import CredentialVerifier, TokenService
from realty_api.config import ConfigManager, Settings
from realty_api.errors import RealtyError
from realty_api.observability import setup_logging
from realty_api.routes import create_router
from realty_api.store import RecordStore, open_store


logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    store: RecordStore | None = None,
    project_dir: str | None = None,
) -> FastAPI:
    """
    Application factory: create and configure the FastAPI instance.

    Args:
        settings:    Runtime settings. Loaded through ConfigManager if None.
        store:       Record store. Opened from settings.store_uri if None.
        project_dir: Directory holding config.yaml and .env.
                     If None, auto-detected from this file's location.

    Returns:
        Configured FastAPI application ready to run with uvicorn.
    """
    # -- Resolve settings ------------------------------------------------------
    if settings is None:
        if project_dir is None:
            project_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
        settings = ConfigManager(project_dir).settings()

    setup_logging(settings.log_level, settings.log_format)

    if not settings.admin.login_enabled:
        logger.warning("ADMIN_PASSWORD_HASH is not set; admin login is disabled")

    # -- Initialize services ---------------------------------------------------
    if store is None:
        store = open_store(settings.store_uri)
    verifier = CredentialVerifier(settings.admin)
    token_service = TokenService(settings.jwt_secret)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("SSP Realty backend started on port %d", settings.port)
        yield
        await store.close()
        logger.info("SSP Realty backend shutting down")

    # -- Create FastAPI app ----------------------------------------------------
    app = FastAPI(
        title="SSP Realty",
        description="Backend API for the SSP Realty website",
        version="1.0.0",
        docs_url="/docs",
        redoc_url=None,
        lifespan=lifespan,
    )

    # -- CORS middleware -------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -- Register API routes ---------------------------------------------------
    app.include_router(create_router(
        verifier=verifier,
        token_service=token_service,
        store=store,
    ))

    @app.get("/")
    async def index():
        """Liveness message."""
        return {"message": "🏠 SSP Realty Backend API v1.0"}

    # -- Global error handlers -------------------------------------------------

    @app.exception_handler(RealtyError)
    async def realty_error_handler(request: Request, exc: RealtyError):
        if exc.http_status >= 500:
            logger.error("%s on %s", exc.message, request.url.path,
                         extra={"path": request.url.path})
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning("Validation error on %s at %s", request.url.path,
                       [e.get("loc") for e in exc.errors()],
                       extra={"path": request.url.path})
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid request body"},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s", request.url.path,
                         extra={"path": request.url.path})
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )

    return app
