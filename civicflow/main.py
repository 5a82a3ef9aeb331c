"""
CivicFlow - FastAPI Application Entry Point

Citizens report civic problems on a map; municipal and hospital staff triage
and resolve them.

DESIGN PRINCIPLES:
- All state lives on one device (single writer, locally persisted)
- Stores are built per application and injected, never global
- Every mutation is persisted before the response is sent

Run with: uvicorn civicflow.main:create_app --factory
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from civicflow.config.firebase import create_blob_store
from civicflow.core.settings import Settings, settings
from civicflow.dependencies import Services
from civicflow.routes import auth, categories, health, reports, views
from civicflow.services.auth_provider import AuthProvider, create_auth_provider
from civicflow.services.blob_store import BlobStore

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(
    config: Settings = settings,
    blob_store: Optional[BlobStore] = None,
    auth_provider: Optional[AuthProvider] = None,
) -> FastAPI:
    """
    Build an application with its own stores.

    Tests pass a MemoryBlobStore and a LocalAuthProvider to get an isolated
    instance.
    """
    app = FastAPI(
        title=config.APP_NAME,
        version=config.APP_VERSION,
        description="Civic problem reporting with role-based triage views",
        debug=config.DEBUG,
    )

    services = Services(
        blob_store=blob_store or create_blob_store(config),
        auth_provider=auth_provider or create_auth_provider(config),
        config=config,
    )
    services.load()
    app.state.services = services
    logger.info(f"{config.APP_NAME} v{config.APP_VERSION} ready with {len(services.reports)} report(s)")

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Catch all unhandled exceptions and log them with full traceback."""
        logger.error(f"Unhandled exception on {request.method} {request.url.path}", exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": f"Internal server error: {str(exc)}"},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Log request validation errors before returning them."""
        logger.warning(f"Validation error on {request.method} {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": jsonable_encoder(exc.errors())},
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(categories.router)
    app.include_router(reports.router)
    app.include_router(views.router)
    app.include_router(auth.router)

    @app.get("/")
    async def root():
        """
        Root endpoint - API information.
        """
        return {
            "service": config.APP_NAME,
            "version": config.APP_VERSION,
            "status": "running",
            "docs": "/docs",
            "health": "/health",
        }

    return app
