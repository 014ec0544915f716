"""FastAPI app for the landing page admin service."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

import config
from landing.errors import InvalidCredentials, NotFound, StorageError, Unauthorized, ValidationError
from landing.models import Database
from landing.schemas import field_errors
from landing.services.accounts import ensure_initial_admin
from landing.services.configurations import ConfigurationRepository
from web.api.auth_routes import router as auth_router
from web.api.landing_routes import router as landing_router
from web.api.routes import router as configurations_router
from web.api.utils import login_url
from web.auth import AdminGateMiddleware

logger = logging.getLogger("landing.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    database: Database = app.state.database
    await database.init()
    await ensure_initial_admin(database)
    logger.info("Landing admin API started (%s)", config.ENVIRONMENT)
    yield
    await database.dispose()


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError):
        return JSONResponse(
            {"detail": "Validation failed", "errors": exc.errors},
            status_code=422,
        )

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            {"detail": "Validation failed", "errors": field_errors(exc.errors(), skip_prefix=("body",))},
            status_code=422,
        )

    @app.exception_handler(InvalidCredentials)
    async def _invalid_credentials(request: Request, exc: InvalidCredentials):
        return JSONResponse({"error": str(exc)}, status_code=status.HTTP_401_UNAUTHORIZED)

    @app.exception_handler(NotFound)
    async def _not_found(request: Request, exc: NotFound):
        return JSONResponse({"detail": "Configuration not found"}, status_code=status.HTTP_404_NOT_FOUND)

    @app.exception_handler(StorageError)
    async def _storage_error(request: Request, exc: StorageError):
        # Detail was logged where the failure happened
        return JSONResponse({"error": "Server error"}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    @app.exception_handler(Unauthorized)
    async def _unauthorized(request: Request, exc: Unauthorized):
        return RedirectResponse(login_url(exc.redirect_from), status_code=status.HTTP_307_TEMPORARY_REDIRECT)

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse({"error": "Server error"}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


def create_app(database: Optional[Database] = None) -> FastAPI:
    """Build the app around an explicit Database (one is created from DATABASE_URL if omitted)."""
    app = FastAPI(title="Landing Page Admin API", lifespan=lifespan)
    app.state.database = database or Database(config.DATABASE_URL)
    app.state.configurations = ConfigurationRepository(app.state.database)

    _register_error_handlers(app)
    app.add_middleware(AdminGateMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(auth_router)
    app.include_router(configurations_router)
    app.include_router(landing_router)

    @app.get("/api/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
