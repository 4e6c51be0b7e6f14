"""
FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from rbac_admin.core.config import Settings, get_settings
from rbac_admin.core.container import Container
from rbac_admin.core.exceptions import AppError, InvalidArgument
from rbac_admin.core.logging import configure_logging
from rbac_admin.api.routes import router as api_router
from rbac_admin.api.middleware import (
    LoggingMiddleware,
    RateLimitMiddleware,
    RequestIdMiddleware,
)
from rbac_admin.schemas.common import error_body

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Optional schema creation on startup; release pools on shutdown."""
    container: Container = app.state.container
    await container.initialize()

    yield

    await container.shutdown()


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else error.get("msg", ""))
    return "Validation failed: " + "; ".join(parts) if parts else "Validation failed"


def register_exception_handlers(app: FastAPI) -> None:
    """Render every error with the standard envelope."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.code, exc.message, exc.data),
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=InvalidArgument.status_code,
            content=error_body(InvalidArgument.status_code, _validation_message(exc)),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.status_code, str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Unexpected errors: full detail in the log, nothing internal to the client."""
        logger.exception(
            "Unhandled error",
            method=request.method,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=500,
            content=error_body(500, "Internal server error"),
        )


def add_middleware(app: FastAPI, settings: Settings) -> None:
    """
    Install the middleware stack.

    Starlette wraps in reverse order of registration, so requests pass
    CORS -> request id -> access log -> global rate limit -> routes.
    """
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the application.

    ``settings`` defaults to the environment; tests pass their own so each
    app gets an isolated container.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )
    app.state.container = Container(settings)

    add_middleware(app, settings)
    register_exception_handlers(app)

    app.include_router(api_router, prefix="/api")

    @app.get("/health", include_in_schema=False)
    async def health():
        """Liveness probe; exempt from rate limiting."""
        return {"status": "healthy", "version": settings.app_version, "environment": settings.environment}

    return app


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "rbac_admin.main:create_app",
        factory=True,
        host=_settings.host,
        port=_settings.port,
        reload=_settings.reload,
        workers=_settings.workers,
    )
