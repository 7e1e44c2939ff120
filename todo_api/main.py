"""
Main FastAPI application entry point with ASGI app definition.
This module configures the FastAPI instance, middleware, routing,
exception handlers and lifecycle events.
"""

import logging
import traceback
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from todo_api.api import api_router
from todo_api.api.middleware import RequestContextMiddleware
from todo_api.config import Settings
from todo_api.config import settings as default_settings
from todo_api.core.database import DatabaseManager
from todo_api.core.exceptions import AppException, UnauthorizedException
from todo_api.core.logging import configure_logging
from todo_api.security.credentials import PasswordManager, PasswordPolicy
from todo_api.security.tokens import TokenService
from todo_api.version import get_version

logger = logging.getLogger(__name__)


def _request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup and shutdown events.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application runtime.
    """
    settings: Settings = app.state.settings
    logger.info("Application starting up...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Version: {get_version()}")

    app.state.database.initialize()
    app.state.startup_time = datetime.now(timezone.utc)
    app.state.ready = True
    logger.info("Application startup complete")

    yield

    logger.info("Application shutting down...")
    app.state.ready = False
    app.state.database.close()
    logger.info("Application shutdown complete")


def create_application(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application instance.

    Args:
        settings: Configuration to use; defaults to settings loaded from the environment.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Task list with threaded comments behind bearer-token authentication.",
        version=get_version(),
        docs_url="/docs" if settings.DOCS_ENABLED else None,
        redoc_url="/redoc" if settings.DOCS_ENABLED else None,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.database = DatabaseManager(settings)
    app.state.token_service = TokenService.from_settings(settings)
    app.state.password_manager = PasswordManager(rounds=settings.BCRYPT_ROUNDS)
    app.state.password_policy = PasswordPolicy.from_settings(settings)
    app.state.startup_time = None
    app.state.ready = False

    configure_middleware(app, settings)
    configure_exception_handlers(app, settings)
    app.include_router(api_router, prefix=settings.API_PREFIX)
    configure_health_checks(app)

    return app


def configure_middleware(app: FastAPI, settings: Settings) -> None:
    """
    Configure middleware for the FastAPI application.

    Args:
        app: FastAPI application instance.
        settings: Application settings.
    """
    if settings.CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
        logger.info(f"CORS configured with origins: {settings.CORS_ORIGINS}")

    app.add_middleware(RequestContextMiddleware)


def configure_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """
    Configure global exception handlers for the application.

    Args:
        app: FastAPI application instance.
        settings: Application settings.
    """

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        if isinstance(exc, UnauthorizedException):
            logger.warning(
                f"Authentication failed on {request.method} {request.url.path}: {exc.reason}",
                extra={"request_id": _request_id(request)},
            )
        else:
            logger.info(
                f"Application exception: {exc.__class__.__name__} - {exc.message}",
                extra={"request_id": _request_id(request), "status_code": exc.status_code},
            )

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": {
                    "code": exc.error_code,
                    "message": exc.message,
                    "details": exc.details,
                }
            },
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.warning(
            f"Request validation error: {exc.errors()}",
            extra={"request_id": _request_id(request)},
        )

        errors = [
            {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": {
                    "code": "VALIDATION_ERROR",
                    "message": "Request validation failed",
                    "details": {"errors": errors},
                }
            },
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            f"Unhandled exception: {exc.__class__.__name__} - {exc}",
            extra={"request_id": _request_id(request)},
            exc_info=exc,
        )

        response_data: Dict[str, Any] = {
            "error": {
                "code": "INTERNAL_SERVER_ERROR",
                "message": "An internal server error occurred",
            }
        }
        if settings.DEBUG:
            response_data["error"]["details"] = {
                "exception_type": exc.__class__.__name__,
                "exception_message": str(exc),
                "traceback": traceback.format_exception(type(exc), exc, exc.__traceback__),
            }

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=response_data,
        )


def configure_health_checks(app: FastAPI) -> None:
    """
    Configure health check endpoints.

    Args:
        app: FastAPI application instance.
    """

    @app.get("/health", tags=["health"])
    def health_check() -> Dict[str, Any]:
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": get_version(),
        }

    @app.get("/health/ready", tags=["health"])
    def readiness_check(request: Request) -> JSONResponse:
        checks = {
            "app_ready": request.app.state.ready,
            "database_connected": request.app.state.database.is_healthy(),
        }
        all_ready = all(checks.values())
        return JSONResponse(
            status_code=status.HTTP_200_OK if all_ready else status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "ready" if all_ready else "not_ready", "checks": checks},
        )


def run() -> None:
    """Console entry point: serve the application with uvicorn."""
    import uvicorn

    logger.info(f"Starting server on {default_settings.HOST}:{default_settings.PORT}")
    uvicorn.run(
        "todo_api.main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        reload=default_settings.DEBUG and default_settings.AUTO_RELOAD,
        log_level=default_settings.LOG_LEVEL.lower(),
        access_log=default_settings.ACCESS_LOG,
    )


# Create the application instance
app = create_application()


if __name__ == "__main__":
    run()
