from contextlib import asynccontextmanager
from typing import Optional
import logging
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

from app.api.v1.endpoints import health
from app.api.v1.router import api_router
from app.middleware.rate_limit import setup_rate_limiting
from core.config import Settings, get_settings
from core.database import Database
from core.exceptions import AppError, MSG_INVALID_REQUEST, MSG_SERVER_ERROR
from core.s3 import S3BlobStore


def configure_logging(settings: Settings) -> None:
    """Configure structured JSON logging on top of the stdlib logging module."""
    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format="%(message)s")
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# Get structured logger
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Create tables on startup and release the connection pool on shutdown.
    """
    logger.info("server_startup", status="initializing")
    try:
        app.state.database.create_tables()
        logger.info("database_tables_created", status="success")
    except Exception as e:
        logger.warning("database_table_creation_warning", error=str(e))

    logger.info("server_startup_complete", status="running")
    yield

    logger.info("server_shutdown", status="closing database pool")
    app.state.database.dispose()


def register_exception_handlers(app: FastAPI) -> None:
    """Map every failure to the {"error": ..., "details": ...} envelope."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        log = logger.warning if exc.status_code < 500 else logger.error
        log(
            "request_error",
            path=request.url.path,
            status_code=exc.status_code,
            error=type(exc).__name__,
            details=exc.details
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"error": MSG_INVALID_REQUEST, "details": jsonable_encoder(exc.errors())}
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error("unhandled_exception", path=request.url.path, error=str(exc), exc_info=True)
        return JSONResponse(status_code=500, content={"error": MSG_SERVER_ERROR, "details": str(exc)})


def create_app(settings: Optional[Settings] = None, blob_store=None) -> FastAPI:
    """
    Build the FastAPI application.

    The database handle and blob store are created here, once per process,
    and reach the handlers through FastAPI dependencies.

    Args:
        settings: Application settings (defaults to the environment)
        blob_store: Object with an ``upload(data, content_type, folder, filename)``
            method; defaults to the configured S3 bucket
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Event updates: PIN login, event listing, media submissions and participation reports",
        debug=settings.DEBUG,
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.database = Database.from_settings(settings)
    app.state.blob_store = blob_store if blob_store is not None else S3BlobStore.from_settings(settings)
    app.state.startup_time = time.time()

    setup_rate_limiting(app, settings)
    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Accept", "X-API-Key"],
    )

    @app.middleware("http")
    async def request_logging_middleware(request, call_next):
        """
        Log all API requests with structured logging.

        Logs request details, response status, and execution time.
        """
        start_time = time.time()

        logger.info(
            "request_started",
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else None
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                "request_failed",
                method=request.method,
                path=request.url.path,
                error=str(e),
                duration_ms=round(duration_ms, 2),
                exc_info=True
            )
            raise

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round(duration_ms, 2)
        )
        return response

    app.include_router(health.router, tags=["health"])
    app.include_router(api_router, prefix=settings.API_PREFIX)

    return app


app = create_app()
