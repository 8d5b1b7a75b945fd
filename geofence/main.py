"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException

from geofence.config import get_settings
from geofence.api.v1 import router as api_v1_router
from geofence.errors import AppError, DatabaseError
from geofence.services.geocoding import GeocodingClient

settings = get_settings()
logger = logging.getLogger("geofence")


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    configure_logging()
    logger.info(f"Starting {settings.APP_NAME}...")
    app.state.geocoder = GeocodingClient(
        api_key=settings.GOOGLE_MAPS_API_KEY,
        base_url=settings.GEOCODING_BASE_URL,
        timeout=settings.GEOCODING_TIMEOUT_SECONDS,
    )
    yield
    # Shutdown
    await app.state.geocoder.aclose()
    logger.info(f"Shutting down {settings.APP_NAME}...")


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "message": message},
    )


async def app_error_handler(request: Request, exc: AppError):
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"{exc.code.value} on {request.method} {request.url.path}: {exc.message}",
        exc_info=exc.status_code >= 500,
    )
    return _error_response(exc.status_code, exc.message)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        detail = str(first.get("msg", "")).removeprefix("Value error, ")
        message = f"{location}: {detail}" if location else detail
    logger.warning(f"Validation failed on {request.method} {request.url.path}: {message}")
    return _error_response(status.HTTP_400_BAD_REQUEST, message)


async def http_error_handler(request: Request, exc: HTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": "error", "message": message},
        headers=getattr(exc, "headers", None),
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError):
    # Driver details stay in the log; clients get the generic DatabaseError
    error = DatabaseError("Internal server error")
    logger.error(
        f"{error.code.value} on {request.method} {request.url.path}: {exc}",
        exc_info=exc,
    )
    return _error_response(error.status_code, error.message)


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(
        f"Unhandled error on {request.method} {request.url.path}: {exc}",
        exc_info=exc,
    )
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description="Geofenced region management with point containment and proximity search",
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Include API routers
    app.include_router(api_v1_router, prefix=settings.API_V1_PREFIX)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "app": settings.APP_NAME}

    return app


app = create_app()
