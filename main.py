"""
Main FastAPI Application.
Entry point for the Real Estate Masters API.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
import time
import uuid

import psutil

from app.config import settings
from app.core.database import get_db_manager
from app.core.exceptions import AppException
from app.core.responses import ResponseHandler
from app.core.schema_manager import SchemaManager
from app.core.logging_config import (
    setup_logging,
    get_logger,
    log_operation_start,
    log_operation_end,
    log_api_request
)

from app.api.routes import auth_routes
from app.api.routes import city_routes, location_routes, amenity_routes, property_type_routes
from app.api.routes import floor_routes, tower_routes, room_routes, washroom_routes
from app.api.routes import builder_routes, agent_routes


# Setup logging before anything else
setup_logging(
    log_level="DEBUG" if settings.DEBUG else settings.LOG_LEVEL,
    log_dir=settings.LOG_DIR,
    enable_file_logging=settings.ENABLE_FILE_LOGGING
)

logger = get_logger(__name__)

HTTP_ERROR_CODES = {
    status.HTTP_400_BAD_REQUEST: "VALIDATION_ERROR",
    status.HTTP_401_UNAUTHORIZED: "AUTHENTICATION_ERROR",
    status.HTTP_403_FORBIDDEN: "AUTHORIZATION_ERROR",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
    status.HTTP_409_CONFLICT: "CONFLICT",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    # Startup
    logger.info("=" * 80)
    logger.info(f"Starting {settings.APP_NAME}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug Mode: {settings.DEBUG}")
    logger.info(f"Version: {settings.APP_VERSION}")
    logger.info("=" * 80)

    logger.perf.log_performance_snapshot("Application Startup")

    try:
        log_operation_start(logger, "database_initialization")
        db_manager = get_db_manager()
        if settings.DB_AUTO_CREATE:
            SchemaManager.initialize_master_records_schema()
            SchemaManager.initialize_directory_schema()
        logger.info(f"Database connection pool initialized: {db_manager.get_pool_status()}")
        log_operation_end(logger, "database_initialization", success=True)
    except Exception as e:
        logger.critical(f"Failed to initialize database: {str(e)}", exc_info=True)
        log_operation_end(logger, "database_initialization", success=False, error=str(e))
        raise

    yield

    # Shutdown
    logger.info("=" * 80)
    logger.info(f"Shutting down {settings.APP_NAME}")
    logger.perf.log_performance_snapshot("Application Shutdown")

    try:
        log_operation_start(logger, "database_shutdown")
        get_db_manager().close_pool()
        logger.info("Database connections closed successfully")
        log_operation_end(logger, "database_shutdown", success=True)
    except Exception as e:
        logger.error(f"Error during shutdown: {str(e)}", exc_info=True)
        log_operation_end(logger, "database_shutdown", success=False, error=str(e))

    logger.info("Shutdown complete")
    logger.info("=" * 80)


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Back-office master data for real estate: cities, locations, amenities, floors, towers, property types, rooms and washrooms, plus the builder and agent directories",
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json"
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests with timing information."""
    start_time = time.time()
    request.state.request_id = str(uuid.uuid4())

    logger.debug(
        f"Incoming request: {request.method} {request.url.path}",
        extra={
            "method": request.method,
            "path": request.url.path,
            "client_host": request.client.host if request.client else "unknown",
            "query_params": dict(request.query_params)
        }
    )

    try:
        response = await call_next(request)

        duration_ms = (time.time() - start_time) * 1000
        log_api_request(
            logger,
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=duration_ms
        )

        # Slow request threshold: 1 second
        if duration_ms > 1000:
            logger.warning(
                f"Slow request detected: {request.method} {request.url.path} - {duration_ms:.2f}ms",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "duration_ms": duration_ms,
                    "slow_request": True
                }
            )
            logger.perf.log_performance_snapshot(f"Slow Request: {request.url.path}")

        response.headers["X-Request-ID"] = request.state.request_id
        response.headers["X-Process-Time"] = f"{duration_ms:.2f}"

        return response

    except Exception as e:
        duration_ms = (time.time() - start_time) * 1000
        logger.error(
            f"Request failed: {request.method} {request.url.path} - {str(e)}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "duration_ms": duration_ms,
                "error": str(e)
            },
            exc_info=True
        )
        raise


@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    """Handle custom application exceptions."""
    logger.warning(
        f"Application exception: {exc.error_code} - {exc.message}",
        extra={
            "error_code": exc.error_code,
            "status_code": exc.status_code,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details
        }
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=ResponseHandler.error(
            code=exc.error_code,
            message=exc.message,
            status_code=exc.status_code,
            details=exc.details
        )
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render framework HTTP errors (401 from auth, unknown routes, ...) in the standard envelope."""
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content=ResponseHandler.error(
            code=HTTP_ERROR_CODES.get(exc.status_code, "INTERNAL_ERROR" if exc.status_code >= 500 else "HTTP_ERROR"),
            message=message,
            status_code=exc.status_code
        ),
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed body or query parameters are a 400 VALIDATION_ERROR."""
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())),
            "message": error.get("msg"),
            "type": error.get("type")
        }
        for error in exc.errors()
    ]
    logger.warning(f"Request validation failed on {request.method} {request.url.path}: {errors}")

    message = errors[0]["message"] if errors else "Invalid request"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ResponseHandler.error(
            code="VALIDATION_ERROR",
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"errors": errors}
        )
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.error(
        f"Unhandled exception: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__
        },
        exc_info=True
    )

    logger.perf.log_performance_snapshot("Unhandled Exception")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ResponseHandler.error(
            code="INTERNAL_ERROR",
            message=str(exc) if settings.DEBUG else "An unexpected error occurred",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )
    )


logger.info("Registering API routes...")
app.include_router(auth_routes.router, prefix="/api/v1")
app.include_router(city_routes.router, prefix="/api/v1")
app.include_router(location_routes.router, prefix="/api/v1")
app.include_router(amenity_routes.router, prefix="/api/v1")
app.include_router(property_type_routes.router, prefix="/api/v1")
app.include_router(floor_routes.router, prefix="/api/v1")
app.include_router(tower_routes.router, prefix="/api/v1")
app.include_router(room_routes.router, prefix="/api/v1")
app.include_router(washroom_routes.router, prefix="/api/v1")
app.include_router(builder_routes.router, prefix="/api/v1")
app.include_router(agent_routes.router, prefix="/api/v1")
logger.info("All API routes registered successfully")


@app.get("/health", tags=["System"])
async def health_check():
    """Health check endpoint with system metrics."""
    logger.debug("Health check requested")

    try:
        pool_status = get_db_manager().get_pool_status()
        db_healthy = pool_status["initialized"] and not pool_status["closed"]

        process = psutil.Process()
        memory_info = process.memory_info()
        cpu_percent = process.cpu_percent(interval=0.1)

        health_data = {
            "status": "healthy" if db_healthy else "degraded",
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
            "database": pool_status,
            "performance": {
                "memory_mb": round(memory_info.rss / 1024 / 1024, 2),
                "cpu_percent": round(cpu_percent, 2)
            }
        }

        logger.info(f"Health check: {health_data['status']}")
        return health_data

    except Exception as e:
        logger.error(f"Health check failed: {str(e)}", exc_info=True)
        return {
            "status": "unhealthy",
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "error": str(e) if settings.DEBUG else "Health check failed"
        }


@app.get("/", tags=["System"])
async def root():
    """Root endpoint with API information."""
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "docs": "/api/docs",
        "health": "/health",
        "api_prefix": "/api/v1"
    }


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting server on {settings.HOST}:{settings.PORT}")

    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_config=None,
        access_log=False
    )
