"""
HomeMarket API - Main Application
FastAPI application with CORS, error handling, middleware, and logging
"""
import logging
import os
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.routes import (
    auth_router,
    properties_router,
    media_router,
    viewings_router,
    photo_jobs_router,
    notifications_router,
    announcements_router,
    analytics_router,
    admin_router,
)
from app.core.config import settings, get_cors_origins
from app.core.exceptions import AppError
from app.database import test_connection, init_db, close_db_connection


# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown"""
    logger.info("=" * 70)
    logger.info(f"Starting {settings.PROJECT_NAME} v{settings.VERSION}")
    logger.info("=" * 70)

    if test_connection():
        logger.info("[OK] Database connection successful!")
    else:
        logger.warning("[WARN] Database connection failed - continuing in degraded mode")

    if init_db():
        logger.info("[OK] Database initialization complete!")
    else:
        logger.warning("[WARN] Database init returned False - tables may not exist")

    yield

    logger.info("Shutting down application...")
    close_db_connection()


# Initialize FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description=settings.PROJECT_DESCRIPTION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)


# ==================== MIDDLEWARE ====================

# Compression: GZip responses
app.add_middleware(GZipMiddleware, minimum_size=1000)

# CORS: Cross-Origin Resource Sharing
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all incoming requests"""
    # Skip logging for health checks
    if request.url.path == "/health":
        return await call_next(request)

    start_time = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception as e:
        duration = time.perf_counter() - start_time
        logger.error(f"[ERROR] {request.method} {request.url.path} - Error: {e} ({duration:.2f}s)")
        raise
    duration = time.perf_counter() - start_time
    logger.info(f"<< {request.method} {request.url.path} - {response.status_code} ({duration:.2f}s)")
    return response


# ==================== ROUTERS ====================

api = settings.API_V1_STR
app.include_router(auth_router, prefix=f"{api}/auth", tags=["Authentication"])
app.include_router(properties_router, prefix=f"{api}/properties", tags=["Properties"])
app.include_router(media_router, prefix=f"{api}/media", tags=["Media"])
app.include_router(viewings_router, prefix=f"{api}/viewings", tags=["Viewings"])
app.include_router(photo_jobs_router, prefix=f"{api}/photo-jobs", tags=["Photo Jobs"])
app.include_router(notifications_router, prefix=f"{api}/notifications", tags=["Notifications"])
app.include_router(announcements_router, prefix=f"{api}/announcements", tags=["Notifications"])
app.include_router(analytics_router, prefix=f"{api}/analytics", tags=["Analytics"])
app.include_router(admin_router, prefix=f"{api}/admin", tags=["Admin"])

# Uploaded media; served only when the upload directory already exists
if os.path.isdir(settings.UPLOAD_DIR):
    app.mount(settings.UPLOAD_URL_PREFIX, StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")


# ==================== ERROR HANDLERS ====================

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"[ERROR] {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors with a flat field/message list"""
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path", "header")]
        errors.append({"field": ".".join(loc) or None, "message": err.get("msg", "Invalid value")})
    logger.warning(f"Validation error on {request.url.path}: {errors}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"ok": False, "message": "Validation error", "errors": errors},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "ok": False,
                "message": "Route not found",
                "method": request.method,
                "path": request.url.path,
            },
        )
    return JSONResponse(status_code=exc.status_code, content={"ok": False, "message": str(exc.detail)})


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions"""
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")

    # Don't expose internal errors in production
    error_message = str(exc) if settings.DEBUG else "Internal server error"
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"ok": False, "message": error_message},
    )


# ==================== HEALTH ====================

@app.get("/health", tags=["System"])
def health_check():
    """Health check endpoint for monitoring"""
    connection_ok = test_connection()
    return {
        "ok": True,
        "status": "healthy" if connection_ok else "degraded",
        "database": "connected" if connection_ok else "disconnected",
    }
