from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from slowapi.errors import RateLimitExceeded

from app.core.config import settings
from app.core.database import init_db, close_db
from app.core.exceptions import RegistrationPortalError, InternalError, error_response
from app.core.logging_config import logger
from app.core.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    RequestSizeLimitMiddleware,
    OriginAllowListMiddleware,
)
from app.core.rate_limiter import limiter, rate_limit_exceeded_handler
from app.api.v1.router import api_router
from app.api.v1.endpoints import realtime
import app.models  # Import models so metadata knows about them


def validate_critical_config():
    """Validate critical configuration at startup - fail fast if missing"""
    errors = []
    warnings = []

    if not settings.DATABASE_URL:
        errors.append("DATABASE_URL is not set")

    try:
        catalog = settings.SERVICE_CATALOG
    except ValueError as e:
        errors.append(str(e))
        catalog = {}

    if settings.ENFORCE_SERVICE_CATALOG and not catalog:
        errors.append("ENFORCE_SERVICE_CATALOG is on but the service catalog is empty")

    if not settings.CORS_ORIGINS:
        warnings.append("CORS_ORIGINS_STR is empty - browser requests will be rejected")

    if "*" in settings.CORS_ORIGINS and settings.ENVIRONMENT == "production":
        warnings.append("CORS allows any origin in production")

    if errors:
        for err in errors:
            logger.critical(f"[Startup] CRITICAL: {err}")
        raise RuntimeError(f"Invalid configuration: {', '.join(errors)}")

    for warn in warnings:
        logger.warning(f"[Startup] WARNING: {warn}")

    logger.info("[Startup] ✓ Configuration validated")


async def ensure_database_ready() -> bool:
    """Create tables if missing"""
    try:
        await init_db()
        logger.info("[Startup] Database tables ready")
        return True
    except Exception as e:
        logger.error(f"[Startup] Failed to ensure database ready: {e}")
        logger.error("[Startup] Registrations will fail until the database is reachable")
        return False


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown"""
    logger.info("=" * 60)
    logger.info(f"Starting {settings.APP_NAME}...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"API Version: {settings.API_VERSION}")
    logger.info(f"Allowed origins: {', '.join(settings.CORS_ORIGINS) or '(none)'}")
    logger.info("=" * 60)

    validate_critical_config()
    await ensure_database_ready()

    yield

    logger.info(f"Shutting down {settings.APP_NAME}...")
    await close_db()


app = FastAPI(
    title=settings.APP_NAME,
    description="Project registration intake with a live admin dashboard feed",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
    redirect_slashes=False  # Prevent 307 redirects that break CORS
)

# Rate limiter state and exception handler
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Middleware (order matters - last added runs first)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestSizeLimitMiddleware, max_size=64 * 1024)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Content-Length", "X-Requested-With", "X-Request-ID"],
    expose_headers=["X-Request-ID", "X-Response-Time"],
)
# Outermost: reject disallowed origins before anything else runs
app.add_middleware(OriginAllowListMiddleware, allowed_origins=settings.CORS_ORIGINS)


# Exception handlers
@app.exception_handler(RegistrationPortalError)
async def portal_exception_handler(request: Request, exc: RegistrationPortalError):
    if exc.status_code >= 500:
        logger.error(f"[API] {exc.code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=error_response(exc))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"field": loc[-1] if loc else "body", "message": err.get("msg", "Invalid value")})
    message = "; ".join(
        f"{e['field']}: {e['message']}" if e["field"] != "body" else e["message"] for e in errors
    ) or "Invalid request"
    return JSONResponse(
        status_code=400,
        content={"success": False, "code": "VALIDATION_ERROR", "message": message, "errors": errors},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global exception: {exc}", exc_info=True)
    error = InternalError(str(exc) if settings.is_development() else "An error occurred")
    return JSONResponse(status_code=500, content=error_response(error))


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "app_name": settings.APP_NAME,
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT
    }


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint"""
    return {
        "message": f"{settings.APP_NAME} API is running",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health"
    }


app.include_router(api_router, prefix=f"/api/{settings.API_VERSION}")
app.include_router(realtime.router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG
    )
