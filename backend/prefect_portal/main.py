from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded

from prefect_portal.api.v1.router import api_router
from prefect_portal.core.config import settings
from prefect_portal.core.database import close_db, init_db
from prefect_portal.core.exceptions import PortalError, ValidationError, error_response
from prefect_portal.core.logging_config import logger
from prefect_portal.core.middleware import (
    RequestLoggingMiddleware,
    RequestSizeLimitMiddleware,
    SecurityHeadersMiddleware,
)
from prefect_portal.core.rate_limiter import limiter, rate_limit_exceeded_handler
from prefect_portal.services.realtime import channel_manager
from prefect_portal.services.storage_service import storage_service

APP_VERSION = "1.0.0"


def validate_critical_config():
    """Fail fast when the settings the portal cannot run without are missing"""
    errors = []
    if not settings.DATABASE_URL:
        errors.append("DATABASE_URL is not set")
    if not settings.SECRET_KEY or settings.SECRET_KEY == "CHANGE_ME":
        errors.append("SECRET_KEY is not set or using default value")
    if not settings.JWT_SECRET_KEY or settings.JWT_SECRET_KEY == "CHANGE_ME":
        errors.append("JWT_SECRET_KEY is not set or using default value")

    if errors:
        for err in errors:
            logger.critical(f"[Startup] CRITICAL: {err}")
        raise RuntimeError(f"Missing critical configuration: {', '.join(errors)}")

    if not settings.REALTIME_REDIS_URL:
        logger.warning("[Startup] REALTIME_REDIS_URL not set - realtime fan-out is single-worker only")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown"""
    logger.info("=" * 60)
    logger.info(f"Starting {settings.APP_NAME}...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"API Version: {settings.API_VERSION}")
    logger.info("=" * 60)

    validate_critical_config()
    await init_db()
    await channel_manager.start_relay()

    yield

    logger.info(f"Shutting down {settings.APP_NAME}...")
    await channel_manager.stop_relay()
    await close_db()


app = FastAPI(
    title=settings.APP_NAME,
    description="School prefect management: attendance, duties, incidents, recruitment and messaging",
    version=APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
    redirect_slashes=False  # Prevent 307 redirects that break CORS
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Middleware (last added runs first)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestSizeLimitMiddleware, max_size=settings.MAX_REQUEST_SIZE)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Response-Time"],
)


@app.exception_handler(PortalError)
async def portal_exception_handler(request: Request, exc: PortalError):
    if exc.status_code >= 500:
        logger.error(f"[{exc.code}] {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=error_response(exc))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ())[1:]) or None
    error = ValidationError(first.get("msg", "Invalid request"), field=field)
    return JSONResponse(status_code=error.status_code, content=error_response(error))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global exception: {exc}", exc_info=True)
    error = PortalError(str(exc) if settings.DEBUG else "An error occurred")
    return JSONResponse(status_code=500, content=error_response(error))


@app.get("/health", tags=["Health"])
async def health_check():
    return {
        "status": "healthy",
        "app_name": settings.APP_NAME,
        "version": APP_VERSION,
        "environment": settings.ENVIRONMENT,
    }


app.include_router(api_router, prefix=f"/api/{settings.API_VERSION}")

if storage_service.is_local:
    storage_service.local_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/media", StaticFiles(directory=str(storage_service.local_dir)), name="media")


def main():
    import uvicorn
    uvicorn.run(
        "prefect_portal.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG
    )


if __name__ == "__main__":
    main()
