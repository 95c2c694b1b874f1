"""
SupChaissac API - Main Application Entry Point

Builds the FastAPI application:
- Database and Redis connections
- CORS, security headers and request logging middleware
- Service error handlers
- API routing
- Health check endpoints
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from supchaissac.api import api_router
from supchaissac.core.config import settings
from supchaissac.core.database import close_db, init_db
from supchaissac.core.errors import register_exception_handlers
from supchaissac.core.redis import close_redis, init_redis, is_redis_available

logging.basicConfig(
    level=logging.DEBUG if settings.is_development else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("supchaissac")

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """
    Connect Redis and the database on startup, close them on shutdown.

    Redis holds the login sessions, so a missing Redis only disables
    logging in; outside production the API still starts.
    """
    logger.info(f"Starting SupChaissac API in {settings.python_env} mode...")

    try:
        await init_redis()
        logger.info("Redis connected")
    except Exception as e:
        logger.error(f"Redis connection failed: {e}")
        if settings.is_production:
            raise

    try:
        await init_db()
        logger.info("Database connected")
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        if settings.is_production:
            raise

    if not settings.storage_configured:
        logger.warning("Object storage credentials missing; attachments are disabled")

    yield

    logger.info("Shutting down SupChaissac API...")
    await close_redis()
    await close_db()
    logger.info("Cleanup complete")


app = FastAPI(
    title="SupChaissac API",
    description="Supplementary teaching hours: declaration, review, validation and payment",
    version="0.1.0",
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

register_exception_handlers(app)

app.include_router(api_router, prefix="/api")

# CORS configuration; credentials are needed for the session cookie
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    for header, value in SECURITY_HEADERS.items():
        response.headers.setdefault(header, value)
    return response


@app.middleware("http")
async def log_api_requests(request: Request, call_next):
    if not request.url.path.startswith("/api"):
        return await call_next(request)

    started = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - started) * 1000
    logger.info(
        f"{request.method} {request.url.path} {response.status_code} {duration_ms:.0f}ms"
    )
    return response


@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """Service banner."""
    return {
        "message": "Welcome to SupChaissac API",
        "status": "running",
        "environment": settings.python_env,
    }


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Liveness probe; does not touch Redis or the database."""
    return {"status": "healthy"}


@app.get("/ready", tags=["Health"])
async def readiness_check() -> dict[str, str | bool]:
    """Report which optional backends (Redis sessions, object storage) are usable."""
    return {
        "status": "ready",
        "redis": is_redis_available(),
        "storage": settings.storage_configured,
    }
