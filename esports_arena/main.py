"""
Main FastAPI application for the Esports Arena API.
"""
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from prometheus_fastapi_instrumentator import Instrumentator

from esports_arena.core.config import settings
from esports_arena.core.exceptions import InvalidOperationError, NotFoundError
from esports_arena.core.logging import configure_logging, get_logger
from esports_arena.core.middleware import CorrelationIdMiddleware
from esports_arena.api.routes import admin, games, leaderboard, matches, teams, tournaments, users, wallet
from esports_arena.storage import get_storage

# Configure structured logging (JSON in deployed environments, colored locally)
configure_logging(
    level=settings.LOG_LEVEL,
    json_output=settings.LOG_JSON
)
logger = get_logger(__name__)


def get_rate_limit_key(request: Request) -> str:
    """
    Get the rate limit key for a request.

    Uses IP address, with fallback to X-Forwarded-For for proxied requests.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return get_remote_address(request)


limiter = Limiter(
    key_func=get_rate_limit_key,
    default_limits=["60/minute"],
    storage_uri="memory://",
    enabled=settings.RATE_LIMIT_ENABLED
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan events."""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    # Build the storage backend up front so a bad DATABASE_URL fails at startup
    storage = get_storage()
    logger.info("Application started", extra={"storage": type(storage).__name__})

    yield

    logger.info("Shutting down application")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Tournaments, teams, brackets, leaderboards and player wallets for mobile esports",
    lifespan=lifespan
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add correlation ID middleware (must be added before CORS for proper header handling)
app.add_middleware(CorrelationIdMiddleware)

# Prometheus metrics must be initialized before routes are added
instrumentator = Instrumentator()
instrumentator.instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)
logger.info("Prometheus metrics initialized at /metrics")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Every resource router carries its own prefix and is mounted under /api
for resource in (users, wallet, games, teams, tournaments, matches, leaderboard, admin):
    app.include_router(resource.router, prefix="/api")


@app.get("/")
@limiter.limit("60/minute")
async def root(request: Request):
    """Root endpoint with API information."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "storage": settings.STORAGE_BACKEND,
        "endpoints": {
            "users": "/api/users",
            "games": "/api/games",
            "teams": "/api/teams",
            "tournaments": "/api/tournaments",
            "leaderboard": "/api/leaderboard",
            "admin": "/api/admin",
            "docs": "/docs",
            "health": "/health",
            "metrics": "/metrics"
        }
    }


@app.get("/health")
@limiter.limit("120/minute")
async def health_check(request: Request):
    """Liveness check."""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT
    }


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies and parameters are client errors (400), with field details."""
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request data", "errors": jsonable_encoder(exc.errors())}
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(InvalidOperationError)
async def invalid_operation_handler(request: Request, exc: InvalidOperationError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions without leaking internals."""
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error"}
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "esports_arena.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )
