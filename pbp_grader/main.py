"""
Main FastAPI application for the NFL play-by-play bet grader.
"""
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pbp_grader.core.config import settings
from pbp_grader.core.logging import configure_logging, get_logger
from pbp_grader.core.middleware import CorrelationIdMiddleware
from pbp_grader.api.routes import bets
from pbp_grader.api.routes.nfl import pbp as nfl_pbp, plays as nfl_plays

# Configure structured logging (JSON unless disabled for local development)
configure_logging(
    level=settings.LOG_LEVEL,
    json_output=settings.LOG_JSON,
)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan events."""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION} ({settings.ENVIRONMENT})")
    yield
    logger.info("Shutting down application")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Replays NFL play-by-play logs and settles player and game wagers against them",
    lifespan=lifespan,
)

# Add correlation ID middleware (must be added before CORS for proper header handling)
app.add_middleware(CorrelationIdMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API v1
# NFL routes
app.include_router(nfl_pbp.router, prefix="/api/v1/nfl")
app.include_router(nfl_plays.router, prefix="/api/v1/nfl")
# Shared routes
app.include_router(bets.router, prefix="/api/v1")


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "sports": ["nfl"],
        "endpoints": {
            "api_version": "v1",
            "nfl": {
                "annotate": "/api/v1/nfl/pbp/annotate",
                "drive": "/api/v1/nfl/pbp/drive",
                "parse": "/api/v1/nfl/plays/parse",
            },
            "shared": {
                "grade": "/api/v1/bets/grade",
            },
            "docs": "/docs",
            "health": "/health",
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
    }


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler."""
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": str(exc) if settings.DEBUG else "An unexpected error occurred",
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "pbp_grader.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
