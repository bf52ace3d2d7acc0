"""Main FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from premonition.api.routes import router
from premonition.config import get_settings
from premonition.db import close_pool, init_pool

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    """Open the Postgres pool when that backend is configured."""
    logger.info("Starting Premonition backend")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    logger.info(f"Storage backend: {settings.storage_backend}")

    if settings.storage_backend == "postgres":
        try:
            await init_pool()
        except (OSError, ValueError) as e:
            logger.error(f"Database unavailable, leaderboard routes will return 503: {e}")

    yield

    await close_pool()
    logger.info("Shutting down Premonition backend")


# Create FastAPI app
app = FastAPI(
    title="Premonition Backend",
    description="Pre-season league table predictions scored gameweek by gameweek",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(router)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint for container orchestration."""
    return {"status": "healthy"}
