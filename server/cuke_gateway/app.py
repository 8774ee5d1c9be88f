"""FastAPI application for the report gateway."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import config

logging.basicConfig(level=config.log_level, format="%(asctime)s [%(name)s] %(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    logger.info("Report gateway starting on %s:%d", config.host, config.port)
    logger.info("Reports directory: %s (deletion mode: %s)", config.reports_dir, config.deletion_mode)

    from .app_state import get_state

    get_state().ensure_index()

    yield

    logger.info("Report gateway stopped")


app = FastAPI(
    title="Cucumber Report Gateway",
    description="HTTP API for uploading, indexing and deleting Cucumber JSON reports",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

from .routers.health import router as health_router
from .routers.reports import router as reports_router
from .routers.sync import router as sync_router

app.include_router(health_router)
app.include_router(reports_router)
app.include_router(sync_router)
