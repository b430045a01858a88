"""FastAPI application entry point.

Configures CORS, structured logging, lifespan events (closing the realtime
client), and router registration.
"""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.logging import setup_logging
from app.db.supabase import close_async_supabase
from app.routers import browse, health, messages, projects

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: startup and shutdown hooks."""
    setup_logging()
    logger.info("Application starting up")
    yield
    await close_async_supabase()
    logger.info("Application shutting down")


app = FastAPI(
    title="Freelance Marketplace API",
    description="Browse coders and teams, post and apply to projects, and message other members",
    version="0.1.0",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# CORS Configuration
# ---------------------------------------------------------------------------
_raw_origins = settings.ALLOWED_ORIGINS.strip()
if _raw_origins == "*":
    _allowed_origins: list[str] = ["*"]
else:
    _allowed_origins = [o.strip() for o in _raw_origins.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Router Registration
# ---------------------------------------------------------------------------
app.include_router(health.router, tags=["Health"])
app.include_router(browse.router, prefix="/api/v1/browse", tags=["Browse"])
app.include_router(projects.router, prefix="/api/v1/projects", tags=["Projects"])
app.include_router(messages.router, prefix="/api/v1/messages", tags=["Messages"])


def run() -> None:
    """Serve the API with uvicorn (the ``marketplace-api`` console script)."""
    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT)
