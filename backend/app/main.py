"""Gatherwise API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map GatherwiseError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup and disposed on shutdown via lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Error handlers live in api/error_handlers.py to keep this module's import fan-out small
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.infrastructure.database import close_db, init_db
from app.infrastructure.observability import setup_logging
from app.config import get_settings
from app.api.error_handlers import register_error_handlers
from app.api.routes import (
    admin, assistant, auth, campuses, churches, health, notifications,
    pathways, profile, roles, user_settings, users,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_db(settings)
    logger.info("Gatherwise API started")
    yield
    await close_db()
    logger.info("Gatherwise API shutting down")


app = FastAPI(
    title="Gatherwise API", version=health.SERVICE_VERSION, lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes: explicit registration
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(admin.router)
app.include_router(churches.router)
app.include_router(campuses.router)
app.include_router(users.router)
app.include_router(profile.router)
app.include_router(user_settings.router)
app.include_router(roles.router)
app.include_router(notifications.router)
app.include_router(pathways.router)
app.include_router(assistant.router)

register_error_handlers(app)
