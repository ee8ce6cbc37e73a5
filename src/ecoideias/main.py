"""FastAPI application factory."""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from ecoideias.activity.router import router as activity_router
from ecoideias.auth.router import router as auth_router
from ecoideias.config import get_settings
from ecoideias.dashboard.router import admin_router as admin_dashboard_router
from ecoideias.dashboard.router import router as dashboard_router
from ecoideias.database import close_db, get_session_factory, init_db
from ecoideias.functions.router import router as functions_router
from ecoideias.goals.router import admin_router as admin_goals_router
from ecoideias.goals.router import router as goals_router
from ecoideias.health.router import router as health_router
from ecoideias.ideas.router import admin_router as admin_ideas_router
from ecoideias.ideas.router import router as ideas_router
from ecoideias.middleware import setup_middleware
from ecoideias.navigation.router import router as navigation_router
from ecoideias.platform.router import router as platform_router
from ecoideias.ranking.router import router as ranking_router
from ecoideias.redis_client import close_redis, get_redis, init_redis
from ecoideias.seed import seed
from ecoideias.users.router import admin_router as admin_users_router
from ecoideias.users.router import router as users_router
from ecoideias.ws.bridge import PubSubBridge
from ecoideias.ws.router import router as ws_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)

    # Seed settings row and bootstrap admin (idempotent)
    try:
        async with get_session_factory()() as db:
            await seed(db, settings)
    except SQLAlchemyError:
        logger.warning("seed_failed", exc_info=True)

    # Redis is optional: without it the realtime feed refreshes in-process
    bridge: PubSubBridge | None = None
    bridge_task: asyncio.Task[None] | None = None
    if settings.redis_url:
        await init_redis(settings.redis_url)
        bridge = PubSubBridge(get_redis())
        bridge_task = asyncio.create_task(bridge.start())

    yield

    if bridge is not None and bridge_task is not None:
        await bridge.stop()
        bridge_task.cancel()
        try:
            await bridge_task
        except asyncio.CancelledError:
            pass

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Eco Ideias API",
        description="Backend API for Eco Ideias, a platform for submitting and reviewing sustainability ideas",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(admin_users_router)
    app.include_router(ideas_router)
    app.include_router(admin_ideas_router)
    app.include_router(ranking_router)
    app.include_router(activity_router)
    app.include_router(goals_router)
    app.include_router(admin_goals_router)
    app.include_router(platform_router)
    app.include_router(dashboard_router)
    app.include_router(admin_dashboard_router)
    app.include_router(navigation_router)
    app.include_router(functions_router)
    app.include_router(ws_router)

    return app


app = create_app()
