"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from ecotrack.auth.router import router as auth_router
from ecotrack.config import get_settings
from ecotrack.database import close_db, get_session, init_db
from ecotrack.gamification.router import router as gamification_router
from ecotrack.gamification.seed import seed_catalogue
from ecotrack.garden.router import router as garden_router
from ecotrack.health.router import router as health_router
from ecotrack.middleware import setup_middleware
from ecotrack.redis_client import close_redis, init_redis
from ecotrack.social.router import directory_router, router as social_router
from ecotrack.users.router import router as users_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    await init_redis(settings.redis_url)

    if settings.seed_on_startup:
        try:
            async for db in get_session():
                await seed_catalogue(db)
                break
        except SQLAlchemyError:
            logger.warning("catalogue_seed_failed", hint="run alembic upgrade head", exc_info=True)

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="EcoTrack API",
        description="Backend API for EcoTrack, a gamified energy-saving tracker for teens",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(gamification_router)
    app.include_router(garden_router)
    app.include_router(social_router)
    app.include_router(directory_router)

    return app


app = create_app()
