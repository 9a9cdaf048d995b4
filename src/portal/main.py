from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from sqlalchemy import text

from src.portal.api.middlewares import setup_middlewares
from src.portal.api.v1.router import api_router
from src.portal.core.config import get_settings
from src.portal.core.db import dispose_engine, get_session, init_db
from src.portal.core.exceptions import setup_exception_handlers
from src.portal.core.logging import get_logger, setup_logging
from src.portal.services import ReviewLocks

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan - startup and shutdown."""
    settings = get_settings()
    setup_logging(settings.debug)
    logger.info(f"Starting {settings.app_name}", app_env=settings.app_env)

    await init_db()
    app.state.review_locks = ReviewLocks()

    yield

    logger.info("Closing connections...")
    await dispose_engine()
    logger.info("Shutdown complete")


OPENAPI_TAGS = [
    {"name": "auth", "description": "Sign-in, sign-up and credential reset"},
    {"name": "users", "description": "The signed-in user's profile"},
    {"name": "admin", "description": "Application review and account provisioning"},
    {"name": "notifications", "description": "Dashboard notification counts"},
]


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Identity, session and access control for the property portal",
        version="0.1.0",
        openapi_tags=OPENAPI_TAGS,
        lifespan=lifespan,
        docs_url="/docs" if settings.enable_openapi else None,
        redoc_url="/redoc" if settings.enable_openapi else None,
        openapi_url="/openapi.json" if settings.enable_openapi else None,
    )

    setup_exception_handlers(app)
    setup_middlewares(app, settings)
    app.include_router(api_router)

    @app.get("/health")
    async def health() -> JSONResponse:
        """Health check with a database round-trip."""
        try:
            async with get_session() as session:
                await session.execute(text("SELECT 1"))
        except Exception as e:
            logger.warning("Health check failed", error=str(e))
            return JSONResponse(
                content={"status": "unhealthy", "database": f"unhealthy: {e}"}, status_code=503
            )
        return JSONResponse(content={"status": "healthy", "database": "healthy"})

    return app


app = create_app()
