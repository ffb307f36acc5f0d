import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from content_service import models  # noqa: F401  (registers tables on Base.metadata)
from content_service.config import settings
from content_service.database import Base, engine
from content_service.exception_handlers import register_exception_handlers
from content_service.middleware.logging import StructuredLoggingMiddleware, setup_structured_logging
from content_service.routes import content, versions

API_V1_PREFIX = "/api/v1"

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.app_name} {settings.app_version} in {settings.environment} mode")
    if settings.debug:
        # Schema is managed by Alembic outside of debug runs
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created (if not existing).")
    yield
    await engine.dispose()
    logger.info("Shutting down the application...")


def create_app() -> FastAPI:
    """Create the FastAPI application."""
    setup_structured_logging(settings.log_level, json_format=settings.log_json)

    app = FastAPI(
        title=settings.app_name,
        description="Content service with versioned history and snapshot restore",
        debug=settings.debug,
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(StructuredLoggingMiddleware)

    register_exception_handlers(app)

    app.include_router(content.router, prefix=API_V1_PREFIX, tags=["Content"])
    app.include_router(versions.router, prefix=API_V1_PREFIX, tags=["Versioning"])

    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
