"""ASGI application for the pitch coach API.

Run with ``uvicorn pitch_api.main:app``.
"""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pitch_api.analysis.router import router as analysis_router
from pitch_api.auth.router import router as auth_router
from pitch_api.config import Settings, get_settings
from pitch_api.db.database import SessionLocal, init_db
from pitch_api.drafts.router import router as drafts_router
from pitch_api.errors import register_exception_handlers
from pitch_api.rubrics.router import router as rubrics_router
from pitch_api.rubrics.templates import seed_templates
from pitch_core.logging_config import get_logger, setup_logging

API_VERSION = "1.0.0"
API_PREFIX = "/api/v1"

logger = get_logger("api")


def _prepare_storage() -> None:
    init_db()
    db = SessionLocal()
    try:
        seed_templates(db)
    finally:
        db.close()


def create_app(settings: Settings = None) -> FastAPI:
    """Build the application with its middleware, error handlers and routers."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(
            level=settings.log_level,
            log_file=Path(settings.log_file) if settings.log_file else None,
        )
        logger.info("Starting %s (model %s)", settings.app_name, settings.model)
        _prepare_storage()
        yield
        logger.info("Stopped %s", settings.app_name)

    app = FastAPI(
        title=settings.app_name,
        description="Rubric drafting, rubric storage and transcript feedback for pitch practice",
        version=API_VERSION,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    for router in (auth_router, drafts_router, rubrics_router, analysis_router):
        app.include_router(router, prefix=API_PREFIX)

    @app.get("/health", tags=["Health"])
    async def health_check():
        return {"status": "healthy", "service": settings.app_name}

    @app.get("/", tags=["Root"])
    async def root():
        return {
            "name": settings.app_name,
            "version": API_VERSION,
            "docs": app.docs_url,
            "health": "/health",
        }

    return app


app = create_app()
