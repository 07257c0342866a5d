"""Advisory Review API — FastAPI application factory."""


import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from advisory_api.core.config import settings
from advisory_api.core.exceptions import register_exception_handlers
from advisory_api.db.base import create_tables
from advisory_api.middleware.audit import AuditMiddleware
from advisory_api.routers.v1.documents import router as documents_v1_router
from advisory_api.routers.v1.generator import router as generator_v1_router
from advisory_api.schemas.common import HealthResponse

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    """Set up structured logging for the application."""
    level = logging.DEBUG if settings.app_env == "development" else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    # Quiet noisy libraries
    for name in ("sqlalchemy.engine", "httpcore", "httpx", "openai", "pdfminer", "aiosqlite"):
        logging.getLogger(name).setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings.documents_dir.mkdir(parents=True, exist_ok=True)
    settings.processed_dir.mkdir(parents=True, exist_ok=True)
    if settings.database_url.startswith("sqlite"):
        await create_tables()
    logger.info(
        "%s started (env=%s, ai=%s, orion=%s, jira=%s)",
        settings.app_name, settings.app_env,
        settings.ai_enabled, settings.orion_enabled, settings.jira_enabled,
    )
    yield


def create_app() -> FastAPI:
    _configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url="/docs" if settings.app_env == "development" else None,
        redoc_url="/redoc" if settings.app_env == "development" else None,
        lifespan=lifespan,
    )

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # --- Audit middleware ---
    app.add_middleware(AuditMiddleware)

    # --- Global exception handlers ---
    register_exception_handlers(app)

    # --- v1 API routes (/api/v1/*) ---
    app.include_router(documents_v1_router, prefix="/api/v1")
    app.include_router(generator_v1_router, prefix="/api/v1")

    # --- Health check ---
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health():
        return HealthResponse(
            app=settings.app_name,
            env=settings.app_env,
            ai_enabled=settings.ai_enabled,
            orion_enabled=settings.orion_enabled,
            jira_enabled=settings.jira_enabled,
        )

    return app


app = create_app()
