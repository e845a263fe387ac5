"""TrustEstate Registry API — FastAPI application factory."""


import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.exceptions import register_exception_handlers
from app.db.base import async_session_factory, create_all
from app.middleware.request_log import RequestLogMiddleware
from app.schemas.common import HealthResponse
from app.services.audit import AuditRecorder
from app.services.user import UserService

# v1 routers
from app.routers.v1.admin import router as admin_v1_router
from app.routers.v1.complaints import router as complaints_v1_router
from app.routers.v1.meta import router as meta_v1_router
from app.routers.v1.properties import router as properties_v1_router
from app.routers.v1.users import router as users_v1_router

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
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Deployed databases are migrated with Alembic; local dev bootstraps the schema
    if settings.app_env == "development":
        await create_all()
    async with async_session_factory() as session:
        await UserService(session, AuditRecorder(async_session_factory)).ensure_admin()
    logger.info("%s started (env=%s, ai=%s)", settings.app_name, settings.app_env, settings.ai_enabled)
    yield


def create_app() -> FastAPI:
    _configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.app_env == "development" else None,
        redoc_url="/redoc" if settings.app_env == "development" else None,
    )

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # --- Request logging ---
    app.add_middleware(RequestLogMiddleware)

    # --- Global exception handlers ---
    register_exception_handlers(app)

    # --- v1 API routes (/api/v1/*) ---
    app.include_router(meta_v1_router, prefix="/api/v1")
    app.include_router(users_v1_router, prefix="/api/v1")
    app.include_router(properties_v1_router, prefix="/api/v1")
    app.include_router(complaints_v1_router, prefix="/api/v1")
    app.include_router(admin_v1_router, prefix="/api/v1")

    # --- Health check ---
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health():
        return HealthResponse(app=settings.app_name, env=settings.app_env)

    return app


app = create_app()
