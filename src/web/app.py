"""
FastAPI application for the Engineering Staffing Service.

Routes:
- POST /api/auth/login                       : exchange credentials for a token
- GET  /api/auth/profile                     : current user
- GET  /api/engineers                        : list engineers (manager)
- GET  /api/engineers/{id}/capacity          : capacity as of today
- GET  /api/engineers/{id}/availability      : next available date
- GET/POST /api/projects, GET/PUT /api/projects/{id}
- GET  /api/projects/{id}/skill-gap          : missing skills (manager)
- GET/POST /api/assignments, PUT/DELETE /api/assignments/{id}
- GET  /health                               : liveness + database check
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.database import DatabaseSettings, get_database_settings
from config.settings import Settings, get_settings, validate_startup_security
from database.async_engine import close_database, create_engine, get_session_factory, init_database
from security.api_errors import RequestIDMiddleware, register_exception_handlers
from services.logging_config import configure_logging
from staffing.locks import EngineerLocks

from .routers import (
    assignments_router,
    auth_router,
    engineers_router,
    health_router,
    projects_router,
)

logger = logging.getLogger(__name__)


# =============================================================================
# LIFESPAN
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Own the process-scoped resources: the database engine, the session
    factory and the per-engineer lock registry.
    """
    settings: Settings = app.state.settings
    db_settings: DatabaseSettings = app.state.db_settings

    if settings.is_production:
        # In production, fail fast if security is misconfigured
        validate_startup_security(settings, exit_on_failure=True)
        logger.info("[SECURITY] Production security validation PASSED")

    engine = create_engine(db_settings)
    await init_database(engine, db_settings)

    app.state.engine = engine
    app.state.session_factory = get_session_factory(engine)
    app.state.locks = EngineerLocks(enabled=settings.serialize_writes)

    logger.info(
        f"{settings.app_name} {settings.app_version} started "
        f"(env={settings.app_environment}, db={db_settings.driver}, "
        f"create_policy={settings.capacity_create_policy.value}, "
        f"availability={settings.availability_mode.value}, "
        f"serialize_writes={settings.serialize_writes})"
    )
    try:
        yield
    finally:
        await close_database(engine)
        logger.info("Database engine disposed")


# =============================================================================
# APPLICATION FACTORY
# =============================================================================

def create_app(
    settings: Optional[Settings] = None,
    db_settings: Optional[DatabaseSettings] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Application settings; read from the environment if omitted
        db_settings: Database settings; read from the environment if omitted
    """
    settings = settings or get_settings()
    db_settings = db_settings or get_database_settings()

    configure_logging(settings.log_level, settings.log_json)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.db_settings = db_settings

    # Middleware (last added = first executed)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(auth_router)
    app.include_router(engineers_router)
    app.include_router(projects_router)
    app.include_router(assignments_router)
    app.include_router(health_router)

    return app


app = create_app()
