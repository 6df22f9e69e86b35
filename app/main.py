"""FastAPI application: main entry point."""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from sqlalchemy.orm import sessionmaker

from app.config import Settings, get_settings
from app.core.exceptions import AppError, register_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import setup_middleware
from app.core.security import PasswordHasher
from app.domain.validation import decode_new_user
from app.infrastructure.database import build_engine, build_session_factory, init_db
from app.infrastructure.repositories.user_repository import SQLAlchemyUserRepository
from app.interfaces.api.auth import router as auth_router
from app.interfaces.api.users import router as users_router

logger = structlog.get_logger(__name__)

VERSION = "1.0.0"


def seed_admin(settings: Settings, session_factory: sessionmaker, hasher: PasswordHasher) -> None:
    """Create the bootstrap admin if configured and missing."""
    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        return

    db = session_factory()
    try:
        new_user = decode_new_user(
            {
                "email": settings.ADMIN_EMAIL,
                "name": settings.ADMIN_NAME,
                "password": settings.ADMIN_PASSWORD,
                "role": "admin",
            }
        )
        repo = SQLAlchemyUserRepository(db)
        if repo.find_by_email(new_user.email) is not None:
            return
        admin = repo.create(new_user, hasher.hash(new_user.password))
        logger.info("Bootstrap admin created", user_id=admin.id, email=admin.email)
    except AppError as exc:
        logger.error("Bootstrap admin not created", error=exc.message, details=exc.details)
    finally:
        db.close()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the app. Missing SECRET_KEY/JWT_EXPIRATION_MINUTES fails here, at startup."""
    settings = settings or get_settings()
    configure_logging(settings)

    engine = build_engine(settings.DATABASE_URL)
    session_factory = build_session_factory(engine)
    hasher = PasswordHasher(rounds=settings.BCRYPT_ROUNDS)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan: startup and shutdown events."""
        logger.info("Starting identity service", env=settings.ENVIRONMENT)

        init_db(engine)
        logger.info("Database tables created/verified")

        seed_admin(settings, session_factory, hasher)

        yield

        engine.dispose()
        logger.info("Identity service stopped")

    app = FastAPI(
        title="Identity Service",
        description="Credential login and role-scoped user records",
        version=VERSION,
        lifespan=lifespan,
    )

    # Read-only per-process state shared by every request
    app.state.settings = settings
    app.state.token_settings = settings.token_settings()
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.password_hasher = hasher

    setup_middleware(app, settings)
    register_exception_handlers(app)

    app.include_router(auth_router)
    app.include_router(users_router)

    @app.get("/")
    def root():
        return {
            "name": "Identity Service",
            "version": VERSION,
            "status": "running",
            "docs": "/docs",
        }

    @app.get("/health")
    def health():
        return {"status": "healthy"}

    return app
