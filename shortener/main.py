"""
Main FastAPI application entry point.
Configures the application, middleware, and routes.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shortener.api.errors import register_exception_handlers
from shortener.api.middleware import RequestLoggingMiddleware
from shortener.api.routes import auth, health, urls, users
from shortener.core.config import settings
from shortener.core.exceptions import BadParamInputError
from shortener.core.logging import get_logger, setup_logging
from shortener.db.session import async_session_factory, init_db
from shortener.models.user import UserRole
from shortener.repositories.user_repository import SQLUserRepository
from shortener.schemas.user import UserCreate
from shortener.services.user_service import UserService

# Setup logging
setup_logging()
logger = get_logger(__name__)


async def bootstrap_superuser() -> None:
    """Create the first ADMIN account if its email is not registered yet."""
    async with async_session_factory() as session:
        service = UserService(SQLUserRepository(session), timeout=settings.CONTEXT_TIMEOUT_SECONDS)
        superuser = UserCreate(
            email=settings.FIRST_SUPERUSER_EMAIL,
            password=settings.FIRST_SUPERUSER_PASSWORD,
            full_name="Admin User",
        )
        try:
            await service.create(superuser, roles=[UserRole.ADMIN.value])
        except BadParamInputError:
            logger.info(f"Superuser already exists: {settings.FIRST_SUPERUSER_EMAIL}")
            return
        logger.info(f"Superuser created: {settings.FIRST_SUPERUSER_EMAIL}")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler.
    Runs startup and shutdown logic.
    """
    # Startup
    logger.info(f"Starting {settings.PROJECT_NAME} v{settings.VERSION}")

    await init_db()

    if not settings.DISABLE_BOOTSTRAP_USERS:
        await bootstrap_superuser()
    else:
        logger.info("User bootstrapping disabled (DISABLE_BOOTSTRAP_USERS=true)")

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url=f"{settings.API_V1_PREFIX}/docs",
        redoc_url=f"{settings.API_V1_PREFIX}/redoc",
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    app.add_middleware(RequestLoggingMiddleware)
    if settings.BACKEND_CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[str(origin).rstrip("/") for origin in settings.BACKEND_CORS_ORIGINS],
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["authorization", "content-type", "accept"],
        )

    app.include_router(health.router, prefix=settings.API_V1_PREFIX)
    # Token and signup before the /user/{user_id} lookup
    app.include_router(auth.router, prefix=settings.API_V1_PREFIX)
    app.include_router(users.router, prefix=settings.API_V1_PREFIX)
    app.include_router(urls.router, prefix=settings.API_V1_PREFIX)

    # Catch-all redirect goes last
    app.include_router(urls.redirect_router)

    return app


app = create_app()
