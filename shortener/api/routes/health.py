"""
Health check routes for monitoring and service discovery.
Provides endpoints to verify service health and database connectivity.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shortener.core.config import settings
from shortener.core.logging import get_logger
from shortener.db.session import get_session

logger = get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> dict:
    """
    Basic health check endpoint.
    Returns service status and version information.

    Returns:
        Health status
    """
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "version": settings.VERSION,
    }


@router.get("/health/db")
async def database_health_check(session: Annotated[AsyncSession, Depends(get_session)]) -> dict:
    """
    Database health check endpoint.
    Verifies database connectivity by executing a simple query.

    Args:
        session: Database session

    Returns:
        Database health status with JSON-serializable data
    """
    try:
        result = (await session.execute(text("SELECT 1"))).scalar()
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return {
            "status": "unhealthy",
            "database": "error",
            "error": str(e),
        }

    return {
        "status": "healthy",
        "database": "ok",
        "result": int(result) if result is not None else 1,
    }
