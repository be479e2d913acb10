"""Health check endpoints."""

from fastapi import APIRouter, status

from knowledge_import.config import get_settings
from knowledge_import.utils.logging import get_logger

logger = get_logger("health")

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check():
    """
    Health check endpoint.

    Returns basic service health status. This endpoint does not check
    external dependencies and will always return healthy if the service is running.
    """
    settings = get_settings()
    logger.debug("Health check requested")
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "environment": settings.environment.value,
    }


@router.get("/ready", status_code=status.HTTP_200_OK)
async def readiness_check():
    """
    Readiness check endpoint.

    Parsing has no external dependencies, so the service is always ready.
    The completion provider check is informational: without a key, test
    generation answers with mock questions.
    """
    settings = get_settings()
    checks = {
        "parser": True,
        "completion_provider": settings.test_generation.is_configured,
    }
    if not checks["completion_provider"]:
        logger.warning("Readiness check partial: completion provider not configured")

    return {
        "status": "ready",
        "app_name": settings.app_name,
        "environment": settings.environment.value,
        "checks": checks,
    }
