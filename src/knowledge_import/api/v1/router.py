"""API v1 router aggregation."""

from fastapi import APIRouter

from knowledge_import.api.v1 import documents, generation, health

router = APIRouter(
    prefix="/api/v1",
    tags=["v1"],
    responses={
        404: {"description": "Not found"},
        422: {"description": "Validation error"},
        500: {"description": "Internal server error"},
    },
)

router.include_router(health.router)
router.include_router(documents.router)
router.include_router(generation.router)


@router.get(
    "/",
    summary="API Information",
    description="Get API version and status information",
    tags=["v1"],
)
async def api_info():
    """Get API v1 information."""
    return {
        "version": "v1",
        "status": "active",
        "service": "knowledge-import",
        "endpoints": {
            "health": "/api/v1/health",
            "ready": "/api/v1/ready",
            "documents": {
                "parse": "/api/v1/documents/parse",
            },
            "tests": {
                "generate": "/api/v1/tests/generate",
                "provider": "/api/v1/tests/provider",
            },
        },
    }
