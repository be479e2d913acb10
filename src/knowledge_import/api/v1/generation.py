"""Test generation endpoints."""

from fastapi import APIRouter, Depends

from knowledge_import.config import get_settings
from knowledge_import.models.test_generation import TestGenerationRequest, TestGenerationResponse
from knowledge_import.services.test_generation_service import (
    TestGenerationService,
    get_test_generation_service,
)

router = APIRouter(prefix="/tests", tags=["tests"])


@router.post(
    "/generate",
    response_model=TestGenerationResponse,
    summary="Generate Test",
    description="Generate quiz questions from document content.",
)
async def generate_test(
    request: TestGenerationRequest,
    service: TestGenerationService = Depends(get_test_generation_service),
) -> TestGenerationResponse:
    """
    Generate questions for the given parameters and context.

    Answers with mock questions when no provider key is configured, when the
    provider is region restricted, or when its reply cannot be parsed.
    """
    return await service.generate(request)


@router.get(
    "/provider",
    summary="Provider Status",
    description="Report whether the completion provider key is configured.",
)
async def provider_status():
    """Report key presence and length; never the key itself."""
    api_key = get_settings().test_generation.api_key
    if not api_key:
        return {"has_key": False, "message": "GROK_API_KEY not set"}
    return {"has_key": True, "message": "GROK_API_KEY is set", "key_length": len(api_key)}
