import logging

from fastapi import APIRouter, Depends

from cardforge.api.models.requests import GenerateFlashcardsRequest
from cardforge.api.models.responses import ErrorResponse, GenerateFlashcardsResponse
from cardforge.core.auth import get_current_user
from cardforge.core.container import get_generation_service
from cardforge.core.error_handling import handle_exceptions
from cardforge.core.exceptions.domain import (
    GatewayError,
    GenerationTimeoutError,
    NoSuggestionsError,
    ServiceUnavailableError,
)
from cardforge.domain.flashcard.generation import FlashcardGenerationService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/ai", tags=["generation"])


@router.post(
    "/generate",
    response_model=GenerateFlashcardsResponse,
    responses={code: {"model": ErrorResponse} for code in (400, 500, 502, 503)},
)
@handle_exceptions(
    {
        GenerationTimeoutError: (502, "Gateway timeout", "AI service timeout. Please try again."),
        GatewayError: (502, "Bad Gateway", "AI generation service returned an error. Please try again."),
        ServiceUnavailableError: (503, "Service unavailable", "AI generation service temporarily unavailable"),
        NoSuggestionsError: (
            500,
            "No suggestions generated",
            "Could not generate valid flashcards from the provided text. Please try different text.",
        ),
        Exception: (500, "Internal server error", "An unexpected error occurred during flashcard generation"),
    }
)
async def generate_flashcards(
    request: GenerateFlashcardsRequest,
    user_id: str = Depends(get_current_user),
    generation_service: FlashcardGenerationService = Depends(get_generation_service),
) -> GenerateFlashcardsResponse:
    """
    Generate flashcard suggestions from user-provided text.

    Args:
        request (GenerateFlashcardsRequest): Source text (1000-10000 characters) and optional model
        user_id (str): Current user ID
        generation_service (FlashcardGenerationService): Generation service instance

    Returns:
        GenerateFlashcardsResponse: Suggestions, the model used and an estimated token count
    """
    result = await generation_service.generate_flashcards(request.text, request.model, user_id)
    return GenerateFlashcardsResponse.from_result(result)
