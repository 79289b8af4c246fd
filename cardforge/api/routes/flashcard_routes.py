import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from cardforge.api.models.requests import BatchCreateFlashcardsRequest, CreateFlashcardRequest, UpdateFlashcardRequest
from cardforge.api.models.responses import (
    BatchCreateFlashcardsResponse,
    ErrorResponse,
    FlashcardListResponse,
    FlashcardResponse,
)
from cardforge.core.auth import get_current_user
from cardforge.core.container import get_flashcard_service
from cardforge.core.error_handling import handle_exceptions
from cardforge.core.exceptions.domain import FlashcardNotFoundError, FlashcardStorageError
from cardforge.domain.flashcard.config import SortField, SortOrder
from cardforge.domain.flashcard.models import FlashcardSource
from cardforge.domain.flashcard.service import FlashcardQuery, FlashcardService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/flashcards", tags=["flashcards"])

NOT_FOUND = (404, "Not found", "Flashcard not found or does not belong to user")


@router.get("", response_model=FlashcardListResponse, responses={400: {"model": ErrorResponse}})
@handle_exceptions({FlashcardStorageError: (500, "Internal server error", "Failed to retrieve flashcards")})
async def list_flashcards(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    source: Optional[FlashcardSource] = Query(None),
    sort: SortField = Query(SortField.CREATED_AT),
    order: SortOrder = Query(SortOrder.DESC),
    user_id: str = Depends(get_current_user),
    flashcard_service: FlashcardService = Depends(get_flashcard_service),
) -> FlashcardListResponse:
    """
    List the current user's flashcards, one page at a time.

    Args:
        page (int): Page number, starting at 1
        limit (int): Items per page, 1-100
        source (Optional[FlashcardSource]): Only flashcards of this origin
        sort (SortField): Timestamp to order by
        order (SortOrder): Ascending or descending
        user_id (str): Current user ID
        flashcard_service (FlashcardService): Flashcard service instance

    Returns:
        FlashcardListResponse: Page of flashcards with pagination metadata
    """
    query = FlashcardQuery(page=page, limit=limit, source=source, sort=sort, order=order)
    result = await flashcard_service.list_flashcards(user_id, query)
    return FlashcardListResponse.from_page(result)


@router.post("", response_model=FlashcardResponse, status_code=status.HTTP_201_CREATED)
@handle_exceptions({FlashcardStorageError: (500, "Internal server error", "Failed to create flashcard")})
async def create_flashcard(
    request: CreateFlashcardRequest,
    user_id: str = Depends(get_current_user),
    flashcard_service: FlashcardService = Depends(get_flashcard_service),
) -> FlashcardResponse:
    """Save a single flashcard."""
    flashcard = await flashcard_service.create_flashcard(user_id, request.to_new_flashcard())
    return FlashcardResponse.from_domain(flashcard)


@router.post("/batch", response_model=BatchCreateFlashcardsResponse, status_code=status.HTTP_201_CREATED)
@handle_exceptions({FlashcardStorageError: (500, "Internal server error", "Failed to save flashcards")})
async def create_flashcards_batch(
    request: BatchCreateFlashcardsRequest,
    user_id: str = Depends(get_current_user),
    flashcard_service: FlashcardService = Depends(get_flashcard_service),
) -> BatchCreateFlashcardsResponse:
    """Save up to 50 flashcards at once, typically accepted AI suggestions."""
    created = await flashcard_service.create_flashcards(user_id, [item.to_new_flashcard() for item in request.flashcards])
    return BatchCreateFlashcardsResponse(
        created=len(created), flashcards=[FlashcardResponse.from_domain(card) for card in created]
    )


@router.put("/{flashcard_id}", response_model=FlashcardResponse, responses={404: {"model": ErrorResponse}})
@handle_exceptions(
    {
        FlashcardNotFoundError: NOT_FOUND,
        FlashcardStorageError: (500, "Internal server error", "Failed to update flashcard"),
    },
    log_level=logging.WARNING,
)
async def update_flashcard(
    flashcard_id: str,
    request: UpdateFlashcardRequest,
    user_id: str = Depends(get_current_user),
    flashcard_service: FlashcardService = Depends(get_flashcard_service),
) -> FlashcardResponse:
    """Edit the front and/or back of a flashcard."""
    flashcard = await flashcard_service.update_flashcard(user_id, flashcard_id, front=request.front, back=request.back)
    return FlashcardResponse.from_domain(flashcard)


@router.delete("/{flashcard_id}", status_code=status.HTTP_204_NO_CONTENT, responses={404: {"model": ErrorResponse}})
@handle_exceptions(
    {
        FlashcardNotFoundError: NOT_FOUND,
        FlashcardStorageError: (500, "Internal server error", "Failed to delete flashcard"),
    },
    log_level=logging.WARNING,
)
async def delete_flashcard(
    flashcard_id: str,
    user_id: str = Depends(get_current_user),
    flashcard_service: FlashcardService = Depends(get_flashcard_service),
) -> Response:
    """Delete a flashcard."""
    await flashcard_service.delete_flashcard(user_id, flashcard_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
