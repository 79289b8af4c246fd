from typing import List, Optional

from pydantic import BaseModel

from cardforge.domain.flashcard.models import Flashcard, FlashcardPage, FlashcardSource, GenerationResult


class FlashcardSuggestionResponse(BaseModel):
    front: str
    back: str


class GenerateFlashcardsResponse(BaseModel):
    model_config = {"protected_namespaces": ()}

    suggestions: List[FlashcardSuggestionResponse]
    model_used: str
    tokens_used: int

    @classmethod
    def from_result(cls, result: GenerationResult) -> "GenerateFlashcardsResponse":
        return cls.model_validate(result.to_dict())


class FlashcardResponse(BaseModel):
    id: str
    front: str
    back: str
    source: FlashcardSource
    created_at: str
    updated_at: str

    @classmethod
    def from_domain(cls, flashcard: Flashcard) -> "FlashcardResponse":
        return cls.model_validate(flashcard.to_public())


class PaginationResponse(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class FlashcardListResponse(BaseModel):
    data: List[FlashcardResponse]
    pagination: PaginationResponse

    @classmethod
    def from_page(cls, page: FlashcardPage) -> "FlashcardListResponse":
        return cls(
            data=[FlashcardResponse.from_domain(card) for card in page.flashcards],
            pagination=PaginationResponse(
                page=page.page, limit=page.limit, total=page.total, total_pages=page.total_pages
            ),
        )


class BatchCreateFlashcardsResponse(BaseModel):
    created: int
    flashcards: List[FlashcardResponse]


class ValidationErrorDetail(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    error: str
    message: Optional[str] = None
    details: Optional[List[ValidationErrorDetail]] = None
    retry_after: Optional[int] = None
