from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_core import PydanticCustomError

from cardforge.domain.flashcard.config import MAX_BATCH_SIZE, MAX_SIDE_LENGTH, MAX_TEXT_LENGTH, MIN_TEXT_LENGTH
from cardforge.domain.flashcard.models import FlashcardSource
from cardforge.domain.flashcard.service import NewFlashcard


def _check_side(value: str, side: str) -> str:
    value = value.strip()
    if not value:
        raise PydanticCustomError("side_empty", "{side} must be at least 1 character", {"side": side})
    if len(value) > MAX_SIDE_LENGTH:
        raise PydanticCustomError(
            "side_too_long", "{side} must not exceed {max_length} characters", {"side": side, "max_length": MAX_SIDE_LENGTH}
        )
    return value


class GenerateFlashcardsRequest(BaseModel):
    """Request schema for generating flashcard suggestions"""

    text: str = Field(..., description="Source text to generate flashcards from")
    model: Optional[str] = Field(None, description="Upstream model id, the server default when omitted")

    @field_validator("text")
    def validate_text_length(cls, value: str) -> str:
        """
        Trim the text and enforce its length bounds.

        Raises:
            PydanticCustomError: If the trimmed text is outside the allowed range
        """
        value = value.strip()
        if len(value) < MIN_TEXT_LENGTH:
            raise PydanticCustomError(
                "text_too_short", "Text must be at least {min_length} characters", {"min_length": MIN_TEXT_LENGTH}
            )
        if len(value) > MAX_TEXT_LENGTH:
            raise PydanticCustomError(
                "text_too_long", "Text must not exceed {max_length} characters", {"max_length": MAX_TEXT_LENGTH}
            )
        return value

    model_config = {
        "json_schema_extra": {
            "example": {
                "text": "Photosynthesis is the process by which green plants ... (1000-10000 characters)",
                "model": "anthropic/claude-3-haiku",
            }
        }
    }


class CreateFlashcardRequest(BaseModel):
    """Request schema for saving a single flashcard"""

    front: str
    back: str
    source: FlashcardSource

    @field_validator("front")
    def validate_front(cls, value: str) -> str:
        return _check_side(value, "Front")

    @field_validator("back")
    def validate_back(cls, value: str) -> str:
        return _check_side(value, "Back")

    def to_new_flashcard(self) -> NewFlashcard:
        return NewFlashcard(front=self.front, back=self.back, source=self.source)


class BatchCreateFlashcardsRequest(BaseModel):
    """Request schema for saving accepted suggestions in one call"""

    flashcards: List[CreateFlashcardRequest] = Field(..., min_length=1, max_length=MAX_BATCH_SIZE)


class UpdateFlashcardRequest(BaseModel):
    """Request schema for editing a flashcard; at least one side is required"""

    front: Optional[str] = None
    back: Optional[str] = None

    @field_validator("front")
    def validate_front(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else _check_side(value, "Front")

    @field_validator("back")
    def validate_back(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else _check_side(value, "Back")

    @model_validator(mode="after")
    def require_a_side(self) -> "UpdateFlashcardRequest":
        if self.front is None and self.back is None:
            raise PydanticCustomError("no_fields", "At least one field (front or back) must be provided")
        return self
