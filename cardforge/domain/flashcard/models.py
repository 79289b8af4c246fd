from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4


class FlashcardSource(str, Enum):
    MANUAL = "manual"
    AI_GENERATED = "ai_generated"


@dataclass(frozen=True)
class FlashcardSuggestion:
    """A validated front/back pair proposed by the model, not yet saved."""

    front: str
    back: str


@dataclass(frozen=True)
class GenerationResult:
    """Successful outcome of one generation call.

    ``tokens_used`` is a character-based estimate, not a billing figure.
    """

    suggestions: Tuple[FlashcardSuggestion, ...]
    model_used: str
    tokens_used: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "suggestions": [asdict(s) for s in self.suggestions],
            "model_used": self.model_used,
            "tokens_used": self.tokens_used,
        }


def utc_now() -> str:
    # Fixed precision keeps the strings sortable
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


@dataclass
class Flashcard:
    """Domain model representing a saved Flashcard."""

    user_id: str
    front: str
    back: str
    source: FlashcardSource
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: str = field(default_factory=utc_now)
    updated_at: Optional[str] = None

    def __post_init__(self):
        """Validate flashcard data after initialization."""
        if not self.front or not self.back:
            raise ValueError("Flashcard must have both front and back content")

        # Trim excessive whitespace
        self.front = self.front.strip()
        self.back = self.back.strip()
        self.source = FlashcardSource(self.source)
        if self.updated_at is None:
            self.updated_at = self.created_at

    def edited(self, front: Optional[str] = None, back: Optional[str] = None) -> "Flashcard":
        """Return a copy with the given sides replaced and a fresh ``updated_at``."""
        return replace(
            self,
            front=front if front is not None else self.front,
            back=back if back is not None else self.back,
            updated_at=utc_now(),
        )

    def to_storage(self) -> Dict[str, Any]:
        data = asdict(self)
        data["source"] = self.source.value
        return data

    @classmethod
    def from_storage(cls, data: Dict[str, Any]) -> "Flashcard":
        return cls(**data)

    def to_public(self) -> Dict[str, Any]:
        """Representation returned to callers; the owner id stays internal."""
        data = self.to_storage()
        data.pop("user_id")
        return data


@dataclass(frozen=True)
class FlashcardPage:
    flashcards: List[Flashcard]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return -(-self.total // self.limit) if self.limit else 0
