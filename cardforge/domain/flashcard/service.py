import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from cardforge.core.exceptions.domain import FlashcardError, FlashcardNotFoundError
from cardforge.repositories.flashcard_repository import FlashcardRepositoryInterface

from .config import SortField, SortOrder
from .models import Flashcard, FlashcardPage, FlashcardSource


@dataclass(frozen=True)
class FlashcardQuery:
    """Validated listing parameters."""

    page: int = 1
    limit: int = 20
    source: Optional[FlashcardSource] = None
    sort: SortField = SortField.CREATED_AT
    order: SortOrder = SortOrder.DESC


@dataclass(frozen=True)
class NewFlashcard:
    front: str
    back: str
    source: FlashcardSource


class FlashcardService:
    """
    Manages a user's flashcard collection.
    """

    def __init__(self, repository: FlashcardRepositoryInterface):
        """
        Initialize FlashcardService.

        Args:
            repository (FlashcardRepositoryInterface): Repository holding the flashcards
        """
        self.repository = repository
        self.logger = logging.getLogger(__name__)

    async def list_flashcards(self, user_id: str, query: FlashcardQuery) -> FlashcardPage:
        """
        Get one page of a user's flashcards.

        The total is computed from the same read as the page, so the two
        cannot disagree.

        Args:
            user_id (str): Owner of the collection
            query (FlashcardQuery): Page, page size, source filter and ordering

        Returns:
            FlashcardPage: The requested page with pagination metadata
        """
        self.logger.info(
            "Fetching flashcards",
            extra={
                "details": {
                    "user_id": user_id,
                    "page": query.page,
                    "limit": query.limit,
                    "source": query.source.value if query.source else None,
                    "sort": query.sort.value,
                    "order": query.order.value,
                }
            },
        )

        flashcards = await self.repository.list_for_user(user_id)
        if query.source is not None:
            flashcards = [card for card in flashcards if card.source is query.source]

        flashcards.sort(
            key=lambda card: (getattr(card, query.sort.value), card.id),
            reverse=query.order is SortOrder.DESC,
        )

        offset = (query.page - 1) * query.limit
        page = FlashcardPage(
            flashcards=flashcards[offset : offset + query.limit],
            page=query.page,
            limit=query.limit,
            total=len(flashcards),
        )

        self.logger.info(
            "Successfully fetched flashcards",
            extra={
                "details": {
                    "user_id": user_id,
                    "count": len(page.flashcards),
                    "total": page.total,
                    "total_pages": page.total_pages,
                }
            },
        )
        return page

    async def create_flashcards(self, user_id: str, items: Sequence[NewFlashcard]) -> List[Flashcard]:
        """
        Save one or more flashcards for a user.

        Raises:
            FlashcardError: If nothing was given to save
            FlashcardStorageError: If the repository write fails
        """
        if not items:
            raise FlashcardError("At least one flashcard is required")

        flashcards = [Flashcard(user_id=user_id, front=item.front, back=item.back, source=item.source) for item in items]
        created = await self.repository.add(flashcards)

        self.logger.info(
            "Created flashcards",
            extra={
                "details": {
                    "user_id": user_id,
                    "created": len(created),
                    "sources": sorted({card.source.value for card in created}),
                }
            },
        )
        return created

    async def create_flashcard(self, user_id: str, item: NewFlashcard) -> Flashcard:
        created = await self.create_flashcards(user_id, [item])
        return created[0]

    async def update_flashcard(
        self, user_id: str, flashcard_id: str, front: Optional[str] = None, back: Optional[str] = None
    ) -> Flashcard:
        """
        Replace the front and/or back of a flashcard.

        Raises:
            FlashcardNotFoundError: If the flashcard does not exist for this user
        """
        self.logger.info(
            "Updating flashcard",
            extra={
                "details": {
                    "user_id": user_id,
                    "flashcard_id": flashcard_id,
                    "fields": [name for name, value in (("front", front), ("back", back)) if value is not None],
                }
            },
        )

        flashcard = await self.repository.get(user_id, flashcard_id)
        if flashcard is None:
            self.logger.warning(
                "Flashcard not found for update", extra={"details": {"user_id": user_id, "flashcard_id": flashcard_id}}
            )
            raise FlashcardNotFoundError(flashcard_id)

        return await self.repository.save(flashcard.edited(front=front, back=back))

    async def delete_flashcard(self, user_id: str, flashcard_id: str) -> None:
        """
        Delete a flashcard.

        Raises:
            FlashcardNotFoundError: If the flashcard does not exist for this user
        """
        if not await self.repository.delete(user_id, flashcard_id):
            self.logger.warning(
                "Flashcard not found for deletion",
                extra={"details": {"user_id": user_id, "flashcard_id": flashcard_id}},
            )
            raise FlashcardNotFoundError(flashcard_id)

        self.logger.info("Deleted flashcard", extra={"details": {"user_id": user_id, "flashcard_id": flashcard_id}})
