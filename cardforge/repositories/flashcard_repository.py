import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from ..core.exceptions.domain import FlashcardStorageError
from ..domain.flashcard.models import Flashcard
from ..storage.base import StorageBackend

logger = logging.getLogger(__name__)


class FlashcardRepositoryInterface(ABC):
    """Abstract base class defining the interface for Flashcard repositories.

    Every operation is scoped to one user: a flashcard owned by someone else
    behaves exactly like a missing one.
    """

    @abstractmethod
    async def add(self, flashcards: List[Flashcard]) -> List[Flashcard]:
        """Persist new flashcards."""
        pass

    @abstractmethod
    async def get(self, user_id: str, flashcard_id: str) -> Optional[Flashcard]:
        """Fetch one flashcard of a user."""
        pass

    @abstractmethod
    async def save(self, flashcard: Flashcard) -> Flashcard:
        """Overwrite an existing flashcard."""
        pass

    @abstractmethod
    async def delete(self, user_id: str, flashcard_id: str) -> bool:
        """Delete a flashcard; False when it did not exist for this user."""
        pass

    @abstractmethod
    async def list_for_user(self, user_id: str) -> List[Flashcard]:
        """All flashcards of a user, newest first."""
        pass


class StorageFlashcardRepository(FlashcardRepositoryInterface):
    """Flashcard repository over a key-value StorageBackend.

    Layout per user: a sorted set of flashcard ids scored by creation time and
    one JSON document per flashcard. The user id sits in a ``{...}`` hash tag
    so all of a user's keys share one Redis cluster slot.
    """

    def __init__(self, storage: StorageBackend):
        self.storage = storage

    @staticmethod
    def _index_key(user_id: str) -> str:
        return f"flashcards:{{{user_id}}}"

    @staticmethod
    def _card_key(user_id: str, flashcard_id: str) -> str:
        return f"flashcard:{{{user_id}}}:{flashcard_id}"

    @staticmethod
    def _score(flashcard: Flashcard) -> float:
        return datetime.fromisoformat(flashcard.created_at).timestamp()

    async def add(self, flashcards: List[Flashcard]) -> List[Flashcard]:
        try:
            for flashcard in flashcards:
                await self.storage.set(self._card_key(flashcard.user_id, flashcard.id), flashcard.to_storage())
                await self.storage.zadd(self._index_key(flashcard.user_id), {flashcard.id: self._score(flashcard)})
        except Exception as e:
            logger.error("Error saving flashcards", extra={"details": {"count": len(flashcards), "error": str(e)}})
            raise FlashcardStorageError("insert", str(e))
        return flashcards

    async def get(self, user_id: str, flashcard_id: str) -> Optional[Flashcard]:
        try:
            data = await self.storage.get(self._card_key(user_id, flashcard_id))
        except Exception as e:
            raise FlashcardStorageError("read", str(e), {"flashcard_id": flashcard_id})
        return Flashcard.from_storage(data) if data else None

    async def save(self, flashcard: Flashcard) -> Flashcard:
        try:
            await self.storage.set(self._card_key(flashcard.user_id, flashcard.id), flashcard.to_storage())
        except Exception as e:
            raise FlashcardStorageError("update", str(e), {"flashcard_id": flashcard.id})
        return flashcard

    async def delete(self, user_id: str, flashcard_id: str) -> bool:
        try:
            removed = await self.storage.zrem(self._index_key(user_id), flashcard_id)
            await self.storage.delete(self._card_key(user_id, flashcard_id))
        except Exception as e:
            raise FlashcardStorageError("delete", str(e), {"flashcard_id": flashcard_id})
        return removed > 0

    async def list_for_user(self, user_id: str) -> List[Flashcard]:
        try:
            ids = await self.storage.zrevrange(self._index_key(user_id), 0, -1)
            documents = await self.storage.mget([self._card_key(user_id, flashcard_id) for flashcard_id in ids])
        except Exception as e:
            raise FlashcardStorageError("list", str(e))

        flashcards = [Flashcard.from_storage(document) for document in documents if document]
        if len(flashcards) != len(ids):
            logger.warning(
                "Flashcard index references missing documents",
                extra={"details": {"user_id": user_id, "missing": len(ids) - len(flashcards)}},
            )
        return flashcards
