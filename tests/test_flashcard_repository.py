from unittest.mock import AsyncMock

import pytest

from cardforge.core.exceptions.domain import FlashcardError, FlashcardNotFoundError, FlashcardStorageError
from cardforge.domain.flashcard.config import SortField, SortOrder
from cardforge.domain.flashcard.models import Flashcard, FlashcardSource
from cardforge.domain.flashcard.service import FlashcardQuery, FlashcardService, NewFlashcard
from cardforge.repositories.flashcard_repository import StorageFlashcardRepository
from cardforge.storage.memory import DictionaryBackend


def card(user_id="user-1", front="Q", created_at="2024-05-01T10:00:00.000000+00:00"):
    return Flashcard(user_id=user_id, front=front, back="A", source=FlashcardSource.MANUAL, created_at=created_at)


@pytest.fixture
def storage():
    return DictionaryBackend()


@pytest.fixture
def repository(storage):
    return StorageFlashcardRepository(storage)


class TestStorageFlashcardRepository:

    async def test_keys_share_the_user_hash_tag(self, repository, storage):
        flashcard = card()

        await repository.add([flashcard])

        assert f"flashcard:{{user-1}}:{flashcard.id}" in storage.data
        assert "flashcards:{user-1}" in storage.sorted_sets

    async def test_list_is_newest_first(self, repository):
        older = card(front="older", created_at="2024-05-01T10:00:00.000000+00:00")
        newer = card(front="newer", created_at="2024-05-02T10:00:00.000000+00:00")

        await repository.add([older, newer])

        assert [c.front for c in await repository.list_for_user("user-1")] == ["newer", "older"]

    async def test_get_is_scoped_to_owner(self, repository):
        flashcard = card()
        await repository.add([flashcard])

        assert (await repository.get("user-1", flashcard.id)) == flashcard
        assert await repository.get("user-2", flashcard.id) is None

    async def test_delete_reports_whether_anything_was_removed(self, repository):
        flashcard = card()
        await repository.add([flashcard])

        assert await repository.delete("user-2", flashcard.id) is False
        assert await repository.delete("user-1", flashcard.id) is True
        assert await repository.delete("user-1", flashcard.id) is False
        assert await repository.list_for_user("user-1") == []

    async def test_dangling_index_entries_are_skipped(self, repository, storage):
        flashcard = card()
        await repository.add([flashcard])
        await storage.delete(f"flashcard:{{user-1}}:{flashcard.id}")

        assert await repository.list_for_user("user-1") == []

    async def test_storage_failures_are_wrapped(self, storage):
        storage.set = AsyncMock(side_effect=ConnectionError("connection reset"))
        repository = StorageFlashcardRepository(storage)

        with pytest.raises(FlashcardStorageError) as exc_info:
            await repository.add([card()])

        assert exc_info.value.details["operation"] == "insert"

    async def test_stored_values_are_isolated_from_callers(self, storage):
        document = {"front": "Q"}
        await storage.set("key", document)
        document["front"] = "changed"

        fetched = await storage.get("key")
        fetched["front"] = "changed again"

        assert await storage.get("key") == {"front": "Q"}


class TestFlashcardService:

    @pytest.fixture
    def service(self, repository):
        return FlashcardService(repository)

    async def test_create_flashcards(self, service):
        created = await service.create_flashcards(
            "user-1",
            [
                NewFlashcard(front=" Capital of France? ", back="Paris", source=FlashcardSource.AI_GENERATED),
                NewFlashcard(front="Largest planet?", back="Jupiter", source=FlashcardSource.AI_GENERATED),
            ],
        )

        assert [c.front for c in created] == ["Capital of France?", "Largest planet?"]
        assert all(c.user_id == "user-1" for c in created)

    async def test_create_requires_items(self, service):
        with pytest.raises(FlashcardError):
            await service.create_flashcards("user-1", [])

    async def test_list_sorts_by_updated_at(self, service, repository):
        first = card(front="first", created_at="2024-05-01T10:00:00.000000+00:00")
        second = card(front="second", created_at="2024-05-02T10:00:00.000000+00:00")
        await repository.add([first, second])
        await service.update_flashcard("user-1", first.id, back="edited")

        page = await service.list_flashcards("user-1", FlashcardQuery(sort=SortField.UPDATED_AT, order=SortOrder.DESC))

        assert [c.front for c in page.flashcards] == ["first", "second"]

    async def test_list_pagination_and_filter(self, service, repository):
        await repository.add([card(front=f"manual {i}", created_at=f"2024-05-0{i + 1}T10:00:00.000000+00:00") for i in range(3)])
        await repository.add(
            [
                Flashcard(
                    user_id="user-1",
                    front="generated",
                    back="A",
                    source=FlashcardSource.AI_GENERATED,
                    created_at="2024-05-09T10:00:00.000000+00:00",
                )
            ]
        )

        page = await service.list_flashcards(
            "user-1", FlashcardQuery(page=2, limit=2, source=FlashcardSource.MANUAL, order=SortOrder.ASC)
        )

        assert [c.front for c in page.flashcards] == ["manual 2"]
        assert (page.total, page.total_pages) == (3, 2)

    async def test_update_keeps_creation_time(self, service, repository):
        flashcard = card()
        await repository.add([flashcard])

        updated = await service.update_flashcard("user-1", flashcard.id, front="  New front ")

        assert updated.front == "New front"
        assert updated.back == "A"
        assert updated.created_at == flashcard.created_at
        assert updated.updated_at > flashcard.updated_at

    async def test_update_and_delete_unknown(self, service):
        with pytest.raises(FlashcardNotFoundError):
            await service.update_flashcard("user-1", "missing", front="x")
        with pytest.raises(FlashcardNotFoundError):
            await service.delete_flashcard("user-1", "missing")
