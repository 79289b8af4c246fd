from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient

from cardforge.core.config import settings
from cardforge.core.container import get_flashcard_service, get_generation_service
from cardforge.domain.chatbot.base import ChatBot
from cardforge.domain.flashcard.service import FlashcardService
from cardforge.repositories.flashcard_repository import StorageFlashcardRepository
from cardforge.storage.memory import DictionaryBackend

from helpers import completion


@pytest.fixture
def mock_chatbot():
    chatbot = Mock(spec=ChatBot)
    chatbot.default_model = "anthropic/claude-3-haiku"
    chatbot.get_chat_completion = AsyncMock(
        return_value=completion([{"front": "What do mitochondria produce?", "back": "ATP"}])
    )
    return chatbot


@pytest.fixture
def flashcard_service():
    return FlashcardService(StorageFlashcardRepository(DictionaryBackend()))


@pytest.fixture
def generation_service():
    service = Mock()
    service.generate_flashcards = AsyncMock()
    return service


@pytest.fixture
def app(monkeypatch, flashcard_service, generation_service):
    monkeypatch.setattr(settings, "rate_limit_calls", 1000)

    from cardforge.api.main import create_app

    application = create_app()
    application.dependency_overrides[get_flashcard_service] = lambda: flashcard_service
    application.dependency_overrides[get_generation_service] = lambda: generation_service
    return application


@pytest.fixture
def client(app):
    return TestClient(app)
