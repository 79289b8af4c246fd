from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import httpx
import pytest
from groq import APIConnectionError, APIStatusError, APITimeoutError

from cardforge.core.config import Settings
from cardforge.domain.chatbot.exceptions import ChatBotNotFoundError
from cardforge.domain.chatbot.factory import ChatBotFactory
from cardforge.domain.chatbot.models import CompletionErrorCode, sanitize_parameters
from cardforge.domain.chatbot.providers.groq import GroqChatBot
from cardforge.domain.chatbot.providers.mistral import MistralChatBot
from cardforge.domain.chatbot.providers.openrouter import OpenRouterChatBot

GROQ_REQUEST = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")


def chat_reply(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture
def groq_chatbot():
    chatbot = GroqChatBot(api_key="groq-key")
    chatbot.client = Mock()
    chatbot.client.chat.completions.create = AsyncMock(return_value=chat_reply('{"flashcards": []}'))
    chatbot.is_initialized = True
    return chatbot


class TestChatBotFactory:

    @pytest.mark.parametrize(
        "provider,chatbot_class,key",
        [
            ("openrouter", OpenRouterChatBot, "or-key"),
            ("groq", GroqChatBot, "groq-key"),
            ("MISTRAL", MistralChatBot, "mistral-key"),
        ],
    )
    def test_create_wires_provider_credential(self, provider, chatbot_class, key):
        settings = Settings(openrouter_api_key="or-key", groq_api_key="groq-key", mistral_api_key="mistral-key")

        chatbot = ChatBotFactory.create(provider, settings)

        assert isinstance(chatbot, chatbot_class)
        assert chatbot.api_key == key
        assert not chatbot.is_initialized

    def test_openrouter_endpoint_comes_from_settings(self):
        settings = Settings(openrouter_base_url="https://proxy.internal/v1/chat/completions")

        chatbot = ChatBotFactory.create("openrouter", settings)

        assert chatbot.endpoint == "https://proxy.internal/v1/chat/completions"

    def test_unknown_provider(self):
        with pytest.raises(ChatBotNotFoundError, match="Unsupported chatbot type: claude"):
            ChatBotFactory.create("claude", Settings())

    def test_register_chatbot(self, monkeypatch):
        monkeypatch.setattr(ChatBotFactory, "_chatbots", dict(ChatBotFactory._chatbots))

        class EchoChatBot(OpenRouterChatBot):
            provider = "echo"

        ChatBotFactory.register_chatbot("Echo", EchoChatBot)

        assert "echo" in ChatBotFactory.get_available_chatbots()
        with pytest.raises(ValueError):
            ChatBotFactory.register_chatbot("echo", EchoChatBot)
        with pytest.raises(ValueError):
            ChatBotFactory.register_chatbot("", EchoChatBot)

    @pytest.mark.parametrize("blank", ["", "   "])
    def test_blank_key_counts_as_missing(self, blank):
        assert Settings(groq_api_key=blank).api_key_for("groq") is None


class TestSanitizeParameters:

    def test_only_known_numeric_parameters_survive(self):
        parameters = {"temperature": 0.7, "max_tokens": 4000, "top_p": "0.9", "stream": True, "seed": 1, "presence_penalty": True}

        assert sanitize_parameters(parameters) == {"temperature": 0.7, "max_tokens": 4000}

    @pytest.mark.parametrize("parameters", [None, {}])
    def test_nothing_to_forward(self, parameters):
        assert sanitize_parameters(parameters) == {}


class TestGroqChatBot:

    async def test_missing_key(self):
        result = await GroqChatBot().get_chat_completion("Hello")

        assert result.error_code is CompletionErrorCode.CONFIGURATION
        assert result.error == "GROQ_API_KEY is not configured."

    async def test_text_completion_forwards_parameters(self, groq_chatbot):
        result = await groq_chatbot.get_chat_completion("Hello", parameters={"temperature": 0.2}, timeout=10)

        assert result.success
        assert result.data == '{"flashcards": []}'
        kwargs = groq_chatbot.client.chat.completions.create.await_args.kwargs
        assert kwargs["model"] == GroqChatBot.default_model
        assert kwargs["temperature"] == 0.2
        assert kwargs["timeout"] == 10

    @pytest.mark.parametrize(
        "error,expected",
        [
            (APITimeoutError(request=GROQ_REQUEST), CompletionErrorCode.TIMEOUT),
            (APIConnectionError(request=GROQ_REQUEST), CompletionErrorCode.NETWORK),
            (
                APIStatusError("unavailable", response=httpx.Response(503, request=GROQ_REQUEST), body=None),
                CompletionErrorCode.SERVICE_UNAVAILABLE,
            ),
            (
                APIStatusError("bad request", response=httpx.Response(400, request=GROQ_REQUEST), body=None),
                CompletionErrorCode.HTTP_ERROR,
            ),
        ],
    )
    async def test_sdk_errors_are_classified(self, groq_chatbot, error, expected):
        groq_chatbot.client.chat.completions.create.side_effect = error

        result = await groq_chatbot.get_chat_completion("Hello")

        assert result.error_code is expected

    async def test_no_choices(self, groq_chatbot):
        groq_chatbot.client.chat.completions.create.return_value = SimpleNamespace(choices=[])

        result = await groq_chatbot.get_chat_completion("Hello")

        assert result.error_code is CompletionErrorCode.EMPTY_RESPONSE

    async def test_unclassified_failure_never_raises(self, groq_chatbot):
        groq_chatbot.client.chat.completions.create.side_effect = KeyError("choices")

        result = await groq_chatbot.get_chat_completion("Hello")

        assert result.error_code is CompletionErrorCode.UNEXPECTED


class TestMistralChatBot:

    async def test_missing_key(self):
        result = await MistralChatBot().get_chat_completion("Hello")

        assert result.error_code is CompletionErrorCode.CONFIGURATION

    async def test_content_chunks_are_joined(self):
        chatbot = MistralChatBot(api_key="mistral-key")
        chatbot.client = Mock()
        chatbot.client.chat.complete_async = AsyncMock(
            return_value=chat_reply([SimpleNamespace(text='{"flash'), SimpleNamespace(text='cards": []}')])
        )
        chatbot.is_initialized = True

        result = await chatbot.get_chat_completion("Hello", timeout=2.5)

        assert result.data == '{"flashcards": []}'
        assert chatbot.client.chat.complete_async.await_args.kwargs["timeout_ms"] == 2500
