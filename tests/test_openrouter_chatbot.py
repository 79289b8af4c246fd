import asyncio
import json
from unittest.mock import AsyncMock

import httpx
import pytest

from cardforge.domain.chatbot.models import DEFAULT_SYSTEM_MESSAGE, CompletionErrorCode, JsonSchemaResponseFormat
from cardforge.domain.chatbot.providers.openrouter import OpenRouterChatBot

SCHEMA = JsonSchemaResponseFormat(
    name="flashcards",
    schema={"type": "object", "properties": {"flashcards": {"type": "array"}}, "required": ["flashcards"]},
)


def chat_response(content, status_code=200):
    return httpx.Response(status_code, json={"choices": [{"message": {"role": "assistant", "content": content}}]})


def make_chatbot(handler, api_key="test-key"):
    """OpenRouter client answered by ``handler``; also returns the requests it sent."""
    sent = []

    def record(request):
        sent.append(request)
        return handler(request)

    return OpenRouterChatBot(api_key=api_key, transport=httpx.MockTransport(record)), sent


class TestOpenRouterChatBot:

    async def test_missing_key_fails_without_network_call(self):
        chatbot, sent = make_chatbot(lambda request: chat_response("{}"), api_key=None)

        result = await chatbot.get_chat_completion("Hello")

        assert not result.success
        assert result.error_code is CompletionErrorCode.CONFIGURATION
        assert result.error == "OPENROUTER_API_KEY is not configured."
        assert sent == []

    @pytest.mark.parametrize("message", ["", None, 42])
    async def test_invalid_user_message_is_rejected(self, message):
        chatbot, sent = make_chatbot(lambda request: chat_response("{}"))

        result = await chatbot.get_chat_completion(message)

        assert result.error_code is CompletionErrorCode.INVALID_REQUEST
        assert sent == []

    async def test_request_carries_auth_messages_and_schema(self):
        chatbot, sent = make_chatbot(lambda request: chat_response('{"flashcards": []}'))

        result = await chatbot.get_chat_completion(
            "Generate please",
            system_message="You are a tutor.",
            model="anthropic/claude-3-haiku",
            response_format=SCHEMA,
            parameters={"temperature": 0.2, "max_tokens": 500, "stream": True, "top_p": "high"},
        )

        assert result.success
        assert result.data == {"flashcards": []}

        request = sent[0]
        assert request.method == "POST"
        assert str(request.url) == "https://openrouter.ai/api/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer test-key"

        body = json.loads(request.content)
        assert body["model"] == "anthropic/claude-3-haiku"
        assert body["messages"] == [
            {"role": "system", "content": "You are a tutor."},
            {"role": "user", "content": "Generate please"},
        ]
        assert body["response_format"] == SCHEMA.to_payload()
        assert body["temperature"] == 0.2
        assert body["max_tokens"] == 500
        assert "stream" not in body
        assert "top_p" not in body

    async def test_defaults_for_system_message_and_model(self):
        chatbot, sent = make_chatbot(lambda request: chat_response("Hi there"))

        await chatbot.get_chat_completion("Hello")

        body = json.loads(sent[0].content)
        assert body["model"] == OpenRouterChatBot.default_model
        assert body["messages"][0] == {"role": "system", "content": DEFAULT_SYSTEM_MESSAGE}
        assert "response_format" not in body

    async def test_text_mode_returns_raw_content(self):
        chatbot, _ = make_chatbot(lambda request: chat_response("Plain answer"))

        result = await chatbot.get_chat_completion("Hello")

        assert result.success
        assert result.data == "Plain answer"
        assert result.raw_content == "Plain answer"

    async def test_invalid_json_content_in_schema_mode(self):
        chatbot, _ = make_chatbot(lambda request: chat_response("Here are your flashcards: ..."))

        result = await chatbot.get_chat_completion("Hello", response_format=SCHEMA)

        assert result.error_code is CompletionErrorCode.INVALID_JSON
        assert result.error == "The AI response was not valid JSON."

    @pytest.mark.parametrize("content", [None, ""])
    async def test_empty_content(self, content):
        chatbot, _ = make_chatbot(lambda request: chat_response(content))

        result = await chatbot.get_chat_completion("Hello", response_format=SCHEMA)

        assert result.error_code is CompletionErrorCode.EMPTY_RESPONSE

    @pytest.mark.parametrize(
        "status_code,expected",
        [
            (503, CompletionErrorCode.SERVICE_UNAVAILABLE),
            (504, CompletionErrorCode.TIMEOUT),
            (500, CompletionErrorCode.HTTP_ERROR),
            (429, CompletionErrorCode.HTTP_ERROR),
            (401, CompletionErrorCode.HTTP_ERROR),
        ],
    )
    async def test_error_status_is_classified(self, status_code, expected):
        chatbot, _ = make_chatbot(
            lambda request: httpx.Response(status_code, json={"error": {"message": "upstream problem"}})
        )

        result = await chatbot.get_chat_completion("Hello")

        assert result.error_code is expected
        assert result.error == f"upstream problem (status {status_code})"
        assert result.metadata["status_code"] == status_code

    async def test_error_status_without_json_body(self):
        chatbot, _ = make_chatbot(lambda request: httpx.Response(502, text="<html>Bad gateway</html>"))

        result = await chatbot.get_chat_completion("Hello")

        assert result.error_code is CompletionErrorCode.HTTP_ERROR
        assert "(status 502)" in result.error

    async def test_transport_timeout(self):
        def raise_timeout(request):
            raise httpx.ReadTimeout("timed out", request=request)

        chatbot, _ = make_chatbot(raise_timeout)

        result = await chatbot.get_chat_completion("Hello", timeout=5)

        assert result.error_code is CompletionErrorCode.TIMEOUT

    async def test_connection_failure(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        chatbot, _ = make_chatbot(refuse)

        result = await chatbot.get_chat_completion("Hello")

        assert result.error_code is CompletionErrorCode.NETWORK

    async def test_cleanup_closes_client(self):
        chatbot, _ = make_chatbot(lambda request: chat_response("Hi"))

        async with chatbot:
            await chatbot.get_chat_completion("Hello")
            assert chatbot.is_initialized

        assert chatbot.client is None
        assert not chatbot.is_initialized

    @pytest.mark.parametrize("content", [42, {"flashcards": []}, [{"type": "text", "text": "{}"}]])
    async def test_non_text_content_is_a_failed_result(self, content):
        chatbot, _ = make_chatbot(lambda request: chat_response(content))

        result = await chatbot.get_chat_completion("Hello", response_format=SCHEMA)

        assert not result.success
        assert result.error_code is CompletionErrorCode.EMPTY_RESPONSE

    async def test_concurrent_first_calls_initialize_once(self, monkeypatch):
        chatbot, _ = make_chatbot(lambda request: chat_response("Hi"))

        async def slow_initialize():
            await asyncio.sleep(0.05)

        initialize = AsyncMock(side_effect=slow_initialize)
        monkeypatch.setattr(chatbot, "initialize", initialize)

        await asyncio.gather(chatbot.ensure_initialized(), chatbot.ensure_initialized())

        assert initialize.await_count == 1
        assert chatbot.is_initialized
