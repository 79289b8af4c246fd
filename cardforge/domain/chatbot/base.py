import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional

from cardforge.core.exceptions.base import ConfigurationError

from .exceptions import ChatBotRequestError
from .models import (
    DEFAULT_SYSTEM_MESSAGE,
    ChatCompletionResult,
    CompletionErrorCode,
    JsonSchemaResponseFormat,
    sanitize_parameters,
)

logger = logging.getLogger(__name__)


class ChatBot(ABC):
    """Abstract base class for all chatbot implementations.

    Subclasses perform the transport-specific request in ``_complete`` and
    raise ``ChatBotRequestError`` for failures they can classify. Everything
    else (credential check, message assembly, parameter filtering, content
    parsing, error collapsing) happens here so every provider honours the
    same contract: ``get_chat_completion`` returns a result and never raises,
    apart from task cancellation.
    """

    provider: str = "base"
    default_model: str = ""
    api_key_setting: str = ""

    def __init__(self, api_key: Optional[str] = None, default_model: Optional[str] = None):
        self.api_key = api_key
        if default_model:
            self.default_model = default_model
        self.client = None
        self.is_initialized = False
        self._init_lock = asyncio.Lock()

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize any necessary clients or resources"""
        pass

    @abstractmethod
    async def _complete(
        self,
        model: str,
        messages: List[Dict[str, str]],
        response_format: Optional[JsonSchemaResponseFormat],
        parameters: Dict[str, Any],
        timeout: Optional[float],
    ) -> Optional[str]:
        """Send one chat-completion request and return the first choice's content"""
        pass

    @abstractmethod
    async def cleanup(self) -> None:
        """Cleanup any resources"""
        pass

    async def get_chat_completion(
        self,
        user_message: str,
        system_message: Optional[str] = None,
        model: Optional[str] = None,
        response_format: Optional[JsonSchemaResponseFormat] = None,
        parameters: Optional[Mapping[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> ChatCompletionResult:
        """
        Run one chat completion against the provider.

        Args:
            user_message: Content of the user turn
            system_message: Content of the system turn, a generic assistant persona when omitted
            model: Model identifier, the provider default when omitted
            response_format: Request structured JSON output; the content is then parsed
            parameters: Generation parameters, unrecognised keys are ignored
            timeout: Per-request transport timeout in seconds

        Returns:
            ChatCompletionResult: parsed JSON or raw text on success, error code and message otherwise
        """
        if not user_message or not isinstance(user_message, str):
            return ChatCompletionResult.fail(
                CompletionErrorCode.INVALID_REQUEST, "`user_message` must be a non-empty string."
            )

        try:
            self.ensure_configured()
        except ConfigurationError as e:
            logger.error(e.message, extra={"error_code": e.error_code, "details": {"provider": self.provider}})
            return ChatCompletionResult.fail(CompletionErrorCode.CONFIGURATION, e.message)

        selected_model = model or self.default_model
        messages = [
            {"role": "system", "content": system_message or DEFAULT_SYSTEM_MESSAGE},
            {"role": "user", "content": user_message},
        ]

        try:
            await self.ensure_initialized()
            content = await self._complete(
                selected_model, messages, response_format, sanitize_parameters(parameters), timeout
            )
        except ChatBotRequestError as e:
            logger.warning(
                "%s API error",
                self.provider,
                extra={"details": {"error_code": e.error_code.value, "status_code": e.status_code, "error": e.message}},
            )
            return ChatCompletionResult.fail(e.error_code, e.message, status_code=e.status_code)
        except Exception as e:
            logger.exception("Unexpected %s client failure", self.provider)
            return ChatCompletionResult.fail(CompletionErrorCode.UNEXPECTED, str(e) or type(e).__name__)

        return self.process_response(content, response_format)

    def process_response(
        self, content: Any, response_format: Optional[JsonSchemaResponseFormat]
    ) -> ChatCompletionResult:
        """Turn the first choice's content into a result; anything but non-empty text is a failure."""
        if content is not None and not isinstance(content, str):
            logger.error(
                "Non-text content received from %s",
                self.provider,
                extra={"details": {"content_type": type(content).__name__}},
            )
            content = None

        if not content:
            return ChatCompletionResult.fail(
                CompletionErrorCode.EMPTY_RESPONSE, "No content received from the AI service."
            )

        if response_format is None:
            return ChatCompletionResult.ok(content, content)

        try:
            parsed = json.loads(content)
        except (TypeError, ValueError):
            logger.error(
                "Failed to parse JSON content from %s",
                self.provider,
                extra={"details": {"content_length": len(content)}},
            )
            return ChatCompletionResult.fail(CompletionErrorCode.INVALID_JSON, "The AI response was not valid JSON.")

        return ChatCompletionResult.ok(parsed, content)

    def ensure_configured(self) -> None:
        """Fail before any network traffic when no credential is configured."""
        if not self.api_key:
            raise ConfigurationError(f"{self.api_key_setting} is not configured.", self.api_key_setting)

    async def ensure_initialized(self) -> None:
        """Ensure the chatbot is initialized before use, once even under concurrent first calls."""
        if self.is_initialized:
            return
        async with self._init_lock:
            if not self.is_initialized:
                await self.initialize()
                self.is_initialized = True

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.cleanup()
