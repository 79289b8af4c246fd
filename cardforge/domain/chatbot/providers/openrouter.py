import logging
from typing import Any, Dict, List, Optional

import httpx

from ..base import ChatBot
from ..exceptions import ChatBotRequestError
from ..models import CompletionErrorCode, JsonSchemaResponseFormat

logger = logging.getLogger(__name__)

OPENROUTER_ENDPOINT = "https://openrouter.ai/api/v1/chat/completions"


class OpenRouterChatBot(ChatBot):
    """OpenRouter chat-completions implementation of ChatBot, spoken over httpx."""

    provider = "openrouter"
    default_model = "anthropic/claude-3-haiku"
    api_key_setting = "OPENROUTER_API_KEY"

    def __init__(
        self,
        api_key: Optional[str] = None,
        default_model: Optional[str] = None,
        endpoint: str = OPENROUTER_ENDPOINT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(api_key=api_key, default_model=default_model)
        self.endpoint = endpoint
        self._transport = transport

    async def initialize(self) -> None:
        """Initialize the HTTP client."""
        self.client = httpx.AsyncClient(transport=self._transport, headers={"Content-Type": "application/json"})

    async def _complete(
        self,
        model: str,
        messages: List[Dict[str, str]],
        response_format: Optional[JsonSchemaResponseFormat],
        parameters: Dict[str, Any],
        timeout: Optional[float],
    ) -> Optional[str]:
        body: Dict[str, Any] = {"model": model, "messages": messages}
        if response_format is not None:
            body["response_format"] = response_format.to_payload()
        body.update(parameters)

        request_kwargs: Dict[str, Any] = {"json": body, "headers": {"Authorization": f"Bearer {self.api_key}"}}
        if timeout is not None:
            request_kwargs["timeout"] = timeout

        try:
            response = await self.client.post(self.endpoint, **request_kwargs)
        except httpx.TimeoutException as e:
            raise ChatBotRequestError(CompletionErrorCode.TIMEOUT, f"Request to the AI service timed out: {e}")
        except httpx.HTTPError as e:
            raise ChatBotRequestError(CompletionErrorCode.NETWORK, f"Could not reach the AI service: {e}")

        payload = self._safe_json(response)

        if response.is_error:
            raise ChatBotRequestError(
                CompletionErrorCode.for_status(response.status_code),
                f"{self._error_message(payload)} (status {response.status_code})",
                response.status_code,
            )

        if not payload:
            raise ChatBotRequestError(
                CompletionErrorCode.EMPTY_RESPONSE, "Received an empty response from the AI service."
            )

        try:
            return payload["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            return None

    @staticmethod
    def _safe_json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            logger.error("Failed to parse JSON response from OpenRouter", extra={"details": {"status": response.status_code}})
            return None

    @staticmethod
    def _error_message(payload: Any) -> str:
        if isinstance(payload, dict):
            error = payload.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
            if payload.get("message"):
                return str(payload["message"])
        return "An unexpected error occurred with the AI service."

    async def cleanup(self) -> None:
        """Close the HTTP client."""
        if self.client:
            await self.client.aclose()
            self.client = None
            self.is_initialized = False
