from typing import Any, Dict, List, Optional

from groq import APIConnectionError, APIStatusError, APITimeoutError, AsyncGroq

from ..base import ChatBot
from ..exceptions import ChatBotRequestError
from ..models import CompletionErrorCode, JsonSchemaResponseFormat


class GroqChatBot(ChatBot):
    """Groq API implementation of ChatBot."""

    provider = "groq"
    default_model = "llama-3.3-70b-versatile"
    api_key_setting = "GROQ_API_KEY"

    async def initialize(self) -> None:
        """Initialize Groq client. The SDK's own retries are disabled."""
        self.client = AsyncGroq(api_key=self.api_key, max_retries=0)

    async def _complete(
        self,
        model: str,
        messages: List[Dict[str, str]],
        response_format: Optional[JsonSchemaResponseFormat],
        parameters: Dict[str, Any],
        timeout: Optional[float],
    ) -> Optional[str]:
        request_kwargs: Dict[str, Any] = dict(parameters)
        if response_format is not None:
            request_kwargs["response_format"] = response_format.to_payload()
        if timeout is not None:
            request_kwargs["timeout"] = timeout

        try:
            completion = await self.client.chat.completions.create(messages=messages, model=model, **request_kwargs)
        except APITimeoutError as e:
            raise ChatBotRequestError(CompletionErrorCode.TIMEOUT, f"Groq request timed out: {e}")
        except APIStatusError as e:
            raise ChatBotRequestError(
                CompletionErrorCode.for_status(e.status_code),
                f"Groq API request failed (status {e.status_code})",
                e.status_code,
            )
        except APIConnectionError as e:
            raise ChatBotRequestError(CompletionErrorCode.NETWORK, f"Could not reach Groq: {e}")

        if not completion or not completion.choices:
            return None
        return completion.choices[0].message.content

    async def cleanup(self) -> None:
        """Cleanup Groq client resources."""
        if self.client:
            await self.client.close()
            self.client = None
            self.is_initialized = False
