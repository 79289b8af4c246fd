from typing import Any, Dict, List, Optional

import httpx
from mistralai import Mistral, models

from ..base import ChatBot
from ..exceptions import ChatBotRequestError
from ..models import CompletionErrorCode, JsonSchemaResponseFormat


class MistralChatBot(ChatBot):
    """Mistral API implementation of ChatBot."""

    provider = "mistral"
    default_model = "mistral-large-latest"
    api_key_setting = "MISTRAL_API_KEY"

    async def initialize(self) -> None:
        """Initialize Mistral client."""
        self.client = Mistral(api_key=self.api_key)

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
            request_kwargs["timeout_ms"] = int(timeout * 1000)

        try:
            response = await self.client.chat.complete_async(model=model, messages=messages, **request_kwargs)
        except models.HTTPValidationError as e:
            raise ChatBotRequestError(CompletionErrorCode.INVALID_REQUEST, f"Mistral rejected the request: {e}", 422)
        except models.SDKError as e:
            raise ChatBotRequestError(
                CompletionErrorCode.for_status(e.status_code),
                f"Mistral API request failed (status {e.status_code})",
                e.status_code,
            )
        except httpx.TimeoutException as e:
            raise ChatBotRequestError(CompletionErrorCode.TIMEOUT, f"Mistral request timed out: {e}")
        except httpx.HTTPError as e:
            raise ChatBotRequestError(CompletionErrorCode.NETWORK, f"Could not reach Mistral: {e}")

        if not response or not response.choices:
            return None
        content = response.choices[0].message.content
        # Mistral may return content chunks instead of a plain string
        if isinstance(content, list):
            content = "".join(getattr(chunk, "text", "") for chunk in content)
        return content

    async def cleanup(self) -> None:
        """Cleanup Mistral client resources."""
        if hasattr(self.client, 'aclose'):
            await self.client.aclose()
        self.client = None
        self.is_initialized = False
