import asyncio
import logging
from typing import Optional

from cardforge.core.exceptions.domain import (
    GatewayError,
    GenerationError,
    GenerationTimeoutError,
    NoSuggestionsError,
    ServiceUnavailableError,
)
from cardforge.domain.chatbot.base import ChatBot
from cardforge.domain.chatbot.models import ChatCompletionResult, CompletionErrorCode

from .config import GenerationConfig
from .models import GenerationResult
from .validator import SuggestionValidator

logger = logging.getLogger(__name__)

CHARS_PER_TOKEN = 4
SERVICE_RETRY_AFTER = 60


def estimate_tokens(*texts: str) -> int:
    """Rough token estimate: combined character count divided by four.

    Not a tokenizer; good enough for usage display, not for billing.
    """
    return sum(len(text) for text in texts) // CHARS_PER_TOKEN


class FlashcardGenerationService:
    """
    Generates flashcard suggestions from free text with one upstream call.

    Every failure leaves this service as one of GenerationTimeoutError,
    GatewayError, ServiceUnavailableError or NoSuggestionsError.
    """

    def __init__(
        self,
        chatbot: ChatBot,
        config: Optional[GenerationConfig] = None,
        validator: Optional[SuggestionValidator] = None,
    ):
        self.chatbot = chatbot
        self.config = config or GenerationConfig()
        self.validator = validator or SuggestionValidator()

    async def generate_flashcards(self, text: str, model: Optional[str], user_id: str) -> GenerationResult:
        """
        Generate flashcard suggestions.

        Args:
            text (str): Source text, already length-checked by the caller
            model (Optional[str]): Upstream model id; the configured default, then the provider default, when None
            user_id (str): Caller identity, used for logging only

        Returns:
            GenerationResult: Suggestions with the model used and a token estimate

        Raises:
            GenerationTimeoutError: The upstream call exceeded the timeout
            ServiceUnavailableError: The upstream reported temporary unavailability
            GatewayError: Any other upstream or unexpected failure
            NoSuggestionsError: No usable suggestion survived validation
        """
        selected_model = self.config.resolve_model(model) or self.chatbot.default_model
        context = {"user_id": user_id, "model": selected_model, "text_length": len(text)}

        logger.info("Generating flashcards", extra={"details": context})

        result = await self._request_completion(text, selected_model, context)
        if not result.success:
            raise self._classify_failure(result, context)

        payload = result.data
        candidates = payload.get("flashcards", []) if isinstance(payload, dict) else []
        suggestions = self.validator.filter_suggestions(candidates)

        if not suggestions:
            logger.warning(
                "No valid suggestions generated",
                extra={
                    "details": {
                        **context,
                        "candidates": len(candidates) if isinstance(candidates, list) else 0,
                    }
                },
            )
            raise NoSuggestionsError("Could not generate valid flashcards from text")

        tokens_used = estimate_tokens(text, result.raw_content)

        logger.info(
            "Successfully generated flashcards",
            extra={"details": {**context, "suggestions_count": len(suggestions), "tokens_used": tokens_used}},
        )

        return GenerationResult(suggestions=tuple(suggestions), model_used=selected_model, tokens_used=tokens_used)

    async def _request_completion(self, text: str, model: str, context: dict) -> ChatCompletionResult:
        try:
            return await asyncio.wait_for(
                self.chatbot.get_chat_completion(
                    user_message=self.config.get_user_message(text),
                    system_message=self.config.get_system_prompt(),
                    model=model,
                    response_format=self.config.get_response_format(),
                    parameters=self.config.parameters(),
                    timeout=self.config.timeout_seconds,
                ),
                timeout=self.config.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error(
                "AI generation timed out",
                extra={"error_code": GenerationTimeoutError.error_code, "details": context},
            )
            raise GenerationTimeoutError(f"AI service did not respond within {self.config.timeout_seconds:g}s")
        except Exception as e:
            logger.exception(
                "Unexpected error during AI generation",
                extra={"error_code": GatewayError.error_code, "details": {**context, "exception_type": type(e).__name__}},
            )
            raise GatewayError("Unexpected error while contacting the AI service")

    def _classify_failure(self, result: ChatCompletionResult, context: dict) -> GenerationError:
        code = result.error_code
        log_extra = {"details": {**context, "error_code": code.value if code else None, "error": result.error}}

        if code is CompletionErrorCode.TIMEOUT:
            logger.error("AI service timeout", extra=log_extra)
            return GenerationTimeoutError("AI service request timed out")

        if code is CompletionErrorCode.SERVICE_UNAVAILABLE:
            logger.error("AI service unavailable", extra=log_extra)
            return ServiceUnavailableError("AI service temporarily unavailable", retry_after=SERVICE_RETRY_AFTER)

        if code is CompletionErrorCode.CONFIGURATION:
            logger.error("AI service is not configured", extra=log_extra)
            return GatewayError("AI service configuration error")

        logger.error("AI service returned an error", extra=log_extra)
        return GatewayError("AI service returned an error")
