from typing import Dict, Optional

from .base import AppError, ResourceNotFoundError


class GenerationError(AppError):
    """Base class for the failures a flashcard generation call can end in"""

    error_code = "GENERATION_ERROR"

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, self.error_code, details)


class GenerationTimeoutError(GenerationError):
    """The upstream model did not answer within the generation timeout"""

    error_code = "GENERATION_TIMEOUT"


class GatewayError(GenerationError):
    """The upstream model failed or could not be reached"""

    error_code = "GATEWAY_ERROR"


class ServiceUnavailableError(GenerationError):
    """The upstream model reported temporary unavailability"""

    error_code = "SERVICE_UNAVAILABLE"

    def __init__(self, message: str, retry_after: int = 60, details: Optional[Dict] = None):
        self.retry_after = retry_after
        super().__init__(message, {"retry_after": retry_after, **(details or {})})


class NoSuggestionsError(GenerationError):
    """The upstream model answered but no usable flashcard survived validation"""

    error_code = "NO_SUGGESTIONS"


class FlashcardError(AppError):
    """Base class for flashcard collection errors"""

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, "FLASHCARD_ERROR", details)


class FlashcardNotFoundError(ResourceNotFoundError):
    """Raised when a flashcard does not exist for the requesting user"""

    def __init__(self, flashcard_id: str):
        super().__init__("Flashcard", flashcard_id)


class FlashcardStorageError(FlashcardError):
    """Raised when flashcard storage operations fail"""

    def __init__(self, operation: str, reason: str, details: Optional[Dict] = None):
        super().__init__(
            f"Flashcard storage {operation} failed: {reason}",
            {"operation": operation, "reason": reason, **(details or {})},
        )
