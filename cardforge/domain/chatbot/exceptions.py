from typing import Optional

from .models import CompletionErrorCode


class ChatBotRequestError(Exception):
    """Raised by providers for a classified upstream failure; turned into a failed result by the ChatBot base"""

    def __init__(self, error_code: CompletionErrorCode, message: str, status_code: Optional[int] = None):
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ChatBotNotFoundError(ValueError):
    """Raised when a requested chatbot type is not registered"""

    pass
