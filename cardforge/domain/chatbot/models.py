from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, Mapping, Optional, TypeVar

T = TypeVar("T")

DEFAULT_SYSTEM_MESSAGE = "You are a helpful assistant."

# Only these generation parameters are forwarded upstream
ALLOWED_PARAMETERS = ("temperature", "max_tokens", "top_p", "frequency_penalty", "presence_penalty")


class CompletionErrorCode(Enum):
    CONFIGURATION = "configuration"
    TIMEOUT = "timeout"
    SERVICE_UNAVAILABLE = "service_unavailable"
    HTTP_ERROR = "http_error"
    NETWORK = "network"
    EMPTY_RESPONSE = "empty_response"
    INVALID_JSON = "invalid_json"
    INVALID_REQUEST = "invalid_request"
    UNEXPECTED = "unexpected"

    @classmethod
    def for_status(cls, status_code: int) -> "CompletionErrorCode":
        """Classify a non-2xx upstream status."""
        if status_code == 503:
            return cls.SERVICE_UNAVAILABLE
        if status_code in (408, 504):
            return cls.TIMEOUT
        return cls.HTTP_ERROR


@dataclass(frozen=True)
class JsonSchemaResponseFormat:
    """Ask the model for JSON conforming to ``schema`` instead of free text."""

    name: str
    schema: Dict[str, Any]
    strict: bool = True

    def to_payload(self) -> Dict[str, Any]:
        return {
            "type": "json_schema",
            "json_schema": {"name": self.name, "strict": self.strict, "schema": self.schema},
        }


@dataclass(frozen=True)
class ChatCompletionResult(Generic[T]):
    """Outcome of one chat-completion call; failures never raise."""

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    error_code: Optional[CompletionErrorCode] = None
    raw_content: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, data: T, raw_content: str, **metadata: Any) -> "ChatCompletionResult[T]":
        return cls(success=True, data=data, raw_content=raw_content, metadata=metadata)

    @classmethod
    def fail(cls, error_code: CompletionErrorCode, error: str, **metadata: Any) -> "ChatCompletionResult[T]":
        return cls(success=False, error=error, error_code=error_code, metadata=metadata)


def sanitize_parameters(parameters: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Keep the recognised numeric generation parameters, drop everything else."""
    if not parameters:
        return {}
    return {
        key: parameters[key]
        for key in ALLOWED_PARAMETERS
        if isinstance(parameters.get(key), (int, float)) and not isinstance(parameters.get(key), bool)
    }
