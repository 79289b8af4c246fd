import logging
from functools import wraps
from typing import Any, Callable, Dict, List, Optional, ParamSpec, Tuple, Type, TypeVar

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .exceptions.base import AppError

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

# exception type -> (status_code, error, user-facing message)
ErrorMapping = Dict[Type[Exception], Tuple[int, str, str]]

DEFAULT_ERROR_MAPPING: ErrorMapping = {
    AppError: (500, "Internal server error", "Internal application error"),
    Exception: (500, "Internal server error", "An unexpected error occurred"),
}


def error_body(error: str, message: str, **extra: Any) -> Dict[str, Any]:
    """Build the JSON body every failed request answers with."""
    return {"error": error, "message": message, **extra}


def handle_exceptions(
    error_mapping: Optional[ErrorMapping] = None,
    log_level: int = logging.ERROR,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """
    Translate exceptions raised by a route into HTTP errors.

    Mappings are matched in order, caller-supplied entries first, so list
    subclasses before their bases. Only the mapped message reaches the
    response; exception text and details are logged.

    Args:
        error_mapping: Custom mapping of exceptions to (status_code, error, message)
        log_level: Logging level for mapped errors

    Usage:
        @handle_exceptions({
            FlashcardNotFoundError: (404, "Not found", "Flashcard not found"),
            GatewayError: (502, "Bad Gateway", "AI generation service returned an error"),
        })
        async def my_route():
            ...
    """
    combined_mapping: ErrorMapping = dict(error_mapping or {})
    for exc_type, mapped in DEFAULT_ERROR_MAPPING.items():
        combined_mapping.setdefault(exc_type, mapped)

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            try:
                return await func(*args, **kwargs)
            except HTTPException:
                raise
            except Exception as e:
                for exc_type, (status_code, error, message) in combined_mapping.items():
                    if not isinstance(e, exc_type):
                        continue

                    # Arguments are not logged: they may carry user text
                    log_data = {
                        "function_name": func.__name__,
                        "function_module": func.__module__,
                        "exception_type": type(e).__name__,
                        "status_code": status_code,
                    }
                    if isinstance(e, AppError):
                        log_data.update({"error_code": e.error_code, "details": e.details})

                    extra: Dict[str, Any] = {}
                    headers = None
                    retry_after = getattr(e, "retry_after", None)
                    if retry_after is not None:
                        extra["retry_after"] = retry_after
                        headers = {"Retry-After": str(retry_after)}

                    logger.log(log_level, str(e), extra=log_data, exc_info=status_code >= 500)
                    raise HTTPException(
                        status_code=status_code, detail=error_body(error, message, **extra), headers=headers
                    ) from e

                raise

        return wrapper

    return decorator


def _field_name(loc: Tuple[Any, ...]) -> str:
    parts = [str(part) for part in loc if part not in ("body", "query", "path")]
    return ".".join(parts) or "body"


def format_validation_errors(errors: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    """Flatten pydantic errors into ``{"field", "message"}`` pairs."""
    details = []
    for error in errors:
        if error.get("type") == "json_invalid":
            details.append({"field": "body", "message": "Invalid JSON in request body"})
        else:
            details.append({"field": _field_name(tuple(error.get("loc", ()))), "message": error.get("msg", "Invalid value")})
    return details


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Answer malformed or out-of-bounds input with 400 instead of FastAPI's 422."""
    details = format_validation_errors(exc.errors())
    logger.warning(
        "Request validation failed",
        extra={"error_code": "VALIDATION_ERROR", "details": {"path": request.url.path, "errors": details}},
    )
    return JSONResponse(status_code=400, content={"error": "Validation failed", "details": details})


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors with the same top-level body as mapped application errors."""
    if isinstance(exc.detail, dict):
        content = exc.detail
    else:
        content = error_body(str(exc.detail), str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))
