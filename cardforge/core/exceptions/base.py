from typing import Dict, Optional


class AppError(Exception):
    """Base exception class for application-specific errors"""

    def __init__(self, message: str, error_code: str, details: Optional[Dict] = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class ResourceNotFoundError(AppError):
    """A resource does not exist or is not visible to the caller"""

    def __init__(self, resource_type: str, resource_id: str, details: Optional[Dict] = None):
        super().__init__(
            message=f"{resource_type} with id {resource_id} not found or does not belong to user",
            error_code="RESOURCE_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id, **(details or {})},
        )


class ConfigurationError(AppError):
    """Missing or invalid operator configuration, e.g. an absent API key"""

    def __init__(self, message: str, setting: Optional[str] = None):
        super().__init__(message, "CONFIGURATION_ERROR", {"setting": setting} if setting else None)
