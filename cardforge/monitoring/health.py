import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from fastapi.responses import JSONResponse

from cardforge.core.config import Settings
from cardforge.storage.base import StorageBackend

logger = logging.getLogger(__name__)


@dataclass
class ServiceHealth:
    storage: bool
    llm_configured: bool


class HealthCheck:
    """Health check for the services flashcard generation depends on.

    The LLM provider is not called: a request would spend tokens on every
    check. Only the presence of its credential is reported.
    """

    def __init__(self, storage: Optional[StorageBackend], settings: Settings):
        self.storage = storage
        self.settings = settings

    async def _check_storage(self) -> bool:
        if self.storage is None:
            return False
        try:
            return await self.storage.ping()
        except Exception as e:
            logger.warning("Storage health check failed", extra={"details": {"error": str(e)}})
            return False

    def _check_llm_configuration(self) -> bool:
        return bool(self.settings.api_key_for(self.settings.llm_provider))

    async def check_services(self) -> Dict[str, Any]:
        """Perform health checks for all services."""
        return asdict(ServiceHealth(storage=await self._check_storage(), llm_configured=self._check_llm_configuration()))

    async def get_health(self) -> JSONResponse:
        """Return the health status of all services."""
        health_check = await self.check_services()
        status = "healthy" if all(health_check.values()) else "unhealthy"
        return JSONResponse(
            content={"status": status, "provider": self.settings.llm_provider, "services": health_check},
            status_code=200 if status == "healthy" else 503,
        )
