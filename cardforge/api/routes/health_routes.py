from typing import Optional

from fastapi import APIRouter, Depends

from cardforge.core.config import settings
from cardforge.core.container import get_storage_or_none
from cardforge.monitoring.health import HealthCheck
from cardforge.storage.base import StorageBackend

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(storage: Optional[StorageBackend] = Depends(get_storage_or_none)):
    """
    Perform system health check.

    Returns:
        JSONResponse: 200 when storage is reachable and the LLM provider has a credential, 503 otherwise
    """
    return await HealthCheck(storage, settings).get_health()
