from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class StorageBackend(ABC):
    """Abstract base class for storage backends."""

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Store a JSON-serialisable value."""
        pass

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Get a value by key."""
        pass

    @abstractmethod
    async def mget(self, keys: List[str]) -> List[Optional[Any]]:
        """Get several values in one round trip, None for missing keys."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete a value by key."""
        pass

    @abstractmethod
    async def zadd(self, key: str, mapping: Dict[str, float]) -> None:
        """Add to a sorted set with scores."""
        pass

    @abstractmethod
    async def zrevrange(self, key: str, start: int, end: int) -> List[str]:
        """Get range from sorted set in reverse order; ``end=-1`` means to the last member."""
        pass

    @abstractmethod
    async def zrem(self, key: str, *members: str) -> int:
        """Remove members from a sorted set, returning how many were removed."""
        pass

    @abstractmethod
    async def ping(self) -> bool:
        """Check that the backend is reachable."""
        pass
