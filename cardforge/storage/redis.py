import json
from typing import Any, Dict, List, Optional

from redis.asyncio import Redis

from .base import StorageBackend


class RedisBackend(StorageBackend):
    """Redis storage backend implementation."""

    def __init__(self, redis_client: Redis):
        self.redis = redis_client

    async def set(self, key: str, value: Any) -> None:
        await self.redis.set(key, json.dumps(value))

    async def get(self, key: str) -> Optional[Any]:
        value = await self.redis.get(key)
        return json.loads(value) if value else None

    async def mget(self, keys: List[str]) -> List[Optional[Any]]:
        if not keys:
            return []
        values = await self.redis.mget(keys)
        return [json.loads(value) if value else None for value in values]

    async def delete(self, key: str) -> None:
        await self.redis.delete(key)

    async def zadd(self, key: str, mapping: Dict[str, float]) -> None:
        await self.redis.zadd(key, mapping)

    async def zrevrange(self, key: str, start: int, end: int) -> List[str]:
        return await self.redis.zrevrange(key, start, end)

    async def zrem(self, key: str, *members: str) -> int:
        if not members:
            return 0
        return await self.redis.zrem(key, *members)

    async def ping(self) -> bool:
        return bool(await self.redis.ping())
