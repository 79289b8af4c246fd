import copy
from typing import Any, Dict, List, Optional

from .base import StorageBackend


class DictionaryBackend(StorageBackend):
    """In-memory dictionary storage backend implementation.

    Values are deep-copied in and out so callers cannot mutate stored state,
    matching the serialise/deserialise behaviour of the Redis backend.
    """

    def __init__(self):
        self.data: Dict[str, Any] = {}
        self.sorted_sets: Dict[str, Dict[str, float]] = {}

    async def set(self, key: str, value: Any) -> None:
        self.data[key] = copy.deepcopy(value)

    async def get(self, key: str) -> Optional[Any]:
        return copy.deepcopy(self.data.get(key))

    async def mget(self, keys: List[str]) -> List[Optional[Any]]:
        return [copy.deepcopy(self.data.get(key)) for key in keys]

    async def delete(self, key: str) -> None:
        self.data.pop(key, None)

    async def zadd(self, key: str, mapping: Dict[str, float]) -> None:
        if key not in self.sorted_sets:
            self.sorted_sets[key] = {}
        self.sorted_sets[key].update(mapping)

    async def zrevrange(self, key: str, start: int, end: int) -> List[str]:
        if key not in self.sorted_sets:
            return []
        sorted_items = sorted(self.sorted_sets[key].items(), key=lambda x: (x[1], x[0]), reverse=True)
        stop = None if end == -1 else end + 1
        return [item[0] for item in sorted_items[start:stop]]

    async def zrem(self, key: str, *members: str) -> int:
        members_set = self.sorted_sets.get(key, {})
        removed = 0
        for member in members:
            if members_set.pop(member, None) is not None:
                removed += 1
        return removed

    async def ping(self) -> bool:
        return True
