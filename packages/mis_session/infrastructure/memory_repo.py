from typing import Dict, Optional
from packages.mis_session.repository import KeyedStore


class MemoryKeyedStore(KeyedStore):
    """
    In-Memory implementation of KeyedStore.
    Used for local development and testing.
    """
    def __init__(self):
        self._store: Dict[str, str] = {}

    async def save(self, key: str, value: str) -> None:
        self._store[key] = value

    async def load(self, key: str) -> Optional[str]:
        return self._store.get(key)

    async def delete(self, key: str) -> None:
        self._store.pop(key, None)

    def keys(self) -> list:
        return list(self._store.keys())
