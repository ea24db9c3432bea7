from abc import ABC, abstractmethod
from typing import Optional


class KeyedStore(ABC):
    """
    Interface for durable keyed storage of session snapshots.
    Values are opaque strings to the store.
    """
    @abstractmethod
    async def save(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    async def load(self, key: str) -> Optional[str]:
        """Return the stored value, or None when the key does not exist."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove the key. Deleting a missing key is not an error."""
        pass
