from abc import ABC, abstractmethod
from typing import Set


class ProfileRepository(ABC):
    """Answers whether a candidate profile (parsed resume) exists."""

    @abstractmethod
    async def exists(self, user_id: str) -> bool:
        pass


class MemoryProfileRepository(ProfileRepository):
    def __init__(self, user_ids: Set[str] = None):
        self._user_ids = set(user_ids or ())

    def add(self, user_id: str) -> None:
        self._user_ids.add(user_id)

    async def exists(self, user_id: str) -> bool:
        return user_id in self._user_ids
