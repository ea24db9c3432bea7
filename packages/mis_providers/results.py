from abc import ABC, abstractmethod
from typing import Dict, Optional

from packages.mis_dto.result import SessionResult


class ResultRepository(ABC):
    """
    Stores scoring results of finished sessions.
    A stored result means the session is over and must never be resumed.
    """
    @abstractmethod
    async def exists(self, session_id: str) -> bool:
        pass

    @abstractmethod
    async def save(self, result: SessionResult, user_id: Optional[str] = None) -> None:
        pass

    @abstractmethod
    async def get(self, session_id: str) -> Optional[SessionResult]:
        pass


class MemoryResultRepository(ResultRepository):
    def __init__(self):
        self._results: Dict[str, SessionResult] = {}

    async def exists(self, session_id: str) -> bool:
        return session_id in self._results

    async def save(self, result: SessionResult, user_id: Optional[str] = None) -> None:
        self._results[result.session_id] = result

    async def get(self, session_id: str) -> Optional[SessionResult]:
        return self._results.get(session_id)
