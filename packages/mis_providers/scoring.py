from abc import ABC, abstractmethod

from packages.mis_dto.result import SessionResult
from packages.mis_session.domain import InterviewSession


class ScoringService(ABC):
    @abstractmethod
    async def submit(self, session: InterviewSession) -> SessionResult:
        """
        Score a terminal session. One call per submission attempt.
        Raises on failure.
        """
        pass
