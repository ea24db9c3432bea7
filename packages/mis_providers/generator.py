import random
import string
import time
from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel

from packages.mis_session.domain import InterviewStructure


class GeneratedSession(BaseModel):
    session_id: Optional[str] = None
    interview_structure: InterviewStructure


def new_session_id() -> str:
    """session_<epoch ms>_<8 base36 chars>"""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=8))
    return f"session_{int(time.time() * 1000)}_{suffix}"


class SessionGenerator(ABC):
    @abstractmethod
    async def create(self, user_id: str) -> GeneratedSession:
        """
        Produce a fresh interview structure (and usually an id) for the candidate.
        Raises on failure; the bootstrapper converts the error.
        """
        pass
