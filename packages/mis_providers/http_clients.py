from typing import Optional

import httpx

from packages.mis_core.logging import get_logger
from packages.mis_dto.result import SessionResult
from packages.mis_session.domain import InterviewSession
from .generator import GeneratedSession, SessionGenerator, new_session_id
from .scoring import ScoringService

logger = get_logger("mis.providers.http")


class HttpSessionGenerator(SessionGenerator):
    """
    Calls the question generation service.
    POST {url} {"user_id": ...} -> {"session_id"?, "interview_structure": {...}}
    """
    def __init__(self, url: str, timeout_sec: float = 60.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.url = url
        self.timeout_sec = timeout_sec
        self.transport = transport

    async def create(self, user_id: str) -> GeneratedSession:
        async with httpx.AsyncClient(timeout=self.timeout_sec, transport=self.transport) as client:
            response = await client.post(self.url, json={"user_id": user_id})
            response.raise_for_status()
            generated = GeneratedSession.model_validate(response.json())

        if not generated.session_id:
            generated = generated.model_copy(update={"session_id": new_session_id()})
        logger.info(
            f"Generated session {generated.session_id} with "
            f"{len(generated.interview_structure.sections)} sections"
        )
        return generated


class HttpScoringService(ScoringService):
    """
    Calls the feedback service with the whole session snapshot.
    POST {url} <InterviewSession json> -> <SessionResult json>
    """
    def __init__(self, url: str, timeout_sec: float = 60.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.url = url
        self.timeout_sec = timeout_sec
        self.transport = transport

    async def submit(self, session: InterviewSession) -> SessionResult:
        async with httpx.AsyncClient(timeout=self.timeout_sec, transport=self.transport) as client:
            response = await client.post(
                self.url,
                content=session.model_dump_json(),
                headers={"Content-Type": "application/json"}
            )
            response.raise_for_status()
            return SessionResult.model_validate(response.json())
