from typing import Dict, Optional, Tuple

from packages.mis_core.errors import SessionAlreadySubmittedError, SessionNotFoundError
from packages.mis_core.logging import get_logger
from packages.mis_dto.result import SessionResult
from packages.mis_dto.session import SessionViewDTO
from packages.mis_providers.results import ResultRepository
from packages.mis_service.bootstrap import NEW_SESSION, BootstrapOutcome, SessionBootstrapper
from packages.mis_service.mapper import SessionMapper
from packages.mis_service.submission import SubmissionController
from packages.mis_session.domain import InterviewSession
from packages.mis_session.engine import InterviewSessionEngine
from packages.mis_session.persistence import SessionPersistence
from packages.mis_session.state import BootstrapAction, Direction

logger = get_logger("mis.service")


class SessionService:
    """
    Application Service for managing interview sessions.
    Responsible for:
    1. Bootstrapping (create / resume / redirect)
    2. Keeping one live engine (and its timer) per session id
    3. Mapping engine state to view DTOs
    """
    def __init__(
        self,
        persistence: SessionPersistence,
        bootstrapper: SessionBootstrapper,
        submission: SubmissionController,
        result_repo: ResultRepository,
        tick_seconds: float = 1.0
    ):
        self.persistence = persistence
        self.bootstrapper = bootstrapper
        self.submission = submission
        self.result_repo = result_repo
        self.tick_seconds = tick_seconds
        self._engines: Dict[str, InterviewSessionEngine] = {}

    async def start(self, user_id: str, entry_key: Optional[str] = None) -> SessionViewDTO:
        outcome = await self.bootstrapper.bootstrap(NEW_SESSION, user_id=user_id, entry_key=entry_key)
        engine = await self._engine_from_outcome(outcome)
        return SessionMapper.to_view(engine)

    async def open(self, session_id: str) -> Tuple[BootstrapAction, Optional[SessionViewDTO]]:
        """
        Entry with a concrete id. Returns SHOW_RESULTS (and no view) when the
        session was already scored.
        """
        engine = self._engines.get(session_id)
        if engine is not None and not engine.submitted:
            return BootstrapAction.RESUMED, SessionMapper.to_view(engine)

        outcome = await self.bootstrapper.bootstrap(session_id)
        if outcome.action == BootstrapAction.SHOW_RESULTS:
            self._drop(session_id)
            return outcome.action, None
        engine = await self._engine_from_outcome(outcome)
        return outcome.action, SessionMapper.to_view(engine)

    async def set_draft(self, session_id: str, answer: Optional[str]) -> SessionViewDTO:
        engine = await self._engine(session_id)
        engine.set_draft(answer)
        return SessionMapper.to_view(engine)

    async def navigate(self, session_id: str, direction: Direction, answer: Optional[str] = None) -> SessionViewDTO:
        engine = await self._engine(session_id)
        await engine.advance(direction, answer)
        view = SessionMapper.to_view(engine)
        if engine.submitted:
            self._drop(session_id)
        return view

    async def finish(self, session_id: str, answer: Optional[str] = None) -> SessionResult:
        engine = await self._engine(session_id)
        result = await engine.finish(answer)
        self._drop(session_id)
        return result

    async def get_result(self, session_id: str) -> SessionResult:
        result = await self.result_repo.get(session_id)
        if result is None:
            raise SessionNotFoundError(session_id)
        return result

    def active_session_ids(self) -> list:
        return list(self._engines.keys())

    async def shutdown(self) -> None:
        for session_id in list(self._engines):
            self._drop(session_id)

    async def _engine(self, session_id: str) -> InterviewSessionEngine:
        engine = self._engines.get(session_id)
        if engine is not None:
            return engine
        # Not live in this process (e.g. after a restart): resume from the store
        outcome = await self.bootstrapper.bootstrap(session_id)
        if outcome.action == BootstrapAction.SHOW_RESULTS:
            raise SessionAlreadySubmittedError(session_id)
        return await self._engine_from_outcome(outcome)

    async def _engine_from_outcome(self, outcome: BootstrapOutcome) -> InterviewSessionEngine:
        existing = self._engines.get(outcome.session_id)
        if existing is not None:
            return existing
        engine = self._build_engine(outcome.session)
        self._engines[outcome.session_id] = engine
        await engine.open()
        return engine

    def _build_engine(self, session: InterviewSession) -> InterviewSessionEngine:
        return InterviewSessionEngine(
            session=session,
            persistence=self.persistence,
            submission=self.submission,
            tick_seconds=self.tick_seconds
        )

    def _drop(self, session_id: str) -> None:
        engine = self._engines.pop(session_id, None)
        if engine is not None:
            engine.close()
