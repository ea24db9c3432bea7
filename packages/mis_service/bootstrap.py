import asyncio
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Optional

from packages.mis_core.errors import (
    MISBaseError,
    PersistenceError,
    PrerequisiteMissingError,
    SessionCreationError,
    SessionExpiredError,
)
from packages.mis_core.logging import get_logger
from packages.mis_providers.generator import SessionGenerator, new_session_id
from packages.mis_providers.profile import ProfileRepository
from packages.mis_providers.results import ResultRepository
from packages.mis_session.domain import InterviewSession
from packages.mis_session.persistence import SessionPersistence
from packages.mis_session.state import BootstrapAction

logger = get_logger("mis.bootstrap")

NEW_SESSION = "new"
MAX_TRACKED_ENTRIES = 1024


@dataclass(frozen=True)
class BootstrapOutcome:
    action: BootstrapAction
    session_id: str
    session: Optional[InterviewSession] = None


class SessionBootstrapper:
    """
    Decides, from the session reference received at entry, whether to create
    a new session, resume a persisted one, or redirect to results.

    Reference "new" creates a session; any other value is a concrete id.
    """
    def __init__(
        self,
        persistence: SessionPersistence,
        profile_repo: ProfileRepository,
        generator: SessionGenerator,
        result_repo: ResultRepository,
        max_entries: int = MAX_TRACKED_ENTRIES
    ):
        self.persistence = persistence
        self.profile_repo = profile_repo
        self.generator = generator
        self.result_repo = result_repo
        self.max_entries = max_entries
        # entry_key -> in-flight creation / created session id (least recent evicted first)
        self._pending: Dict[str, asyncio.Future] = {}
        self._created: "OrderedDict[str, str]" = OrderedDict()

    async def bootstrap(
        self,
        session_ref: str,
        user_id: Optional[str] = None,
        entry_key: Optional[str] = None
    ) -> BootstrapOutcome:
        if session_ref == NEW_SESSION:
            return await self._create_once(user_id, entry_key)
        return await self._resume(session_ref)

    async def _create_once(self, user_id: Optional[str], entry_key: Optional[str]) -> BootstrapOutcome:
        """
        Duplicate invocations from the same entry (same entry_key) share one
        creation and then resolve to the concrete session id.
        """
        if not entry_key:
            return await self._create(user_id)

        if entry_key in self._created:
            self._created.move_to_end(entry_key)
            session_id = self._created[entry_key]
            logger.info(f"Entry {entry_key} already created {session_id}; resuming")
            return await self._resume(session_id)

        pending = self._pending.get(entry_key)
        if pending is not None:
            logger.info(f"Entry {entry_key} creation in flight; joining")
            return await pending

        future = asyncio.ensure_future(self._create(user_id))
        self._pending[entry_key] = future
        try:
            outcome = await future
            self._remember(entry_key, outcome.session_id)
            return outcome
        finally:
            self._pending.pop(entry_key, None)

    def _remember(self, entry_key: str, session_id: str) -> None:
        self._created[entry_key] = session_id
        while len(self._created) > self.max_entries:
            self._created.popitem(last=False)

    async def _create(self, user_id: Optional[str]) -> BootstrapOutcome:
        if not user_id:
            raise PrerequisiteMissingError("")

        try:
            has_profile = await self.profile_repo.exists(user_id)
        except Exception as e:
            logger.error(f"Profile check failed for {user_id}: {e}")
            raise SessionCreationError("Could not verify candidate profile", {"reason": str(e)}) from e

        if not has_profile:
            logger.warning(f"No candidate profile for {user_id}; refusing to start")
            raise PrerequisiteMissingError(user_id)

        try:
            generated = await self.generator.create(user_id)
        except MISBaseError:
            raise
        except Exception as e:
            logger.error(f"Question generation failed for {user_id}: {e}")
            raise SessionCreationError("Failed to generate interview questions.", {"reason": str(e)}) from e

        session = InterviewSession(
            session_id=generated.session_id or new_session_id(),
            interview_structure=generated.interview_structure,
            user_id=user_id,
            started_at=datetime.now(timezone.utc)
        )
        await self.persistence.save(session)
        logger.info(
            f"Created session {session.session_id} for {user_id} "
            f"({len(session.interview_structure.sections)} sections, "
            f"{session.interview_structure.total_questions} questions)"
        )
        return BootstrapOutcome(BootstrapAction.CREATED, session.session_id, session)

    async def _resume(self, session_id: str) -> BootstrapOutcome:
        try:
            has_result = await self.result_repo.exists(session_id)
        except Exception as e:
            logger.error(f"Result check failed for {session_id}: {e}")
            raise PersistenceError("Could not check interview results", {"reason": str(e)}) from e

        if has_result:
            # Never resume a scored session
            await self.persistence.delete(session_id)
            logger.info(f"Session {session_id} already has a result; redirecting")
            return BootstrapOutcome(BootstrapAction.SHOW_RESULTS, session_id)

        session = await self.persistence.load(session_id)
        if session is None:
            logger.warning(f"Session {session_id} has no snapshot and no result; expired")
            raise SessionExpiredError(session_id)

        logger.info(
            f"Resumed session {session_id} at "
            f"({session.current_section_index}, {session.current_question_index})"
        )
        return BootstrapOutcome(BootstrapAction.RESUMED, session_id, session)
