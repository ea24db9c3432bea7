from typing import Optional

from pydantic import ValidationError

from packages.mis_core.errors import PersistenceError
from packages.mis_core.logging import get_logger
from .domain import InterviewSession
from .repository import KeyedStore

logger = get_logger("mis.persistence")

SNAPSHOT_KEY_PREFIX = "interviewSession_"


def snapshot_key(session_id: str) -> str:
    return f"{SNAPSHOT_KEY_PREFIX}{session_id}"


class SessionPersistence:
    """
    Loads and saves full session snapshots keyed by session id.
    Every call completes before the caller moves on, so the next load
    always observes the previous save.
    """
    def __init__(self, store: KeyedStore):
        self.store = store

    async def save(self, session: InterviewSession) -> None:
        key = snapshot_key(session.session_id)
        try:
            await self.store.save(key, session.model_dump_json())
        except Exception as e:
            logger.error(f"Failed to save snapshot {key}: {e}")
            raise PersistenceError(f"Failed to save session {session.session_id}", {"reason": str(e)}) from e
        logger.debug(
            f"Saved snapshot {key} at ({session.current_section_index}, {session.current_question_index}), "
            f"{len(session.answers)} answers"
        )

    async def load(self, session_id: str) -> Optional[InterviewSession]:
        key = snapshot_key(session_id)
        try:
            raw = await self.store.load(key)
        except Exception as e:
            logger.error(f"Failed to load snapshot {key}: {e}")
            raise PersistenceError(f"Failed to load session {session_id}", {"reason": str(e)}) from e
        if raw is None:
            return None
        try:
            return InterviewSession.model_validate_json(raw)
        except ValidationError as e:
            logger.error(f"Corrupted snapshot {key}: {e}")
            raise PersistenceError(f"Snapshot for session {session_id} is corrupted", {"reason": str(e)}) from e

    async def delete(self, session_id: str) -> None:
        key = snapshot_key(session_id)
        try:
            await self.store.delete(key)
        except Exception as e:
            logger.error(f"Failed to delete snapshot {key}: {e}")
            raise PersistenceError(f"Failed to delete session {session_id}", {"reason": str(e)}) from e
        logger.info(f"Deleted snapshot {key}")
