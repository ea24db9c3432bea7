from datetime import datetime, timezone
from typing import Optional

from packages.mis_core.errors import (
    PersistenceError,
    SessionAlreadySubmittedError,
    SessionNotCompleteError,
    SubmissionFailedError,
    SubmissionInProgressError,
)
from packages.mis_core.logging import get_logger
from packages.mis_dto.result import SessionResult
from packages.mis_providers.results import ResultRepository
from packages.mis_providers.scoring import ScoringService
from packages.mis_session.domain import InterviewSession
from packages.mis_session.navigation import advance
from packages.mis_session.persistence import SessionPersistence
from packages.mis_session.state import Direction
from packages.mis_service.concurrency import ConcurrencyManager

logger = get_logger("mis.submission")

QUESTION_NOT_FOUND = "Question not found"
ANSWER_NOT_AVAILABLE = "N/A"


class SubmissionController:
    """
    One-shot finalisation of a session.

    1. Merge the last answer and build the terminal session
    2. Persist the merged answers, cursor left where the candidate is
    3. Submit the terminal session once to the scoring service
    4. On success record the result and delete the snapshot

    A failed attempt leaves the stored snapshot resumable at its position.
    The ResultRepository is the record of finished sessions.
    """
    def __init__(
        self,
        persistence: SessionPersistence,
        scoring: ScoringService,
        result_repo: ResultRepository
    ):
        self.persistence = persistence
        self.scoring = scoring
        self.result_repo = result_repo
        self.concurrency_manager = ConcurrencyManager()

    def is_in_flight(self, session_id: str) -> bool:
        return self.concurrency_manager.is_locked(session_id)

    def finalize(self, session: InterviewSession, pending_answer: Optional[str] = None) -> InterviewSession:
        """
        Terminal snapshot with the pending answer merged.
        Only allowed from the last question or an already terminal session.
        """
        if not session.is_terminal:
            if not session.is_last_question:
                raise SessionNotCompleteError(
                    session.session_id,
                    session.current_section_index,
                    session.current_question_index
                )
            session = advance(session, Direction.FORWARD, pending_answer).session

        if session.ended_at is None:
            session = session.model_copy(update={"ended_at": datetime.now(timezone.utc)})
        return session

    @staticmethod
    def resumable(session: InterviewSession, final: InterviewSession) -> InterviewSession:
        """`session` at its own position, carrying the answers of `final`."""
        return session.model_copy(update={"answers": dict(final.answers)})

    async def finish(
        self,
        session: InterviewSession,
        pending_answer: Optional[str] = None,
        final: Optional[InterviewSession] = None
    ) -> SessionResult:
        """
        Submit `session`. `final` is the terminal session when the caller
        already reached it (e.g. a section expiry in the last section).
        """
        session_id = session.session_id
        with self.concurrency_manager.acquire_lock(session_id, SubmissionInProgressError):
            if await self._already_scored(session_id):
                raise SessionAlreadySubmittedError(session_id)

            final = self.finalize(session, pending_answer) if final is None else self.finalize(final)
            await self.persistence.save(self.resumable(session, final))

            logger.info(f"Submitting session {session_id} ({len(final.answers)} answers)")
            try:
                result = await self.scoring.submit(final)
            except Exception as e:
                logger.error(f"Scoring failed for {session_id}: {e}")
                raise SubmissionFailedError(session_id, str(e)) from e

            result = self._annotate(result, final)
            try:
                await self.result_repo.save(result, user_id=final.user_id)
            except Exception as e:
                logger.error(f"Could not record result for {session_id}: {e}")
                raise SubmissionFailedError(session_id, f"Result could not be recorded: {e}") from e

            try:
                await self.persistence.delete(session_id)
            except PersistenceError as e:
                # The stored result makes the bootstrapper discard this snapshot on next entry
                logger.warning(f"Snapshot of submitted session {session_id} not deleted: {e}")

            logger.info(
                f"Session {session_id} submitted: "
                f"{result.overall_feedback.overall_score_percentage}%"
            )
            return result

    async def _already_scored(self, session_id: str) -> bool:
        try:
            return await self.result_repo.exists(session_id)
        except Exception as e:
            logger.error(f"Result check failed for {session_id}: {e}")
            raise SubmissionFailedError(session_id, f"Could not check interview results: {e}") from e

    @staticmethod
    def _annotate(result: SessionResult, session: InterviewSession) -> SessionResult:
        """Attach question text and the provided answer to every evaluation."""
        structure = session.interview_structure
        evaluations = []
        for evaluation in result.answer_evaluations:
            question = structure.find_question(evaluation.question_id)
            evaluations.append(evaluation.model_copy(update={
                "question_text": question.text if question else QUESTION_NOT_FOUND,
                "answer_provided": session.answers.get(evaluation.question_id) or ANSWER_NOT_AVAILABLE,
            }))
        return result.model_copy(update={
            "session_id": session.session_id,
            "answer_evaluations": evaluations,
        })
