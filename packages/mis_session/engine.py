import asyncio
import logging
from typing import TYPE_CHECKING, Optional

from packages.mis_core.errors import (
    MISBaseError,
    SessionAlreadySubmittedError,
    SubmissionFailedError,
    SubmissionInProgressError,
)
from packages.mis_dto.result import SessionResult
from .answers import validate_answer
from .domain import InterviewSession
from .navigation import NavigationResult, advance
from .persistence import SessionPersistence
from .state import Direction, NavigationOutcome, SessionEvent
from .timer import SectionTimer

if TYPE_CHECKING:
    from packages.mis_service.submission import SubmissionController

logger = logging.getLogger("mis.session")


class InterviewSessionEngine:
    """
    Runtime owner of one interview session.

    Holds the current snapshot, the candidate's in-progress (draft) answer and
    the timer of the displayed section. User navigation and timer expiry both
    go through `navigation.advance`; every transition is persisted before the
    engine adopts it. Reaching the terminal state routes straight to submission;
    the terminal session is adopted only once scoring succeeded.
    """
    def __init__(
        self,
        session: InterviewSession,
        persistence: SessionPersistence,
        submission: "SubmissionController",
        tick_seconds: float = 1.0
    ):
        self.session = session
        self.persistence = persistence
        self.submission = submission
        self.tick_seconds = tick_seconds

        self.draft: Optional[str] = None
        self.timer: Optional[SectionTimer] = None
        self.result: Optional[SessionResult] = None
        self.last_notice: Optional[str] = None
        self.last_error: Optional[MISBaseError] = None

        self._lock = asyncio.Lock()
        self._finishing = False
        self._expired_final: Optional[InterviewSession] = None

    @property
    def session_id(self) -> str:
        return self.session.session_id

    @property
    def submitted(self) -> bool:
        return self.result is not None

    async def open(self) -> None:
        """Arm the timer of the section the cursor points at."""
        self._emit(SessionEvent.SESSION_OPENED)
        self._arm_timer()

    def close(self) -> None:
        self._cancel_timer()

    def set_draft(self, value: Optional[str]) -> None:
        """Record the answer currently being edited for the current question."""
        question = self.session.current_question
        if question is not None and value:
            validate_answer(question, value)
        self.draft = value

    def current_answer(self) -> str:
        if self.draft is not None:
            return self.draft
        question = self.session.current_question
        if question is None:
            return ""
        return self.session.answers.get(question.id, "")

    async def next(self, pending_answer: Optional[str] = None) -> NavigationResult:
        return await self.advance(Direction.FORWARD, pending_answer)

    async def previous(self, pending_answer: Optional[str] = None) -> NavigationResult:
        return await self.advance(Direction.BACKWARD, pending_answer)

    async def advance(self, direction: Direction, pending_answer: Optional[str] = None) -> NavigationResult:
        async with self._lock:
            return await self._transition(direction, pending_answer)

    async def handle_time_up(self, timer: Optional[SectionTimer] = None) -> Optional[NavigationResult]:
        """
        Forced transition on section expiry. Uses the draft answer and asks
        for no confirmation. A timer that is no longer current is ignored.
        """
        async with self._lock:
            if timer is not None and timer is not self.timer:
                logger.debug(f"Stale timer expiry ignored for {self.session_id}")
                return None
            if self.session.is_terminal:
                return None
            self._emit(SessionEvent.SECTION_TIME_UP, section=self.session.current_section.name)
            return await self._transition(Direction.TIMEOUT, None)

    async def finish(self, pending_answer: Optional[str] = None) -> SessionResult:
        """Explicit "Finish Interview" from the last question (or a retry after failure)."""
        if self._finishing:
            raise SubmissionInProgressError(self.session_id)
        async with self._lock:
            if self.result is not None:
                raise SessionAlreadySubmittedError(self.session_id)
            if self._expired_final is not None:
                # Last section ran out of time; its answers are final
                final = self.submission.finalize(self._expired_final)
            else:
                if pending_answer is None:
                    pending_answer = self.draft
                final = self.submission.finalize(self.session, pending_answer)
            await self._submit(final)
            return self.result

    async def _transition(self, direction: Direction, pending_answer: Optional[str]) -> NavigationResult:
        if pending_answer is None:
            pending_answer = self.draft
        previous_section = self.session.current_section_index

        result = advance(self.session, direction, pending_answer)
        self._expired_final = None
        if result.completed:
            self.last_notice = result.notice
            self._emit(SessionEvent.SESSION_COMPLETED, trigger=direction.value)
            try:
                await self._submit(result.session)
            except SubmissionFailedError:
                if direction == Direction.TIMEOUT:
                    self._expired_final = result.session
                raise
            return result

        await self.persistence.save(result.session)

        self.session = result.session
        self.draft = None
        self.last_notice = result.notice

        if self.session.current_section_index != previous_section:
            self._emit(SessionEvent.SECTION_CHANGED, section=self.session.current_section.name)
            self._arm_timer()
        elif result.outcome == NavigationOutcome.AT_FIRST_QUESTION:
            self._emit(SessionEvent.BOUNDARY_REACHED)
        return result

    async def _submit(self, final: InterviewSession) -> None:
        """
        Submit the terminal `final`. The section timer stops first. On failure
        the engine stays at its position with the merged answers, as stored.
        """
        self._cancel_timer()
        self._finishing = True
        try:
            self.result = await self.submission.finish(self.session, final=final)
        except SubmissionFailedError as e:
            self.session = self.submission.resumable(self.session, final)
            self.draft = None
            self.last_error = e
            self.last_notice = e.message
            self._emit(SessionEvent.SUBMISSION_FAILED, reason=e.details.get("reason"))
            raise
        finally:
            self._finishing = False

        self.session = final
        self.draft = None
        self._expired_final = None
        self.last_error = None
        self._emit(
            SessionEvent.SESSION_SUBMITTED,
            score=self.result.overall_feedback.overall_score_percentage
        )

    def _arm_timer(self) -> None:
        """Replace the timer with a fresh one for the current section (restart on revisit)."""
        self._cancel_timer()
        section = self.session.current_section
        if section is None:
            return

        timer = SectionTimer.for_section(
            section,
            lambda: self._on_time_up(timer),
            tick_seconds=self.tick_seconds
        )
        self.timer = timer
        if timer is not None:
            timer.start()
            logger.info(
                f"Timer armed for {self.session_id}: {section.name} "
                f"({section.time_limit_minutes} min)"
            )

    def _cancel_timer(self) -> None:
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None

    async def _on_time_up(self, timer: SectionTimer) -> None:
        # Runs inside the timer task; nothing above can observe a raise here
        try:
            await self.handle_time_up(timer)
        except MISBaseError as e:
            self.last_error = e
            logger.error(f"Forced transition failed for {self.session_id}: {e}")

    def _emit(self, event: SessionEvent, **fields) -> None:
        extra = " ".join(f"{k}={v}" for k, v in fields.items())
        logger.info(f"Event: {event.value} for {self.session_id} {extra}".rstrip())
