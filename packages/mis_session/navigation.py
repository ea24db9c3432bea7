from dataclasses import dataclass
from typing import Optional

from packages.mis_core.errors import SessionCompletedError
from .answers import merge_pending
from .domain import InterviewSession
from .state import Direction, NavigationOutcome

FIRST_QUESTION_NOTICE = "Already at the first question."


@dataclass(frozen=True)
class NavigationResult:
    session: InterviewSession
    outcome: NavigationOutcome
    notice: Optional[str] = None

    @property
    def completed(self) -> bool:
        return self.outcome == NavigationOutcome.COMPLETED

    @property
    def moved(self) -> bool:
        return self.outcome != NavigationOutcome.AT_FIRST_QUESTION


def advance(
    session: InterviewSession,
    direction: Direction,
    pending_answer: Optional[str] = None
) -> NavigationResult:
    """
    Merge the answer of the question being left, then move the cursor.

    Pure transform shared by user navigation and timer expiry; persisting
    the returned snapshot is the caller's job.
    """
    if session.is_terminal:
        raise SessionCompletedError(session.session_id)

    question = session.current_question
    answers = merge_pending(session.answers, question, pending_answer)
    sections = session.interview_structure.sections
    section_idx = session.current_section_index
    question_idx = session.current_question_index

    if direction == Direction.FORWARD:
        if question_idx + 1 < len(sections[section_idx].questions):
            return _moved(session, answers, section_idx, question_idx + 1, NavigationOutcome.MOVED)
        return _enter_next_section(session, answers, section_idx)

    if direction == Direction.TIMEOUT:
        return _enter_next_section(
            session, answers, section_idx,
            notice=f'Time for section "{sections[section_idx].name}" has expired.'
        )

    if direction == Direction.BACKWARD:
        if question_idx - 1 >= 0:
            return _moved(session, answers, section_idx, question_idx - 1, NavigationOutcome.MOVED)
        if section_idx - 1 < 0:
            return NavigationResult(
                session=session.model_copy(update={"answers": answers}),
                outcome=NavigationOutcome.AT_FIRST_QUESTION,
                notice=FIRST_QUESTION_NOTICE
            )
        previous = sections[section_idx - 1]
        return _moved(
            session, answers, section_idx - 1, len(previous.questions) - 1,
            NavigationOutcome.SECTION_CHANGED,
            notice=f"Returning to {previous.name}."
        )

    raise ValueError(f"Unknown direction: {direction}")


def _enter_next_section(
    session: InterviewSession,
    answers: dict,
    section_idx: int,
    notice: Optional[str] = None
) -> NavigationResult:
    sections = session.interview_structure.sections
    next_idx = section_idx + 1
    if next_idx >= len(sections):
        return _moved(session, answers, len(sections), 0, NavigationOutcome.COMPLETED, notice=notice)

    entering = f"Moving to {sections[next_idx].name}."
    return _moved(
        session, answers, next_idx, 0,
        NavigationOutcome.SECTION_CHANGED,
        notice=f"{notice} {entering}" if notice else f"Section complete! {entering}"
    )


def _moved(
    session: InterviewSession,
    answers: dict,
    section_idx: int,
    question_idx: int,
    outcome: NavigationOutcome,
    notice: Optional[str] = None
) -> NavigationResult:
    updated = session.model_copy(update={
        "answers": answers,
        "current_section_index": section_idx,
        "current_question_index": question_idx,
    })
    return NavigationResult(session=updated, outcome=outcome, notice=notice)
