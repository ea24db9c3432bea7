from typing import TYPE_CHECKING

from packages.mis_dto.session import QuestionDTO, SessionViewDTO

if TYPE_CHECKING:
    from packages.mis_session.engine import InterviewSessionEngine


class SessionMapper:
    """
    Explicit Mapper to convert the engine state to view DTOs.
    Ensures no domain objects leak into the API layer.
    """

    @staticmethod
    def to_view(engine: "InterviewSessionEngine") -> SessionViewDTO:
        session = engine.session
        sections = session.interview_structure.sections
        section = session.current_section
        question = session.current_question

        current_q_dto = None
        if question is not None:
            current_q_dto = QuestionDTO(
                id=question.id,
                text=question.text,
                type=question.type.value,
                options=list(question.options) if question.options else None,
                number_in_section=session.current_question_index + 1,
                section_question_count=len(section.questions)
            )

        timer = engine.timer
        return SessionViewDTO(
            session_id=session.session_id,
            is_terminal=session.is_terminal,
            section_index=session.current_section_index,
            section_count=len(sections),
            section_name=section.name if section else None,
            current_question=current_q_dto,
            current_answer=engine.current_answer(),
            remaining_seconds=timer.remaining_seconds if timer else None,
            remaining_display=timer.remaining_display() if timer else None,
            progress_fraction=round(session.progress_fraction(), 4),
            can_go_back=not session.is_terminal and not session.is_first_question,
            is_last_question=session.is_last_question,
            notice=engine.last_notice,
            result=engine.result
        )
