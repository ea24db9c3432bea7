from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import Field, field_validator, model_validator

from packages.mis_core.dto import BaseDTO, FrozenDTO


class QuestionType(str, Enum):
    FREE_TEXT = "free-text"
    SINGLE_CHOICE = "single-choice"


class Question(FrozenDTO):
    """
    A single interview question.
    `options` is present iff the question is single-choice.
    """
    id: str = Field(..., min_length=1)
    text: str
    type: QuestionType = QuestionType.FREE_TEXT
    options: Optional[List[str]] = None

    # Only consumed by scoring
    topic: Optional[str] = None
    difficulty: Optional[str] = None
    correct_answer_text: Optional[str] = None
    keywords_for_evaluation: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_options(self) -> "Question":
        if self.type == QuestionType.SINGLE_CHOICE:
            if not self.options:
                raise ValueError(f"Question {self.id}: single-choice requires options")
        elif self.options is not None:
            raise ValueError(f"Question {self.id}: options are only allowed for single-choice")
        return self


class Section(FrozenDTO):
    """Named, optionally time-boxed group of questions. 0 minutes means untimed."""
    name: str
    time_limit_minutes: int = Field(default=0, ge=0)
    questions: List[Question] = Field(..., min_length=1)
    type: Optional[str] = None

    @property
    def is_timed(self) -> bool:
        return self.time_limit_minutes > 0


class InterviewStructure(FrozenDTO):
    """Ordered sections of an interview. Immutable once the session exists."""
    sections: List[Section] = Field(..., min_length=1)

    @field_validator("sections")
    @classmethod
    def _unique_question_ids(cls, sections: List[Section]) -> List[Section]:
        seen = set()
        for section in sections:
            for question in section.questions:
                if question.id in seen:
                    raise ValueError(f"Duplicate question id: {question.id}")
                seen.add(question.id)
        return sections

    @property
    def total_questions(self) -> int:
        return sum(len(s.questions) for s in self.sections)

    def question_ids(self) -> List[str]:
        return [q.id for s in self.sections for q in s.questions]

    def find_question(self, question_id: str) -> Optional[Question]:
        for section in self.sections:
            for question in section.questions:
                if question.id == question_id:
                    return question
        return None


class InterviewSession(BaseDTO):
    """
    Root entity of a running interview (the snapshot that gets persisted).

    The cursor is (current_section_index, current_question_index).
    current_section_index == len(sections) marks the terminal state.
    Instances are treated as values: every transition returns a new copy.
    """
    session_id: str = Field(..., min_length=1)
    interview_structure: InterviewStructure
    current_section_index: int = 0
    current_question_index: int = 0
    answers: Dict[str, str] = Field(default_factory=dict)

    user_id: Optional[str] = None
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None

    @model_validator(mode="after")
    def _check_cursor(self) -> "InterviewSession":
        sections = self.interview_structure.sections
        if not 0 <= self.current_section_index <= len(sections):
            raise ValueError(f"Section index {self.current_section_index} out of range")
        if self.current_section_index < len(sections):
            size = len(sections[self.current_section_index].questions)
            if not 0 <= self.current_question_index < size:
                raise ValueError(f"Question index {self.current_question_index} out of range")
        elif self.current_question_index != 0:
            raise ValueError("Terminal session must have question index 0")

        known = set(self.interview_structure.question_ids())
        unknown = [qid for qid in self.answers if qid not in known]
        if unknown:
            raise ValueError(f"Answers reference unknown questions: {unknown}")
        return self

    @property
    def is_terminal(self) -> bool:
        return self.current_section_index >= len(self.interview_structure.sections)

    @property
    def current_section(self) -> Optional[Section]:
        if self.is_terminal:
            return None
        return self.interview_structure.sections[self.current_section_index]

    @property
    def current_question(self) -> Optional[Question]:
        section = self.current_section
        if section is None:
            return None
        return section.questions[self.current_question_index]

    @property
    def is_first_question(self) -> bool:
        return self.current_section_index == 0 and self.current_question_index == 0

    @property
    def is_last_question(self) -> bool:
        section = self.current_section
        if section is None:
            return False
        last_section = len(self.interview_structure.sections) - 1
        return (
            self.current_section_index == last_section
            and self.current_question_index == len(section.questions) - 1
        )

    def progress_fraction(self) -> float:
        """Share of questions positioned before the cursor, in [0, 1]."""
        total = self.interview_structure.total_questions
        if self.is_terminal:
            return 1.0
        done = sum(
            len(s.questions)
            for s in self.interview_structure.sections[:self.current_section_index]
        )
        return (done + self.current_question_index) / total
