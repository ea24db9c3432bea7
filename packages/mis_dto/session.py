from typing import List, Optional
from pydantic import BaseModel, Field

from packages.mis_dto.result import SessionResult


class QuestionDTO(BaseModel):
    """
    Question as shown to the candidate.
    Decoupled from the domain model (no scoring hints leak out).
    """
    id: str
    text: str
    type: str
    options: Optional[List[str]] = None
    number_in_section: int
    section_question_count: int


class SessionViewDTO(BaseModel):
    """
    Derived view state returned after every mutation.
    """
    session_id: str
    is_terminal: bool
    section_index: int
    section_count: int
    section_name: Optional[str] = None
    current_question: Optional[QuestionDTO] = None
    current_answer: str = ""
    remaining_seconds: Optional[int] = Field(None, description="None for untimed sections")
    remaining_display: Optional[str] = None
    progress_fraction: float
    can_go_back: bool
    is_last_question: bool
    notice: Optional[str] = None
    result: Optional[SessionResult] = None
