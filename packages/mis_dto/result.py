from typing import List, Optional

from pydantic import Field

from packages.mis_core.dto import BaseDTO


class AnswerEvaluation(BaseDTO):
    question_id: str
    question_text: str = ""
    answer_provided: str = ""
    score: float = Field(..., ge=0, le=5, description="Score for the answer (0-5)")
    feedback: str = ""
    is_correct: Optional[bool] = Field(None, description="For single-choice questions, whether it was correct")


class LearningResource(BaseDTO):
    name: str
    url: str


class ImprovementSuggestion(BaseDTO):
    area: str
    suggestions: List[str] = Field(default_factory=list)
    resources: List[LearningResource] = Field(default_factory=list)


class OverallFeedback(BaseDTO):
    overall_score_percentage: float = Field(..., ge=0, le=100)
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    improvement_suggestions: List[ImprovementSuggestion] = Field(default_factory=list)
    study_plan_summary: str = ""


class SessionResult(BaseDTO):
    """
    Scoring outcome of a finished session.
    Produced once by the scoring service, kept for the results view.
    """
    session_id: str
    answer_evaluations: List[AnswerEvaluation] = Field(default_factory=list)
    overall_feedback: OverallFeedback
