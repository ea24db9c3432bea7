"""
Answer store.

Answers are a plain mapping from question id to the candidate's answer.
Entries are only ever set or overwritten; there is no removal.
"""
from typing import Dict, Mapping, Optional

from packages.mis_core.errors import InvalidAnswerError
from .domain import Question, QuestionType


def merge(answers: Mapping[str, str], question_id: str, value: str) -> Dict[str, str]:
    """Return a copy of `answers` with `question_id` set to `value`."""
    merged = dict(answers)
    merged[question_id] = value
    return merged


def resolve_pending(answers: Mapping[str, str], question_id: str, pending: Optional[str]) -> str:
    """
    Value to store for the question being left.
    An unset pending answer keeps what is stored, or records an empty answer.
    """
    if pending is None:
        return answers.get(question_id, "")
    return pending


def validate_answer(question: Question, value: str) -> None:
    if question.type == QuestionType.SINGLE_CHOICE and value:
        if value not in (question.options or []):
            raise InvalidAnswerError(
                question.id,
                f"'{value}' is not one of the options of question {question.id}"
            )


def merge_pending(
    answers: Mapping[str, str],
    question: Question,
    pending: Optional[str]
) -> Dict[str, str]:
    """Validate and merge the in-progress answer for `question`."""
    value = resolve_pending(answers, question.id, pending)
    validate_answer(question, value)
    if answers.get(question.id) == value:
        return dict(answers)
    return merge(answers, question.id, value)
