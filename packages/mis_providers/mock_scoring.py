import asyncio
from typing import List

from packages.mis_dto.result import AnswerEvaluation, OverallFeedback, SessionResult
from packages.mis_session.domain import InterviewSession, Question, QuestionType
from .scoring import ScoringService

NO_ANSWER = "No answer provided."


class MockScoringService(ScoringService):
    """
    Deterministic scorer for development and tests.
    Single-choice: 5 when the option matches the correct answer, else 0.
    Free text: keyword coverage, or a flat 3 for any answer when no keywords exist.
    """
    def __init__(self, should_fail: bool = False, latency: float = 0.0):
        self.should_fail = should_fail
        self.latency = latency
        self.calls = 0

    async def submit(self, session: InterviewSession) -> SessionResult:
        self.calls += 1
        if self.latency > 0:
            await asyncio.sleep(self.latency)
        if self.should_fail:
            raise RuntimeError("Mock Failure: scoring unavailable")

        evaluations: List[AnswerEvaluation] = []
        for section in session.interview_structure.sections:
            for question in section.questions:
                answer = session.answers.get(question.id, "")
                evaluations.append(self._evaluate(question, answer))

        total = len(evaluations) * 5
        scored = sum(e.score for e in evaluations)
        return SessionResult(
            session_id=session.session_id,
            answer_evaluations=evaluations,
            overall_feedback=OverallFeedback(
                overall_score_percentage=round(scored / total * 100, 1) if total else 0.0,
                strengths=self._topics(session, evaluations, lambda s: s >= 4),
                weaknesses=self._topics(session, evaluations, lambda s: s < 2),
                study_plan_summary="Review the weaker topics and practise answering out loud."
            )
        )

    def _evaluate(self, question: Question, answer: str) -> AnswerEvaluation:
        if not answer.strip():
            return AnswerEvaluation(
                question_id=question.id, score=0, feedback=NO_ANSWER,
                is_correct=False if question.type == QuestionType.SINGLE_CHOICE else None
            )

        if question.type == QuestionType.SINGLE_CHOICE:
            correct = answer == question.correct_answer_text
            return AnswerEvaluation(
                question_id=question.id,
                score=5 if correct else 0,
                feedback="Correct." if correct else f"The correct answer is {question.correct_answer_text}.",
                is_correct=correct
            )

        keywords = question.keywords_for_evaluation
        if not keywords:
            return AnswerEvaluation(question_id=question.id, score=3, feedback="Answer recorded.")

        lowered = answer.lower()
        missing = [k for k in keywords if k.lower() not in lowered]
        score = round(5 * (len(keywords) - len(missing)) / len(keywords), 1)
        feedback = "Covers the key points." if not missing else f"Consider mentioning: {', '.join(missing)}."
        return AnswerEvaluation(question_id=question.id, score=score, feedback=feedback)

    @staticmethod
    def _topics(session: InterviewSession, evaluations: List[AnswerEvaluation], predicate) -> List[str]:
        topics = []
        for evaluation in evaluations:
            if not predicate(evaluation.score):
                continue
            question = session.interview_structure.find_question(evaluation.question_id)
            topic = (question.topic if question else None) or evaluation.question_id
            if topic not in topics:
                topics.append(topic)
        return topics
