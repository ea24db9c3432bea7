import asyncio
import uuid
from typing import List

from packages.mis_session.domain import InterviewStructure, Question, QuestionType, Section
from .generator import GeneratedSession, SessionGenerator, new_session_id


def _q(text: str, **kwargs) -> Question:
    return Question(id=str(uuid.uuid4()), text=text, **kwargs)


def _mcq(text: str, options: List[str], correct: str, topic: str) -> Question:
    return _q(
        text,
        type=QuestionType.SINGLE_CHOICE,
        options=options,
        correct_answer_text=correct,
        topic=topic,
        difficulty="easy"
    )


class MockSessionGenerator(SessionGenerator):
    """
    Static interview used for development and tests.
    Simulates latency and failure scenarios.
    """
    def __init__(self, should_fail: bool = False, latency: float = 0.0):
        self.should_fail = should_fail
        self.latency = latency
        self.calls = 0

    async def create(self, user_id: str) -> GeneratedSession:
        self.calls += 1
        if self.latency > 0:
            await asyncio.sleep(self.latency)

        if self.should_fail:
            raise RuntimeError("Mock Failure: Intentional Error")

        structure = InterviewStructure(sections=[
            Section(name="Background & Resume", type="background", time_limit_minutes=5, questions=[
                _q("Walk me through your background and what brought you to this role.", topic="motivation"),
                _q("Where do you see your career in the next three years?", topic="career goals"),
            ]),
            Section(name="Technical Skills", type="technical", time_limit_minutes=20, questions=[
                _q("Explain the difference between a process and a thread.", topic="operating systems",
                   difficulty="medium", keywords_for_evaluation=["memory", "scheduling", "shared"]),
                _q("How would you design a rate limiter for a public API?", topic="system design",
                   difficulty="hard", keywords_for_evaluation=["token bucket", "window", "redis"]),
                _q("What happens when you type a URL into the browser?", topic="networking",
                   difficulty="medium", keywords_for_evaluation=["dns", "tcp", "http"]),
            ]),
            Section(name="Problem-Solving", type="problem-solving", time_limit_minutes=10, questions=[
                _q("A nightly batch job started taking three times longer. How do you investigate?",
                   topic="debugging", keywords_for_evaluation=["profile", "logs", "data volume"]),
            ]),
            Section(name="Behavioral", type="behavioral", time_limit_minutes=15, questions=[
                _q("Tell me about a time you disagreed with a teammate. What did you do?", topic="teamwork"),
                _q("Describe a project that failed and what you learned from it.", topic="ownership"),
            ]),
            Section(name="Aptitude", type="aptitude-mcq", time_limit_minutes=10, questions=[
                _mcq("What is the next number in the sequence 2, 6, 12, 20, ...?",
                     ["28", "30", "32"], "30", "logical reasoning"),
                _mcq("Which data structure gives O(1) average lookup by key?",
                     ["Linked list", "Hash table", "Binary heap", "Stack"], "Hash table", "data structures"),
            ]),
        ])
        return GeneratedSession(session_id=new_session_id(), interview_structure=structure)
