import asyncio
from typing import List, Optional, Sequence

from packages.mis_dto.result import AnswerEvaluation, OverallFeedback, SessionResult
from packages.mis_providers.generator import GeneratedSession, SessionGenerator
from packages.mis_providers.profile import ProfileRepository
from packages.mis_providers.results import MemoryResultRepository
from packages.mis_providers.scoring import ScoringService
from packages.mis_session.domain import InterviewSession, InterviewStructure, Question, QuestionType, Section
from packages.mis_session.infrastructure.memory_repo import MemoryKeyedStore


def make_structure(
    sizes: Sequence[int],
    time_limits: Optional[Sequence[int]] = None,
    choice_sections: Sequence[int] = ()
) -> InterviewStructure:
    """Questions are named s{section}q{question}."""
    time_limits = time_limits or [0] * len(sizes)
    sections = []
    for s, size in enumerate(sizes):
        questions = []
        for q in range(size):
            if s in choice_sections:
                questions.append(Question(
                    id=f"s{s}q{q}", text=f"Pick one ({s},{q})",
                    type=QuestionType.SINGLE_CHOICE, options=["A", "B", "C"],
                    correct_answer_text="B"
                ))
            else:
                questions.append(Question(id=f"s{s}q{q}", text=f"Question ({s},{q})"))
        sections.append(Section(name=f"Section {s}", time_limit_minutes=time_limits[s], questions=questions))
    return InterviewStructure(sections=sections)


def make_session(sizes: Sequence[int], session_id: str = "sess_test", **kwargs) -> InterviewSession:
    time_limits = kwargs.pop("time_limits", None)
    choice_sections = kwargs.pop("choice_sections", ())
    return InterviewSession(
        session_id=session_id,
        interview_structure=make_structure(sizes, time_limits, choice_sections),
        **kwargs
    )


def assert_cursor_invariant(testcase, session: InterviewSession) -> None:
    sections = session.interview_structure.sections
    testcase.assertGreaterEqual(session.current_section_index, 0)
    testcase.assertLessEqual(session.current_section_index, len(sections))
    if session.current_section_index < len(sections):
        size = len(sections[session.current_section_index].questions)
        testcase.assertGreaterEqual(session.current_question_index, 0)
        testcase.assertLess(session.current_question_index, size)


class SpyKeyedStore(MemoryKeyedStore):
    def __init__(self):
        super().__init__()
        self.saves: List[str] = []
        self.loads: List[str] = []
        self.deletes: List[str] = []

    async def save(self, key, value):
        self.saves.append(key)
        await super().save(key, value)

    async def load(self, key):
        self.loads.append(key)
        return await super().load(key)

    async def delete(self, key):
        self.deletes.append(key)
        await super().delete(key)


class FailingKeyedStore(MemoryKeyedStore):
    async def save(self, key, value):
        raise OSError("disk full")

    async def load(self, key):
        raise OSError("disk unavailable")


class StubProfileRepository(ProfileRepository):
    def __init__(self, exists: bool = True):
        self._exists = exists
        self.calls = 0

    async def exists(self, user_id: str) -> bool:
        self.calls += 1
        return self._exists


class FailingResultRepository(MemoryResultRepository):
    def __init__(self, fail_exists: bool = False, fail_save: bool = False):
        super().__init__()
        self.fail_exists = fail_exists
        self.fail_save = fail_save

    async def exists(self, session_id):
        if self.fail_exists:
            raise ConnectionError("database unreachable")
        return await super().exists(session_id)

    async def save(self, result, user_id=None):
        if self.fail_save:
            raise ConnectionError("database unreachable")
        await super().save(result, user_id)


class StaticGenerator(SessionGenerator):
    def __init__(self, structure: InterviewStructure, session_id: Optional[str] = "sess_generated", latency: float = 0.0):
        self.structure = structure
        self.session_id = session_id
        self.latency = latency
        self.calls = 0

    async def create(self, user_id: str) -> GeneratedSession:
        self.calls += 1
        if self.latency:
            await asyncio.sleep(self.latency)
        return GeneratedSession(session_id=self.session_id, interview_structure=self.structure)


class RecordingScoring(ScoringService):
    """
    Counts submissions. With `gated=True` every call blocks until release().
    """
    def __init__(self, should_fail: bool = False, gated: bool = False):
        self.should_fail = should_fail
        self.calls = 0
        self.submitted: List[InterviewSession] = []
        self.started = asyncio.Event()
        self._gate = asyncio.Event()
        if not gated:
            self._gate.set()

    def release(self):
        self._gate.set()

    async def submit(self, session: InterviewSession) -> SessionResult:
        self.calls += 1
        self.submitted.append(session)
        self.started.set()
        await self._gate.wait()
        if self.should_fail:
            raise ConnectionError("scoring service unavailable")
        return SessionResult(
            session_id=session.session_id,
            answer_evaluations=[
                AnswerEvaluation(question_id=qid, score=3, feedback="ok")
                for qid in session.interview_structure.question_ids()
            ],
            overall_feedback=OverallFeedback(overall_score_percentage=60, strengths=["clarity"])
        )


async def wait_until(predicate, timeout: float = 3.0, interval: float = 0.005) -> bool:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while loop.time() < deadline:
        if predicate():
            return True
        await asyncio.sleep(interval)
    return predicate()
