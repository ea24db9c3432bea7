import asyncio
import unittest

from helpers import FailingResultRepository, RecordingScoring, SpyKeyedStore, make_session

from packages.mis_core.errors import (
    SessionAlreadySubmittedError,
    SessionNotCompleteError,
    SubmissionFailedError,
    SubmissionInProgressError,
)
from packages.mis_dto.result import AnswerEvaluation, OverallFeedback, SessionResult
from packages.mis_providers.results import MemoryResultRepository
from packages.mis_providers.scoring import ScoringService
from packages.mis_service.submission import ANSWER_NOT_AVAILABLE, QUESTION_NOT_FOUND, SubmissionController
from packages.mis_session.persistence import SessionPersistence, snapshot_key


class SubmissionTestCase(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.store = SpyKeyedStore()
        self.persistence = SessionPersistence(self.store)
        self.results = MemoryResultRepository()
        # Sitting on the last question of a [2, 1] interview
        self.session = make_session(
            [2, 1], session_id="sess_sub", user_id="u1",
            current_section_index=1, current_question_index=0,
            answers={"s0q0": "a", "s0q1": ""}
        )
        await self.persistence.save(self.session)

    def controller(self, scoring, results=None) -> SubmissionController:
        return SubmissionController(self.persistence, scoring, results or self.results)


class TestSubmissionSuccess(SubmissionTestCase):

    async def test_submits_once_and_cleans_up(self):
        scoring = RecordingScoring()
        controller = self.controller(scoring)

        result = await controller.finish(self.session, "last answer")

        self.assertEqual(scoring.calls, 1)
        submitted = scoring.submitted[0]
        self.assertTrue(submitted.is_terminal)
        self.assertEqual(submitted.answers["s1q0"], "last answer")
        self.assertIsNotNone(submitted.ended_at)

        self.assertEqual(result.session_id, "sess_sub")
        self.assertTrue(await self.results.exists("sess_sub"))
        self.assertIsNone(await self.persistence.load("sess_sub"))
        self.assertEqual((await self.results.get("sess_sub")).session_id, result.session_id)

    async def test_evaluations_are_annotated(self):
        result = await self.controller(RecordingScoring()).finish(self.session, "c")
        by_id = {e.question_id: e for e in result.answer_evaluations}

        self.assertEqual(by_id["s0q0"].question_text, "Question (0,0)")
        self.assertEqual(by_id["s0q0"].answer_provided, "a")
        self.assertEqual(by_id["s0q1"].answer_provided, ANSWER_NOT_AVAILABLE)
        self.assertEqual(by_id["s1q0"].answer_provided, "c")

    async def test_unknown_question_in_evaluation(self):
        class StrayScoring(ScoringService):
            async def submit(self, session):
                return SessionResult(
                    session_id="ignored",
                    answer_evaluations=[AnswerEvaluation(question_id="stray", score=1)],
                    overall_feedback=OverallFeedback(overall_score_percentage=20)
                )

        result = await self.controller(StrayScoring()).finish(self.session)
        self.assertEqual(result.session_id, "sess_sub")
        self.assertEqual(result.answer_evaluations[0].question_text, QUESTION_NOT_FOUND)
        self.assertEqual(result.answer_evaluations[0].answer_provided, ANSWER_NOT_AVAILABLE)

    async def test_second_finish_is_refused(self):
        scoring = RecordingScoring()
        controller = self.controller(scoring)
        await controller.finish(self.session)

        with self.assertRaises(SessionAlreadySubmittedError):
            await controller.finish(self.session)
        self.assertEqual(scoring.calls, 1)

    async def test_scored_session_is_refused_by_a_fresh_controller(self):
        await self.controller(RecordingScoring()).finish(self.session)

        scoring = RecordingScoring()
        with self.assertRaises(SessionAlreadySubmittedError):
            await self.controller(scoring).finish(self.session)
        self.assertEqual(scoring.calls, 0)

    async def test_concurrent_finish_is_refused_while_in_flight(self):
        scoring = RecordingScoring(gated=True)
        controller = self.controller(scoring)

        first = asyncio.create_task(controller.finish(self.session))
        await asyncio.wait_for(scoring.started.wait(), timeout=2)
        self.assertTrue(controller.is_in_flight("sess_sub"))

        with self.assertRaises(SubmissionInProgressError):
            await controller.finish(self.session)

        scoring.release()
        result = await first
        self.assertEqual(result.session_id, "sess_sub")
        self.assertEqual(scoring.calls, 1)
        self.assertFalse(controller.is_in_flight("sess_sub"))


class TestSubmissionFailure(SubmissionTestCase):

    async def test_failure_keeps_position_and_allows_retry(self):
        failing = RecordingScoring(should_fail=True)
        controller = self.controller(failing)

        with self.assertRaises(SubmissionFailedError) as ctx:
            await controller.finish(self.session, "kept")
        self.assertTrue(ctx.exception.details["retryable"])
        self.assertTrue(failing.submitted[0].is_terminal)

        stored = await self.persistence.load("sess_sub")
        self.assertFalse(stored.is_terminal)
        self.assertEqual((stored.current_section_index, stored.current_question_index), (1, 0))
        self.assertIsNone(stored.ended_at)
        self.assertEqual(stored.answers, {"s0q0": "a", "s0q1": "", "s1q0": "kept"})
        self.assertFalse(await self.results.exists("sess_sub"))
        self.assertFalse(controller.is_in_flight("sess_sub"))

        controller.scoring = RecordingScoring()
        result = await controller.finish(stored)
        self.assertEqual(result.session_id, "sess_sub")
        self.assertEqual(controller.scoring.submitted[0].answers["s1q0"], "kept")
        self.assertIsNone(await self.persistence.load("sess_sub"))

    async def test_failure_from_later_question_of_last_section(self):
        session = make_session(
            [1, 2], session_id="sess_long",
            current_section_index=1, current_question_index=1,
            answers={"s0q0": "a", "s1q0": "b"}
        )
        await self.persistence.save(session)

        with self.assertRaises(SubmissionFailedError):
            await self.controller(RecordingScoring(should_fail=True)).finish(session, "last")

        stored = await self.persistence.load("sess_long")
        self.assertEqual((stored.current_section_index, stored.current_question_index), (1, 1))
        self.assertEqual(stored.answers, {"s0q0": "a", "s1q0": "b", "s1q1": "last"})

    async def test_result_store_failure_is_a_submission_failure(self):
        results = FailingResultRepository(fail_save=True)
        controller = self.controller(RecordingScoring(), results)
        with self.assertRaises(SubmissionFailedError):
            await controller.finish(self.session)
        self.assertIsNotNone(await self.persistence.load("sess_sub"))
        self.assertFalse(await results.exists("sess_sub"))

    async def test_finish_before_last_question(self):
        scoring = RecordingScoring()
        early = self.session.model_copy(update={"current_section_index": 0, "current_question_index": 1})

        with self.assertRaises(SessionNotCompleteError):
            await self.controller(scoring).finish(early)
        self.assertEqual(scoring.calls, 0)
        self.assertNotIn(snapshot_key("sess_sub"), self.store.deletes)


if __name__ == "__main__":
    unittest.main()
