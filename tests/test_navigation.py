import random
import unittest

from helpers import assert_cursor_invariant, make_session

from packages.mis_core.errors import InvalidAnswerError, SessionCompletedError
from packages.mis_session.domain import InterviewSession
from packages.mis_session.navigation import FIRST_QUESTION_NOTICE, advance
from packages.mis_session.state import Direction, NavigationOutcome


class TestForwardNavigation(unittest.TestCase):

    def test_moves_within_section(self):
        session = make_session([3])
        result = advance(session, Direction.FORWARD, "first")

        self.assertEqual(result.outcome, NavigationOutcome.MOVED)
        self.assertEqual((result.session.current_section_index, result.session.current_question_index), (0, 1))
        self.assertEqual(result.session.answers, {"s0q0": "first"})

    def test_two_sections_walkthrough(self):
        session = make_session([2, 1])

        step1 = advance(session, Direction.FORWARD, "a")
        self.assertEqual((step1.session.current_section_index, step1.session.current_question_index), (0, 1))

        step2 = advance(step1.session, Direction.FORWARD, "b")
        self.assertEqual(step2.outcome, NavigationOutcome.SECTION_CHANGED)
        self.assertEqual((step2.session.current_section_index, step2.session.current_question_index), (1, 0))
        self.assertEqual(step2.notice, "Section complete! Moving to Section 1.")

        step3 = advance(step2.session, Direction.FORWARD, "c")
        self.assertTrue(step3.completed)
        self.assertTrue(step3.session.is_terminal)
        self.assertEqual(step3.session.current_section_index, 2)
        self.assertEqual(step3.session.current_question_index, 0)
        self.assertIsNone(step3.session.current_question)
        self.assertEqual(step3.session.answers, {"s0q0": "a", "s0q1": "b", "s1q0": "c"})

    def test_unset_pending_answer_records_empty_answer(self):
        session = make_session([2])
        result = advance(session, Direction.FORWARD)
        self.assertEqual(result.session.answers, {"s0q0": ""})

    def test_unset_pending_answer_keeps_stored_answer(self):
        session = make_session([2], answers={"s0q0": "kept"})
        result = advance(session, Direction.FORWARD)
        self.assertEqual(result.session.answers["s0q0"], "kept")

    def test_pending_answer_overwrites(self):
        session = make_session([2], answers={"s0q0": "old"})
        result = advance(session, Direction.FORWARD, "new")
        self.assertEqual(result.session.answers["s0q0"], "new")

    def test_input_session_is_not_mutated(self):
        session = make_session([2, 1])
        advance(session, Direction.FORWARD, "a")
        self.assertEqual(session.answers, {})
        self.assertEqual(session.current_question_index, 0)


class TestBackwardNavigation(unittest.TestCase):

    def test_at_first_question_stays_and_records_answer(self):
        session = make_session([2, 1])
        result = advance(session, Direction.BACKWARD, "draft")

        self.assertEqual(result.outcome, NavigationOutcome.AT_FIRST_QUESTION)
        self.assertFalse(result.moved)
        self.assertEqual(result.notice, FIRST_QUESTION_NOTICE)
        self.assertEqual((result.session.current_section_index, result.session.current_question_index), (0, 0))
        self.assertEqual(result.session.answers, {"s0q0": "draft"})

    def test_at_first_question_without_pending_is_unchanged(self):
        session = make_session([2, 1], answers={"s0q0": "saved"})
        result = advance(session, Direction.BACKWARD)
        self.assertEqual(result.session.model_dump(), session.model_dump())

    def test_moves_within_section(self):
        session = make_session([3], current_question_index=2)
        result = advance(session, Direction.BACKWARD, "x")
        self.assertEqual(result.session.current_question_index, 1)
        self.assertEqual(result.session.answers, {"s0q2": "x"})

    def test_crosses_to_last_question_of_previous_section(self):
        session = make_session([3, 2], current_section_index=1)
        result = advance(session, Direction.BACKWARD, "y")

        self.assertEqual(result.outcome, NavigationOutcome.SECTION_CHANGED)
        self.assertEqual((result.session.current_section_index, result.session.current_question_index), (0, 2))
        self.assertEqual(result.notice, "Returning to Section 0.")
        self.assertEqual(result.session.answers, {"s1q0": "y"})


class TestTimeoutNavigation(unittest.TestCase):

    def test_jumps_to_first_question_of_next_section(self):
        session = make_session([3, 2], current_question_index=1, answers={"s0q0": "a"})
        result = advance(session, Direction.TIMEOUT, "partial")

        self.assertEqual(result.outcome, NavigationOutcome.SECTION_CHANGED)
        self.assertEqual((result.session.current_section_index, result.session.current_question_index), (1, 0))
        self.assertEqual(result.session.answers, {"s0q0": "a", "s0q1": "partial"})
        self.assertIn('Time for section "Section 0" has expired.', result.notice)
        self.assertIn("Moving to Section 1.", result.notice)

    def test_expiry_in_last_section_completes(self):
        session = make_session([1, 3], current_section_index=1)
        result = advance(session, Direction.TIMEOUT)
        self.assertTrue(result.completed)
        self.assertTrue(result.session.is_terminal)


class TestNavigationErrors(unittest.TestCase):

    def test_terminal_session_cannot_move(self):
        session = make_session([1], current_section_index=1)
        for direction in Direction:
            with self.assertRaises(SessionCompletedError):
                advance(session, direction, "late")

    def test_choice_answer_must_be_an_option(self):
        session = make_session([2], choice_sections=(0,))
        with self.assertRaises(InvalidAnswerError):
            advance(session, Direction.FORWARD, "Z")

        result = advance(session, Direction.FORWARD, "B")
        self.assertEqual(result.session.answers["s0q0"], "B")


class TestCursorInvariant(unittest.TestCase):

    def test_random_walks_keep_cursor_valid(self):
        rng = random.Random(1234)
        layouts = [[1], [2, 1], [3, 1, 4], [1, 1, 1, 1], [5, 2]]
        directions = list(Direction)

        for layout in layouts:
            session = make_session(layout)
            for step in range(300):
                if session.is_terminal:
                    session = make_session(layout)
                result = advance(session, rng.choice(directions), rng.choice([None, "", f"answer {step}"]))
                session = result.session

                assert_cursor_invariant(self, session)
                # The snapshot must survive its own validation
                InterviewSession.model_validate(session.model_dump())
                if session.is_terminal:
                    self.assertEqual(session.current_question_index, 0)
                    self.assertEqual(result.outcome, NavigationOutcome.COMPLETED)


if __name__ == "__main__":
    unittest.main()
