# ==============================================================================
# ARCHITECTURE: UNIT TEST (CORE LOGIC)
# ------------------------------------------------------------------------------
# GOAL: Verify the per-slot state machine of a quiz session.
# CONSTRAINTS:
#   1. EXECUTION: FAST (< 50ms per test).
#   2. I/O: FORBIDDEN.
# ==============================================================================
import pytest

from quiz_gauge.config import Difficulty
from quiz_gauge.quiz.domain.errors import (
    InvalidTransition,
    OptionIndexError,
    SelectionEmpty,
)
from quiz_gauge.quiz.domain.session import QuizSession, SessionState, SlotState
from tests.factories import make_question


@pytest.fixture
def session(sample_questions):
    return QuizSession(sample_questions, Difficulty.EASY)


class TestStart:
    def test_empty_question_list_cannot_start(self):
        with pytest.raises(SelectionEmpty):
            QuizSession([], Difficulty.HARD)

    def test_initial_state(self, session):
        assert session.state == SessionState.IN_PROGRESS
        assert session.current_index == 0
        assert session.answers == {}
        assert session.slot_state() == SlotState.UNANSWERED
        assert session.submitted_for_current is False

    def test_questions_are_a_snapshot(self, sample_questions):
        session = QuizSession(sample_questions)
        sample_questions.clear()

        assert session.total == 5


class TestSelectAndSubmit:
    def test_select_marks_slot_selected_without_grading(self, session):
        session.select_option(1)

        assert session.slot_state() == SlotState.SELECTED
        assert session.selected_index == 1
        assert session.answers == {}

    def test_out_of_range_option_raises(self, session):
        with pytest.raises(OptionIndexError):
            session.select_option(4)
        with pytest.raises(IndexError):
            session.select_option(-1)

    def test_submit_without_selection_is_a_noop(self, session):
        assert session.submit() is None

        assert session.answers == {}
        assert session.slot_state() == SlotState.UNANSWERED
        assert isinstance(session.last_rejected, InvalidTransition)

    def test_submit_grades_current_question(self, session):
        session.select_option(0)
        record = session.submit()

        assert record is not None
        assert record.question_id == "Q1"
        assert record.is_correct is True
        assert session.slot_state() == SlotState.SUBMITTED
        assert session.answers["Q1"] == record

    def test_select_after_submit_is_ignored(self, session):
        session.select_option(2)
        session.submit()

        session.select_option(0)

        assert session.answers["Q1"].selected_index == 2
        assert session.slot_state() == SlotState.SUBMITTED

    def test_submitting_twice_keeps_one_identical_record(self, session):
        session.select_option(3)
        first = session.submit()
        session.submit()

        assert len(session.answers) == 1
        assert session.answers["Q1"] == first

    def test_grade_is_not_rederived(self, session):
        session.select_option(1)
        session.submit()

        assert session.answers["Q1"].is_correct is False


class TestNavigation:
    def test_advance_submits_pending_choice(self, session):
        session.select_option(0)

        assert session.advance() is None

        assert session.current_index == 1
        assert session.answers["Q1"].is_correct is True
        assert session.slot_state() == SlotState.UNANSWERED

    def test_advance_without_selection_stays_put(self, session):
        assert session.advance() is None

        assert session.current_index == 0
        assert session.answers == {}

    def test_retreat_on_first_question_requests_exit(self, session):
        assert session.retreat() is True
        assert session.current_index == 0

    def test_retreat_rehydrates_graded_slot(self, session):
        session.select_option(1)
        session.advance()

        assert session.retreat() is False

        assert session.current_index == 0
        assert session.slot_state() == SlotState.SUBMITTED
        assert session.selected_index == 1
        assert session.feedback() is not None

    def test_retreat_discards_unsubmitted_choice(self, session):
        session.select_option(0)
        session.advance()
        session.select_option(3)

        session.retreat()
        session.advance()

        assert session.current_index == 1
        assert session.slot_state() == SlotState.UNANSWERED
        assert "Q2" not in session.answers

    def test_advance_into_graded_slot_restores_submitted(self, session):
        session.select_option(0)
        session.advance()
        session.select_option(0)
        session.submit()
        session.retreat()

        session.advance()

        assert session.current_index == 1
        assert session.slot_state() == SlotState.SUBMITTED

    def test_slot_state_for_other_slots(self, session):
        session.select_option(0)
        session.advance()

        assert session.slot_state(0) == SlotState.SUBMITTED
        assert session.slot_state(2) == SlotState.UNANSWERED


class TestRevisit:
    def test_resubmitting_on_revisit_replaces_the_record(self, session):
        """
        GIVEN a graded question
        WHEN the user goes back, picks another option and submits
        THEN exactly one record exists for it, reflecting the latest choice
        """
        session.select_option(1)
        session.submit()
        session.advance()

        session.retreat()
        session.select_option(0)
        assert session.slot_state() == SlotState.SELECTED
        session.submit()

        assert len(session.answers) == 1
        assert session.answers["Q1"].selected_index == 0
        assert session.answers["Q1"].is_correct is True

    def test_reopened_slot_keeps_old_record_until_resubmitted(self, session):
        session.select_option(1)
        session.advance()
        session.retreat()

        session.select_option(0)

        assert session.answers["Q1"].selected_index == 1

    def test_reopened_slot_is_regraded_by_advance(self, session):
        session.select_option(1)
        session.advance()
        session.retreat()

        session.select_option(0)
        session.advance()

        assert session.answers["Q1"].is_correct is True
        assert session.current_index == 1


class TestCompletion:
    def _answer_all(self, session, choices):
        result = None
        for choice in choices:
            session.select_option(choice)
            result = session.advance()
        return result

    def test_advance_past_last_completes(self, session):
        answers = self._answer_all(session, [0, 1, 0, 1, 0])

        assert session.state == SessionState.COMPLETE
        assert answers is not None
        assert [a.question_id for a in answers] == ["Q1", "Q2", "Q3", "Q4", "Q5"]
        assert sum(a.is_correct for a in answers) == 3

    def test_answers_have_one_entry_per_submitted_question(self, session):
        self._answer_all(session, [0, 0])
        session.retreat()
        session.select_option(2)
        session.submit()
        session.advance()
        answers = self._answer_all(session, [0, 0, 0])

        assert len(answers) == 5
        assert answers[1].selected_index == 2

    def test_actions_after_completion_are_ignored(self, session):
        self._answer_all(session, [0] * 5)

        assert session.advance() is None
        assert session.retreat() is False
        session.select_option(1)
        assert session.submit() is None
        assert session.answers["Q5"].selected_index == 0

    def test_single_question_session(self):
        session = QuizSession([make_question("only", answer_index=1)])

        session.select_option(1)
        answers = session.advance()

        assert answers is not None
        assert answers[0].is_correct is True
        assert session.is_complete


class TestReaders:
    def test_feedback_for_graded_slot(self, sample_question):
        session = QuizSession([sample_question])
        assert session.feedback() is None

        session.select_option(0)
        session.submit()
        feedback = session.feedback()

        assert feedback.is_correct is False
        assert feedback.selected_label == "A"
        assert feedback.correct_label == "C"
        assert feedback.explanation == "Because."

    def test_toolbar_follows_slot_state(self, session):
        toolbar = session.toolbar()
        assert toolbar.show_exit and not toolbar.show_previous
        assert not toolbar.show_submit and not toolbar.show_next

        session.select_option(0)
        assert session.toolbar().show_submit

        session.submit()
        toolbar = session.toolbar()
        assert toolbar.show_next and not toolbar.show_submit

        session.advance()
        assert session.toolbar().show_previous

    def test_progress(self, session):
        assert session.progress() == 0.0

        session.select_option(0)
        session.submit()

        assert session.progress() == pytest.approx(0.2)
