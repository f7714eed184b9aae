from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum, auto

from quiz_gauge.config import Difficulty, QuizConfig
from quiz_gauge.quiz.domain.errors import (
    InvalidTransition,
    OptionIndexError,
    SelectionEmpty,
)
from quiz_gauge.quiz.domain.models import AnswerRecord, Question
from quiz_gauge.shared.telemetry import Telemetry


class SlotState(Enum):
    UNANSWERED = auto()  # No tentative choice, no record
    SELECTED = auto()  # Tentative choice, not graded yet
    SUBMITTED = auto()  # Graded, record exists, feedback visible


class SessionState(Enum):
    IN_PROGRESS = auto()
    COMPLETE = auto()


@dataclass(frozen=True)
class Feedback:
    """Explanation panel for the graded current slot."""

    prompt: str
    explanation: str | None
    selected_label: str
    correct_label: str
    is_correct: bool


@dataclass(frozen=True)
class ToolbarState:
    """Which controls the caller should offer for the current slot."""

    show_exit: bool
    show_previous: bool
    show_submit: bool
    show_next: bool
    is_last_question: bool


class QuizSession:
    """
    One walk through a fixed, pre-selected list of questions.

    Answers are keyed by question id, so a slot holds at most one record and
    re-grading on revisit replaces it in place. Actions that break a
    precondition are logged and ignored; only an out-of-range option index
    raises.
    """

    def __init__(
        self,
        questions: Sequence[Question],
        difficulty: Difficulty = QuizConfig.DEFAULT_DIFFICULTY,
    ) -> None:
        if not questions:
            raise SelectionEmpty(Difficulty(difficulty).value)

        self.telemetry = Telemetry("QuizSession")
        self.questions: tuple[Question, ...] = tuple(questions)
        self.difficulty = Difficulty(difficulty)
        self.current_index = 0
        self.answers: dict[str, AnswerRecord] = {}
        self.last_rejected: InvalidTransition | None = None

        self._state = SessionState.IN_PROGRESS
        self._pending: int | None = None
        self._submitted = False
        # Feedback freeze: a slot graded during this visit accepts no new choice.
        self._graded_this_visit = False

    # --- Properties ---

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_complete(self) -> bool:
        return self._state == SessionState.COMPLETE

    @property
    def total(self) -> int:
        return len(self.questions)

    @property
    def current_question(self) -> Question:
        return self.questions[self.current_index]

    @property
    def is_last_question(self) -> bool:
        return self.current_index == self.total - 1

    @property
    def submitted_for_current(self) -> bool:
        return self._submitted

    @property
    def current_answer(self) -> AnswerRecord | None:
        return self.answers.get(self.current_question.id)

    @property
    def selected_index(self) -> int | None:
        """The choice to highlight: the tentative one, else the graded one."""
        if self._pending is not None:
            return self._pending
        record = self.current_answer
        return record.selected_index if record else None

    def slot_state(self, index: int | None = None) -> SlotState:
        idx = self.current_index if index is None else index
        if idx == self.current_index:
            if self._submitted:
                return SlotState.SUBMITTED
            if self._pending is not None:
                return SlotState.SELECTED
            return SlotState.UNANSWERED

        if self.questions[idx].id in self.answers:
            return SlotState.SUBMITTED
        return SlotState.UNANSWERED

    def ordered_answers(self) -> list[AnswerRecord]:
        """Records in question order. Questions never submitted are absent."""
        return [self.answers[q.id] for q in self.questions if q.id in self.answers]

    def progress(self) -> float:
        return (self.current_index + (1 if self._submitted else 0)) / self.total

    def feedback(self) -> Feedback | None:
        record = self.current_answer
        if not self._submitted or record is None:
            return None
        q = self.current_question
        return Feedback(
            prompt=q.prompt,
            explanation=q.explanation,
            selected_label=q.options[record.selected_index],
            correct_label=q.correct_option,
            is_correct=record.is_correct,
        )

    def toolbar(self) -> ToolbarState:
        return ToolbarState(
            show_exit=self.current_index == 0,
            show_previous=self.current_index > 0,
            show_submit=self._pending is not None and not self._submitted,
            show_next=self._submitted,
            is_last_question=self.is_last_question,
        )

    # --- Actions ---

    def select_option(self, index: int) -> None:
        q = self.current_question
        if not q.has_option(index):
            raise OptionIndexError(q.id, index, len(q.options))

        if self.is_complete:
            self._reject("select_option", "session is complete")
            return
        if self._submitted and self._graded_this_visit:
            self._reject("select_option", f"question {q.id} already graded")
            return

        # On a revisited graded slot this re-opens it; the old record
        # stays until the new choice is submitted.
        self._pending = index
        self._submitted = False

    def submit(self) -> AnswerRecord | None:
        if self.is_complete:
            self._reject("submit", "session is complete")
            return None
        if self._submitted:
            self._reject("submit", "question already graded")
            return None
        if self._pending is None:
            self._reject("submit", "no option selected")
            return None

        q = self.current_question
        record = AnswerRecord.grade(q, self._pending)
        replaced = q.id in self.answers
        self.answers[q.id] = record
        self._submitted = True
        self._graded_this_visit = True

        self.telemetry.log_info(
            "Answer graded",
            q_id=q.id,
            selected=record.selected_index,
            correct=record.is_correct,
            replaced=replaced,
        )
        return record

    def advance(self) -> list[AnswerRecord] | None:
        """
        Submit-then-advance. Returns the final answers when the last graded
        slot is advanced past, otherwise None.
        """
        if self.is_complete:
            self._reject("advance", "session is complete")
            return None

        if not self._submitted:
            self.submit()
            if not self._submitted:
                return None

        if self.is_last_question:
            self._state = SessionState.COMPLETE
            answers = self.ordered_answers()
            self.telemetry.log_info(
                "🏁 Session complete", answered=len(answers), total=self.total
            )
            return answers

        self._move_to(self.current_index + 1)
        return None

    def retreat(self) -> bool:
        """Steps back one slot. Returns True when the caller should exit the session."""
        if self.is_complete:
            self._reject("retreat", "session is complete")
            return False

        if self.current_index == 0:
            self.telemetry.log_info("Exit requested", answered=len(self.answers))
            return True

        self._move_to(self.current_index - 1)
        return False

    # --- Internals ---

    def _move_to(self, index: int) -> None:
        self.current_index = index
        self._pending = None
        self._submitted = self.questions[index].id in self.answers
        self._graded_this_visit = False

    def _reject(self, action: str, reason: str) -> None:
        self.last_rejected = InvalidTransition(f"{action}: {reason}")
        self.telemetry.log_warning(
            f"⛔ Ignored action: {action}", reason=reason, index=self.current_index
        )
