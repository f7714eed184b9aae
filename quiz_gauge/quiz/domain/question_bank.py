from collections.abc import Iterable
from typing import Any

from pydantic import TypeAdapter, ValidationError

from quiz_gauge.quiz.domain.errors import InvalidQuestionData
from quiz_gauge.quiz.domain.models import Question
from quiz_gauge.shared.telemetry import Telemetry

_QUESTION_LIST = TypeAdapter(list[Question])


def parse_questions(payload: Any) -> list[Question]:
    """
    Validates a raw dataset (decoded JSON) into Questions.
    The whole payload is rejected if any record is malformed.
    """
    if not isinstance(payload, list):
        raise InvalidQuestionData("Questions payload is not an array.")
    try:
        questions = _QUESTION_LIST.validate_python(payload)
    except ValidationError as e:
        raise InvalidQuestionData(f"Questions payload is invalid: {e}") from e
    return _check_unique(questions)


def _check_unique(questions: Iterable[Question]) -> list[Question]:
    seen: set[str] = set()
    result = []
    for q in questions:
        if q.id in seen:
            raise InvalidQuestionData(f"Duplicate question id: {q.id!r}")
        seen.add(q.id)
        result.append(q)
    return result


class QuestionBank:
    """
    In-memory pool of questions.
    The pool is an immutable tuple swapped as a whole, so a reader holding
    `questions` sees the pool either before or after a replace.
    """

    def __init__(self, initial: Iterable[Question] = ()) -> None:
        self.telemetry = Telemetry("QuestionBank")
        self._questions: tuple[Question, ...] = ()
        self.load(initial)

    @property
    def questions(self) -> tuple[Question, ...]:
        return self._questions

    @property
    def size(self) -> int:
        return len(self._questions)

    def __len__(self) -> int:
        return len(self._questions)

    def is_empty(self) -> bool:
        return not self._questions

    def load(self, initial: Iterable[Question]) -> None:
        self._questions = tuple(_check_unique(initial))
        self.telemetry.log_info("Question bank loaded", size=self.size)

    def replace(self, next_questions: Iterable[Question]) -> None:
        """Atomically swaps the pool. Invalid input leaves the current pool in place."""
        validated = tuple(_check_unique(next_questions))
        previous = self.size
        self._questions = validated
        self.telemetry.log_info(
            "Question bank replaced", previous=previous, size=self.size
        )
