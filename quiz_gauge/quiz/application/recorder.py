import uuid
from collections.abc import Callable
from datetime import datetime, timezone

from quiz_gauge.quiz.domain.errors import PersistenceFailure
from quiz_gauge.quiz.domain.models import QuizAttempt, UserMode
from quiz_gauge.quiz.domain.ports import IQuizStorage
from quiz_gauge.quiz.domain.scoring import ScoreCalculator
from quiz_gauge.quiz.domain.session import QuizSession
from quiz_gauge.shared.telemetry import Telemetry, measure_time


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


class AttemptRecorder:
    """
    Turns completed sessions into immutable attempts and keeps the
    history newest first. History only shrinks through clear().
    """

    def __init__(
        self,
        storage: IQuizStorage,
        clock: Callable[[], datetime] = _utc_now,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self.storage = storage
        self.clock = clock
        self.id_factory = id_factory
        self.telemetry = Telemetry("AttemptRecorder")
        self._history: list[QuizAttempt] = []

    def load(self) -> list[QuizAttempt]:
        self._history = self.storage.get_attempts()
        self.telemetry.log_info("History loaded", count=len(self._history))
        return self.history()

    def history(self) -> list[QuizAttempt]:
        return list(self._history)

    @measure_time("record_attempt")
    def record_attempt(
        self,
        session: QuizSession,
        user_mode: UserMode,
        user_login: str,
        streak: int,
    ) -> QuizAttempt:
        answers = tuple(session.ordered_answers())
        attempt = QuizAttempt(
            id=self.id_factory(),
            timestamp=self.clock(),
            difficulty=session.difficulty,
            score=ScoreCalculator.overall(session.questions, answers),
            streak=streak,
            user_mode=user_mode,
            user_login=user_login,
            questions=tuple(session.questions),
            answers=answers,
        )
        self._history.insert(0, attempt)

        try:
            self.storage.append_attempt(attempt)
        except Exception as e:
            # The attempt stays in the in-memory history either way.
            self.telemetry.log_error(
                "Attempt not persisted", PersistenceFailure("append_attempt", e)
            )
            Telemetry.count_persistence_failure("append_attempt")

        self.telemetry.log_info(
            "Attempt recorded",
            attempt_id=attempt.id,
            score=f"{attempt.score.correct}/{attempt.score.total}",
            history=len(self._history),
        )
        return attempt

    def clear(self) -> None:
        self._history = []
        try:
            self.storage.clear_attempts()
        except Exception as e:
            self.telemetry.log_error(
                "History not cleared in storage", PersistenceFailure("clear_attempts", e)
            )
            Telemetry.count_persistence_failure("clear_attempts")
