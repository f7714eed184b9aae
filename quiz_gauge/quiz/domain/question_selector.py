import random
from collections.abc import Sequence

from quiz_gauge.config import Difficulty, QuizConfig
from quiz_gauge.quiz.domain.models import Question
from quiz_gauge.shared.telemetry import Telemetry


class QuestionSelector:
    """
    Pure domain logic for sampling questions out of the bank.
    The random source is injected so tests can seed it.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()
        self.telemetry = Telemetry("QuestionSelector")

    def shuffle(self, pool: Sequence[Question]) -> list[Question]:
        """Unbiased Fisher-Yates shuffle of a copy of the pool."""
        shuffled = list(pool)
        for i in range(len(shuffled) - 1, 0, -1):
            j = self.rng.randint(0, i)
            shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
        return shuffled

    def pick_for_difficulty(
        self, difficulty: Difficulty, pool: Sequence[Question]
    ) -> list[Question]:
        """
        Returns min(desired count, pool size) distinct questions in random order.
        An empty pool yields an empty list; the caller refuses to start a session.

        Example:
            >>> selector.pick_for_difficulty(Difficulty.EASY, three_questions)
            >>> # All 3 questions, shuffled
        """
        desired = QuizConfig.question_count(difficulty)
        selection = self.shuffle(pool)[: min(desired, len(pool))]

        self.telemetry.log_info(
            "Questions selected",
            difficulty=Difficulty(difficulty).value,
            desired=desired,
            pool=len(pool),
            selected=len(selection),
        )
        return selection

    def pick_random(self, pool: Sequence[Question]) -> Question | None:
        if not pool:
            return None
        return pool[self.rng.randrange(len(pool))]
