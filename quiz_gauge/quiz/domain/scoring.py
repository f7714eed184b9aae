from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from quiz_gauge.quiz.domain.models import (
    AnswerRecord,
    Question,
    Score,
    TopicStat,
    percentage,
)


@dataclass(frozen=True)
class ReviewItem:
    """One row of the answer review (score screen and history detail)."""

    question_id: str
    prompt: str
    options: tuple[str, ...]
    selected_index: int | None
    correct_index: int
    is_correct: bool
    explanation: str | None

    @property
    def answered(self) -> bool:
        return self.selected_index is not None

    @property
    def selected_label(self) -> str | None:
        if self.selected_index is None:
            return None
        return self.options[self.selected_index]

    @property
    def correct_label(self) -> str:
        return self.options[self.correct_index]


class ScoreCalculator:
    """
    Pure scoring over a question list and its answer records.
    Questions without a record count toward totals but never as correct.
    """

    @staticmethod
    def overall(
        questions: Sequence[Question], answers: Iterable[AnswerRecord]
    ) -> Score:
        correct = sum(1 for a in answers if a.is_correct)
        return Score(correct=correct, total=len(questions))

    @staticmethod
    def by_topic(
        questions: Sequence[Question], answers: Iterable[AnswerRecord]
    ) -> list[TopicStat]:
        """
        Groups by topic ("General" when unset), ordered by topic name
        ignoring case.

        Example:
            >>> ScoreCalculator.by_topic([hooks_ok, hooks_bad, untagged_ok], answers)
            >>> # [TopicStat("General", 1, 1), TopicStat("hooks", 2, 1)]
        """
        lookup = {a.question_id: a for a in answers}
        totals: dict[str, int] = {}
        corrects: dict[str, int] = {}

        for q in questions:
            topic = q.topic_label
            totals[topic] = totals.get(topic, 0) + 1
            answer = lookup.get(q.id)
            if answer is not None and answer.is_correct:
                corrects[topic] = corrects.get(topic, 0) + 1

        return [
            TopicStat(topic=topic, total=totals[topic], correct=corrects.get(topic, 0))
            for topic in sorted(totals, key=lambda t: (t.casefold(), t))
        ]

    @staticmethod
    def percentage(correct: int, total: int) -> int:
        return percentage(correct, total)

    @staticmethod
    def review(
        questions: Sequence[Question], answers: Iterable[AnswerRecord]
    ) -> list[ReviewItem]:
        lookup = {a.question_id: a for a in answers}
        items = []
        for q in questions:
            answer = lookup.get(q.id)
            items.append(
                ReviewItem(
                    question_id=q.id,
                    prompt=q.prompt,
                    options=q.options,
                    selected_index=answer.selected_index if answer else None,
                    correct_index=q.answer_index,
                    is_correct=bool(answer and answer.is_correct),
                    explanation=q.explanation,
                )
            )
        return items
