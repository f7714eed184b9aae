from collections.abc import Sequence

from quiz_gauge.quiz.domain.models import (
    AnswerRecord,
    AuthenticatedUser,
    UserMode,
    UserProfile,
)


class ProgressAggregator:
    """
    Folds completed sessions into the running user profile.
    The arithmetic is the same for guest and authenticated profiles;
    only their storage lifecycle differs.
    """

    @staticmethod
    def apply_session(
        prior: UserProfile, answers: Sequence[AnswerRecord]
    ) -> UserProfile:
        """
        Returns the updated profile. `completion` reflects this session only,
        and a session with no graded answers leaves it unchanged.
        """
        correct_count = sum(1 for a in answers if a.is_correct)
        completion = correct_count / len(answers) if answers else prior.completion

        return prior.model_copy(
            update={
                "answered": prior.answered + len(answers),
                "correct": prior.correct + correct_count,
                "completion": completion,
            }
        )

    @staticmethod
    def for_login(prior: UserProfile | None, user: AuthenticatedUser) -> UserProfile:
        """Authenticated profile carrying the prior counters, streak floored at 1."""
        answered = prior.answered if prior else 0
        correct = prior.correct if prior else 0
        streak = max((prior.streak if prior else 0) or 1, 1)

        return UserProfile(
            mode=UserMode.GITHUB,
            login=user.id,
            name=user.display_name or user.id,
            avatar_url=user.avatar_url,
            answered=answered,
            correct=correct,
            streak=streak,
            completion=correct / answered if answered else 0.0,
        )

    @staticmethod
    def guest() -> UserProfile:
        return UserProfile(mode=UserMode.GUEST, login="guest", name="Guest")
