from abc import ABC, abstractmethod

from quiz_gauge.quiz.domain.models import (
    AuthenticatedUser,
    Question,
    QuizAttempt,
    UserProfile,
)


class IAuthProvider(ABC):
    @abstractmethod
    def authenticate(self) -> AuthenticatedUser:
        """
        Runs the external sign-in flow.
        Raises AuthError with a human-readable message on any failure.
        """
        pass


class IKeyValueStore(ABC):
    """Opaque local storage of serialized blobs."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        pass


class IQuizStorage(ABC):
    """
    Typed persistence used by the core.
    Implementations log and swallow their own failures; callers never
    see a storage error.
    """

    @abstractmethod
    def get_attempts(self) -> list[QuizAttempt]:
        pass

    @abstractmethod
    def append_attempt(self, attempt: QuizAttempt) -> list[QuizAttempt]:
        pass

    @abstractmethod
    def clear_attempts(self) -> None:
        pass

    @abstractmethod
    def get_user_profile(self) -> UserProfile | None:
        pass

    @abstractmethod
    def save_user_profile(self, profile: UserProfile | None) -> None:
        pass

    @abstractmethod
    def get_language(self) -> str | None:
        pass

    @abstractmethod
    def save_language(self, code: str) -> None:
        pass


class IQuestionSource(ABC):
    @abstractmethod
    def fetch(self) -> list[Question]:
        """
        Returns a complete, validated question list.
        Raises InvalidQuestionData if the payload is malformed.
        """
        pass
