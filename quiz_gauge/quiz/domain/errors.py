class QuizError(Exception):
    """Base class for every error raised by the quiz core."""


class SelectionEmpty(QuizError):
    """The question pool yielded no candidates; a session must not start."""

    def __init__(self, difficulty: str) -> None:
        self.difficulty = difficulty
        super().__init__(
            "No questions available. Add more questions to the question bank "
            f"to start a quiz for this difficulty ({difficulty})."
        )


class InvalidTransition(QuizError):
    """
    An action arrived that violates a state machine precondition.
    Logged and ignored at the core boundary, never raised to callers.
    """


class OptionIndexError(QuizError, IndexError):
    """An option index outside the question's options. A programming error."""

    def __init__(self, question_id: str, index: int, option_count: int) -> None:
        self.question_id = question_id
        self.index = index
        self.option_count = option_count
        super().__init__(
            f"Option index {index} out of range for question {question_id!r} "
            f"({option_count} options)"
        )


class InvalidQuestionData(QuizError, ValueError):
    """A question dataset failed validation and was rejected as a whole."""


class PersistenceFailure(QuizError):
    """A storage operation failed. Logged by the storage adapter, never surfaced."""

    def __init__(self, operation: str, cause: Exception) -> None:
        self.operation = operation
        self.cause = cause
        super().__init__(f"Storage operation '{operation}' failed: {cause}")


class AuthError(QuizError):
    """Authentication failed. The message is shown to the user verbatim."""

    def __init__(self, message: str = "Something went wrong.") -> None:
        self.message = message
        super().__init__(message)


class QuestionSourceUnavailable(QuizError):
    """A question source could not be reached. The current bank stays in use."""
