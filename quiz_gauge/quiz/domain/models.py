import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from quiz_gauge.config import Difficulty, QuizConfig


def percentage(correct: int, total: int) -> int:
    """Display percentage, rounded half up. An empty total is 0%."""
    if total <= 0:
        return 0
    return math.floor(correct / total * 100 + 0.5)


# --- Enums ---
class QuestionType(str, Enum):
    MCQ = "mcq"
    BOOLEAN = "boolean"
    CODE = "code"


class UserMode(str, Enum):
    GITHUB = "github"  # authenticated through the OAuth provider
    GUEST = "guest"


# --- Entities ---
class Question(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    id: str = Field(..., min_length=1)
    type: QuestionType
    prompt: str
    description: str | None = None
    code: str | None = None
    options: tuple[str, ...]
    answer_index: StrictInt
    explanation: str | None = None
    topic: str | None = None

    @field_validator("options")
    @classmethod
    def _enough_options(cls, options: tuple[str, ...]) -> tuple[str, ...]:
        if len(options) < QuizConfig.MIN_OPTIONS:
            raise ValueError(
                f"a question needs at least {QuizConfig.MIN_OPTIONS} options"
            )
        return options

    @model_validator(mode="after")
    def _answer_in_range(self) -> "Question":
        if not 0 <= self.answer_index < len(self.options):
            raise ValueError(
                f"answerIndex {self.answer_index} out of range for "
                f"{len(self.options)} options"
            )
        return self

    @property
    def topic_label(self) -> str:
        return self.topic if self.topic is not None else QuizConfig.DEFAULT_TOPIC

    @property
    def correct_option(self) -> str:
        return self.options[self.answer_index]

    def has_option(self, index: int) -> bool:
        return 0 <= index < len(self.options)


class AnswerRecord(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    question_id: str
    selected_index: StrictInt
    is_correct: bool

    @classmethod
    def grade(cls, question: Question, selected_index: int) -> "AnswerRecord":
        """Grades a selection at submission time. The result is never re-derived."""
        return cls(
            question_id=question.id,
            selected_index=selected_index,
            is_correct=selected_index == question.answer_index,
        )


class Score(BaseModel):
    model_config = ConfigDict(frozen=True)

    correct: int = 0
    total: int = 0

    @property
    def percentage(self) -> int:
        return percentage(self.correct, self.total)


@dataclass(frozen=True)
class TopicStat:
    topic: str
    total: int
    correct: int

    @property
    def percentage(self) -> int:
        return percentage(self.correct, self.total)


class QuizAttempt(BaseModel):
    """
    Immutable history record of one completed session.
    Questions and answers are snapshots, so a later bank replacement
    cannot change what the history shows.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    id: str
    timestamp: datetime
    difficulty: Difficulty
    score: Score
    streak: int
    user_mode: UserMode
    user_login: str
    questions: tuple[Question, ...]
    answers: tuple[AnswerRecord, ...]


class UserProfile(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    mode: UserMode
    login: str
    name: str | None = None
    avatar_url: str | None = None
    answered: int = 0
    correct: int = 0
    streak: int = 0
    completion: float = 0.0

    @property
    def is_guest(self) -> bool:
        return self.mode == UserMode.GUEST

    @property
    def display_name(self) -> str:
        return self.name or self.login


class AuthenticatedUser(BaseModel):
    """What the OAuth collaborator hands back after a successful sign-in."""

    id: str
    display_name: str | None = None
    avatar_url: str | None = None


# --- (Data Transfer Object) ---
@dataclass(frozen=True)
class QuizResult:
    """
    A completed session as shown on the score screen.
    `attempt` is None only if the result was never recorded.
    """

    questions: tuple[Question, ...]
    answers: tuple[AnswerRecord, ...]
    score: Score
    topics: tuple[TopicStat, ...]
    difficulty: Difficulty
    attempt: QuizAttempt | None = None
