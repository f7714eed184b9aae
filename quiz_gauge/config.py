import os
from enum import Enum
from typing import Final

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class QuizConfig:
    # --- App Identity ---
    SERVICE_NAME = "quiz-gauge"

    # --- Quiz Rules ---
    QUESTION_COUNT_BY_DIFFICULTY: Final[dict[Difficulty, int]] = {
        Difficulty.EASY: 10,
        Difficulty.MEDIUM: 25,
        Difficulty.HARD: 50,
    }
    DEFAULT_DIFFICULTY = Difficulty.EASY
    DEFAULT_TOPIC = "General"
    MIN_OPTIONS = 2

    # --- Question Source ---
    BUNDLED_QUESTIONS_PATH = os.path.join(_PACKAGE_DIR, "data", "questions.json")
    REMOTE_QUESTIONS_URL = os.getenv(
        "QUIZ_GAUGE_QUESTIONS_URL",
        "https://raw.githubusercontent.com/founding-partner/ReactGauge/refs/heads/main/data/questions.json",
    )
    HTTP_TIMEOUT_SECONDS = 10.0

    # --- Storage ---
    DB_PATH = os.getenv("QUIZ_GAUGE_DB_PATH", "data/quiz_gauge.db")
    HISTORY_KEY = "quizGauge:quizHistory"
    PROFILE_KEY = "quizGauge:userProfile"
    LANGUAGE_KEY = "quizGauge:language"

    # --- Localization (codes only, catalogs live in the UI layer) ---
    SUPPORTED_LANGUAGES: Final[list[str]] = ["en", "es", "ta"]
    FALLBACK_LANGUAGE = "en"

    # --- Observability ---
    METRICS_PORT = int(os.getenv("QUIZ_GAUGE_METRICS_PORT", "8000"))

    @staticmethod
    def question_count(difficulty: Difficulty) -> int:
        """Desired number of questions for a session at the given difficulty."""
        return QuizConfig.QUESTION_COUNT_BY_DIFFICULTY[Difficulty(difficulty)]

    @staticmethod
    def normalize_language(code: str | None) -> str:
        """Returns the code if supported, otherwise the fallback language."""
        if code in QuizConfig.SUPPORTED_LANGUAGES:
            return code
        return QuizConfig.FALLBACK_LANGUAGE
