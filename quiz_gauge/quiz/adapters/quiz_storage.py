import json

from pydantic import TypeAdapter

from quiz_gauge.config import QuizConfig
from quiz_gauge.quiz.domain.errors import PersistenceFailure
from quiz_gauge.quiz.domain.models import QuizAttempt, UserProfile
from quiz_gauge.quiz.domain.ports import IKeyValueStore, IQuizStorage
from quiz_gauge.shared.telemetry import Telemetry

_HISTORY = TypeAdapter(list[QuizAttempt])

# --- Failure Policy ---
# Every operation is best effort: errors are logged and counted, then
# swallowed. Reads of missing or malformed blobs return an empty value.
# The quiz flow never blocks on storage.
# ----------------------


class KeyValueQuizStorage(IQuizStorage):
    def __init__(self, store: IKeyValueStore) -> None:
        self.store = store
        self.telemetry = Telemetry("QuizStorage")

    # --- History ---

    def get_attempts(self) -> list[QuizAttempt]:
        try:
            raw = self.store.get(QuizConfig.HISTORY_KEY)
            if not raw:
                return []
            parsed = json.loads(raw)
            if not isinstance(parsed, list):
                return []
            return _HISTORY.validate_python(parsed)
        except Exception as e:
            self._failed("get_attempts", e)
            return []

    def append_attempt(self, attempt: QuizAttempt) -> list[QuizAttempt]:
        history = [attempt, *self.get_attempts()]
        self._save_history(history)
        return history

    def clear_attempts(self) -> None:
        try:
            self.store.remove(QuizConfig.HISTORY_KEY)
            self.telemetry.log_info("History cleared")
        except Exception as e:
            self._failed("clear_attempts", e)

    def _save_history(self, history: list[QuizAttempt]) -> None:
        try:
            payload = _HISTORY.dump_json(history, by_alias=True).decode("utf-8")
            self.store.set(QuizConfig.HISTORY_KEY, payload)
        except Exception as e:
            self._failed("save_history", e)

    # --- Profile ---

    def get_user_profile(self) -> UserProfile | None:
        try:
            raw = self.store.get(QuizConfig.PROFILE_KEY)
            if not raw:
                return None
            return UserProfile.model_validate_json(raw)
        except Exception as e:
            self._failed("get_user_profile", e)
            return None

    def save_user_profile(self, profile: UserProfile | None) -> None:
        try:
            if profile is None:
                self.store.remove(QuizConfig.PROFILE_KEY)
                return
            self.store.set(QuizConfig.PROFILE_KEY, profile.model_dump_json(by_alias=True))
        except Exception as e:
            self._failed("save_user_profile", e)

    # --- Settings ---

    def get_language(self) -> str | None:
        try:
            stored = self.store.get(QuizConfig.LANGUAGE_KEY)
        except Exception as e:
            self._failed("get_language", e)
            return None
        if stored not in QuizConfig.SUPPORTED_LANGUAGES:
            return None
        return stored

    def save_language(self, code: str) -> None:
        try:
            self.store.set(QuizConfig.LANGUAGE_KEY, QuizConfig.normalize_language(code))
        except Exception as e:
            self._failed("save_language", e)

    def _failed(self, operation: str, error: Exception) -> None:
        self.telemetry.log_error(
            "Storage failure", PersistenceFailure(operation, error), operation=operation
        )
        Telemetry.count_persistence_failure(operation)
