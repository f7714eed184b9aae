import json
import os

import httpx

from quiz_gauge.config import QuizConfig
from quiz_gauge.quiz.domain.errors import InvalidQuestionData, QuestionSourceUnavailable
from quiz_gauge.quiz.domain.models import Question
from quiz_gauge.quiz.domain.ports import IQuestionSource
from quiz_gauge.quiz.domain.question_bank import parse_questions
from quiz_gauge.shared.telemetry import Telemetry, measure_time


class BundledQuestionSource(IQuestionSource):
    """
    The dataset shipped with the package.
    A missing or malformed file is a packaging bug, so it raises.
    """

    def __init__(self, path: str = QuizConfig.BUNDLED_QUESTIONS_PATH) -> None:
        self.path = path
        self.telemetry = Telemetry("BundledQuestionSource")

    @measure_time("load_bundled_questions")
    def fetch(self) -> list[Question]:
        if not os.path.exists(self.path):
            raise QuestionSourceUnavailable(f"Bundled dataset not found: {self.path}")

        with open(self.path, encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise InvalidQuestionData(f"Bundled dataset is not JSON: {e}") from e

        questions = parse_questions(data)
        self.telemetry.log_info("Bundled questions loaded", count=len(questions))
        return questions


class RemoteQuestionSource(IQuestionSource):
    """Fetches a replacement dataset of the same shape from a fixed URL."""

    def __init__(
        self,
        url: str = QuizConfig.REMOTE_QUESTIONS_URL,
        client: httpx.Client | None = None,
        timeout: float = QuizConfig.HTTP_TIMEOUT_SECONDS,
    ) -> None:
        self.url = url
        self.client = client or httpx.Client(timeout=timeout)
        self.telemetry = Telemetry("RemoteQuestionSource")

    @measure_time("fetch_remote_questions")
    def fetch(self) -> list[Question]:
        try:
            response = self.client.get(self.url, headers={"Accept": "application/json"})
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise QuestionSourceUnavailable(
                f"Failed to fetch questions ({e.response.status_code})"
            ) from e
        except httpx.HTTPError as e:
            raise QuestionSourceUnavailable(f"Failed to fetch questions: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise InvalidQuestionData("Questions payload is not JSON.") from e

        questions = parse_questions(data)
        self.telemetry.log_info("Remote questions fetched", count=len(questions))
        return questions

    def close(self) -> None:
        self.client.close()
