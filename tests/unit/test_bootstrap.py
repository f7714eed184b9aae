import json

from quiz_gauge.bootstrap import build_service, configure_observability
from quiz_gauge.fsm import AppState
from quiz_gauge.quiz.domain.models import UserMode, UserProfile


def test_observability_disabled_without_env(monkeypatch):
    monkeypatch.delenv("OTEL_EXPORTER_OTLP_ENDPOINT", raising=False)
    monkeypatch.delenv("OTEL_EXPORTER_OTLP_HEADERS", raising=False)

    assert configure_observability() is False


def test_observability_needs_both_env_vars(monkeypatch):
    monkeypatch.setenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://collector:4317")
    monkeypatch.delenv("OTEL_EXPORTER_OTLP_HEADERS", raising=False)

    assert configure_observability() is False


def test_build_service_loads_bundled_bank(tmp_path):
    service = build_service(db_path=str(tmp_path / "app.db"))

    assert service.question_pool_size >= 10
    assert service.warmup_question is not None
    assert service.state == AppState.SIGNED_OUT


def test_build_service_with_custom_dataset(tmp_path):
    dataset = tmp_path / "questions.json"
    dataset.write_text(
        json.dumps(
            [{"id": "x", "type": "boolean", "prompt": "?", "options": ["T", "F"], "answerIndex": 0}]
        ),
        encoding="utf-8",
    )

    service = build_service(db_path=str(tmp_path / "app.db"), questions_path=str(dataset))

    assert service.question_pool_size == 1
    assert service.warmup_question.id == "x"


def test_build_service_restores_saved_profile(tmp_path):
    db_path = str(tmp_path / "app.db")
    first = build_service(db_path=db_path)
    first.storage.save_user_profile(
        UserProfile(mode=UserMode.GITHUB, login="octocat", answered=4, correct=3)
    )

    second = build_service(db_path=db_path)

    assert second.state == AppState.HOME
    assert second.profile.login == "octocat"
    assert second.profile.answered == 4
