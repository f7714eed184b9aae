import random

import pytest

from quiz_gauge.quiz.adapters.db_manager import DatabaseManager
from quiz_gauge.quiz.adapters.quiz_storage import KeyValueQuizStorage
from quiz_gauge.quiz.adapters.sqlite_store import SQLiteKeyValueStore
from quiz_gauge.quiz.application.recorder import AttemptRecorder
from quiz_gauge.quiz.application.service import QuizService
from quiz_gauge.quiz.domain.question_bank import QuestionBank
from quiz_gauge.quiz.domain.question_selector import QuestionSelector
from tests.factories import StaticAuthProvider, make_question


@pytest.fixture
def sample_question():
    return make_question("Q1", answer_index=2, topic="hooks", explanation="Because.")


@pytest.fixture
def sample_questions():
    """Five questions, correct answer is always index 0."""
    return [make_question(f"Q{i}", answer_index=0) for i in range(1, 6)]


@pytest.fixture
def seeded_selector():
    return QuestionSelector(rng=random.Random(42))


@pytest.fixture
def db_manager():
    db = DatabaseManager(db_path=":memory:")
    yield db
    db.close()


@pytest.fixture
def kv_store(db_manager):
    return SQLiteKeyValueStore(db_manager)


@pytest.fixture
def storage(kv_store):
    return KeyValueQuizStorage(kv_store)


@pytest.fixture
def auth_provider():
    return StaticAuthProvider()


@pytest.fixture
def service(sample_questions, storage, seeded_selector):
    """Controller over a five-question bank with real in-memory storage."""
    bank = QuestionBank(sample_questions)
    return QuizService(
        bank,
        storage,
        selector=seeded_selector,
        recorder=AttemptRecorder(storage),
    )
