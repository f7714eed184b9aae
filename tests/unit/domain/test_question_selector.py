import random

import pytest

from quiz_gauge.config import Difficulty
from quiz_gauge.quiz.domain.question_selector import QuestionSelector
from tests.factories import make_question


def make_pool(size):
    return [make_question(f"Q{i}") for i in range(size)]


@pytest.mark.parametrize(
    "difficulty,pool_size,expected",
    [
        (Difficulty.EASY, 60, 10),
        (Difficulty.MEDIUM, 60, 25),
        (Difficulty.HARD, 60, 50),
        (Difficulty.HARD, 30, 30),
        (Difficulty.MEDIUM, 0, 0),
    ],
)
def test_pick_for_difficulty_count(difficulty, pool_size, expected):
    pool = make_pool(pool_size)

    selected = QuestionSelector().pick_for_difficulty(difficulty, pool)

    assert len(selected) == expected


def test_pick_for_difficulty_returns_unique_bank_members():
    pool = make_pool(40)

    selected = QuestionSelector().pick_for_difficulty(Difficulty.MEDIUM, pool)

    ids = [q.id for q in selected]
    assert len(set(ids)) == len(ids)
    assert set(selected) <= set(pool)


def test_small_bank_returns_every_question_once():
    """
    GIVEN a bank of exactly 3 questions
    WHEN 'easy' (10 desired) is requested
    THEN all 3 come back, each exactly once
    """
    pool = make_pool(3)

    selected = QuestionSelector().pick_for_difficulty(Difficulty.EASY, pool)

    assert sorted(q.id for q in selected) == ["Q0", "Q1", "Q2"]


def test_selection_does_not_mutate_the_pool():
    pool = make_pool(20)
    original = list(pool)

    QuestionSelector(rng=random.Random(1)).pick_for_difficulty(Difficulty.EASY, pool)

    assert pool == original


def test_seeded_selectors_reproduce_the_same_order():
    pool = make_pool(30)

    first = QuestionSelector(rng=random.Random(7)).pick_for_difficulty(Difficulty.EASY, pool)
    second = QuestionSelector(rng=random.Random(7)).pick_for_difficulty(Difficulty.EASY, pool)

    assert [q.id for q in first] == [q.id for q in second]


def test_shuffle_reaches_every_position():
    pool = make_pool(3)
    selector = QuestionSelector(rng=random.Random(0))

    first_ids = {selector.shuffle(pool)[0].id for _ in range(200)}

    assert first_ids == {"Q0", "Q1", "Q2"}


def test_pick_random_on_empty_bank_is_none():
    assert QuestionSelector().pick_random([]) is None


def test_pick_random_draws_from_pool(seeded_selector):
    pool = make_pool(5)

    assert seeded_selector.pick_random(pool) in pool
