from datetime import datetime, timedelta, timezone

import pytest

from scoring import calculate_score, detective_rating, elapsed_minutes


def test_perfect_run_scores_base():
    assert calculate_score(0, 0, 0) == 1000


def test_reference_scenario():
    # 3 questions, 1 hint, 2 minutes: 1000 - 30 - 100 - 10
    assert calculate_score(3, 1, 2) == 860


def test_question_penalty_is_capped():
    assert calculate_score(100, 2, 0) == 300
    assert calculate_score(250, 2, 0) == 300


def test_time_penalty_uses_whole_minutes_and_is_capped():
    assert calculate_score(0, 0, 2.99) == 990
    assert calculate_score(0, 0, 40) == 800
    assert calculate_score(0, 0, 600) == 800


def test_score_never_drops_below_floor():
    assert calculate_score(0, 9, 0) == 100
    assert calculate_score(0, 10, 0) == 100
    assert calculate_score(500, 2, 600) == 100


@pytest.mark.parametrize("field", ["questions", "hints", "minutes"])
def test_score_is_monotone_non_increasing(field):
    previous = calculate_score(0, 0, 0)
    for n in range(0, 80):
        args = {"questions": 0, "hints": 0, "minutes": 0}
        args[field] = n
        score = calculate_score(args["questions"], args["hints"], args["minutes"])
        assert 100 <= score <= previous
        previous = score


def test_elapsed_minutes():
    start = datetime(2026, 1, 1, tzinfo=timezone.utc)
    assert elapsed_minutes(start, start + timedelta(minutes=2, seconds=30)) == 2.5
    assert elapsed_minutes(start, start - timedelta(minutes=5)) == 0.0


@pytest.mark.parametrize(
    "score, rating",
    [
        (1000, "Master Detective"),
        (900, "Master Detective"),
        (860, "Senior Investigator"),
        (500, "Detective"),
        (300, "Junior Detective"),
        (100, "Rookie"),
    ],
)
def test_detective_rating(score, rating):
    assert detective_rating(score) == rating
