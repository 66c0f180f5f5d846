import pytest

from autonotes.agents.grading import derive_health_status, score_from_grade, status_from_grade


@pytest.mark.parametrize("score,expected", [
    (0.75, "Strong"),
    (0.7499, "Stable"),
    (0.55, "Stable"),
    (0.5499, "Watch"),
    (0.35, "Watch"),
    (0.3499, "At Risk"),
    (None, "Unknown"),
])
def test_score_thresholds(score, expected):
    assert derive_health_status(score) == expected


def test_fallback_status_wins_over_score():
    assert derive_health_status(0.9, "Watch") == "Watch"


def test_grades():
    assert score_from_grade(" b+ ") == 0.82
    assert score_from_grade("Z") is None
    assert status_from_grade("A-") == "Strong"
    assert status_from_grade("c") == "Watch"
    assert status_from_grade("F") == "At Risk"
    assert status_from_grade("") is None
