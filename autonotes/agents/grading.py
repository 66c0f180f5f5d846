from typing import Optional

GRADE_SCORES = {
    "A+": 0.95,
    "A": 0.9,
    "A-": 0.87,
    "B+": 0.82,
    "B": 0.76,
    "B-": 0.72,
    "C+": 0.66,
    "C": 0.58,
    "C-": 0.52,
    "D+": 0.46,
    "D": 0.4,
    "D-": 0.35,
    "E": 0.3,
    "F": 0.2,
}


def score_from_grade(grade: Optional[str]) -> Optional[float]:
    if not grade:
        return None
    return GRADE_SCORES.get(grade.strip().upper())


def status_from_grade(grade: Optional[str]) -> Optional[str]:
    if not grade:
        return None
    normalized = grade.strip().upper()
    if normalized.startswith("A"):
        return "Strong"
    if normalized.startswith("B"):
        return "Stable"
    if normalized.startswith("C"):
        return "Watch"
    return "At Risk"


def derive_health_status(score: Optional[float], fallback: Optional[str] = None) -> str:
    """Explicit status wins; otherwise bucket the score, or "Unknown" without one."""
    if fallback:
        return fallback
    if score is None:
        return "Unknown"
    if score >= 0.75:
        return "Strong"
    if score >= 0.55:
        return "Stable"
    if score >= 0.35:
        return "Watch"
    return "At Risk"
