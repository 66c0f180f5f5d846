"""
Scalar extractors for untyped agent output.

Every function here is total: a value of the wrong type yields an empty list
or None instead of raising.
"""

import json
import math
import re
from typing import Any, Optional

from .models import Sentiment, SentimentScore

_LIST_SPLIT = re.compile(r"\r?\n|•|- ")
_LEADING_BULLET = re.compile(r"^[\s\-•]+")
_SCORE_IN_TEXT = re.compile(r"(-?\d+(?:\.\d+)?)\s*(%)?")
_NUMBER_NOISE = re.compile(r"[, $%()]")

DEFAULT_SENTIMENT_SCORES = {
    Sentiment.POSITIVE: 0.6,
    Sentiment.NEGATIVE: -0.6,
    Sentiment.NEUTRAL: 0.0,
}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_finite(value) -> bool:
    # Huge JSON integers overflow float conversion
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def clamp_sentiment_score(score: float) -> float:
    return min(1.0, max(-1.0, score))


def _clean_entries(values) -> list[str]:
    entries = (str(entry).strip() for entry in values)
    return [entry for entry in entries if entry]


def parse_array_value(value: Any) -> list[str]:
    """Turn a list, a JSON-encoded list or bulleted text into a list of strings."""
    if isinstance(value, (list, tuple)):
        return _clean_entries(value)

    if isinstance(value, str):
        trimmed = value.strip()
        if not trimmed:
            return []

        try:
            parsed = json.loads(trimmed)
        except ValueError:
            parsed = None
        if isinstance(parsed, list):
            return _clean_entries(parsed)

        fragments = (_LEADING_BULLET.sub("", part).strip() for part in _LIST_SPLIT.split(trimmed))
        return [fragment for fragment in fragments if fragment]

    return []


def parse_number_value(value: Any) -> Optional[float]:
    """
    Parse a number, or a human-formatted string such as "$1,234.50", "12%" or
    "(3.4)". Parentheses negate first, then a percent sign divides by 100.
    """
    if _is_number(value):
        return value if _is_finite(value) else None

    if isinstance(value, str):
        contains_percent = "%" in value
        wrapped_negative = bool(re.match(r"^\s*\(", value)) and bool(re.search(r"\)\s*$", value))
        cleaned = _NUMBER_NOISE.sub("", value).strip()
        if not cleaned:
            return None
        try:
            parsed = float(cleaned)
        except ValueError:
            return None
        if not math.isfinite(parsed):
            return None
        signed = -parsed if wrapped_negative else parsed
        return signed / 100 if contains_percent else signed

    return None


def get_string_value(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def format_number(value: float) -> str:
    """Render a number the way a JSON producer would: no trailing ``.0``."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def to_display_string(value: Any) -> Optional[str]:
    if _is_number(value):
        return format_number(value) if _is_finite(value) else None
    return get_string_value(value)


def normalize_sentiment_label(text: str) -> Sentiment:
    lower = text.lower()
    if "positive" in lower:
        return Sentiment.POSITIVE
    if "negative" in lower:
        return Sentiment.NEGATIVE
    return Sentiment.NEUTRAL


def parse_sentiment_value(value: Any) -> SentimentScore:
    """Read a sentiment from ``{"label", "score"}`` or from free text like "Positive (0.8)".

    Scores are clamped to [-1, 1]; a percentage such as "80%" reads as 0.8.
    """
    if isinstance(value, dict) and isinstance(value.get("label"), str):
        label = normalize_sentiment_label(value["label"])
        score = parse_number_value(value.get("score"))
        if score is None:
            score = DEFAULT_SENTIMENT_SCORES[label]
        return SentimentScore(label=label, score=clamp_sentiment_score(score))

    if isinstance(value, str):
        label = normalize_sentiment_label(value)
        match = _SCORE_IN_TEXT.search(value)
        if match:
            score = float(match.group(1))
            if match.group(2):
                score /= 100
        else:
            score = DEFAULT_SENTIMENT_SCORES[label]
        return SentimentScore(label=label, score=clamp_sentiment_score(score))

    return SentimentScore(label=Sentiment.NEUTRAL, score=0.0)
