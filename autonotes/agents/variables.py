import json
import logging
import re
from typing import Any, Optional

from .models import AgentRawResponse, VariableMap

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"^([`']{3})(?:\s*json)?\s*([\s\S]*?)\1\Z", re.IGNORECASE)
_OPEN_FENCE = re.compile(r"^([`']{3})(?:\s*json)?", re.IGNORECASE)


def extract_variables(response: AgentRawResponse) -> VariableMap:
    """Merge ``variables`` with ``variablesExpanded``; later expanded entries win."""
    combined: VariableMap = dict(response.variables or {})
    for entry in response.variables_expanded:
        combined[entry["name"]] = entry.get("value")
    return combined


def normalize_variable_keys(variables: VariableMap) -> VariableMap:
    """
    Add a lowercase alias for every key. Original keys stay; an existing
    lowercase key is never overwritten.
    """
    normalized = dict(variables)
    for key, value in variables.items():
        lower_key = key.lower()
        if lower_key not in normalized:
            normalized[lower_key] = value
    return normalized


def normalize_record(value: Any) -> Optional[VariableMap]:
    if not isinstance(value, dict):
        return None
    return normalize_variable_keys(value)


def strip_fence(text: str) -> str:
    trimmed = text.strip()
    match = _FENCE.match(trimmed)
    if match:
        return match.group(2).strip()
    if _OPEN_FENCE.match(trimmed):
        # Unterminated fence: drop the opener and keep the rest
        return _OPEN_FENCE.sub("", trimmed, count=1).strip()
    return trimmed


def _parse_object(text: str) -> Optional[VariableMap]:
    trimmed = text.strip()
    if not trimmed:
        return None
    try:
        parsed = json.loads(trimmed)
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


def extract_json_object_from_answer(answer: Any) -> Optional[VariableMap]:
    """Recover a JSON object from a free-text answer, fenced or embedded in prose."""
    if not isinstance(answer, str) or not answer:
        return None
    stripped = strip_fence(answer)
    if not stripped:
        return None

    direct = _parse_object(stripped)
    if direct is not None:
        return direct

    first_brace = stripped.find("{")
    last_brace = stripped.rfind("}")
    if first_brace != -1 and last_brace > first_brace:
        embedded = _parse_object(stripped[first_brace:last_brace + 1])
        if embedded is not None:
            logger.debug("Recovered embedded JSON object from agent answer")
        return embedded
    return None
