"""
Priority resolution over synonym keys.

Each report field lists candidate keys in order; the first candidate that
yields a well-typed value wins. Wrong-typed candidates are skipped, not
treated as errors.
"""

from typing import Any, Optional

from .extractors import get_string_value, parse_array_value, parse_number_value
from .models import VariableMap


def candidates(variables: Optional[VariableMap], *keys: str) -> list[Any]:
    """Values for ``keys`` in order, trying each exact key before its lowercase form."""
    if not variables:
        return []
    values = []
    for key in keys:
        if key in variables:
            values.append(variables[key])
        lower_key = key.lower()
        if lower_key != key and lower_key in variables:
            values.append(variables[lower_key])
    return values


def pick_first_string(*values: Any) -> Optional[str]:
    for value in values:
        parsed = get_string_value(value)
        if parsed:
            return parsed
    return None


def pick_first_number(*values: Any) -> Optional[float]:
    for value in values:
        parsed = parse_number_value(value)
        if parsed is not None:
            return parsed
    return None


def collect_unique_list(*sources: Any) -> list[str]:
    seen: dict[str, None] = {}
    for source in sources:
        for entry in parse_array_value(source):
            seen.setdefault(entry, None)
    return list(seen)


def pick_first_list(*values: Any) -> Optional[list[str]]:
    """First source that parses to a non-empty list, deduplicated; None if none do."""
    for value in values:
        entries = collect_unique_list(value)
        if entries:
            return entries
    return None
