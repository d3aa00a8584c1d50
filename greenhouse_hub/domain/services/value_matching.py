"""
Type-normalizing comparison of reported attribute values.

Controllers report flags as booleans, 0/1 or "true"/"false" depending on
firmware, so a confirmation check cannot rely on plain equality.
"""
from typing import Any, Optional

_TRUE_STRINGS = ("1", "true")
_FALSE_STRINGS = ("0", "false")


def as_bool(value: Any) -> Optional[bool]:
    """
    Interpret a boolean-like value.

    Returns None for values that are not boolean-like (e.g. "08:30", 5).
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        if value in (0, 1):
            return bool(value)
        return None
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    return None


def values_match(actual: Any, expected: Any) -> bool:
    """
    Compare a reported value against the expected one.

    Boolean-like pairs compare as booleans; anything else compares by
    string form. A missing attribute never matches.
    """
    if actual is None:
        return False
    actual_bool = as_bool(actual)
    expected_bool = as_bool(expected)
    if actual_bool is not None and expected_bool is not None:
        return actual_bool == expected_bool
    return str(actual).strip() == str(expected).strip()


def default_expected_value(params: Any) -> Any:
    """
    Expected attribute value for a command sent without one.

    Flag commands expect the boolean they set; value commands (timer
    settings) expect the value itself.
    """
    flag = as_bool(params)
    if flag is not None:
        return flag
    return params
