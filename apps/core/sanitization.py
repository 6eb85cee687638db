"""Strip markup and script injection fragments from user-supplied text."""

import re

ANGLE_BRACKETS_RE = re.compile(r'[<>]')
JAVASCRIPT_SCHEME_RE = re.compile(r'javascript:', re.IGNORECASE)
EVENT_HANDLER_RE = re.compile(r'on\w+\s*=', re.IGNORECASE)


def sanitize_input(value):
    """
    Trim a string and remove ``<``/``>``, ``javascript:`` and ``on*=`` handlers.

    Non-string values are returned unchanged.
    """
    if not isinstance(value, str):
        return value

    value = value.strip()
    value = ANGLE_BRACKETS_RE.sub('', value)
    value = JAVASCRIPT_SCHEME_RE.sub('', value)
    value = EVENT_HANDLER_RE.sub('', value)
    return value


def sanitize_data(data: dict) -> dict:
    """Apply sanitize_input to every top-level value of a mapping."""
    return {key: sanitize_input(value) for key, value in data.items()}
