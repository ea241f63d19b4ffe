"""
Input sanitizer for user-supplied text.
Bounds and normalizes text before it is sent upstream.
"""
from typing import Any

MAX_INPUT_LENGTH = 4000


def sanitize_input(value: Any, max_length: int = MAX_INPUT_LENGTH) -> str:
    """
    Trim whitespace and truncate text to max_length characters.

    Non-string values yield an empty string instead of raising. The result is
    stripped again after truncation so a cut that lands on whitespace never
    leaves trailing whitespace behind.

    Whitespace follows Python's str.strip(), which is not the same set as
    JavaScript's trim(): U+FEFF is kept, while U+001C to U+001F are removed.
    """
    if not isinstance(value, str):
        return ""
    return value.strip()[:max_length].rstrip()
