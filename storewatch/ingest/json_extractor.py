"""Locate and decode JSON objects embedded in script text."""

import json
import logging
from enum import Enum
from typing import Any, Optional

logger = logging.getLogger(__name__)


class _ScanState(Enum):
    NORMAL = "normal"
    IN_STRING = "in_string"
    ESCAPED = "escaped"


def extract_balanced_object(text: str, start: int) -> Optional[str]:
    """
    Extract a brace-balanced ``{...}`` substring beginning at ``start``.

    Braces inside double-quoted strings are ignored and a backslash escapes
    the character after it. This is not a JavaScript tokenizer: single-quoted
    strings, comments and regex literals are not understood.

    Args:
        text: Text to scan
        start: Index of the opening brace

    Returns:
        The object text including both braces, or None if ``start`` does not
        point at ``{`` or the object is never closed
    """
    if not text or start < 0 or start >= len(text) or text[start] != "{":
        return None

    depth = 0
    state = _ScanState.NORMAL

    for i in range(start, len(text)):
        ch = text[i]

        if state is _ScanState.ESCAPED:
            state = _ScanState.IN_STRING
            continue

        if state is _ScanState.IN_STRING:
            if ch == "\\":
                state = _ScanState.ESCAPED
            elif ch == '"':
                state = _ScanState.NORMAL
            continue

        if ch == '"':
            state = _ScanState.IN_STRING
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start:i + 1]

    return None


def safe_json_loads(text: Any) -> Any:
    """Decode JSON text, returning None instead of raising."""
    if not isinstance(text, str):
        return None
    try:
        return json.loads(text)
    except (json.JSONDecodeError, RecursionError) as e:
        logger.debug(f"Failed to decode embedded JSON: {e}")
        return None


def find_object_after(text: str, marker_end: int) -> Optional[str]:
    """Extract the balanced object at the first ``{`` at or after ``marker_end``."""
    brace = text.find("{", marker_end)
    if brace == -1:
        return None
    return extract_balanced_object(text, brace)
