"""Pull a JSON literal out of free-form model output.

Models asked for "only JSON" still wrap it in prose or markdown fences now
and then. The extractor looks for the first balanced literal of each requested
shape in turn (arrays, then objects, by default) that decodes, and only
falls back to decoding the whole reply.
"""

import json
import logging
from typing import Any, Optional, Tuple

logger = logging.getLogger(__name__)

_CLOSERS = {"[": "]", "{": "}"}

ARRAY_FIRST = ("[", "{")
OBJECT_ONLY = ("{",)


class JSONExtractionError(ValueError):
    """Raised when no JSON literal can be decoded from a model reply."""

    def __init__(self, message: str, raw_text: str):
        super().__init__(message)
        self.raw_text = raw_text


def find_balanced_end(text: str, start: int) -> Optional[int]:
    """Return the index just past the bracket matching ``text[start]``.

    Brackets inside JSON string literals are ignored. Returns None when the
    bracket is never closed or a mismatched closer shows up first.
    """
    opener = text[start]
    if opener not in _CLOSERS:
        return None

    expected = [_CLOSERS[opener]]
    in_string = False
    escaped = False

    for i in range(start + 1, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch in _CLOSERS:
            expected.append(_CLOSERS[ch])
        elif ch in ("]", "}"):
            if ch != expected.pop():
                return None
            if not expected:
                return i + 1

    return None


def _first_decodable(text: str, opener: str) -> Optional[tuple[Any, str]]:
    pos = text.find(opener)
    while pos != -1:
        end = find_balanced_end(text, pos)
        if end is not None:
            candidate = text[pos:end]
            try:
                return json.loads(candidate), candidate
            except json.JSONDecodeError:
                logger.debug("Balanced %s at offset %d is not valid JSON, continuing", opener, pos)
        pos = text.find(opener, pos + 1)
    return None


def extract_json_text(text: str, shapes: Tuple[str, ...] = ARRAY_FIRST) -> str:
    """Return the JSON substring that ``extract_json`` would decode."""
    return _extract(text, shapes)[1]


def extract_json(text: str, shapes: Tuple[str, ...] = ARRAY_FIRST) -> Any:
    """Decode the first JSON array or object embedded in ``text``.

    ``shapes`` lists the openers to search for, in order; each search runs
    across the whole reply before the next one starts. The default puts
    arrays first. Pass ``OBJECT_ONLY`` when the reply is an object that
    may contain arrays. If no candidate decodes, the trimmed reply itself
    is decoded.

    Raises:
        JSONExtractionError: If nothing decodes
    """
    return _extract(text, shapes)[0]


def _extract(text: str, shapes: Tuple[str, ...]) -> tuple[Any, str]:
    if text is None:
        raise JSONExtractionError("Model returned no content", "")

    content = text.strip()
    for opener in shapes:
        found = _first_decodable(content, opener)
        if found is not None:
            return found

    try:
        return json.loads(content), content
    except json.JSONDecodeError as e:
        raise JSONExtractionError(f"No JSON found in model response: {e.msg}", text) from e
