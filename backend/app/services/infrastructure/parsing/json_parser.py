"""
JSON extraction for content-generation responses.

Providers are asked for exact JSON but routinely wrap it in prose or
markdown fences ("Sure! Here is your course: {...}"). The helpers here pull
out the first top-level object by bracket matching and parse it, with one
repair pass for invalid escape sequences and trailing commas.
"""

import json
import re
from typing import Any, Dict, Optional

# A valid escape (group 1) or a lone backslash
_ESCAPE_PATTERN = re.compile(r'\\(["\\/bfnrt]|u[0-9a-fA-F]{4})|\\')
_TRAILING_COMMA_PATTERN = re.compile(r",(\s*[}\]])")


class JsonParseError(ValueError):
    """Raised when no usable JSON object can be recovered from a response."""


def extract_first_json_object(text: str) -> Optional[str]:
    """Return the first balanced top-level ``{...}`` block in `text`.

    Braces inside double-quoted strings are ignored and escapes inside
    strings are honoured. Scanning only starts at the first ``{`` so
    apostrophes in surrounding prose cannot confuse the string tracking.

    Returns None when there is no ``{`` or the first object never closes.

    >>> extract_first_json_object('Here you go: {"a": {"b": "}"}} trailing {"c": 1}')
    '{"a": {"b": "}"}}'
    """
    if not text:
        return None

    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escape = False

    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start:i + 1]

    return None


def fix_json_escapes(text: str) -> str:
    """Double any backslash that does not start a valid JSON escape.

    Models writing about file paths or LaTeX produce things like ``C:\\Users``
    or ``\\frac`` unescaped, which json.loads rejects.
    """
    return _ESCAPE_PATTERN.sub(
        lambda match: match.group(0) if match.group(1) else "\\\\",
        text,
    )


def strip_trailing_commas(text: str) -> str:
    """Drop commas that directly precede a closing brace or bracket.

    >>> strip_trailing_commas('{"a": [1, 2,], }')
    '{"a": [1, 2] }'
    """
    return _TRAILING_COMMA_PATTERN.sub(r"\1", text)


def repair_json(text: str) -> str:
    return strip_trailing_commas(fix_json_escapes(text))


def parse_json_object(text: str) -> Dict[str, Any]:
    """Extract and parse the first JSON object in a provider response.

    Raises:
        JsonParseError: if no object is found, it does not parse even after
            repair, or the top-level value is not an object.
    """
    candidate = extract_first_json_object(text or "")
    if candidate is None:
        raise JsonParseError("No JSON object found in response")

    try:
        data = json.loads(candidate)
    except json.JSONDecodeError:
        try:
            data = json.loads(repair_json(candidate))
        except json.JSONDecodeError as exc:
            raise JsonParseError(f"Invalid JSON in response: {exc.msg}") from exc

    if not isinstance(data, dict):
        raise JsonParseError("Top-level JSON value is not an object")
    return data
