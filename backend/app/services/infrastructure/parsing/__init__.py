"""
Parsing Module

Recovers structured JSON from free-form LLM responses.

Usage:
    from app.services.infrastructure.parsing import parse_json_object, JsonParseError
"""

from .json_parser import (
    JsonParseError,
    extract_first_json_object,
    fix_json_escapes,
    parse_json_object,
    strip_trailing_commas,
)

__all__ = [
    "JsonParseError",
    "extract_first_json_object",
    "fix_json_escapes",
    "parse_json_object",
    "strip_trailing_commas",
]
