"""Script generation - provider ladder plus deterministic offline fallback."""

from .generator import (
    ScriptGenerator,
    parse_generated_content,
    parse_quiz_questions,
    parse_segments,
)
from .offline import OfflineScriptGenerator, bucket_evenly, split_paragraphs, template_quizzes
from .prompts import COURSE_SCRIPT, PromptTemplate

__all__ = [
    "ScriptGenerator",
    "parse_generated_content",
    "parse_quiz_questions",
    "parse_segments",
    "OfflineScriptGenerator",
    "bucket_evenly",
    "split_paragraphs",
    "template_quizzes",
    "COURSE_SCRIPT",
    "PromptTemplate",
]
